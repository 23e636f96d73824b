import pytest

from secboot.errors import ConfigError
from secboot.model import Artifact, Step
from secboot.registry import StepRegistry


def _noop(ctx):
    return None


def _step(i, requires=()):
    return Step(id=i, name=f"s{i}", title=f"Step {i}", flag=f"s{i}", action=_noop, requires=requires)


def test_default_registry_is_ordered(registry):
    assert registry.ids() == [1, 2, 3, 4, 5, 6, 7]
    assert [s.name for s in registry] == ["atf", "uboot", "download", "spsdk", "keys", "yaml", "export"]


def test_select_all(registry):
    assert registry.select(None) == (1, 2, 3, 4, 5, 6, 7)


@pytest.mark.parametrize(
    "requested,expected",
    [
        ([7, 3, 1], (1, 3, 7)),
        ([3, 3, 1, 3], (1, 3)),
        ([6], (6,)),
        ([5, 4, 7, 6, 5], (4, 5, 6, 7)),
    ],
)
def test_select_ascending_and_deduplicated(registry, requested, expected):
    assert registry.select(requested) == expected


@pytest.mark.parametrize("bad", [0, 8, -1])
def test_select_rejects_unknown(registry, bad):
    with pytest.raises(ConfigError) as exc:
        registry.select([1, bad])
    assert exc.value.kind == "invalid_step"


def test_by_flag(registry):
    assert registry.by_flag("export").id == 7
    with pytest.raises(ConfigError):
        registry.by_flag("flash")


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError, match="Duplicate step id"):
        StepRegistry([_step(1), _step(1)])


def test_forward_reference_rejected():
    with pytest.raises(ValueError, match="later step"):
        StepRegistry([_step(1, requires=(Artifact("x.bin", 2),)), _step(2)])


def test_unknown_producer_rejected():
    with pytest.raises(ValueError, match="missing step"):
        StepRegistry([_step(2, requires=(Artifact("x.bin", 1),))])


def test_steps_only_require_earlier_steps(registry):
    for step in registry:
        assert all(a.producer < step.id for a in step.requires)
