import pytest

from secboot.config import DEFAULTS, resolve
from secboot.menu import Dispatch, apply_choice, interactive, menu_entries
from secboot.model import BoardVariant, BootMedia


@pytest.fixture
def config(tmp_path):
    return resolve(DEFAULTS, {}, {"workspace_root": str(tmp_path)})


def scripted(*answers):
    it = iter(answers)
    return lambda _text: next(it)


def test_entries(config, registry):
    entries = menu_entries(config, registry)
    assert len(entries) == 13
    assert entries[0] == "Run ALL steps (1..7) [board=evk, media=sd]"
    assert entries[5] == "Step 1: Build ARM Trusted Firmware (imx-atf)"
    assert entries[-1] == "Quit"


def test_apply_run_all(config, registry):
    cfg, dispatch, quit_requested = apply_choice(config, 1, registry)
    assert dispatch == Dispatch(cfg, None)
    assert not cfg.skip_keygen
    assert not quit_requested


def test_apply_run_all_no_keys(config, registry):
    cfg, dispatch, _ = apply_choice(config, 2, registry)
    assert cfg.skip_keygen
    assert dispatch.selection is None
    assert dispatch.config.skip_keygen


def test_apply_toggle_pause_is_pure(config, registry):
    cfg, dispatch, _ = apply_choice(config, 3, registry)
    assert cfg.pause and not config.pause
    assert dispatch is None
    cfg2, _, _ = apply_choice(cfg, 3, registry)
    assert not cfg2.pause


@pytest.mark.parametrize("choice,step_id", [(6, 1), (9, 4), (12, 7)])
def test_apply_single_step(config, registry, choice, step_id):
    _, dispatch, _ = apply_choice(config, choice, registry)
    assert dispatch.selection == (step_id,)


def test_apply_quit(config, registry):
    assert apply_choice(config, 13, registry) == (config, None, True)


def test_interactive_quit(config, registry, console):
    assert interactive(config, registry, scripted("13"), console) is None


def test_interactive_invalid_input_keeps_state(config, registry, console, capsys):
    dispatch = interactive(config, registry, scripted("x", "0", "99", "1"), console)
    assert dispatch.config == config
    assert capsys.readouterr().out.count("Invalid selection.") == 3


def test_interactive_toggles_then_runs(config, registry, console):
    answers = scripted(
        "3",        # pause on
        "4", "2",   # board -> frdm
        "5", "5", "2",  # media: invalid, then emmc
        "11",       # step 6
    )
    dispatch = interactive(config, registry, answers, console)
    assert dispatch.selection == (6,)
    assert dispatch.config.pause
    assert dispatch.config.board is BoardVariant.FRDM
    assert dispatch.config.media is BootMedia.EMMC
    # the original value is untouched
    assert config.board is BoardVariant.EVK


def test_interactive_cancel_submenu(config, registry, console):
    dispatch = interactive(config, registry, scripted("4", "3", "5", "3", "2"), console)
    assert dispatch.config.board is BoardVariant.EVK
    assert dispatch.config.media is BootMedia.SD
    assert dispatch.config.skip_keygen


def test_single_step_menu_entry_runs_even_with_skip_keygen(config, registry):
    cfg = apply_choice(config, 2, registry)[0]
    assert cfg.skip_keygen
    _, dispatch, _ = apply_choice(cfg, 10, registry)
    assert dispatch.selection == (5,)
    assert not dispatch.config.skip_keygen
