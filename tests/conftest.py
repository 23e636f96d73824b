"""Shared fixtures: a throw-away workspace wired to fake providers."""

from dataclasses import replace

import pytest
from click.testing import CliRunner

from secboot.config import DEFAULTS, resolve
from secboot.deps import DependencyChecker
from secboot.registry import default_registry
from secboot.steps import StepContext
from secboot.ui.console import Console
from secboot.workspace import ensure_workspace
from tests.fakes import FakeFirmware, FakeSigning, FakeToolchain


def all_tools_present(_name):
    return "/usr/bin/true"


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def console() -> Console:
    return Console(color=False)


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def make_ctx(tmp_path, console):
    """Build a StepContext over tmp_path/work; keyword args override config fields."""

    def _make(**overrides) -> StepContext:
        config = resolve(DEFAULTS, {}, {"workspace_root": str(tmp_path / "work")})
        config = replace(config, **overrides)
        workspace = ensure_workspace(config.workspace_root)
        return StepContext(
            config=config,
            workspace=workspace,
            console=console,
            deps=DependencyChecker(which=all_tools_present, find_module=lambda _m: True),
            toolchain=FakeToolchain(),
            firmware=FakeFirmware(),
            signing=FakeSigning(),
        )

    return _make
