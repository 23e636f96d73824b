# cli.py
from __future__ import annotations

import os
import sys
from typing import Optional, Tuple

import click

from . import __version__
from .config import DEFAULTS, resolve
from .deps import DependencyChecker
from .errors import ConfigError, SecbootError
from .menu import interactive
from .model import PipelineConfig
from .providers import EulaFirmwareFetcher, GitMakeToolchain, SpsdkSigningProvider
from .registry import default_registry
from .runner import run_pipeline
from .steps import STEPS, StepContext
from .ui.console import Console, set_console
from .workspace import Workspace, ensure_workspace

EXAMPLES = """\b
Examples:
  secboot --all --board frdm --media emmc --pause --log run.log
  secboot --step 2 --board frdm
  secboot --step 6 --media emmc
"""


def build_context(config: PipelineConfig, workspace: Workspace, console: Console) -> StepContext:
    """Wire the production providers for one run."""
    return StepContext(
        config=config,
        workspace=workspace,
        console=console,
        deps=DependencyChecker(),
        toolchain=GitMakeToolchain(console=console),
        firmware=EulaFirmwareFetcher(console=console),
        signing=SpsdkSigningProvider(workspace.root, console=console),
    )


def _line_prompt(text: str) -> str:
    return click.prompt(text, default="", show_default=False, prompt_suffix="")


def _acknowledge() -> None:
    _line_prompt("Press ENTER to continue...")


def _collect_step_flag(ctx: click.Context, param: click.Parameter, value: bool) -> bool:
    if value:
        ctx.ensure_object(dict).setdefault("flag_steps", []).append(default_registry().by_flag(param.name).id)
    return value


def step_flag_options(f):
    """One convenience flag per step (--atf, --uboot, ...), same as --step N."""
    for step in reversed(STEPS):
        f = click.option(
            f"--{step.flag}",
            step.flag,
            is_flag=True,
            expose_value=False,
            callback=_collect_step_flag,
            help=f"Step {step.id}: {step.title}",
        )(f)
    return f


def _run_mode(menu: bool, run_all: bool, steps: Tuple[int, ...]) -> str:
    modes = [name for name, on in (("menu", menu), ("all", run_all), ("steps", bool(steps))) if on]
    if len(modes) > 1:
        raise click.UsageError(f"Run modes are mutually exclusive, got: {', '.join(modes)}")
    return modes[0] if modes else "menu"


@click.command(epilog=EXAMPLES, context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--menu", "mode_menu", is_flag=True, help="Show interactive menu (default)")
@click.option("--all", "mode_all", is_flag=True, help="Run all steps sequentially")
@click.option("--all-no-keys", is_flag=True, help="Run all steps but skip key generation (Step 5)")
@click.option("--step", "steps", type=click.IntRange(1, len(STEPS)), multiple=True,
              help="Run a single step. Can be repeated.")
@step_flag_options
@click.option("--board", default=None, help="Board target: evk|frdm (selects the U-Boot defconfig)")
@click.option("--media", default=None, help="Boot media: sd|emmc (bootable-image memory_type)")
@click.option("--pause", is_flag=True, help="Pause between steps")
@click.option("--workdir", default=None, help="Working directory (default: work)")
@click.option("--log", "log_file", default=None, type=click.Path(dir_okay=False),
              help="Also write all output to this file")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Show stack traces and tool commands")
@click.version_option(__version__, prog_name="secboot")
@click.pass_context
def cli(ctx, mode_menu, mode_all, all_no_keys, steps, board, media, pause, workdir, log_file, no_color, debug):
    """i.MX93 AHAB secure-boot build: ATF + U-Boot, SRK keys, signed bootable image."""
    requested = list(steps) + list((ctx.obj or {}).get("flag_steps", []))
    mode = _run_mode(mode_menu, mode_all or all_no_keys, tuple(requested))

    console = Console(color=not no_color, debug=debug)
    set_console(console)
    try:
        config = resolve(
            DEFAULTS,
            os.environ,
            {
                "workspace_root": workdir,
                "board": board,
                "media": media,
                "skip_keygen": True if all_no_keys else None,
                "pause": True if pause else None,
                "log_file": log_file,
                "color": False if no_color else None,
                "debug": True if debug else None,
            },
        )
    except ConfigError as e:
        console.error(e.message)
        sys.exit(2)

    try:
        console = Console(color=config.color, log_file=config.log_file, debug=config.debug)
    except OSError as e:
        console.error(f"Cannot open log file {config.log_file}: {e}")
        sys.exit(2)
    set_console(console)
    try:
        sys.exit(_run(mode, config, tuple(requested), console))
    except (KeyboardInterrupt, click.exceptions.Abort):
        # click.prompt turns Ctrl-C into Abort
        console.warn("Interrupted by user")
        sys.exit(130)
    finally:
        console.close()


def _run(mode: str, config: PipelineConfig, requested: Tuple[int, ...], console: Console) -> int:
    registry = default_registry()
    if config.log_file is not None:
        console.info(f"Logging enabled -> {config.log_file}")
    console.info(f"secboot version: {__version__}")

    selection: Optional[Tuple[int, ...]] = None
    if mode == "menu":
        dispatch = interactive(config, registry, _line_prompt, console)
        if dispatch is None:
            return 0
        config, selection = dispatch.config, dispatch.selection
    elif mode == "steps":
        selection = registry.select(requested)

    try:
        workspace = ensure_workspace(config.workspace_root)
    except OSError as e:
        console.error(f"Cannot create workspace {config.workspace_root}: {e}")
        return 1

    console.info(f"WORKDIR={workspace.root}")
    shown = "all" if selection is None else " ".join(str(i) for i in selection)
    console.info(
        f"Running steps: {shown} (board={config.board.value}, media={config.media.value}, "
        f"skip keygen: {int(config.skip_keygen)}, pause: {int(config.pause)})"
    )

    acknowledge = _acknowledge
    if config.pause and not sys.stdin.isatty():
        console.warn("stdin is not a terminal; not pausing between steps")
        acknowledge = None

    step_ctx = build_context(config, workspace, console)
    try:
        report = run_pipeline(registry, selection, step_ctx, acknowledge=acknowledge)
    except SecbootError as e:
        console.print_exception(e)
        return 1

    console.print_results(report.statuses)
    return 0 if report.ok else 1


if __name__ == "__main__":
    cli()
