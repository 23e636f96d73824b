# menu.py
# Interactive front-end. The loop only ever rebuilds a local PipelineConfig;
# once the operator picks something runnable it hands back a Dispatch that
# goes through the same run_pipeline() as --all / --step.
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from .config import defconfig_for
from .model import BoardVariant, BootMedia, PipelineConfig
from .registry import StepRegistry
from .ui.console import Console

Prompt = Callable[[str], str]

RUN_ALL = 1
RUN_ALL_NO_KEYS = 2
TOGGLE_PAUSE = 3
SET_BOARD = 4
SET_MEDIA = 5
FIRST_STEP_ENTRY = 6

BOARD_CHOICES = (
    ("EVK (imx93_11x11_evk_defconfig)", BoardVariant.EVK),
    ("FRDM (imx93_11x11_frdm_defconfig)", BoardVariant.FRDM),
)
MEDIA_CHOICES = (
    ("SD (memory_type: sd)", BootMedia.SD),
    ("eMMC (memory_type: emmc)", BootMedia.EMMC),
)


@dataclass(frozen=True)
class Dispatch:
    """What the menu decided to run. selection None means all steps."""
    config: PipelineConfig
    selection: Optional[Tuple[int, ...]]


def menu_entries(config: PipelineConfig, registry: StepRegistry) -> List[str]:
    target = f"[board={config.board.value}, media={config.media.value}]"
    entries = [
        f"Run ALL steps ({registry.ids()[0]}..{registry.ids()[-1]}) {target}",
        f"Run ALL steps (skip key generation) {target}",
        "Toggle pause between steps",
        "Set board target (EVK/FRDM)",
        "Set boot media (SD/eMMC)",
    ]
    entries += [f"Step {s.id}: {s.title}" for s in registry]
    entries.append("Quit")
    return entries


def _parse_choice(raw: str, count: int) -> Optional[int]:
    raw = raw.strip()
    if not raw.isdigit():
        return None
    n = int(raw)
    return n if 1 <= n <= count else None


def _pick(title: str, options, prompt: Prompt, console: Console):
    """Sub-menu with a trailing Cancel entry. Returns the chosen value or None."""
    labels = [label for label, _ in options] + ["Cancel"]
    while True:
        console.line("")
        console.line(title)
        for i, label in enumerate(labels, start=1):
            console.line(f"{i}) {label}")
        n = _parse_choice(prompt("Choice> "), len(labels))
        if n is None:
            console.warn("Invalid selection.")
            continue
        if n == len(labels):
            return None
        return options[n - 1][1]


def apply_choice(
    config: PipelineConfig,
    choice: int,
    registry: StepRegistry,
) -> Tuple[PipelineConfig, Optional[Dispatch], bool]:
    """
    Apply one top-level menu choice (no sub-menus).

    Returns:
        (config, dispatch, quit). dispatch is set when something should run;
        quit is set for the Quit entry. Board/media entries are handled by
        the caller because they need another prompt.
    """
    step_ids = registry.ids()
    quit_entry = FIRST_STEP_ENTRY + len(step_ids)

    if choice == RUN_ALL:
        cfg = replace(config, skip_keygen=False)
        return cfg, Dispatch(cfg, None), False
    if choice == RUN_ALL_NO_KEYS:
        cfg = replace(config, skip_keygen=True)
        return cfg, Dispatch(cfg, None), False
    if choice == TOGGLE_PAUSE:
        return replace(config, pause=not config.pause), None, False
    if FIRST_STEP_ENTRY <= choice < quit_entry:
        step_id = step_ids[choice - FIRST_STEP_ENTRY]
        # an explicitly chosen step always runs
        return config, Dispatch(replace(config, skip_keygen=False), (step_id,)), False
    if choice == quit_entry:
        return config, None, True
    raise ValueError(f"Menu choice {choice} is not a direct action")


def interactive(
    config: PipelineConfig,
    registry: StepRegistry,
    prompt: Prompt,
    console: Console,
) -> Optional[Dispatch]:
    """Loop until the operator dispatches a run (returned) or quits (None)."""
    while True:
        console.info(f"WORKDIR={config.workspace_root}")
        console.info(f"Board target: {config.board.value} (U-Boot defconfig: {defconfig_for(config.board)})")
        console.info(f"Boot media: {config.media.value} (bootable-image memory_type)")
        console.line("")
        console.line("Select an action:")
        entries = menu_entries(config, registry)
        for i, label in enumerate(entries, start=1):
            console.line(f"{i}) {label}")

        choice = _parse_choice(prompt("Choice> "), len(entries))
        if choice is None:
            console.warn("Invalid selection.")
            continue

        if choice == SET_BOARD:
            board = _pick("Select board target:", BOARD_CHOICES, prompt, console)
            if board is not None:
                config = replace(config, board=board)
                console.info(f"Board target set -> {board.value}")
            continue
        if choice == SET_MEDIA:
            media = _pick("Select boot media:", MEDIA_CHOICES, prompt, console)
            if media is not None:
                config = replace(config, media=media)
                console.info(f"Boot media set -> {media.value}")
            continue

        config, dispatch, quit_requested = apply_choice(config, choice, registry)
        if choice == TOGGLE_PAUSE:
            console.info(f"Pause between steps: {'ON' if config.pause else 'OFF'}")
            continue
        if quit_requested:
            console.info("Bye.")
            return None
        return dispatch
