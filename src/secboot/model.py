# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Optional

if TYPE_CHECKING:
    from .deps import Dependency
    from .errors import SecbootError
    from .steps.context import StepContext


class BoardVariant(str, Enum):
    EVK = "evk"
    FRDM = "frdm"


class BootMedia(str, Enum):
    SD = "sd"
    EMMC = "emmc"


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class PipelineConfig:
    """
    Fully resolved settings for one invocation.

    board/media are always canonical enum members; build one through
    config.resolve() and derive variants with dataclasses.replace().
    """
    workspace_root: Path
    board: BoardVariant = BoardVariant.EVK
    media: BootMedia = BootMedia.SD
    skip_keygen: bool = False
    pause: bool = False
    log_file: Optional[Path] = None
    color: bool = True
    debug: bool = False
    ddr_url: str = ""
    ele_url: str = ""


@dataclass(frozen=True)
class Artifact:
    """A workspace-relative file and the step that writes it."""
    path: str
    producer: int


@dataclass(frozen=True)
class Step:
    """A single numbered stage of the secure-boot build."""
    id: int
    name: str
    title: str
    flag: str
    action: Callable[["StepContext"], None]
    requires: tuple[Artifact, ...] = ()
    produces: tuple[str, ...] = ()
    tools: tuple["Dependency", ...] = ()
    skip_when: Optional[Callable[[PipelineConfig], bool]] = None


@dataclass
class RunReport:
    """Per-step status for one run, in execution order."""
    statuses: Dict[int, StepStatus] = field(default_factory=dict)
    failed_step: Optional[int] = None
    error: Optional["SecbootError | OSError"] = None

    @property
    def ok(self) -> bool:
        return self.failed_step is None
