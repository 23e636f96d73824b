# context.py
from __future__ import annotations

from dataclasses import dataclass

from ..deps import DependencyChecker
from ..model import PipelineConfig
from ..providers.base import FirmwareProvider, SigningProvider, ToolchainProvider
from ..ui.console import Console
from ..workspace import Workspace


@dataclass
class StepContext:
    """Everything a step action may touch during one run."""
    config: PipelineConfig
    workspace: Workspace
    console: Console
    deps: DependencyChecker
    toolchain: ToolchainProvider
    firmware: FirmwareProvider
    signing: SigningProvider
