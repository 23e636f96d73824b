# deps.py
from __future__ import annotations

import importlib.util
import shutil
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .errors import MissingDependency

EXECUTABLE = "executable"
MODULE = "module"


TOOL_HINTS = {
    "git": "Install Git or fix PATH.",
    "make": "Install build-essential (make).",
    "gcc": "Install build-essential (gcc).",
    "aarch64-linux-gnu-gcc": "Install gcc-aarch64-linux-gnu.",
    "aarch64-linux-gnu-objcopy": "Install binutils-aarch64-linux-gnu.",
    "bc": "Install bc.",
    "bison": "Install bison.",
    "flex": "Install flex.",
    "venv": "Install python3-venv (venv module unavailable).",
    "nxpimage": "Run Step 4 to install SPSDK into the workspace venv.",
    "nxpcrypto": "Run Step 4 to install SPSDK into the workspace venv.",
}


@dataclass(frozen=True)
class Dependency:
    """Something the host must provide: an executable on PATH or an importable module."""
    name: str
    kind: str = EXECUTABLE


def executable(name: str) -> Dependency:
    return Dependency(name, EXECUTABLE)


def module(name: str) -> Dependency:
    return Dependency(name, MODULE)


def _module_available(name: str) -> bool:
    return importlib.util.find_spec(name) is not None


class DependencyChecker:
    """
    Fail-fast preflight for host tools.

    Probes are injectable so tests don't depend on what the host has installed.
    """

    def __init__(
        self,
        which: Callable[[str], Optional[str]] = shutil.which,
        find_module: Callable[[str], bool] = _module_available,
    ):
        self._which = which
        self._find_module = find_module

    def is_available(self, dep: Dependency) -> bool:
        if dep.kind == MODULE:
            return self._find_module(dep.name)
        if dep.kind == EXECUTABLE:
            return self._which(dep.name) is not None
        raise ValueError(f"Unknown dependency kind: {dep.kind!r}")

    def check_required(self, deps: Iterable[Dependency]) -> None:
        """Raise MissingDependency for the first dependency that is not present."""
        for dep in deps:
            if not self.is_available(dep):
                raise MissingDependency(
                    dep.name,
                    probe=dep.kind,
                    hint=TOOL_HINTS.get(dep.name, f"Install {dep.name} or fix PATH."),
                )
