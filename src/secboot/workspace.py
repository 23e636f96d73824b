# workspace.py
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

SUBDIRS = ("inputs", "outputs", "keys")


class Workspace:
    """
    The shared build tree. Every step-relative path goes through here.

    The root is resolved to an absolute path once, at construction.
    """

    def __init__(self, root: str | Path, cwd: Optional[str | Path] = None):
        root = Path(root).expanduser()
        if not root.is_absolute():
            base = Path(cwd) if cwd is not None else Path.cwd()
            root = base / root
        self.root = root.resolve()

    @property
    def inputs(self) -> Path:
        return self.root / "inputs"

    @property
    def outputs(self) -> Path:
        return self.root / "outputs"

    @property
    def keys(self) -> Path:
        return self.root / "keys"

    def ensure(self) -> "Workspace":
        for name in SUBDIRS:
            (self.root / name).mkdir(parents=True, exist_ok=True)
        return self

    def path(self, rel: str | Path) -> Path:
        return self.root / rel

    def subdir(self, rel: str | Path) -> Path:
        """Create (if needed) and return a directory under the root."""
        p = self.root / rel
        p.mkdir(parents=True, exist_ok=True)
        return p

    def exists(self, rel: str | Path) -> bool:
        return (self.root / rel).exists()

    def missing(self, rels: Iterable[str]) -> List[str]:
        return [r for r in rels if not self.exists(r)]

    def relative(self, path: Path) -> str:
        try:
            return str(Path(path).relative_to(self.root))
        except ValueError:
            return str(path)

    def __repr__(self) -> str:
        return f"Workspace({str(self.root)!r})"


def ensure_workspace(root: str | Path, cwd: Optional[str | Path] = None) -> Workspace:
    """Resolve root against cwd and create inputs/, outputs/, keys/. Idempotent."""
    return Workspace(root, cwd=cwd).ensure()
