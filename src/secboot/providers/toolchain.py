# toolchain.py
# Source checkout + cross-compile via git and make.
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..errors import BuildError, ExternalToolError
from ..ui.console import Console, get_console
from .process import CommandRunner, run_command


class GitMakeToolchain:
    """Clone repositories and drive their make-based builds."""

    def __init__(self, runner: CommandRunner = run_command, console: Optional[Console] = None):
        self._run = runner
        self.console = console or get_console()

    def clone(self, repo_url: str, dest: Path) -> Path:
        """
        Clone repo_url into dest. No-op if dest already exists.

        Returns:
            dest
        """
        dest = Path(dest)
        if dest.is_dir():
            self.console.info(f"Source already present: {dest.name}")
            return dest
        dest.parent.mkdir(parents=True, exist_ok=True)
        self._run(["git", "clone", repo_url, str(dest)], cwd=dest.parent, console=self.console)
        return dest

    def run(self, local_dir: Path, argv: Sequence[str], env: Optional[Dict[str, str]] = None) -> str:
        """Run a helper inside the source tree (e.g. scripts/config)."""
        return self._run(list(argv), cwd=local_dir, env=env, console=self.console)

    def build(
        self,
        local_dir: Path,
        commands: Sequence[Sequence[str]],
        outputs: Sequence[str] = (),
        *,
        env: Optional[Dict[str, str]] = None,
        unset_env: Sequence[str] = (),
    ) -> List[Path]:
        """
        Run each make invocation in order, then check the expected binaries.

        Args:
            local_dir: Source tree
            commands: e.g. [["make", "PLAT=imx93", "bl31"]]
            outputs: Binaries (relative to local_dir) the build must leave behind

        Returns:
            Absolute paths of the produced binaries

        Raises:
            BuildError: a make invocation failed or an output is missing
        """
        local_dir = Path(local_dir)
        for argv in commands:
            try:
                self._run(list(argv), cwd=local_dir, env=env, unset_env=unset_env, console=self.console)
            except ExternalToolError as e:
                raise BuildError(
                    e.tool,
                    f"Build failed in {local_dir.name}: {e.message}",
                    exit_code=e.exit_code,
                    output=e.output,
                ) from e

        produced = [local_dir / rel for rel in outputs]
        missing = [str(p) for p in produced if not p.is_file()]
        if missing:
            raise BuildError("make", f"Build in {local_dir.name} did not produce: {', '.join(missing)}")
        return produced
