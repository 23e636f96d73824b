# process.py
# The single place that spawns external tools. Providers never call
# subprocess directly so that tool output always reaches the console
# (and therefore the log file) and failures surface as ExternalToolError.
from __future__ import annotations

import os
import shlex
import subprocess
from collections import deque
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from ..errors import ExternalToolError
from ..ui.console import Console, get_console

OUTPUT_TAIL_LINES = 50

CommandRunner = Callable[..., str]


def run_command(
    argv: Sequence[str],
    *,
    cwd: Optional[str | Path] = None,
    env: Optional[Dict[str, str]] = None,
    unset_env: Sequence[str] = (),
    console: Optional[Console] = None,
) -> str:
    """
    Run argv, streaming merged stdout/stderr through the console.

    Args:
        argv: Command and arguments (no shell)
        cwd: Working directory
        env: Extra environment variables layered over os.environ
        unset_env: Variables removed from the child environment
        console: Output sink (defaults to the global console)

    Returns:
        The captured output (all lines), for callers that parse it.

    Raises:
        ExternalToolError: tool not found or non-zero exit status
    """
    console = console or get_console()
    tool = Path(argv[0]).name

    child_env = os.environ.copy()
    child_env.update(env or {})
    for key in unset_env:
        child_env.pop(key, None)

    console.print_debug(f"$ {shlex.join([str(a) for a in argv])} (cwd={cwd or '.'})")

    captured: List[str] = []
    tail: deque[str] = deque(maxlen=OUTPUT_TAIL_LINES)
    try:
        proc = subprocess.Popen(
            [str(a) for a in argv],
            cwd=str(cwd) if cwd is not None else None,
            env=child_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except FileNotFoundError as e:
        raise ExternalToolError(tool, f"{tool} could not be executed: {e}") from e

    assert proc.stdout is not None
    with proc.stdout:
        for raw in proc.stdout:
            text = raw.rstrip("\n")
            captured.append(text)
            tail.append(text)
            console.line(text)
    exit_code = proc.wait()

    if exit_code != 0:
        raise ExternalToolError(
            tool,
            f"{tool} failed (exit={exit_code}): {shlex.join([str(a) for a in argv])}",
            exit_code=exit_code,
            output="\n".join(tail),
        )
    return "\n".join(captured)
