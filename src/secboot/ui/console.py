"""Console output formatting utilities for secboot."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import IO, Optional

import click


LEVELS = {
    # level: (prefix, color, to stderr)
    "info": ("[INFO]", "blue", False),
    "warn": ("[WARN]", "yellow", False),
    "error": ("[ERR ]", "red", True),
    "ok": ("[OK  ]", "green", False),
}


class Console:
    """Leveled status output, optionally mirrored to a log file."""

    def __init__(
        self,
        color: bool = True,
        log_file: Optional[str | Path] = None,
        debug: bool = False,
    ):
        """
        Initialize console formatter.

        Args:
            color: If False, emit the same text without ANSI styling. If True,
                style only when the stream is a terminal
            log_file: Optional path; every line is appended there as well
            debug: If True, show debug lines and stack traces
        """
        self.color = color
        self.debug_enabled = debug
        self.log_path: Optional[Path] = None
        self._log: Optional[IO[str]] = None
        if log_file is not None:
            self.log_path = Path(log_file)
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._log = self.log_path.open("a", encoding="utf-8")

    def close(self) -> None:
        if self._log is not None and not self._log.closed:
            self._log.close()

    def _emit(self, text: str, styled: str, err: bool = False) -> None:
        # file first, then console; both flushed so the two sinks stay in step
        if self._log is not None:
            self._log.write(text + "\n")
            self._log.flush()
        stream = sys.stderr if err else sys.stdout
        # color=None lets click strip ANSI when the stream is not a terminal
        click.echo(styled if self.color else text, file=stream, color=None if self.color else False)
        stream.flush()

    def log(self, level: str, message: str) -> None:
        """Print message with the fixed prefix for level."""
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level!r}")
        prefix, fg, err = LEVELS[level]
        plain = f"{prefix} {message}"
        styled = f"{click.style(prefix, fg=fg, bold=True)} {message}"
        self._emit(plain, styled, err=err)

    def info(self, message: str) -> None:
        self.log("info", message)

    def warn(self, message: str) -> None:
        self.log("warn", message)

    def error(self, message: str) -> None:
        self.log("error", message)

    def ok(self, message: str) -> None:
        self.log("ok", message)

    def header(self, title: str) -> None:
        """Print a section header."""
        self._emit("", "")
        self._emit(f"==> {title}", click.style(f"==> {title}", bold=True))

    def line(self, text: str) -> None:
        """Print a raw line of tool output."""
        self._emit(text, text)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug_enabled:
            self._emit(f"[DEBUG] {message}", f"[DEBUG] {message}", err=True)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        self.error(str(exc).split("\n")[0] if not self.debug_enabled else str(exc))
        if self.debug_enabled:
            import traceback
            for chunk in traceback.format_exception(type(exc), exc, exc.__traceback__):
                for tb_line in chunk.rstrip("\n").split("\n"):
                    self._emit(tb_line, tb_line, err=True)

    def print_results(self, statuses: dict) -> None:
        """Print final results summary."""
        self._emit("", "")
        self._emit("=" * 40, "=" * 40)
        self._emit("RESULTS", click.style("RESULTS", bold=True))
        self._emit("=" * 40, "=" * 40)
        for step_id, status in statuses.items():
            value = getattr(status, "value", status)
            self.line(f"  Step {step_id}: {str(value).upper()}")


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
