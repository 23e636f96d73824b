# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(eq=False)
class SecbootError(Exception):
    """
    Structured pipeline error with enough context for:
      - clean CLI output
      - naming the step / tool / artifact that broke the run
    """
    kind: str
    message: str
    details: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class ConfigError(SecbootError):
    """Invalid variant, flag or step selection."""

    def __init__(self, message: str, *, kind: str = "invalid_config",
                 field_name: Optional[str] = None, value: Optional[str] = None):
        details = {}
        if field_name is not None:
            details["field"] = field_name
        if value is not None:
            details["value"] = value
        super().__init__(kind=kind, message=message, details=details)
        self.field_name = field_name
        self.value = value


class MissingDependency(SecbootError):
    """A host executable or python module is not available."""

    def __init__(self, tool: str, *, probe: str = "executable", hint: Optional[str] = None):
        details = {"tool": tool, "probe": probe}
        if hint:
            details["hint"] = hint
        super().__init__(kind="missing_dependency", message=f"missing required tool: {tool}", details=details)
        self.tool = tool


class PreconditionError(SecbootError):
    """An artifact expected from an earlier step is missing."""

    def __init__(self, step_id: int, missing: list[str], producer_id: int, producer_name: str):
        super().__init__(
            kind="precondition_failed",
            message=f"Missing {', '.join(missing)} (run Step {producer_id}: {producer_name} first)",
            details={"step": str(step_id), "producer": str(producer_id)},
        )
        self.step_id = step_id
        self.missing = list(missing)
        self.producer_id = producer_id


class ExternalToolError(SecbootError):
    """A delegated subprocess failed."""

    def __init__(self, tool: str, message: str, *, exit_code: Optional[int] = None,
                 output: str = "", kind: str = "tool_failed"):
        details = {"tool": tool}
        if exit_code is not None:
            details["exit_code"] = str(exit_code)
        super().__init__(kind=kind, message=message, details=details)
        self.tool = tool
        self.exit_code = exit_code
        self.output = output


class BuildError(ExternalToolError):
    """Cross-compilation did not produce the expected binaries."""

    def __init__(self, tool: str, message: str, **kwargs):
        super().__init__(tool, message, kind="build_failed", **kwargs)


class FirmwareError(ExternalToolError):
    """Firmware download or EULA self-extraction failed."""

    def __init__(self, tool: str, message: str, **kwargs):
        super().__init__(tool, message, kind="firmware_failed", **kwargs)
