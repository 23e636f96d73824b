# runner.py
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from .errors import ExternalToolError, PreconditionError, SecbootError
from .model import RunReport, Step, StepStatus
from .registry import StepRegistry
from .steps.context import StepContext

Acknowledge = Callable[[], None]


def _check_preconditions(registry: StepRegistry, step: Step, ctx: StepContext) -> None:
    """Raise PreconditionError naming the earliest step whose artifacts are missing."""
    missing: Dict[int, List[str]] = {}
    for artifact in step.requires:
        if not ctx.workspace.exists(artifact.path):
            missing.setdefault(artifact.producer, []).append(artifact.path)
    if missing:
        producer = min(missing)
        raise PreconditionError(step.id, missing[producer], producer, registry.get(producer).name)


def _check_outputs(step: Step, ctx: StepContext) -> None:
    absent = ctx.workspace.missing(step.produces)
    if absent:
        raise ExternalToolError(
            step.name,
            f"Step {step.id} finished but did not produce: {', '.join(absent)}",
            kind="missing_output",
        )


def _skip(registry: StepRegistry, step: Step, ctx: StepContext) -> None:
    ctx.console.warn(f"Skipping Step {step.id} ({step.title}) as requested")
    # artifacts this step would have produced must already be in place for later steps
    consumers = [s for s in registry if any(a.producer == step.id for a in s.requires)]
    needed = sorted({a.path for s in consumers for a in s.requires if a.producer == step.id})
    absent = ctx.workspace.missing(needed)
    if absent:
        ctx.console.warn(
            f"Expected existing files are missing: {', '.join(absent)}. "
            f"Provide them in {ctx.workspace.root} or later steps will fail."
        )


def _describe(e: BaseException) -> str:
    return e.message if isinstance(e, SecbootError) else str(e)


def run_step(registry: StepRegistry, step: Step, ctx: StepContext) -> StepStatus:
    """
    Execute one step: skip check, preflight, preconditions, action, outputs.

    Raises whatever made the step fail; the caller records FAILED.
    """
    ctx.console.header(f"Step {step.id}: {step.title}")
    if step.skip_when is not None and step.skip_when(ctx.config):
        _skip(registry, step, ctx)
        return StepStatus.SKIPPED

    ctx.deps.check_required(step.tools)
    ctx.workspace.ensure()
    _check_preconditions(registry, step, ctx)

    step.action(ctx)

    _check_outputs(step, ctx)
    ctx.console.ok(f"Step {step.id} complete")
    return StepStatus.COMPLETED


def run_pipeline(
    registry: StepRegistry,
    selection: Optional[Iterable[int]],
    ctx: StepContext,
    acknowledge: Optional[Acknowledge] = None,
) -> RunReport:
    """
    Run the selected steps in ascending id order, stopping at the first failure.

    Args:
        selection: step ids (any order, duplicates allowed) or None for all
        acknowledge: blocking operator gate called after each finished step when
            config.pause is set; None runs without pausing

    Returns:
        RunReport with a status for every selected step; steps after a
        failure stay PENDING.
    """
    ids = registry.select(selection)
    report = RunReport(statuses={i: StepStatus.PENDING for i in ids})

    for step_id in ids:
        step = registry.get(step_id)
        report.statuses[step_id] = StepStatus.RUNNING
        try:
            status = run_step(registry, step, ctx)
        except (SecbootError, OSError) as e:
            report.statuses[step_id] = StepStatus.FAILED
            report.failed_step = step_id
            report.error = e
            ctx.console.error(f"Step {step.id} ({step.name}) failed: {_describe(e)}")
            hint = e.details.get("hint") if isinstance(e, SecbootError) else None
            if hint:
                ctx.console.info(f"Hint: {hint}")
            if ctx.console.debug_enabled:
                ctx.console.print_exception(e)
            break

        report.statuses[step_id] = status
        if ctx.config.pause and acknowledge is not None:
            acknowledge()

    return report

