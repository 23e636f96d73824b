# registry.py
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import ConfigError
from .model import Step


class StepRegistry:
    """
    The ordered, numbered set of steps.

    Requires:
      - step.id: int (unique)
      - step.requires: artifacts produced by steps with a strictly lower id
    """

    def __init__(self, steps: Iterable[Step]):
        by_id: Dict[int, Step] = {}
        for step in steps:
            if step.id in by_id:
                raise ValueError(f"Duplicate step id: {step.id}")
            by_id[step.id] = step

        for step in by_id.values():
            for artifact in step.requires:
                if artifact.producer not in by_id:
                    raise ValueError(
                        f"Step {step.id} requires {artifact.path} from missing step {artifact.producer}"
                    )
                if artifact.producer >= step.id:
                    # no forward references: a step only reads what earlier steps wrote
                    raise ValueError(
                        f"Step {step.id} requires {artifact.path} from later step {artifact.producer}"
                    )

        self._steps: Dict[int, Step] = dict(sorted(by_id.items()))

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps.values())

    def __len__(self) -> int:
        return len(self._steps)

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps

    def ids(self) -> List[int]:
        return list(self._steps)

    def get(self, step_id: int) -> Step:
        try:
            return self._steps[step_id]
        except KeyError:
            valid = ", ".join(str(i) for i in self._steps)
            raise ConfigError(
                f"Invalid step: {step_id} (valid: {valid})",
                kind="invalid_step",
                field_name="step",
                value=str(step_id),
            ) from None

    def by_flag(self, flag: str) -> Step:
        for step in self._steps.values():
            if step.flag == flag:
                return step
        raise ConfigError(f"Unknown step flag: {flag}", kind="invalid_step", field_name="step", value=flag)

    def select(self, requested: Optional[Iterable[int]] = None) -> Tuple[int, ...]:
        """
        Normalize a selection.

        None means "all". Otherwise ids are validated, duplicates collapsed,
        and the result is in ascending id order regardless of request order,
        since later steps consume what earlier ones produce.
        """
        if requested is None:
            return tuple(self._steps)
        seen: Dict[int, None] = {}
        for step_id in requested:
            self.get(step_id)
            seen.setdefault(step_id, None)
        return tuple(sorted(seen))


def default_registry() -> StepRegistry:
    from .steps import STEPS
    return StepRegistry(STEPS)
