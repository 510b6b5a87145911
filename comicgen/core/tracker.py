from __future__ import annotations
import logging
from typing import List, Optional
from comicgen.core.errors import JobAlreadyFailed, StepNotFound
from comicgen.core.workflow import (
    Step,
    StepArtifact,
    StepStatus,
    build_initial_steps,
    steps_from_json,
)
from comicgen.db.store import JobStore

log = logging.getLogger(__name__)


class StepTracker:
    """Name-addressed state machine over one job's step list."""

    def __init__(self, store: JobStore):
        self.store = store

    @staticmethod
    def initialize(part_count: int) -> List[Step]:
        return build_initial_steps(part_count)

    def transition(
        self,
        cache_id: str,
        step_name: str,
        status: StepStatus,
        detail: Optional[str] = None,
        artifact: Optional[StepArtifact] = None,
    ) -> List[Step]:
        def apply(steps: List[Step]) -> List[Step]:
            index = next((i for i, s in enumerate(steps) if s.name == step_name), None)
            if index is None:
                raise StepNotFound(step_name)

            if status in (StepStatus.IN_PROGRESS, StepStatus.COMPLETE):
                failed = next((s for s in steps if s.status == StepStatus.ERROR), None)
                if failed is not None:
                    raise JobAlreadyFailed(step_name, failed.name)

            steps[index] = Step(name=step_name, status=status, detail=detail, artifact=artifact)

            # Arm the following step so pollers can see what runs next
            if status == StepStatus.COMPLETE and index < len(steps) - 1:
                following = steps[index + 1]
                if following.status != StepStatus.COMPLETE:
                    following.status = StepStatus.PENDING
            return steps

        steps = self.store.mutate_steps(cache_id, apply)
        log.info("Step %s -> %s%s", step_name, status.value, f" ({detail})" if detail else "",
                 extra={"job_id": cache_id, "step": step_name})
        return steps

    def steps(self, cache_id: str) -> List[Step]:
        return steps_from_json(self.store.require(cache_id).steps)

    def current_step(self, cache_id: str) -> Optional[Step]:
        return next((s for s in self.steps(cache_id) if s.status == StepStatus.IN_PROGRESS), None)
