import logging
from comicgen.core.workflow import CACHE_HIT_DETAIL, CHECK_CACHE, StepStatus, all_complete, steps_from_json
from comicgen.db.store import JobStore
from comicgen.stages.base import BaseStage, StageResult

log = logging.getLogger(__name__)

class CacheCheckStage(BaseStage):
    step_name = CHECK_CACHE

    def __init__(self, store: JobStore):
        self.store = store

    async def run(self, ctx, tracker):
        existing = self.store.get(ctx.cache_id)
        if existing is not None and all_complete(steps_from_json(existing.steps)):
            # Finished job: record the hit without reopening a completed step
            tracker.transition(ctx.cache_id, self.step_name, StepStatus.COMPLETE, CACHE_HIT_DETAIL)
            return StageResult(self.step_name, CACHE_HIT_DETAIL, short_circuit=True)

        tracker.transition(ctx.cache_id, self.step_name, StepStatus.IN_PROGRESS)
        tracker.transition(ctx.cache_id, self.step_name, StepStatus.COMPLETE, "New generation started")
        return StageResult(self.step_name, "New generation started")
