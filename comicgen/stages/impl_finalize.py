from comicgen.core.errors import StageError
from comicgen.core.workflow import FINALIZE, StepStatus
from comicgen.db.store import JobStore
from comicgen.stages.base import BaseStage, StageResult

class FinalizeStage(BaseStage):
    step_name = FINALIZE

    def __init__(self, store: JobStore):
        self.store = store

    async def run(self, ctx, tracker):
        tracker.transition(ctx.cache_id, self.step_name, StepStatus.IN_PROGRESS)
        job = self.store.require(ctx.cache_id)
        panels = len(job.image_refs or [])
        summaries = len(job.summaries or [])
        if panels != ctx.part_count or summaries != ctx.part_count:
            raise StageError(
                f"Comic incomplete: expected {ctx.part_count} parts, "
                f"got {summaries} summaries and {panels} images",
                retriable=False,
            )
        tracker.transition(ctx.cache_id, self.step_name, StepStatus.COMPLETE, "Comic generation completed")
        return StageResult(self.step_name, "Comic generation completed")
