from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from comicgen.core.config import settings
from comicgen.core.errors import ComicGenError, InvariantViolation, JobNotFound, StageTimeout
from comicgen.core.tracker import StepTracker
from comicgen.core.workflow import StepStatus
from comicgen.db.store import JobStore
from comicgen.stages.base import BaseStage, StageContext, StageResult
from comicgen.stages.registry import StageRegistry

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineOutcome:
    cache_id: str
    ok: bool
    message: str
    from_cache: bool = False


class PipelineOrchestrator:
    """Runs a job's stages one after another until success or the first error.

    Stage failures never escape ``run``; they end up as an ``error`` step on
    the job record and a failed PipelineOutcome.
    """

    def __init__(self, store: JobStore, registry: StageRegistry | None = None, stage_timeout: float | None = None):
        self.store = store
        self.tracker = StepTracker(store)
        self.registry = registry or StageRegistry.default(store)
        self.stage_timeout = stage_timeout if stage_timeout is not None else settings.stage_timeout_seconds

    async def _run_stage(self, stage: BaseStage, ctx: StageContext) -> StageResult:
        try:
            return await asyncio.wait_for(stage.run(ctx, self.tracker), timeout=self.stage_timeout)
        except asyncio.TimeoutError:
            raise StageTimeout(f"Stage timed out after {self.stage_timeout:g}s") from None

    def _fail(self, ctx: StageContext, stage: BaseStage, error: Exception) -> None:
        """Move whichever step is in progress to ``error``."""
        message = str(error) or error.__class__.__name__
        try:
            current = self.tracker.current_step(ctx.cache_id)
            step_name = current.name if current else stage.step_name
            self.tracker.transition(ctx.cache_id, step_name, StepStatus.ERROR, f"Error: {message}")
        except ComicGenError:
            log.exception("Could not record failure", extra={"job_id": ctx.cache_id, "step": stage.step_name})

    async def run(self, cache_id: str) -> PipelineOutcome:
        job = self.store.get(cache_id)
        if job is None:
            log.error("Job not found", extra={"job_id": cache_id, "step": "-"})
            return PipelineOutcome(cache_id, False, str(JobNotFound(cache_id)))

        ctx = StageContext(
            cache_id=cache_id,
            source_url=job.source_url,
            part_count=job.part_count,
            summary_prompt=job.summary_prompt,
            image_prompt=job.image_prompt,
        )
        log.info("Starting pipeline for %s (%d parts)", ctx.source_url, ctx.part_count,
                 extra={"job_id": cache_id, "step": "-"})

        for stage in self.registry.stages_for(ctx.part_count):
            try:
                result = await self._run_stage(stage, ctx)
            except InvariantViolation as e:
                log.error("Corrupted job record: %s", e, extra={"job_id": cache_id, "step": stage.step_name})
                self._fail(ctx, stage, e)
                return PipelineOutcome(cache_id, False, "Comic generation failed")
            except Exception as e:
                log.exception("Stage failed", extra={"job_id": cache_id, "step": stage.step_name})
                self._fail(ctx, stage, e)
                return PipelineOutcome(cache_id, False, str(e))

            if result.short_circuit:
                log.info("Served from cache", extra={"job_id": cache_id, "step": stage.step_name})
                return PipelineOutcome(cache_id, True, result.message, from_cache=True)

        log.info("Comic generation completed", extra={"job_id": cache_id, "step": "-"})
        return PipelineOutcome(cache_id, True, "Comic generation completed")
