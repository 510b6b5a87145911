from __future__ import annotations
import logging
from comicgen.core.submission import Launcher
from comicgen.core.tracker import StepTracker
from comicgen.core.workflow import CHECK_CACHE, StepStatus
from comicgen.db.store import JobStore

log = logging.getLogger(__name__)


class RegenerationController:
    """Resets a job in place and queues a fresh run under the same id."""

    def __init__(self, store: JobStore, launch: Launcher):
        self.store = store
        self.launch = launch

    def regenerate(self, cache_id: str) -> None:
        job = self.store.require(cache_id)
        self.store.reset(cache_id, StepTracker.initialize(job.part_count))
        log.info("Reset job for regeneration", extra={"job_id": cache_id, "step": "-"})
        try:
            self.launch(cache_id)
        except Exception as e:
            # Leave the job failed, not pending, so it can be regenerated again
            log.exception("Could not queue regeneration", extra={"job_id": cache_id, "step": "-"})
            StepTracker(self.store).transition(
                cache_id, CHECK_CACHE, StepStatus.ERROR, f"Error: Could not queue generation: {e}"
            )
            raise
