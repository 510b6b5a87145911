from __future__ import annotations
import asyncio
import logging
from comicgen.tasks.celery_app import celery_app
from comicgen.db.session import SessionLocal
from comicgen.db.store import JobStore
from comicgen.core.engine import PipelineOrchestrator

log = logging.getLogger(__name__)

@celery_app.task(name="run_comic_pipeline")
def run_comic_pipeline(cache_id: str) -> dict:
    store = JobStore(SessionLocal)
    orchestrator = PipelineOrchestrator(store)
    outcome = asyncio.run(orchestrator.run(cache_id))
    if outcome.ok:
        log.info("Pipeline finished: %s", outcome.message, extra={"job_id": cache_id, "step": "-"})
    else:
        log.error("Pipeline failed: %s", outcome.message, extra={"job_id": cache_id, "step": "-"})
    return {"cache_id": cache_id, "ok": outcome.ok, "message": outcome.message, "from_cache": outcome.from_cache}


def launch_pipeline(cache_id: str) -> None:
    """Queue a pipeline run without waiting for it."""
    run_comic_pipeline.delay(cache_id)
