from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Optional
from comicgen.core.errors import DuplicateJob
from comicgen.core.fingerprint import compute_fingerprint
from comicgen.core.tracker import StepTracker
from comicgen.core.workflow import CACHE_HIT_DETAIL, CHECK_CACHE, StepStatus, all_complete, steps_from_json
from comicgen.db.store import JobStore

log = logging.getLogger(__name__)

Launcher = Callable[[str], object]


@dataclass(frozen=True)
class Submission:
    job_id: str
    created: bool


def submit_generation(
    store: JobStore,
    launch: Launcher,
    source_url: str,
    part_count: int,
    summary_prompt: Optional[str] = None,
    image_prompt: Optional[str] = None,
) -> Submission:
    """Create a job for a new request, or hand back the id of an identical one.

    Only the call that inserts the record launches a pipeline run.
    """
    cache_id = compute_fingerprint(source_url, part_count, summary_prompt, image_prompt)

    existing = store.get(cache_id)
    if existing is not None:
        if all_complete(steps_from_json(existing.steps)):
            StepTracker(store).transition(cache_id, CHECK_CACHE, StepStatus.COMPLETE, CACHE_HIT_DETAIL)
        log.info("Request matched existing job", extra={"job_id": cache_id, "step": "-"})
        return Submission(cache_id, created=False)

    try:
        store.create(
            cache_id=cache_id,
            source_url=source_url,
            part_count=part_count,
            steps=StepTracker.initialize(part_count),
            summary_prompt=summary_prompt,
            image_prompt=image_prompt,
        )
    except DuplicateJob:
        # Lost an insert race against an identical submission; that one launches
        log.info("Concurrent identical submission", extra={"job_id": cache_id, "step": "-"})
        return Submission(cache_id, created=False)

    try:
        launch(cache_id)
    except Exception:
        # An undispatched record would block every later identical submission
        log.exception("Could not queue comic generation", extra={"job_id": cache_id, "step": "-"})
        store.delete(cache_id)
        raise
    log.info("Queued comic generation for %s", source_url, extra={"job_id": cache_id, "step": "-"})
    return Submission(cache_id, created=True)
