#!/usr/bin/env python3
"""
Run one article-to-comic generation in-process and print its steps.
Usage: python scripts/run_pipeline.py <article-url> [parts]
"""
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from comicgen.core.engine import PipelineOrchestrator
from comicgen.core.logging import configure_logging
from comicgen.core.submission import submit_generation
from comicgen.core.workflow import steps_from_json
from comicgen.db import models  # noqa
from comicgen.db.session import Base, SessionLocal, engine
from comicgen.db.store import JobStore

# Create tables if they don't exist
Base.metadata.create_all(bind=engine)


def run(url: str, parts: int) -> int:
    store = JobStore(SessionLocal)
    queued = []
    submission = submit_generation(store, queued.append, source_url=url, part_count=parts)
    print(f"Job: {submission.job_id} ({'new' if submission.created else 'existing'})")

    outcome = asyncio.run(PipelineOrchestrator(store).run(submission.job_id))

    job = store.require(submission.job_id)
    print()
    print("=" * 80)
    print(f"Finished: ok={outcome.ok} from_cache={outcome.from_cache} - {outcome.message}")
    print("=" * 80)
    for step in steps_from_json(job.steps):
        print(f"  [{step.status.value:>11}] {step.name}" + (f" - {step.detail}" if step.detail else ""))
    if job.title:
        print()
        print(f"Title: {job.title}")
        for i, (summary, image) in enumerate(zip(job.summaries, job.image_refs), start=1):
            print(f"  Part {i}: {summary}")
            print(f"          {image[:100]}")
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    configure_logging()
    sys.exit(run(sys.argv[1], int(sys.argv[2]) if len(sys.argv) > 2 else 3))
