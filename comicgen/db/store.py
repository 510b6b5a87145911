from __future__ import annotations
import logging
from typing import Callable, List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.attributes import flag_modified
from comicgen.core.errors import DuplicateJob, JobNotFound, StepsMissing
from comicgen.core.workflow import Step, steps_from_json, steps_to_json
from comicgen.db.models import ComicGeneration

log = logging.getLogger(__name__)

StepsMutator = Callable[[List[Step]], List[Step]]


class JobStore:
    """Keyed access to comic generation records.

    Every call runs in its own session and commits before returning, so a
    poller never sees a write that could still be rolled back.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _load(self, db: Session, cache_id: str, for_update: bool = False) -> ComicGeneration:
        stmt = select(ComicGeneration).where(ComicGeneration.cache_id == cache_id)
        if for_update:
            stmt = stmt.with_for_update()
        job = db.execute(stmt).scalar_one_or_none()
        if job is None:
            raise JobNotFound(cache_id)
        return job

    def get(self, cache_id: str) -> Optional[ComicGeneration]:
        with self._session_factory() as db:
            stmt = select(ComicGeneration).where(ComicGeneration.cache_id == cache_id)
            return db.execute(stmt).scalar_one_or_none()

    def require(self, cache_id: str) -> ComicGeneration:
        job = self.get(cache_id)
        if job is None:
            raise JobNotFound(cache_id)
        return job

    def create(
        self,
        cache_id: str,
        source_url: str,
        part_count: int,
        steps: List[Step],
        summary_prompt: Optional[str] = None,
        image_prompt: Optional[str] = None,
    ) -> ComicGeneration:
        with self._session_factory() as db:
            job = ComicGeneration(
                cache_id=cache_id,
                source_url=source_url,
                part_count=part_count,
                summary_prompt=summary_prompt,
                image_prompt=image_prompt,
                steps=steps_to_json(steps),
                summaries=[],
                prompts=[],
                image_refs=[],
            )
            db.add(job)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise DuplicateJob(cache_id) from e
            db.refresh(job)
            return job

    def update(self, cache_id: str, **fields) -> None:
        with self._session_factory() as db:
            job = self._load(db, cache_id, for_update=True)
            for key, value in fields.items():
                setattr(job, key, value)
            db.commit()

    def mutate_steps(self, cache_id: str, mutator: StepsMutator) -> List[Step]:
        """Read-modify-write the step list under a row lock."""
        with self._session_factory() as db:
            job = self._load(db, cache_id, for_update=True)
            if not job.steps:
                raise StepsMissing(cache_id)
            steps = mutator(steps_from_json(job.steps))
            job.steps = steps_to_json(steps)
            flag_modified(job, "steps")
            db.commit()
            return steps

    def set_image_ref(self, cache_id: str, index: int, image_ref: str) -> List[str]:
        """Store the reference for part ``index``, dropping anything after it."""
        with self._session_factory() as db:
            job = self._load(db, cache_id, for_update=True)
            refs = list(job.image_refs or [])[:index]
            refs.append(image_ref)
            job.image_refs = refs
            flag_modified(job, "image_refs")
            db.commit()
            return refs

    def reset(self, cache_id: str, steps: List[Step]) -> ComicGeneration:
        with self._session_factory() as db:
            job = self._load(db, cache_id, for_update=True)
            job.steps = steps_to_json(steps)
            job.title = None
            job.summaries = []
            job.prompts = []
            job.image_refs = []
            db.commit()
            return job

    def delete(self, cache_id: str) -> bool:
        with self._session_factory() as db:
            job = db.execute(
                select(ComicGeneration).where(ComicGeneration.cache_id == cache_id)
            ).scalar_one_or_none()
            if job is None:
                return False
            db.delete(job)
            db.commit()
            log.info("Deleted comic generation", extra={"job_id": cache_id, "step": "-"})
            return True

    def list_recent(self, limit: int = 20) -> List[ComicGeneration]:
        with self._session_factory() as db:
            stmt = select(ComicGeneration).order_by(ComicGeneration.created_at.desc(), ComicGeneration.id.desc()).limit(limit)
            return list(db.execute(stmt).scalars())
