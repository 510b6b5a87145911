import logging
import secrets
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, Query
from comicgen.api.deps import get_launcher, get_store
from comicgen.core.config import settings
from comicgen.core.errors import JobNotFound
from comicgen.core.regeneration import RegenerationController
from comicgen.core.submission import Launcher, submit_generation
from comicgen.core.workflow import job_status, served_from_cache, steps_from_json
from comicgen.db.models import ComicGeneration
from comicgen.db.store import JobStore
from comicgen.schemas.jobs import (
    ActionResponse,
    ComicCreateRequest,
    ComicCreateResponse,
    ComicListItem,
    ComicResponse,
    StepOut,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/comics")


def _to_response(job: ComicGeneration) -> ComicResponse:
    steps = steps_from_json(job.steps)
    return ComicResponse(
        job_id=job.cache_id,
        source_url=job.source_url,
        requested_part_count=job.part_count,
        title=job.title,
        steps=[StepOut(**s.to_dict()) for s in steps],
        summaries=job.summaries or [],
        prompts=job.prompts or [],
        image_refs=job.image_refs or [],
        summary_prompt_override=job.summary_prompt,
        image_prompt_override=job.image_prompt,
        created_at=job.created_at,
        status=job_status(steps),
        from_cache=served_from_cache(steps),
    )


@router.post("", response_model=ComicCreateResponse)
def create_comic(
    req: ComicCreateRequest,
    store: JobStore = Depends(get_store),
    launch: Launcher = Depends(get_launcher),
):
    submission = submit_generation(
        store,
        launch,
        source_url=req.source_url,
        part_count=req.requested_part_count,
        summary_prompt=req.summary_prompt_override,
        image_prompt=req.image_prompt_override,
    )
    return ComicCreateResponse(job_id=submission.job_id)


@router.get("", response_model=list[ComicListItem])
def list_comics(limit: int = Query(20, ge=1, le=100), store: JobStore = Depends(get_store)):
    items = []
    for job in store.list_recent(limit):
        items.append(ComicListItem(
            job_id=job.cache_id,
            source_url=job.source_url,
            requested_part_count=job.part_count,
            title=job.title,
            status=job_status(steps_from_json(job.steps)),
            created_at=job.created_at,
        ))
    return items


@router.get("/{job_id}", response_model=ComicResponse)
def get_comic(job_id: str, store: JobStore = Depends(get_store)):
    job = store.get(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Comic generation not found")
    return _to_response(job)


@router.post("/{job_id}/regenerate", response_model=ActionResponse)
def regenerate_comic(
    job_id: str,
    store: JobStore = Depends(get_store),
    launch: Launcher = Depends(get_launcher),
):
    try:
        RegenerationController(store, launch).regenerate(job_id)
    except JobNotFound:
        raise HTTPException(status_code=404, detail="Comic generation not found")
    return ActionResponse(success=True)


@router.delete("/{job_id}", response_model=ActionResponse)
def delete_comic(
    job_id: str,
    x_admin_password: Optional[str] = Header(default=None),
    store: JobStore = Depends(get_store),
):
    expected = settings.admin_password
    if not expected or not x_admin_password or not secrets.compare_digest(x_admin_password.encode(), expected.encode()):
        raise HTTPException(status_code=403, detail="Invalid admin password")
    if not store.delete(job_id):
        raise HTTPException(status_code=404, detail="Comic generation not found")
    return ActionResponse(success=True)
