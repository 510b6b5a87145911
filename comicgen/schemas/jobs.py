from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional, List
from datetime import datetime
from urllib.parse import urlparse
from comicgen.core.config import settings
from comicgen.core.workflow import StepStatus

class ComicCreateRequest(BaseModel):
    source_url: str = Field(..., examples=["https://example.com/articles/moon-landing"])
    requested_part_count: int = Field(..., ge=1, le=settings.max_parts, examples=[3])
    summary_prompt_override: Optional[str] = None
    image_prompt_override: Optional[str] = None

    @field_validator("source_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("source_url must be an absolute http(s) URL")
        return value

    @field_validator("summary_prompt_override", "image_prompt_override")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value

class ComicCreateResponse(BaseModel):
    job_id: str

class StepArtifactOut(BaseModel):
    type: Literal["text", "image"]
    data: str

class StepOut(BaseModel):
    name: str
    status: StepStatus
    detail: Optional[str] = None
    artifact: Optional[StepArtifactOut] = None

class ComicResponse(BaseModel):
    job_id: str
    source_url: str
    requested_part_count: int
    title: Optional[str] = None
    steps: List[StepOut] = []
    summaries: List[str] = []
    prompts: List[str] = []
    image_refs: List[str] = []
    summary_prompt_override: Optional[str] = None
    image_prompt_override: Optional[str] = None
    created_at: datetime
    status: StepStatus
    from_cache: bool = False

class ComicListItem(BaseModel):
    job_id: str
    source_url: str
    requested_part_count: int
    title: Optional[str] = None
    status: StepStatus
    created_at: datetime

class ActionResponse(BaseModel):
    success: bool = True

class DefaultPromptsResponse(BaseModel):
    summary: str
    image: str
