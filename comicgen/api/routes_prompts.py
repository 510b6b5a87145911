from fastapi import APIRouter
from comicgen.schemas.jobs import DefaultPromptsResponse
from comicgen.services.prompts import DEFAULT_PROMPTS

router = APIRouter(prefix="/prompts")

@router.get("/defaults", response_model=DefaultPromptsResponse)
def get_default_prompts():
    return DefaultPromptsResponse(**DEFAULT_PROMPTS)
