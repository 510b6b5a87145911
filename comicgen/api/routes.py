from fastapi import APIRouter
from comicgen.api.routes_health import router as health_router
from comicgen.api.routes_jobs import router as jobs_router
from comicgen.api.routes_prompts import router as prompts_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(jobs_router, tags=["comics"])
router.include_router(prompts_router, tags=["prompts"])
