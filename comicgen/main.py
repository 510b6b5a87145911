import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from alembic.config import Config
from alembic import command
from comicgen.core.config import settings
from comicgen.core.logging import configure_logging
from comicgen.api.routes import router as api_router
from comicgen.db.session import engine

configure_logging()
log = logging.getLogger(__name__)


def prepare_database(attempts: int = 30, delay: float = 1.0) -> None:
    """Wait for the database to accept connections, then upgrade the schema to head."""
    for attempt in range(1, attempts + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            break
        except OperationalError as e:
            if attempt == attempts:
                raise
            log.warning("Database unavailable (%d/%d): %s", attempt, attempts, e)
            time.sleep(delay)
    command.upgrade(Config("alembic.ini"), "head")
    log.info("Schema for comic_generations is at head")


@asynccontextmanager
async def lifespan(app: FastAPI):
    prepare_database()
    yield


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan if with_lifespan else None,
    )
    app.include_router(api_router, prefix="/v1")
    return app


app = create_app()
