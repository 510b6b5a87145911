from comicgen.core.submission import Launcher
from comicgen.db.session import SessionLocal
from comicgen.db.store import JobStore


def get_store() -> JobStore:
    return JobStore(SessionLocal)


def get_launcher() -> Launcher:
    from comicgen.tasks.jobs import launch_pipeline
    return launch_pipeline
