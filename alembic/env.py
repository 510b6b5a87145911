from sqlalchemy import pool
from alembic import context
from comicgen.db.session import Base, make_engine
from comicgen.core.config import settings
from comicgen.db import models  # noqa

target_metadata = Base.metadata
# SQLite cannot ALTER columns in place; batch mode rebuilds the table instead
render_as_batch = settings.database_url.startswith("sqlite")


if context.is_offline_mode():
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=render_as_batch,
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    connectable = make_engine(settings.database_url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )
        with context.begin_transaction():
            context.run_migrations()
