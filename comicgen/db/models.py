from __future__ import annotations
from datetime import datetime
from sqlalchemy import String, DateTime, Integer, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column
from comicgen.db.session import Base

class ComicGeneration(Base):
    __tablename__ = "comic_generations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cache_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    source_url: Mapped[str] = mapped_column(Text, nullable=False)
    part_count: Mapped[int] = mapped_column(Integer, nullable=False)
    summary_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)

    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    steps: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    summaries: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    prompts: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    image_refs: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
