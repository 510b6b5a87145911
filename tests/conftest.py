"""Shared fixtures: an in-memory job store and fake collaborators."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from comicgen.db.session import Base
from comicgen.db import models  # noqa
from comicgen.db.store import JobStore
from comicgen.services.base import (
    ContentGenerator,
    DocumentFetcher,
    GeneratedContent,
    ImageSynthesizer,
)
from comicgen.stages.base import RetryPolicy
from comicgen.stages.registry import StageRegistry

ARTICLE_TEXT = (
    "The city council met on Tuesday to discuss the new bridge. "
    "Engineers presented three designs, and residents argued late into the night "
    "about which one would best survive the spring floods."
)


class FakeScraper:
    """Stands in for ArticleScraper's HEAD probe."""
    def __init__(self, content_type="text/html; charset=utf-8", error=None):
        self.content_type = content_type
        self.error = error
        self.probes = []

    async def probe_content_type(self, url):
        self.probes.append(url)
        if self.error:
            raise self.error
        return self.content_type


class FakeFetcher(DocumentFetcher):
    """Returns queued results in order; exceptions in the queue are raised."""
    def __init__(self, *results):
        self.results = list(results) or [ARTICLE_TEXT]
        self.calls = 0

    async def fetch(self, url):
        self.calls += 1
        result = self.results[min(self.calls, len(self.results)) - 1]
        if isinstance(result, Exception):
            raise result
        return result


class FakeGenerator(ContentGenerator):
    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    async def summarize(self, text, part_count, prompt_override=None):
        self.calls.append((text, part_count, prompt_override))
        if self.results:
            result = self.results[min(len(self.calls), len(self.results)) - 1]
            if isinstance(result, Exception):
                raise result
            return result
        return GeneratedContent(
            title="The Bridge Debate",
            summaries=[f"Summary of part {i + 1} of the bridge story" for i in range(part_count)],
            prompts=[f"Panel {i + 1}: council chamber at night" for i in range(part_count)],
        )


class FakeSynthesizer(ImageSynthesizer):
    def __init__(self, failures=None):
        self.failures = list(failures or [])
        self.calls = []

    async def synthesize(self, prompt, prompt_override=None):
        self.calls.append((prompt, prompt_override))
        if self.failures:
            raise self.failures.pop(0)
        return f"https://images.example.com/{len(self.calls)}.png"


async def always_resolvable(image_ref):
    return True


@pytest.fixture
def store():
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield JobStore(sessionmaker(bind=engine, autoflush=False, expire_on_commit=False))
    engine.dispose()


@pytest.fixture
def make_registry(store):
    """Build a StageRegistry of fakes; keyword arguments replace single collaborators."""
    def _make(**overrides):
        values = dict(
            store=store,
            scraper=FakeScraper(),
            fetcher=FakeFetcher(),
            generator=FakeGenerator(),
            synthesizer=FakeSynthesizer(),
            resolver=always_resolvable,
            retry=RetryPolicy(max_attempts=3, delay_seconds=0),
        )
        values.update(overrides)
        return StageRegistry(**values)
    return _make
