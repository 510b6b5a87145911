import logging
from urllib.parse import urlparse
import httpx
from comicgen.core.config import settings
from comicgen.core.errors import InvalidStageResult, InvalidUrl
from comicgen.core.workflow import DOWNLOAD_ARTICLE, VALIDATE_URL, ArtifactType, StepArtifact, StepStatus
from comicgen.services.base import DocumentFetcher
from comicgen.services.scraper import ArticleScraper, normalize_whitespace
from comicgen.stages.base import BaseStage, RetryPolicy, StageResult

log = logging.getLogger(__name__)


def check_url_syntax(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrl("Invalid URL provided")


class ValidateUrlStage(BaseStage):
    """Syntax check plus a HEAD probe for an HTML document. Never retried."""
    step_name = VALIDATE_URL

    def __init__(self, scraper: ArticleScraper):
        self.scraper = scraper

    async def run(self, ctx, tracker):
        tracker.transition(ctx.cache_id, self.step_name, StepStatus.IN_PROGRESS)
        check_url_syntax(ctx.source_url)
        try:
            content_type = await self.scraper.probe_content_type(ctx.source_url)
        except httpx.HTTPError as e:
            raise InvalidUrl(f"URL is not reachable: {e}") from e
        if "text/html" not in content_type.lower():
            raise InvalidUrl("URL must point to an HTML page")

        tracker.transition(ctx.cache_id, self.step_name, StepStatus.COMPLETE, "URL validated successfully")
        return StageResult(self.step_name, "URL validated successfully")


class FetchArticleStage(BaseStage):
    step_name = DOWNLOAD_ARTICLE

    def __init__(self, fetcher: DocumentFetcher, retry: RetryPolicy | None = None, min_chars: int | None = None):
        self.fetcher = fetcher
        self.retry = retry or RetryPolicy.from_settings()
        self.min_chars = min_chars if min_chars is not None else settings.min_article_chars

    async def run(self, ctx, tracker):
        tracker.transition(ctx.cache_id, self.step_name, StepStatus.IN_PROGRESS)

        async def attempt() -> str:
            text = normalize_whitespace(await self.fetcher.fetch(ctx.source_url) or "")
            if len(text) < self.min_chars:
                raise InvalidStageResult("Article content too short or invalid")
            return text

        ctx.article_text = await self.with_retries(ctx, tracker, attempt)
        tracker.transition(
            ctx.cache_id,
            self.step_name,
            StepStatus.COMPLETE,
            "Article downloaded and processed",
            StepArtifact(ArtifactType.TEXT, ctx.article_text),
        )
        return StageResult(self.step_name, "Article downloaded and processed")
