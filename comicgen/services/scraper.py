from __future__ import annotations
import logging
import re
from html.parser import HTMLParser
from typing import List, Optional
import httpx
from comicgen.core.config import settings
from comicgen.core.errors import FetchError
from comicgen.services.base import DocumentFetcher

log = logging.getLogger(__name__)

USER_AGENT = "comicgen/0.1 (+article-to-comic)"

SKIPPED_TAGS = {"head", "title", "script", "style", "nav", "header", "footer", "aside", "noscript", "template"}
CONTENT_TAGS = {"article", "main"}
CONTENT_CLASSES = {"content", "post-content"}
VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


class _ArticleTextParser(HTMLParser):
    """Collects body text and the text of the first main-content container."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.stack: List[str] = []
        self.skip_depth: Optional[int] = None
        self.content_depth: Optional[int] = None
        self.content_done = False
        self.body_parts: List[str] = []
        self.content_parts: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in VOID_TAGS:
            return
        self.stack.append(tag)
        depth = len(self.stack)
        if self.skip_depth is None and tag in SKIPPED_TAGS:
            self.skip_depth = depth
            return
        if self.content_depth is None and not self.content_done and self.skip_depth is None:
            classes = set((dict(attrs).get("class") or "").split())
            if tag in CONTENT_TAGS or classes & CONTENT_CLASSES:
                self.content_depth = depth

    def handle_endtag(self, tag):
        if tag not in self.stack:
            return
        # Pop through unclosed children until the matching open tag
        while self.stack:
            depth = len(self.stack)
            popped = self.stack.pop()
            if self.skip_depth is not None and depth <= self.skip_depth:
                self.skip_depth = None
            if self.content_depth is not None and depth <= self.content_depth:
                self.content_depth = None
                self.content_done = True
            if popped == tag:
                break

    def handle_data(self, data):
        if self.skip_depth is not None:
            return
        self.body_parts.append(data)
        if self.content_depth is not None:
            self.content_parts.append(data)


def extract_article_text(html: str) -> str:
    """Main article text of an HTML page, falling back to the whole body."""
    parser = _ArticleTextParser()
    parser.feed(html)
    parser.close()
    content = normalize_whitespace(" ".join(parser.content_parts))
    if content:
        return content
    return normalize_whitespace(" ".join(parser.body_parts))


class ArticleScraper(DocumentFetcher):
    def __init__(self, timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
        )

    async def probe_content_type(self, url: str) -> str:
        """Content type of the URL (empty when absent).

        Hosts that refuse HEAD are asked again with a GET whose body is never read.
        """
        async with self._client() as client:
            r = await client.head(url)
            if r.is_success:
                return r.headers.get("content-type", "")
            log.info("HEAD %s returned %d, retrying with GET", url, r.status_code)
            async with client.stream("GET", url) as r:
                r.raise_for_status()
                return r.headers.get("content-type", "")

    async def is_reachable(self, url: str) -> bool:
        try:
            async with self._client() as client:
                r = await client.head(url)
                return r.is_success
        except httpx.HTTPError as e:
            log.warning("HEAD %s failed: %s", url, e)
            return False

    async def fetch(self, url: str) -> str:
        try:
            async with self._client() as client:
                r = await client.get(url)
                r.raise_for_status()
                html = r.text
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to scrape article: {e}") from e
        return extract_article_text(html)
