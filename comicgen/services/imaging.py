from __future__ import annotations
import base64
import binascii
import logging
from typing import Optional
from openai import AsyncOpenAI, OpenAIError
from comicgen.core.config import settings
from comicgen.core.errors import SynthesisError
from comicgen.services.base import ImageSynthesizer
from comicgen.services.llm import build_openai_client
from comicgen.services.prompts import render_image_prompt
from comicgen.services.scraper import ArticleScraper

log = logging.getLogger(__name__)

DATA_URI_PREFIX = "data:image/png;base64,"


class OpenAIImageSynthesizer(ImageSynthesizer):
    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str | None = None,
        size: str | None = None,
        quality: str | None = None,
    ):
        self._client = client
        self.model = model or settings.openai_image_model
        self.size = size or settings.image_size
        self.quality = quality or settings.image_quality

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = build_openai_client()
        return self._client

    async def synthesize(self, prompt: str, prompt_override: Optional[str] = None) -> str:
        try:
            response = await self.client.images.generate(
                model=self.model,
                prompt=render_image_prompt(prompt, prompt_override),
                n=1,
                size=self.size,
                quality=self.quality,
            )
        except OpenAIError as e:
            raise SynthesisError(f"Image generation failed: {e}") from e

        if not response.data:
            raise SynthesisError("No image received from OpenAI")
        image = response.data[0]
        if image.url:
            return image.url
        if image.b64_json:
            return DATA_URI_PREFIX + image.b64_json
        raise SynthesisError("No image URL received from OpenAI")


class ImageRefResolver:
    """Checks that an image reference can actually be served."""

    def __init__(self, scraper: ArticleScraper | None = None):
        self.scraper = scraper or ArticleScraper()

    async def __call__(self, image_ref: str) -> bool:
        if image_ref.startswith("data:"):
            _, _, payload = image_ref.partition(",")
            try:
                return bool(base64.b64decode(payload, validate=True))
            except (binascii.Error, ValueError):
                return False
        if image_ref.startswith(("http://", "https://")):
            return await self.scraper.is_reachable(image_ref)
        log.warning("Unsupported image reference scheme: %s", image_ref[:40])
        return False
