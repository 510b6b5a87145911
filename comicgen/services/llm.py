from __future__ import annotations
import json
import logging
from typing import Any, Optional
from openai import AsyncOpenAI, OpenAIError
from comicgen.core.config import settings
from comicgen.core.errors import GenerationError
from comicgen.services.base import ContentGenerator, GeneratedContent
from comicgen.services.prompts import render_summary_prompt

log = logging.getLogger(__name__)


def build_openai_client() -> AsyncOpenAI:
    return AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.stage_timeout_seconds)


def parse_generated_content(content: str) -> GeneratedContent:
    """Parse the model's JSON reply into a title plus per-part summaries and prompts."""
    try:
        result: Any = json.loads(content)
    except json.JSONDecodeError as e:
        raise GenerationError(f"Model returned invalid JSON: {e}") from e

    parts = result.get("parts") if isinstance(result, dict) else None
    if not isinstance(parts, list):
        raise GenerationError("Model response is missing the 'parts' list")

    summaries, prompts = [], []
    for part in parts:
        if not isinstance(part, dict):
            raise GenerationError("Model response contains a malformed part")
        summaries.append(str(part.get("summary") or "").strip())
        prompts.append(str(part.get("prompt") or "").strip())

    title = str(result.get("title") or "").strip() or "Untitled Comic"
    return GeneratedContent(title=title, summaries=summaries, prompts=prompts)


class OpenAIContentGenerator(ContentGenerator):
    def __init__(self, client: AsyncOpenAI | None = None, model: str | None = None):
        self._client = client
        self.model = model or settings.openai_text_model

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = build_openai_client()
        return self._client

    async def summarize(self, text: str, part_count: int, prompt_override: Optional[str] = None) -> GeneratedContent:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": render_summary_prompt(part_count, prompt_override)},
                    {"role": "user", "content": text},
                ],
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise GenerationError(f"Summary generation failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GenerationError("No content received from OpenAI")
        return parse_generated_content(content)
