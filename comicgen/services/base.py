from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class GeneratedContent:
    title: str
    summaries: List[str] = field(default_factory=list)
    prompts: List[str] = field(default_factory=list)


class DocumentFetcher:
    async def fetch(self, url: str) -> str:
        raise NotImplementedError


class ContentGenerator:
    async def summarize(self, text: str, part_count: int, prompt_override: Optional[str] = None) -> GeneratedContent:
        raise NotImplementedError


class ImageSynthesizer:
    async def synthesize(self, prompt: str, prompt_override: Optional[str] = None) -> str:
        raise NotImplementedError
