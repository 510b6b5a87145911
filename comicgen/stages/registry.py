from dataclasses import dataclass, field
from typing import List
from comicgen.db.store import JobStore
from comicgen.services.base import ContentGenerator, DocumentFetcher, ImageSynthesizer
from comicgen.services.imaging import ImageRefResolver, OpenAIImageSynthesizer
from comicgen.services.llm import OpenAIContentGenerator
from comicgen.services.scraper import ArticleScraper
from comicgen.stages.base import BaseStage, RetryPolicy
from comicgen.stages.impl_cache import CacheCheckStage
from comicgen.stages.impl_finalize import FinalizeStage
from comicgen.stages.impl_generate import ImagePartStage, ImageResolver, SummarizeStage
from comicgen.stages.impl_intake import FetchArticleStage, ValidateUrlStage

@dataclass
class StageRegistry:
    """Collaborators for one pipeline, and the ordered stages built from them."""
    store: JobStore
    scraper: ArticleScraper
    fetcher: DocumentFetcher
    generator: ContentGenerator
    synthesizer: ImageSynthesizer
    resolver: ImageResolver
    retry: RetryPolicy = field(default_factory=RetryPolicy.from_settings)

    def stages_for(self, part_count: int) -> List[BaseStage]:
        stages: List[BaseStage] = [
            CacheCheckStage(self.store),
            ValidateUrlStage(self.scraper),
            FetchArticleStage(self.fetcher, retry=self.retry),
            SummarizeStage(self.generator, self.store, retry=self.retry),
        ]
        stages += [
            ImagePartStage(i, self.synthesizer, self.resolver, self.store, retry=self.retry)
            for i in range(part_count)
        ]
        stages.append(FinalizeStage(self.store))
        return stages

    @staticmethod
    def default(store: JobStore) -> "StageRegistry":
        scraper = ArticleScraper()
        return StageRegistry(
            store=store,
            scraper=scraper,
            fetcher=scraper,
            generator=OpenAIContentGenerator(),
            synthesizer=OpenAIImageSynthesizer(),
            resolver=ImageRefResolver(scraper),
        )
