import json
import logging
from typing import Awaitable, Callable
from comicgen.core.config import settings
from comicgen.core.errors import InvalidStageResult, StageError
from comicgen.core.workflow import GENERATE_SUMMARY, ArtifactType, StepArtifact, StepStatus, image_step_name
from comicgen.db.store import JobStore
from comicgen.services.base import ContentGenerator, GeneratedContent, ImageSynthesizer
from comicgen.stages.base import BaseStage, RetryPolicy, StageResult

log = logging.getLogger(__name__)

ImageResolver = Callable[[str], Awaitable[bool]]


class SummarizeStage(BaseStage):
    step_name = GENERATE_SUMMARY

    def __init__(
        self,
        generator: ContentGenerator,
        store: JobStore,
        retry: RetryPolicy | None = None,
        min_summary_chars: int | None = None,
    ):
        self.generator = generator
        self.store = store
        self.retry = retry or RetryPolicy.from_settings()
        self.min_summary_chars = min_summary_chars if min_summary_chars is not None else settings.min_summary_chars

    def _validate(self, content: GeneratedContent, part_count: int) -> None:
        if len(content.summaries) != part_count or len(content.prompts) != part_count:
            raise InvalidStageResult(
                f"Expected {part_count} parts, received {len(content.summaries)} summaries "
                f"and {len(content.prompts)} prompts"
            )
        for i, summary in enumerate(content.summaries):
            if not summary or len(summary) < self.min_summary_chars:
                raise InvalidStageResult(f"Invalid summary for part {i + 1}")
        for i, prompt in enumerate(content.prompts):
            if not prompt:
                raise InvalidStageResult(f"Invalid image prompt for part {i + 1}")

    async def run(self, ctx, tracker):
        if not ctx.article_text:
            raise StageError("No article text available to summarize", retriable=False)
        tracker.transition(ctx.cache_id, self.step_name, StepStatus.IN_PROGRESS)

        async def attempt() -> GeneratedContent:
            content = await self.generator.summarize(ctx.article_text, ctx.part_count, ctx.summary_prompt)
            self._validate(content, ctx.part_count)
            return content

        content = await self.with_retries(ctx, tracker, attempt)

        # Results land before the step is marked complete; a rerun also drops stale images
        self.store.update(
            ctx.cache_id,
            title=content.title,
            summaries=content.summaries,
            prompts=content.prompts,
            image_refs=[],
        )
        ctx.prompts = list(content.prompts)
        tracker.transition(
            ctx.cache_id,
            self.step_name,
            StepStatus.COMPLETE,
            "Generated summaries and prompts",
            StepArtifact(
                ArtifactType.TEXT,
                json.dumps({"title": content.title, "summaries": content.summaries, "prompts": content.prompts}, indent=2),
            ),
        )
        return StageResult(self.step_name, "Generated summaries and prompts")


class ImagePartStage(BaseStage):
    """Generates the panel for one part; one instance per part, run in order."""

    def __init__(
        self,
        part_index: int,
        synthesizer: ImageSynthesizer,
        resolver: ImageResolver,
        store: JobStore,
        retry: RetryPolicy | None = None,
    ):
        self.part_index = part_index
        self.step_name = image_step_name(part_index + 1)
        self.synthesizer = synthesizer
        self.resolver = resolver
        self.store = store
        self.retry = retry or RetryPolicy.from_settings()

    def _prompt(self, ctx) -> str:
        prompts = ctx.prompts or list(self.store.require(ctx.cache_id).prompts or [])
        if self.part_index >= len(prompts):
            raise StageError(f"No image prompt for part {self.part_index + 1}", retriable=False)
        return prompts[self.part_index]

    async def run(self, ctx, tracker):
        prompt = self._prompt(ctx)
        tracker.transition(ctx.cache_id, self.step_name, StepStatus.IN_PROGRESS)

        async def attempt() -> str:
            image_ref = await self.synthesizer.synthesize(prompt, ctx.image_prompt)
            if not image_ref:
                raise InvalidStageResult("Invalid image URL received")
            if not await self.resolver(image_ref):
                raise InvalidStageResult("Generated image not accessible")
            return image_ref

        image_ref = await self.with_retries(ctx, tracker, attempt)
        self.store.set_image_ref(ctx.cache_id, self.part_index, image_ref)
        tracker.transition(
            ctx.cache_id,
            self.step_name,
            StepStatus.COMPLETE,
            "Generated comic panel",
            StepArtifact(ArtifactType.IMAGE, image_ref),
        )
        return StageResult(self.step_name, "Generated comic panel")
