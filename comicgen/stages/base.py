from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, TypeVar
from comicgen.core.config import settings
from comicgen.core.errors import StageError
from comicgen.core.tracker import StepTracker
from comicgen.core.workflow import StepStatus

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class StageContext:
    """Inputs of one pipeline run plus what earlier stages hand forward."""
    cache_id: str
    source_url: str
    part_count: int
    summary_prompt: Optional[str] = None
    image_prompt: Optional[str] = None
    article_text: Optional[str] = None
    prompts: List[str] = field(default_factory=list)


@dataclass
class StageResult:
    step_name: str
    message: str
    short_circuit: bool = False


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    delay_seconds: float = 1.0

    @staticmethod
    def from_settings() -> "RetryPolicy":
        return RetryPolicy(max_attempts=settings.stage_max_attempts, delay_seconds=settings.retry_delay_seconds)


class BaseStage:
    step_name: str
    retry = RetryPolicy()

    async def run(self, ctx: StageContext, tracker: StepTracker) -> StageResult:
        raise NotImplementedError

    async def with_retries(self, ctx: StageContext, tracker: StepTracker, attempt: Callable[[], Awaitable[T]]) -> T:
        """Run ``attempt`` until it succeeds or the retry budget is spent.

        Only retriable StageErrors are retried; anything else propagates at once.
        """
        max_attempts = self.retry.max_attempts
        for n in range(1, max_attempts + 1):
            try:
                return await attempt()
            except StageError as e:
                if not e.retriable or n >= max_attempts:
                    raise
                log.warning("Attempt %d/%d failed: %s", n, max_attempts, e,
                            extra={"job_id": ctx.cache_id, "step": self.step_name})
                tracker.transition(ctx.cache_id, self.step_name, StepStatus.IN_PROGRESS,
                                   f"Retry attempt {n}/{max_attempts}")
                if self.retry.delay_seconds:
                    await asyncio.sleep(self.retry.delay_seconds)
        raise AssertionError("unreachable")
