"""Fire-and-forget usage accounting for collaborator calls."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Protocol

from rostrum.config.settings import GenerationSettings
from rostrum.exceptions import CollaboratorUnavailable

from .base_types import Completion, TextGenerator

logger = logging.getLogger(__name__)

# Strong references so pending ledger writes are not garbage collected
_background_tasks: set[asyncio.Task[None]] = set()


@dataclass(frozen=True)
class UsageRecord:
    provider: str
    prompt_tokens: int
    completion_tokens: int
    success: bool
    latency_ms: int
    subject_id: str | None = None
    operation: str = ""
    model: str = ""
    error_message: str | None = None


class UsageLedger(Protocol):
    async def log_invocation(self, record: UsageRecord) -> None: ...


def _log_task_failure(task: asyncio.Task[None]) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Usage ledger write failed: {type(exc).__name__}: {exc}")


def record_usage(ledger: UsageLedger | None, record: UsageRecord) -> None:
    """Hand ``record`` to the ledger without waiting for it."""
    if ledger is None:
        return

    try:
        result = ledger.log_invocation(record)
    except Exception as e:
        logger.error(f"Usage ledger write failed: {type(e).__name__}: {e}")
        return

    if not inspect.isawaitable(result):
        return

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError as e:
        # No running loop; nothing can await the write
        logger.error(f"Usage ledger write dropped: {e}")
        if inspect.iscoroutine(result):
            result.close()
        return

    task = asyncio.ensure_future(result, loop=loop)
    _background_tasks.add(task)
    task.add_done_callback(_log_task_failure)


async def timed_completion(
    generator: TextGenerator,
    system_prompt: str,
    user_prompt: str,
    settings: GenerationSettings,
    *,
    ledger: UsageLedger | None = None,
    subject_id: str | None = None,
    operation: str = "",
) -> Completion:
    """Call the collaborator once, timing it and reporting usage either way.

    Raises:
        CollaboratorUnavailable: propagated from the generator; any other
            exception from it is wrapped.
    """
    start_time = time.time()
    try:
        completion = await generator.complete(
            system_prompt,
            user_prompt,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
    except Exception as e:
        latency_ms = int((time.time() - start_time) * 1000)
        record_usage(
            ledger,
            UsageRecord(
                provider=generator.provider_name,
                prompt_tokens=0,
                completion_tokens=0,
                success=False,
                latency_ms=latency_ms,
                subject_id=subject_id,
                operation=operation,
                error_message=str(e) or type(e).__name__,
            ),
        )
        if isinstance(e, CollaboratorUnavailable):
            raise
        raise CollaboratorUnavailable(generator.provider_name, f"{type(e).__name__}: {e}") from e

    latency_ms = int((time.time() - start_time) * 1000)
    record_usage(
        ledger,
        UsageRecord(
            provider=completion.provider or generator.provider_name,
            prompt_tokens=completion.prompt_tokens,
            completion_tokens=completion.completion_tokens,
            success=True,
            latency_ms=latency_ms,
            subject_id=subject_id,
            operation=operation,
            model=completion.model,
        ),
    )
    return completion
