"""Fallback orchestration across image providers.

Each generation walks a small state machine::

    TRY_PRIMARY -> TRY_BACKUP -> USE_PLACEHOLDER -> DONE

The primary tier gets a bounded retry budget with backoff keyed to the failure
reason; the backup tier gets a single attempt; the placeholder tier cannot
fail. Provider exceptions never reach the caller. Task cancellation is not a
provider failure and is allowed to propagate so in-flight requests and
backoff sleeps are torn down with the task.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional

from logic.placeholder import DEFAULT_CAPTION, PLACEHOLDER_CONTENT_TYPE, render_placeholder
from models.generation import (
    BACKUP,
    FATAL_FAILURE,
    PLACEHOLDER,
    PRIMARY,
    RETRYABLE_FAILURE,
    SUCCESS,
    GenerationResult,
    ProviderAttempt,
    ProviderTier,
    RawImageResponse,
)
from models.preferences import PreferenceSet
from stylegen_app.logging_config import get_logger, log_event
from tools.image_provider import (
    MODEL_LOADING,
    NETWORK,
    RATE_LIMITED,
    UPSTREAM,
    AllProvidersExhausted,
    GenerationOptions,
    ImageProvider,
    classify_failure,
)

LOGGER = get_logger(__name__)

TRY_PRIMARY = "try_primary"
TRY_BACKUP = "try_backup"
USE_PLACEHOLDER = "use_placeholder"
DONE = "done"

UNAVAILABLE_CAPTION = "AI Providers Unavailable - Placeholder Design"

SleepFunc = Callable[[float], Awaitable[None]]


def _default_backoff() -> Dict[str, float]:
    return {MODEL_LOADING: 10.0, RATE_LIMITED: 5.0, NETWORK: 2.0, UPSTREAM: 2.0}


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget for the primary tier and per-reason backoff delays."""

    attempts: int = 3
    backoff_seconds: Dict[str, float] = field(default_factory=_default_backoff)

    def delay_for(self, reason: str) -> float:
        return self.backoff_seconds.get(reason, self.backoff_seconds.get(NETWORK, 2.0))


class FallbackOrchestrator:
    """Turns a prompt into a :class:`GenerationResult`, whatever the providers do."""

    def __init__(
        self,
        primary: ImageProvider | None,
        backup: ImageProvider | None,
        retry_policy: RetryPolicy | None = None,
        force_demo: bool = False,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.primary = primary
        self.backup = backup
        self.retry_policy = retry_policy or RetryPolicy()
        self.force_demo = force_demo
        self._sleep = sleep

    async def run(
        self,
        preferences: PreferenceSet,
        prompt: str,
        options: GenerationOptions | None = None,
        force_demo: bool = False,
    ) -> GenerationResult:
        started = time.perf_counter()
        attempts: List[ProviderAttempt] = []
        demo = force_demo or self.force_demo
        state = USE_PLACEHOLDER if demo else TRY_PRIMARY
        image: Optional[RawImageResponse] = None
        tier: ProviderTier = PLACEHOLDER
        result: Optional[GenerationResult] = None

        while state != DONE:
            if state == TRY_PRIMARY:
                image = await self._try_tier(
                    PRIMARY, self.primary, prompt, options, max(1, self.retry_policy.attempts), attempts
                )
                if image is not None:
                    tier = PRIMARY
                    state = DONE
                else:
                    state = TRY_BACKUP
            elif state == TRY_BACKUP:
                image = await self._try_tier(BACKUP, self.backup, prompt, options, 1, attempts)
                if image is not None:
                    tier = BACKUP
                    state = DONE
                else:
                    state = USE_PLACEHOLDER
            elif state == USE_PLACEHOLDER:
                if not demo:
                    self._log_exhausted(attempts)
                caption = DEFAULT_CAPTION if demo else UNAVAILABLE_CAPTION
                result = GenerationResult(
                    image_data=render_placeholder(preferences, caption),
                    content_type=PLACEHOLDER_CONTENT_TYPE,
                    prompt=prompt,
                    provider_used=PLACEHOLDER,
                    generation_time_ms=_elapsed_ms(started),
                    is_placeholder=True,
                    caption=caption,
                    attempts=tuple(attempts),
                )
                state = DONE

        if result is None:
            result = GenerationResult(
                image_data=image.content,
                content_type=image.content_type,
                prompt=prompt,
                provider_used=tier,
                generation_time_ms=_elapsed_ms(started),
                is_placeholder=False,
                model_id=image.model_id,
                attempts=tuple(attempts),
            )
        log_event(LOGGER, logging.INFO, "generation_finished", **result.summary())
        return result

    async def _try_tier(
        self,
        tier: ProviderTier,
        provider: ImageProvider | None,
        prompt: str,
        options: GenerationOptions | None,
        budget: int,
        attempts: List[ProviderAttempt],
    ) -> Optional[RawImageResponse]:
        if provider is None:
            return None

        for attempt_number in range(1, budget + 1):
            try:
                image = await provider.generate(prompt, options)
            except Exception as exc:
                outcome, reason, http_status = classify_failure(exc)
                attempts.append(
                    ProviderAttempt(
                        provider=tier,
                        attempt_number=attempt_number,
                        outcome=outcome,
                        http_status=http_status,
                        detail=str(exc),
                    )
                )
                final = outcome != RETRYABLE_FAILURE or attempt_number >= budget
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "provider_attempt_failed",
                    tier=tier,
                    provider=provider.name,
                    attempt=attempt_number,
                    budget=budget,
                    outcome=outcome,
                    reason=reason,
                    http_status=http_status,
                    advancing=final,
                    exc_info=outcome == FATAL_FAILURE and reason == "unexpected_error",
                )
                if final:
                    return None
                await self._sleep(self.retry_policy.delay_for(reason))
                continue

            attempts.append(ProviderAttempt(provider=tier, attempt_number=attempt_number, outcome=SUCCESS))
            return image
        return None

    def _log_exhausted(self, attempts: List[ProviderAttempt]) -> None:
        error = AllProvidersExhausted(
            f"{len(attempts)} provider attempt(s) failed; serving placeholder"
        )
        log_event(
            LOGGER,
            logging.ERROR,
            "all_providers_exhausted",
            detail=str(error),
            attempts=[
                {
                    "provider": attempt.provider,
                    "attempt": attempt.attempt_number,
                    "outcome": attempt.outcome,
                    "http_status": attempt.http_status,
                }
                for attempt in attempts
            ],
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


__all__ = [
    "DONE",
    "FallbackOrchestrator",
    "RetryPolicy",
    "TRY_BACKUP",
    "TRY_PRIMARY",
    "UNAVAILABLE_CAPTION",
    "USE_PLACEHOLDER",
]
