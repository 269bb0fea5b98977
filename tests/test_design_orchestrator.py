"""Fallback state machine coverage with scripted providers."""

import asyncio
import logging
from typing import List

import httpx
import pytest

from agents.design_orchestrator import UNAVAILABLE_CAPTION, FallbackOrchestrator, RetryPolicy
from logic.placeholder import DEFAULT_CAPTION, render_placeholder
from logic.prompt_builder import build_prompt
from models.generation import RawImageResponse
from models.preferences import build_preference_set
from tools.image_provider import (
    MODEL_LOADING,
    RATE_LIMITED,
    FatalProviderError,
    GenerationOptions,
    MockImageProvider,
    RetryableProviderError,
    mock_image,
)

PREFS = build_preference_set(
    {"gender": "female", "occasion": "party", "style": "modern", "colors": ["#FF6B6B", "#4ECDC4"]}
)
PROMPT = build_prompt(PREFS)


def _status_error(status: int) -> Exception:
    if status == 503:
        return RetryableProviderError("huggingface", "HTTP 503", http_status=503, reason=MODEL_LOADING)
    if status == 429:
        return RetryableProviderError("huggingface", "HTTP 429", http_status=429, reason=RATE_LIMITED)
    return FatalProviderError("huggingface", f"HTTP {status}", http_status=status, reason="bad_credentials")


class _SleepRecorder:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _orchestrator(primary, backup, sleep=None, **kwargs) -> FallbackOrchestrator:
    return FallbackOrchestrator(primary=primary, backup=backup, sleep=sleep or _SleepRecorder(), **kwargs)


def test_primary_recovers_after_two_cold_starts() -> None:
    primary = MockImageProvider("huggingface", [_status_error(503), _status_error(503), mock_image(model_id="hf")])
    backup = MockImageProvider("replicate")
    sleep = _SleepRecorder()

    result = asyncio.run(_orchestrator(primary, backup, sleep).run(PREFS, PROMPT))

    assert result.provider_used == "primary"
    assert not result.is_placeholder
    assert result.model_id == "hf"
    assert len(primary.calls) == 3
    assert backup.calls == []
    assert sleep.delays == [10.0, 10.0]
    assert [attempt.outcome for attempt in result.attempts] == [
        "retryable-failure",
        "retryable-failure",
        "success",
    ]
    assert [attempt.http_status for attempt in result.attempts] == [503, 503, None]


def test_fatal_primary_failure_moves_to_backup_without_retry() -> None:
    primary = MockImageProvider("huggingface", [_status_error(401)])
    backup = MockImageProvider("replicate", [mock_image(model_id="rep")])
    sleep = _SleepRecorder()

    result = asyncio.run(_orchestrator(primary, backup, sleep).run(PREFS, PROMPT))

    assert len(primary.calls) == 1
    assert len(backup.calls) == 1
    assert sleep.delays == []
    assert result.provider_used == "backup"
    assert result.model_id == "rep"
    assert result.attempts[0].http_status == 401
    assert result.attempts[0].outcome == "fatal-failure"


def test_backoff_delay_depends_on_failure_reason() -> None:
    primary = MockImageProvider(
        "huggingface", [_status_error(429), httpx.ConnectError("reset"), _status_error(503)]
    )
    backup = MockImageProvider("replicate")
    sleep = _SleepRecorder()

    result = asyncio.run(_orchestrator(primary, backup, sleep).run(PREFS, PROMPT))

    assert sleep.delays == [5.0, 2.0]
    assert result.provider_used == "backup"
    assert len(primary.calls) == 3


def test_backup_gets_single_attempt_then_placeholder() -> None:
    primary = MockImageProvider("huggingface", [_status_error(503)])
    backup = MockImageProvider("replicate", [RetryableProviderError("replicate", "HTTP 429", 429, RATE_LIMITED)])
    sleep = _SleepRecorder()

    result = asyncio.run(_orchestrator(primary, backup, sleep).run(PREFS, PROMPT))

    assert len(primary.calls) == 3
    assert len(backup.calls) == 1
    assert len(sleep.delays) == 2
    assert result.is_placeholder
    assert result.provider_used == "placeholder"
    assert result.caption == UNAVAILABLE_CAPTION
    assert result.content_type == "image/svg+xml"
    assert result.image_data == render_placeholder(PREFS, UNAVAILABLE_CAPTION)
    assert result.prompt == PROMPT


def test_unreachable_providers_still_return_a_result() -> None:
    primary = MockImageProvider("huggingface", [httpx.ConnectError("unreachable")])
    backup = MockImageProvider("replicate", [httpx.ConnectError("unreachable")])

    result = asyncio.run(_orchestrator(primary, backup).run(PREFS, PROMPT))

    assert result.is_placeholder
    assert len(result.attempts) == 4


def test_unexpected_exceptions_are_contained_and_not_retried() -> None:
    primary = MockImageProvider("huggingface", [RuntimeError("decoder exploded")])
    backup = MockImageProvider("replicate", [ValueError("bad json")])

    result = asyncio.run(_orchestrator(primary, backup).run(PREFS, PROMPT))

    assert len(primary.calls) == 1
    assert result.is_placeholder
    assert all(attempt.outcome == "fatal-failure" for attempt in result.attempts)


def test_unconfigured_provider_is_skipped_as_fatal() -> None:
    primary = MockImageProvider("huggingface", configured=False)
    backup = MockImageProvider("replicate", [mock_image(model_id="rep")])

    result = asyncio.run(_orchestrator(primary, backup).run(PREFS, PROMPT))

    assert result.provider_used == "backup"
    assert primary.calls == []
    assert result.attempts[0].outcome == "fatal-failure"


def test_missing_backup_goes_straight_to_placeholder() -> None:
    primary = MockImageProvider("huggingface", [_status_error(403)])

    result = asyncio.run(_orchestrator(primary, None).run(PREFS, PROMPT))

    assert result.is_placeholder
    assert len(result.attempts) == 1


def test_forced_demo_never_contacts_providers() -> None:
    primary = MockImageProvider("huggingface")
    backup = MockImageProvider("replicate")

    per_call = asyncio.run(_orchestrator(primary, backup).run(PREFS, PROMPT, force_demo=True))
    configured = asyncio.run(_orchestrator(primary, backup, force_demo=True).run(PREFS, PROMPT))

    for result in (per_call, configured):
        assert result.is_placeholder
        assert result.caption == DEFAULT_CAPTION
        assert result.attempts == ()
    assert primary.calls == [] and backup.calls == []


def test_retry_budget_is_configurable() -> None:
    primary = MockImageProvider("huggingface", [_status_error(503)])
    backup = MockImageProvider("replicate")

    asyncio.run(_orchestrator(primary, backup, retry_policy=RetryPolicy(attempts=5)).run(PREFS, PROMPT))

    assert len(primary.calls) == 5


def test_exhaustion_is_logged() -> None:
    records: List[logging.LogRecord] = []

    class _Collector(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            records.append(record)

    logger = logging.getLogger("agents.design_orchestrator")
    handler = _Collector(level=logging.ERROR)
    logger.addHandler(handler)
    try:
        primary = MockImageProvider("huggingface", [_status_error(401)])
        backup = MockImageProvider("replicate", [_status_error(401)])
        asyncio.run(_orchestrator(primary, backup).run(PREFS, PROMPT))
    finally:
        logger.removeHandler(handler)

    assert [record.getMessage() for record in records] == ["all_providers_exhausted"]


class _HangingProvider(MockImageProvider):
    async def _generate(self, prompt: str, options: GenerationOptions) -> RawImageResponse:
        self.calls.append(prompt)
        await asyncio.Event().wait()
        raise AssertionError("unreachable")


def test_cancellation_propagates_from_in_flight_request() -> None:
    primary = _HangingProvider("huggingface")
    backup = MockImageProvider("replicate")

    async def scenario() -> None:
        task = asyncio.create_task(_orchestrator(primary, backup).run(PREFS, PROMPT))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert len(primary.calls) == 1
    assert backup.calls == []


def test_cancellation_interrupts_backoff_sleep() -> None:
    primary = MockImageProvider("huggingface", [_status_error(503)])
    backup = MockImageProvider("replicate")
    orchestrator = FallbackOrchestrator(
        primary=primary,
        backup=backup,
        retry_policy=RetryPolicy(attempts=3, backoff_seconds={MODEL_LOADING: 60.0}),
    )

    async def scenario() -> None:
        task = asyncio.create_task(orchestrator.run(PREFS, PROMPT))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert len(primary.calls) == 1
    assert backup.calls == []
