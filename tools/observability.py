"""Observability helpers for instrumenting provider calls."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from stylegen_app.logging_config import ensure_correlation_id, get_logger, log_event

LOGGER = get_logger(__name__)
R = TypeVar("R")


def instrument_provider(
    operation: str,
) -> Callable[[Callable[..., Awaitable[R]]], Callable[..., Awaitable[R]]]:
    """Wrap an async provider method to emit structured start/finish/failure logs.

    The provider label is read from the bound instance's ``name`` attribute.
    """

    def decorator(func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> R:
            provider = getattr(args[0], "name", "provider") if args else "provider"
            correlation_id = ensure_correlation_id()
            start = time.perf_counter()

            log_event(
                LOGGER,
                logging.INFO,
                "provider_call_started",
                provider=provider,
                operation=operation,
                correlation_id=correlation_id,
            )
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "provider_call_failed",
                    provider=provider,
                    operation=operation,
                    correlation_id=correlation_id,
                    duration_ms=duration_ms,
                    error_type=type(exc).__name__,
                    reason=getattr(exc, "reason", None),
                    http_status=getattr(exc, "http_status", None),
                    detail=str(exc),
                )
                raise
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            log_event(
                LOGGER,
                logging.INFO,
                "provider_call_completed",
                provider=provider,
                operation=operation,
                correlation_id=correlation_id,
                duration_ms=duration_ms,
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_provider"]
