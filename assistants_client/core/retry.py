#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Retry with exponential backoff and jitter

Only transport failures and HttpError with a retryable status are retried.
The last error is re-raised unchanged once attempts run out.
"""
import asyncio
import functools
import math
import random
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx

from ..config.settings import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BACKOFF_MULTIPLIER,
    DEFAULT_RETRY_INITIAL_DELAY_MS,
    DEFAULT_RETRY_MAX_DELAY_MS,
)
from .errors import RETRYABLE_STATUS_CODES, HttpError
from .logging import logger

T = TypeVar("T")

JITTER_RATIO = 0.25


def is_retryable(error: BaseException) -> bool:
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, HttpError):
        return error.status_code in RETRYABLE_STATUS_CODES
    return False


def calculate_delay(
    attempt: int,
    initial_delay_ms: float,
    max_delay_ms: float,
    backoff_multiplier: float,
    rand: Callable[[], float] = random.random,
) -> int:
    """Delay in ms before retrying after the given 0-based attempt."""
    exponential = initial_delay_ms * math.pow(backoff_multiplier, attempt)
    capped = min(exponential, max_delay_ms)
    jitter = capped * rand() * JITTER_RATIO
    return int(math.floor(capped + jitter))


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_delay_ms: float = DEFAULT_RETRY_INITIAL_DELAY_MS,
    max_delay_ms: float = DEFAULT_RETRY_MAX_DELAY_MS,
    backoff_multiplier: float = DEFAULT_RETRY_BACKOFF_MULTIPLIER,
    retryable: Callable[[BaseException], bool] = is_retryable,
    description: Optional[str] = None,
) -> T:
    """Run ``fn`` with up to ``max_retries`` retries after the first attempt."""
    total = max_retries + 1
    label = description or getattr(fn, "__name__", "call")
    for attempt in range(total):
        logger.debug(f"{label}: attempt {attempt + 1}/{total}")
        try:
            return await fn()
        except Exception as e:
            if attempt >= max_retries or not retryable(e):
                reason = "retries exhausted" if attempt >= max_retries else "not retryable"
                logger.error(
                    f"{label}: attempt {attempt + 1}/{total} failed, giving up ({reason}): "
                    f"{type(e).__name__}: {e}"
                )
                raise
            delay = calculate_delay(attempt, initial_delay_ms, max_delay_ms, backoff_multiplier)
            logger.warning(
                f"{label}: attempt {attempt + 1}/{total} failed, retrying in {delay}ms "
                f"({type(e).__name__}: {e})"
            )
            await asyncio.sleep(delay / 1000)
    raise RuntimeError("unreachable")


def create_retryable(fn: Callable[..., Awaitable[T]], **options: Any) -> Callable[..., Awaitable[T]]:
    """Wrap an async callable so every call goes through with_retry."""

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        return await with_retry(lambda: fn(*args, **kwargs), description=fn.__name__, **options)

    return wrapper
