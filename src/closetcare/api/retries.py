"""Retry decision logic and exponential backoff computation.

Two pure functions used by the transport layer:

* :func:`should_retry` -- decide whether a failed request is retryable.
* :func:`compute_backoff` -- compute the delay before the next attempt.

Only idempotent methods are ever retried; creating an item or logging in
is sent exactly once.
"""

from __future__ import annotations

import random

import httpx

# HTTP status codes that are safe to retry.
_RETRYABLE_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

# Methods the backend treats as idempotent.
_IDEMPOTENT_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "PUT", "DELETE", "OPTIONS"})

# Network-level exceptions that warrant a retry.
_RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
)


def is_idempotent(method: str) -> bool:
    """Return ``True`` if *method* may be safely repeated."""
    return method.upper() in _IDEMPOTENT_METHODS


def should_retry(
    method: str,
    status_code: int | None,
    exception: Exception | None,
    attempt: int,
    max_attempts: int,
) -> bool:
    """Decide whether a request should be retried.

    Parameters
    ----------
    method:
        HTTP method of the request.
    status_code:
        HTTP status code from the response, or ``None`` if the request never
        received a response.
    exception:
        The exception that was raised, or ``None`` if a response was received.
    attempt:
        The current attempt number (0-indexed).
    max_attempts:
        Maximum total attempts allowed (including the initial request).
    """
    if not is_idempotent(method):
        return False

    if attempt + 1 >= max_attempts:
        return False

    if exception is not None:
        return isinstance(exception, _RETRYABLE_EXCEPTIONS)

    if status_code is not None:
        return status_code in _RETRYABLE_STATUSES

    return False


def compute_backoff(
    attempt: int,
    base: float = 0.5,
    maximum: float = 10.0,
    jitter: bool = True,
    retry_after: float | None = None,
) -> float:
    """Compute the delay before the next retry attempt.

    A server-provided ``Retry-After`` value is used directly (capped at
    *maximum*); otherwise the delay is ``base * 2**attempt`` capped at
    *maximum*.  With *jitter* the delay is scaled to 50-100 % of itself.
    """
    if retry_after is not None:
        delay = min(max(retry_after, 0.0), maximum)
    else:
        delay = min(base * (2 ** attempt), maximum)

    if jitter:
        delay *= 0.5 + random.random() * 0.5

    return delay
