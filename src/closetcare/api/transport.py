"""Sync and async HTTP transports for the clothing-care API.

Each transport handles the full request lifecycle:

1. Build per-request headers from the caller's bearer token.
2. Send the HTTP request.
3. On ``2xx`` -- return the parsed JSON body (``None`` when empty).
4. On ``429`` / ``5xx`` / network error for an idempotent method --
   exponential backoff and retry.
5. On any other error status -- raise the matching typed error.
6. On max attempts exceeded -- raise :class:`ClosetcareRetryExhaustedError`.

Credentials are never stored on the underlying ``httpx`` client: every
call receives the token it should use, so two sessions can share one
transport and tests need no global state.
"""

from __future__ import annotations

import asyncio
import json as _json
import sys
import time
from typing import Any

import httpx

from closetcare.config import ClosetcareConfig
from closetcare.errors import (
    ClosetcareAuthError,
    ClosetcareConflictError,
    ClosetcareNetworkError,
    ClosetcareNotFoundError,
    ClosetcarePermissionError,
    ClosetcareRetryExhaustedError,
    ClosetcareServerError,
    ClosetcareValidationError,
)
from closetcare.observability import NoopMetricsHook, get_logger

from .retries import _RETRYABLE_STATUSES, compute_backoff, is_idempotent, should_retry

log = get_logger("closetcare.transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def build_headers(token: str | None) -> dict[str, str]:
    """Return the per-request headers for *token*.

    ``None`` or an empty token yields no ``Authorization`` header.
    """
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _parse_retry_after(response: httpx.Response) -> float | None:
    """Extract the ``Retry-After`` header value as a float, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None


def _error_detail(response: httpx.Response) -> tuple[str, Any]:
    """Return ``(message, raw_detail)`` from an error response.

    The backend reports errors as ``{"detail": "..."}`` or, for request
    validation failures, ``{"detail": [{"msg": "...", ...}, ...]}``.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str) and detail:
        return detail, detail
    if isinstance(detail, list) and detail:
        messages = [
            str(entry.get("msg", entry)) if isinstance(entry, dict) else str(entry)
            for entry in detail
        ]
        return "; ".join(messages), detail
    text = response.text[:500].strip()
    return text or response.reason_phrase or f"HTTP {response.status_code}", detail


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the :class:`ClosetcareError` subclass matching a failed response."""
    status = response.status_code
    message, detail = _error_detail(response)
    context: dict[str, Any] = {"status_code": status, "detail": detail}

    if status == 401:
        raise ClosetcareAuthError(
            message=message,
            context={**context, "operation": f"{method} {path}"},
        )
    if status == 403:
        raise ClosetcarePermissionError(
            message=message,
            context={**context, "operation": f"{method} {path}"},
        )
    if status == 404:
        raise ClosetcareNotFoundError(
            message=message,
            context={**context, "path": path},
        )
    if status == 409:
        raise ClosetcareConflictError(message=message, context=context)
    if status == 429 or status >= 500:
        raise ClosetcareServerError(
            message=message,
            context={**context, "operation": f"{method} {path}"},
        )

    raise ClosetcareValidationError(
        message=message,
        context={**context, "operation": f"{method} {path}"},
    )


def _dump_payload(
    method: str,
    url: str,
    payload: Any | None,
    response_status: int | None,
    response_body: Any | None,
    token: str | None = None,
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    from closetcare.utils.redact import redact

    dump: dict[str, Any] = {
        "method": method,
        "url": url,
    }
    if payload is not None:
        dump["request_body"] = payload
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    safe_dump = redact(dump, token)
    print(
        _json.dumps(safe_dump, indent=2, default=str),
        file=sys.stderr,
    )


def _emit_debug_dump(
    config: ClosetcareConfig,
    method: str,
    response: httpx.Response,
    kwargs: dict[str, Any],
    token: str | None,
) -> None:
    """Emit a redacted debug dump of request/response if enabled."""
    if not config.debug_dump_payload:
        return
    payload = kwargs.get("json")
    if payload is None and kwargs.get("data") is not None:
        payload = dict(kwargs["data"])
        if kwargs.get("files"):
            payload["files"] = sorted(kwargs["files"])
    try:
        resp_body = response.json()
    except ValueError:
        resp_body = response.text[:1000]
    _dump_payload(
        method, str(response.url), payload,
        response.status_code, resp_body,
        token=token,
    )


def _parse_body(response: httpx.Response, method: str, path: str) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        # e.g. an HTML page from a proxy in front of the API
        raise ClosetcareServerError(
            message=f"Unexpected non-JSON response from {method} {path}",
            context={
                "status_code": response.status_code,
                "operation": f"{method} {path}",
                "content_type": response.headers.get("content-type", ""),
            },
            cause=exc,
        ) from exc


def _handle_network_exception(
    config: ClosetcareConfig,
    metrics: Any,
    method: str,
    path: str,
    exc: Exception,
    attempt: int,
) -> float:
    """Handle a network error during a request attempt.

    Returns the backoff delay (seconds) if the request should be retried.
    Raises :class:`ClosetcareNetworkError` otherwise.
    """
    metrics.increment(
        "closetcare.requests_total",
        tags={"method": method, "status": "error"},
    )
    log.warning(
        "Request network error",
        extra={
            "extra_fields": {
                "op": "request",
                "method": method,
                "path": path,
                "attempt": attempt + 1,
                "error": str(exc),
            }
        },
    )
    if should_retry(method, None, exc, attempt, config.retry_max_attempts):
        metrics.increment(
            "closetcare.retries_total",
            tags={"method": method, "reason": "network_error"},
        )
        return compute_backoff(
            attempt,
            base=config.retry_base_delay,
            maximum=config.retry_max_delay,
            jitter=config.retry_jitter,
        )
    raise ClosetcareNetworkError(
        message=f"Network error on {method} {path}: {exc}",
        context={"url": path, "attempt": attempt + 1},
        cause=exc,
    ) from exc


def _record_response(
    metrics: Any,
    method: str,
    path: str,
    response: httpx.Response,
    elapsed_ms: float,
) -> None:
    tags = {"method": method, "status": str(response.status_code)}
    metrics.increment("closetcare.requests_total", tags=tags)
    metrics.timing("closetcare.request_duration_ms", elapsed_ms, tags=tags)
    log.debug(
        "Request complete",
        extra={
            "extra_fields": {
                "op": "request",
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 1),
            }
        },
    )


def _retry_delay(
    config: ClosetcareConfig,
    metrics: Any,
    method: str,
    path: str,
    response: httpx.Response,
    attempt: int,
) -> float:
    """Return the delay before retrying a retryable status response."""
    retry_after: float | None = None
    reason = "server_error"
    if response.status_code == 429:
        retry_after = _parse_retry_after(response)
        reason = "rate_limited"
    log.warning(
        "Retrying request",
        extra={
            "extra_fields": {
                "op": "request",
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "retry_after": retry_after,
                "attempt": attempt + 1,
            }
        },
    )
    metrics.increment(
        "closetcare.retries_total",
        tags={"method": method, "reason": reason},
    )
    return compute_backoff(
        attempt,
        base=config.retry_base_delay,
        maximum=config.retry_max_delay,
        jitter=config.retry_jitter,
        retry_after=retry_after,
    )


def _exhausted(
    method: str,
    path: str,
    attempts: int,
    last_status: int | None,
    last_exception: Exception | None,
) -> ClosetcareRetryExhaustedError:
    ctx: dict[str, Any] = {"attempts": attempts, "last_status_code": last_status}
    if last_exception is not None:
        return ClosetcareRetryExhaustedError(
            message=(
                f"All {attempts} attempts exhausted for {method} {path} "
                f"(last error: {last_exception})"
            ),
            context=ctx,
            cause=last_exception,
        )
    return ClosetcareRetryExhaustedError(
        message=(
            f"All {attempts} attempts exhausted for {method} {path} "
            f"(last status: {last_status})"
        ),
        context=ctx,
    )


def _merge_headers(token: str | None, kwargs: dict[str, Any]) -> dict[str, Any]:
    headers = build_headers(token)
    headers.update(kwargs.pop("headers", None) or {})
    kwargs["headers"] = headers
    return kwargs


# ---------------------------------------------------------------------------
# Sync transport
# ---------------------------------------------------------------------------

class ApiTransport:
    """Synchronous HTTP transport with typed errors and retries.

    Parameters
    ----------
    config:
        A :class:`ClosetcareConfig` controlling all transport behaviour.
    """

    def __init__(self, config: ClosetcareConfig) -> None:
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=config.http_proxy,
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        **kwargs: Any,
    ) -> Any:
        """Execute an HTTP request against the API.

        Parameters
        ----------
        method:
            HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
        path:
            API path relative to ``base_url`` (e.g. ``/clothing-items``).
        token:
            Bearer token for this request, or ``None`` for an anonymous
            request.
        **kwargs:
            Forwarded to :meth:`httpx.Client.request` (``json=``,
            ``params=``, ``data=``, ``files=``, ``headers=``).

        Returns
        -------
        Any
            Parsed JSON response body, or ``None`` for an empty body.

        Raises
        ------
        ClosetcareAuthError
            On 401 responses.
        ClosetcarePermissionError
            On 403 responses.
        ClosetcareNotFoundError
            On 404 responses.
        ClosetcareConflictError
            On 409 responses.
        ClosetcareValidationError
            On 400, 422 and other non-retryable error statuses.
        ClosetcareRetryExhaustedError
            When all retry attempts have been exhausted.
        ClosetcareNetworkError
            On transport-level failures that cannot be retried.
        """
        method = method.upper()
        max_attempts = self._config.retry_max_attempts
        last_exception: Exception | None = None
        last_status: int | None = None
        kwargs = _merge_headers(token, kwargs)

        for attempt in range(max_attempts):
            t0 = time.monotonic()
            try:
                response = self._client.request(method, path, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                last_exception = exc
                last_status = None
                delay = _handle_network_exception(
                    self._config, self._metrics, method, path, exc, attempt,
                )
                time.sleep(delay)
                continue

            last_status = response.status_code
            last_exception = None
            _record_response(
                self._metrics, method, path, response, (time.monotonic() - t0) * 1000,
            )
            _emit_debug_dump(self._config, method, response, kwargs, token)

            if response.is_success:
                return _parse_body(response, method, path)

            if not should_retry(method, response.status_code, None, attempt, max_attempts):
                if response.status_code in _RETRYABLE_STATUSES and is_idempotent(method):
                    break
                _raise_for_status(response, method, path)

            time.sleep(
                _retry_delay(self._config, self._metrics, method, path, response, attempt)
            )

        raise _exhausted(method, path, max_attempts, last_status, last_exception)

    def close(self) -> None:
        """Close the underlying HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> ApiTransport:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------

class AsyncApiTransport:
    """Asynchronous HTTP transport with typed errors and retries.

    Mirrors :class:`ApiTransport` but uses ``httpx.AsyncClient`` and
    ``asyncio.sleep``.
    """

    def __init__(self, config: ClosetcareConfig) -> None:
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=config.http_proxy,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        **kwargs: Any,
    ) -> Any:
        """Execute an HTTP request against the API (async).

        See :meth:`ApiTransport.request` for full documentation.
        """
        method = method.upper()
        max_attempts = self._config.retry_max_attempts
        last_exception: Exception | None = None
        last_status: int | None = None
        kwargs = _merge_headers(token, kwargs)

        for attempt in range(max_attempts):
            t0 = time.monotonic()
            try:
                response = await self._client.request(method, path, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                last_exception = exc
                last_status = None
                delay = _handle_network_exception(
                    self._config, self._metrics, method, path, exc, attempt,
                )
                await asyncio.sleep(delay)
                continue

            last_status = response.status_code
            last_exception = None
            _record_response(
                self._metrics, method, path, response, (time.monotonic() - t0) * 1000,
            )
            _emit_debug_dump(self._config, method, response, kwargs, token)

            if response.is_success:
                return _parse_body(response, method, path)

            if not should_retry(method, response.status_code, None, attempt, max_attempts):
                if response.status_code in _RETRYABLE_STATUSES and is_idempotent(method):
                    break
                _raise_for_status(response, method, path)

            await asyncio.sleep(
                _retry_delay(self._config, self._metrics, method, path, response, attempt)
            )

        raise _exhausted(method, path, max_attempts, last_status, last_exception)

    async def close(self) -> None:
        """Close the underlying async HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncApiTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
