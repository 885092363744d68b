"""Metrics hook protocol and no-op default implementation.

closetcare emits counters and timings for API requests and image
processing.  By default a :class:`NoopMetricsHook` is used.  Supply any
object satisfying :class:`MetricsHook` as ``ClosetcareConfig.metrics`` to
route them to StatsD, Prometheus, Datadog, etc.

Emitted metric names:

* ``closetcare.requests_total``            -- counter
* ``closetcare.retries_total``             -- counter
* ``closetcare.request_duration_ms``       -- timing
* ``closetcare.image_compress_attempts``   -- counter
* ``closetcare.image_process_ms``          -- timing
* ``closetcare.image_bytes``               -- gauge
* ``closetcare.image_failures_total``      -- counter
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict of string keys and values.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric by *value*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
