"""SDK configuration for closetcare.

:class:`ClosetcareConfig` is a plain dataclass that captures every tuneable
knob exposed by the SDK.  Instances are passed to both
:class:`ClosetcareClient` and :class:`AsyncClosetcareClient`.

Image preparation settings live in their own :class:`ImageSettings`
dataclass, embedded in the client config as ``config.image``, so the image
pipeline can be used on its own without an API configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_BASE_URL = "http://localhost:8000"

DEFAULT_SESSION_FILE = "~/.closetcare/session.json"

ENV_API_URL = "CLOSETCARE_API_URL"
ENV_SESSION_FILE = "CLOSETCARE_SESSION_FILE"


# ---------------------------------------------------------------------------
# Image pipeline settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImageSettings:
    """Constants recognised by the image preparation pipeline.

    Parameters
    ----------
    max_size_kb:
        Byte budget for the compression stage, in KiB.
    max_dimension:
        The larger side of the image is scaled down to this many pixels
        before compression when it exceeds it.
    target_size:
        Side length of the final square image.
    initial_quality:
        JPEG quality (0-1) of the first compression attempt.
    quality_step:
        Amount the quality is lowered by after each over-budget attempt.
    quality_floor:
        Lowest quality the compressor will try.
    final_quality:
        JPEG quality used to encode the square canvas.
    fill_color:
        RGB colour of the letterbox area around the fitted image, and of
        transparent pixels flattened during compression.
    max_source_bytes:
        Largest source accepted by :func:`load_source` (checked before
        reading) and :func:`validate_source`.
    """

    max_size_kb: int = 500

    max_dimension: int = 1200

    target_size: int = 400

    initial_quality: float = 0.9

    quality_step: float = 0.1

    quality_floor: float = 0.1

    final_quality: float = 0.8

    fill_color: tuple[int, int, int] = (0, 0, 0)

    max_source_bytes: int = 25 * 1024 * 1024  # 25 MiB

    def __post_init__(self) -> None:
        if self.max_size_kb <= 0:
            raise ValueError(f"max_size_kb must be > 0, got {self.max_size_kb}")
        if self.max_dimension < 1:
            raise ValueError(f"max_dimension must be >= 1, got {self.max_dimension}")
        if self.target_size < 1:
            raise ValueError(f"target_size must be >= 1, got {self.target_size}")
        for name in ("initial_quality", "quality_floor", "final_quality"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}")
        if self.quality_step <= 0:
            raise ValueError(f"quality_step must be > 0, got {self.quality_step}")
        if self.quality_floor > self.initial_quality:
            raise ValueError(
                f"quality_floor ({self.quality_floor}) must not exceed "
                f"initial_quality ({self.initial_quality})"
            )
        if len(self.fill_color) != 3 or not all(0 <= c <= 255 for c in self.fill_color):
            raise ValueError(f"fill_color must be an RGB triple, got {self.fill_color!r}")
        if self.max_source_bytes <= 0:
            raise ValueError(f"max_source_bytes must be > 0, got {self.max_source_bytes}")

    @property
    def max_size_bytes(self) -> int:
        """The compression byte budget in bytes."""
        return self.max_size_kb * 1024


# ---------------------------------------------------------------------------
# Client configuration
# ---------------------------------------------------------------------------

@dataclass
class ClosetcareConfig:
    """Complete configuration for a closetcare client.

    Every parameter has a default suitable for a backend running on the
    local machine.

    Parameters
    ----------
    base_url:
        API root URL.  Plain ``http`` is only accepted for local hosts.
    timeout_seconds:
        HTTP request timeout in seconds.
    retry_max_attempts:
        Maximum number of attempts for idempotent requests (``GET``,
        ``PUT``, ``DELETE``) that fail with 429, 5xx or a network error.
        ``POST`` requests are always sent exactly once.
    retry_base_delay:
        Base delay (seconds) for exponential backoff.
    retry_max_delay:
        Upper cap (seconds) on computed backoff delay.
    retry_jitter:
        Randomly scale backoff delays to 50-100 % of their value.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    session_file:
        Where the bearer token cache is stored.  ``~`` is expanded.
    token_ttl_days:
        How long a saved token is trusted before a new login is required.
    image:
        Settings for the image preparation pipeline.
    metrics:
        Optional :class:`~closetcare.observability.MetricsHook` backend.
    debug_dump_payload:
        Write a redacted dump of every request/response to *stderr*.
    """

    # ── API ─────────────────────────────────────────────────────────────
    base_url: str = DEFAULT_BASE_URL

    timeout_seconds: float = 30.0

    # ── Retry ───────────────────────────────────────────────────────────
    retry_max_attempts: int = 3

    retry_base_delay: float = 0.5

    retry_max_delay: float = 10.0

    retry_jitter: bool = True

    # ── HTTP ────────────────────────────────────────────────────────────
    http_proxy: str | None = None

    # ── Session ─────────────────────────────────────────────────────────
    session_file: str = DEFAULT_SESSION_FILE

    token_ttl_days: int = 7

    # ── Images ──────────────────────────────────────────────────────────
    image: ImageSettings = field(default_factory=ImageSettings)

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        from urllib.parse import urlparse

        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise ValueError(
                f"base_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS to protect your credentials, or target localhost for testing."
            )

        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_max_delay < 0:
            raise ValueError(f"retry_max_delay must be >= 0, got {self.retry_max_delay}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.token_ttl_days < 1:
            raise ValueError(f"token_ttl_days must be >= 1, got {self.token_ttl_days}")

    @property
    def session_path(self) -> Path:
        """The token cache location with ``~`` expanded."""
        return Path(self.session_file).expanduser()

    @classmethod
    def from_env(cls, **overrides: Any) -> ClosetcareConfig:
        """Build a config from ``CLOSETCARE_*`` environment variables.

        Explicit keyword *overrides* win over the environment.
        """
        values: dict[str, Any] = {}
        api_url = os.environ.get(ENV_API_URL)
        if api_url:
            values["base_url"] = api_url
        session_file = os.environ.get(ENV_SESSION_FILE)
        if session_file:
            values["session_file"] = session_file
        values.update(overrides)
        return cls(**values)
