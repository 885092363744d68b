"""closetcare.api -- HTTP transport and endpoint wrappers.

This sub-package provides:

* :mod:`.retries` -- Retry decision logic and exponential backoff.
* :mod:`.transport` -- HTTP transport with per-request credentials and retries.
* :mod:`.items` -- Clothing-item API wrappers.
* :mod:`.auth` -- Login, signup and current-user wrappers.
"""

from __future__ import annotations

from .auth import AsyncAuthAPI, AuthAPI
from .items import AsyncItemAPI, ItemAPI
from .retries import compute_backoff, is_idempotent, should_retry
from .transport import ApiTransport, AsyncApiTransport, build_headers

__all__ = [
    "ApiTransport",
    "AsyncApiTransport",
    "AsyncAuthAPI",
    "AsyncItemAPI",
    "AuthAPI",
    "ItemAPI",
    "build_headers",
    "compute_backoff",
    "is_idempotent",
    "should_retry",
]
