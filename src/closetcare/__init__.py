"""closetcare -- clothing-care client SDK and command line.

Public re-exports
-----------------

* **Clients:** :class:`ClosetcareClient`, :class:`AsyncClosetcareClient`
* **Configuration:** :class:`ClosetcareConfig`, :class:`ImageSettings`
* **Errors:** Every :class:`ClosetcareError` subclass and :class:`ErrorCode`
* **Models:** Image values, API records and :class:`CleaningStatus`
* **Images:** :func:`process_image_for_upload` and its two stages

Usage::

    from closetcare import ClosetcareClient

    with ClosetcareClient(base_url="https://closet.example.com") as client:
        client.login("me@example.com", "password")
        for item_type, items in client.list_items().items():
            print(item_type, len(items))
"""

from __future__ import annotations

# ── Clients ────────────────────────────────────────────────────────────
from closetcare.async_client import AsyncClosetcareClient
from closetcare.client import ClosetcareClient

# ── Configuration ───────────────────────────────────────────────────────
from closetcare.config import ClosetcareConfig, ImageSettings

# ── Errors ──────────────────────────────────────────────────────────────
from closetcare.errors import (
    ClosetcareAuthError,
    ClosetcareConflictError,
    ClosetcareError,
    ClosetcareImageDecodeError,
    ClosetcareImageEncodeError,
    ClosetcareImageError,
    ClosetcareImageNotFoundError,
    ClosetcareImageParseError,
    ClosetcareImageSizeError,
    ClosetcareImageSurfaceError,
    ClosetcareImageTypeError,
    ClosetcareNetworkError,
    ClosetcareNotFoundError,
    ClosetcarePermissionError,
    ClosetcareRetryExhaustedError,
    ClosetcareServerError,
    ClosetcareSessionError,
    ClosetcareValidationError,
    ErrorCode,
)

# ── Images ──────────────────────────────────────────────────────────────
from closetcare.image import compress_image, crop_to_square, process_image_for_upload

# ── Models ──────────────────────────────────────────────────────────────
from closetcare.models import (
    AuthResult,
    CleaningIntervalUpdate,
    CleaningStatus,
    ClothingItem,
    ClothingItemCreate,
    CompressedImage,
    ProcessedImage,
    SourceImage,
    User,
)

__all__ = [
    "AsyncClosetcareClient",
    "AuthResult",
    "CleaningIntervalUpdate",
    "CleaningStatus",
    "ClosetcareAuthError",
    "ClosetcareClient",
    "ClosetcareConfig",
    "ClosetcareConflictError",
    "ClosetcareError",
    "ClosetcareImageDecodeError",
    "ClosetcareImageEncodeError",
    "ClosetcareImageError",
    "ClosetcareImageNotFoundError",
    "ClosetcareImageParseError",
    "ClosetcareImageSizeError",
    "ClosetcareImageSurfaceError",
    "ClosetcareImageTypeError",
    "ClosetcareNetworkError",
    "ClosetcareNotFoundError",
    "ClosetcarePermissionError",
    "ClosetcareRetryExhaustedError",
    "ClosetcareServerError",
    "ClosetcareSessionError",
    "ClosetcareValidationError",
    "ClothingItem",
    "ClothingItemCreate",
    "CompressedImage",
    "ErrorCode",
    "ImageSettings",
    "ProcessedImage",
    "SourceImage",
    "User",
    "compress_image",
    "crop_to_square",
    "process_image_for_upload",
]

__version__ = "0.1.0"
