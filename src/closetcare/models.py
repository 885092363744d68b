"""Public data models for the closetcare SDK.

This module contains the image values passed through the preparation
pipeline, the clothing-item and user records returned by the API, and
the enums used to describe cleaning status.  Records built from backend
JSON go through ``from_api`` constructors which tolerate missing keys,
since the backend omits fields it has no value for.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CleaningStatus(str, Enum):
    """Where an item stands relative to its next cleaning date."""

    OVERDUE = "overdue"
    """The next cleaning date is today or already past."""

    DUE_SOON = "due_soon"
    """Cleaning is due within the next few days."""

    OK = "ok"
    """Cleaning is not due yet."""


# ---------------------------------------------------------------------------
# Image values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceImage:
    """A user-selected image as picked from disk or captured by a camera.

    Attributes
    ----------
    data:
        The raw file bytes.
    media_type:
        The declared media type (e.g. ``"image/png"``).
    name:
        Original file name, reused for the uploaded file.
    """

    data: bytes
    media_type: str
    name: str = "image.jpg"

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class CompressedImage:
    """A :class:`SourceImage` re-encoded as JPEG under a byte budget.

    Attributes
    ----------
    data:
        JPEG bytes.
    width, height:
        Pixel dimensions after the optional downscale.
    quality:
        The JPEG quality (0-1) of the returned encoding.
    attempts:
        How many encodes were performed to reach *quality*.
    within_budget:
        ``False`` when the quality floor was reached before the byte budget
        was met.
    name:
        File name carried over from the source.
    media_type:
        Always ``"image/jpeg"``.
    """

    data: bytes
    width: int
    height: int
    quality: float
    attempts: int = 1
    within_budget: bool = True
    name: str = "image.jpg"
    media_type: str = "image/jpeg"

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ProcessedImage:
    """The final square image, ready for a multipart upload.

    Attributes
    ----------
    data:
        JPEG payload for the upload.
    preview:
        A ``data:image/jpeg;base64,...`` URI of the very same bytes, usable
        directly as an image source for display.
    width, height:
        Always equal to the target size.
    content_box:
        ``(x, y, width, height)`` of the region covered by the fitted image;
        the rest of the canvas is letterbox fill.
    name:
        File name carried over from the source.
    media_type:
        Always ``"image/jpeg"``.
    """

    data: bytes
    preview: str
    width: int
    height: int
    content_box: tuple[int, int, int, int]
    name: str = "image.jpg"
    media_type: str = "image/jpeg"

    @property
    def size_bytes(self) -> int:
        return len(self.data)


# ---------------------------------------------------------------------------
# API records
# ---------------------------------------------------------------------------

def parse_timestamp(value: Any) -> datetime | None:
    """Parse a backend ISO-8601 timestamp into an aware UTC ``datetime``.

    A trailing ``Z`` and naive values are both read as UTC.  Empty or
    unparseable values return ``None``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _record_id(data: dict[str, Any]) -> str:
    raw = data.get("_id") or data.get("id") or ""
    return str(raw)


@dataclass
class ClothingItem:
    """A tracked piece of clothing and its cleaning schedule."""

    id: str
    name: str
    clothing_item_type: str
    image: str = ""
    cleaning_interval_seconds: int = 0
    last_cleaned: datetime | None = None
    next_cleaning_date: datetime | None = None
    is_archived: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ClothingItem:
        """Build an item from a backend JSON object.

        The backend uses ``_id`` (or ``id``), the camelCase key
        ``clothingItemType``, and snake_case for everything else.
        """
        return cls(
            id=_record_id(data),
            name=str(data.get("name") or ""),
            clothing_item_type=str(data.get("clothingItemType") or ""),
            image=str(data.get("image") or ""),
            cleaning_interval_seconds=int(data.get("cleaning_interval_seconds") or 0),
            last_cleaned=parse_timestamp(data.get("last_cleaned")),
            next_cleaning_date=parse_timestamp(data.get("next_cleaning_date")),
            is_archived=bool(data.get("is_archived") or False),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )


@dataclass
class ClothingItemCreate:
    """Fields for a new item sent as JSON (when no photo is uploaded)."""

    name: str
    clothing_item_type: str
    cleaning_interval_seconds: int
    image: str = ""

    def to_api(self, now: datetime | None = None) -> dict[str, Any]:
        """Return the JSON body; ``last_cleaned`` is set to *now*."""
        now = now or datetime.now(timezone.utc)
        return {
            "name": self.name,
            "clothingItemType": self.clothing_item_type,
            "image": self.image,
            "cleaning_interval_seconds": self.cleaning_interval_seconds,
            "last_cleaned": _format_timestamp(now),
        }


@dataclass
class CleaningIntervalUpdate:
    """Result of a bulk cleaning-interval update for a type."""

    message: str
    modified_count: int
    item_type: str
    new_interval_seconds: int

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> CleaningIntervalUpdate:
        return cls(
            message=str(data.get("message") or ""),
            modified_count=int(data.get("modified_count") or 0),
            item_type=str(data.get("item_type") or ""),
            new_interval_seconds=int(data.get("new_interval_seconds") or 0),
        )


@dataclass
class User:
    """The authenticated account."""

    id: str
    name: str
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> User:
        return cls(
            id=_record_id(data),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            created_at=parse_timestamp(data.get("created_at")),
            updated_at=parse_timestamp(data.get("updated_at")),
        )


@dataclass
class AuthResult:
    """Token and user returned by login and signup."""

    access_token: str
    user: User

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> AuthResult:
        return cls(
            access_token=str(data.get("access_token") or ""),
            user=User.from_api(data.get("user") or {}),
        )


ItemsByType = dict[str, list[ClothingItem]]
"""Items grouped by their ``clothing_item_type``, as the list endpoints return them."""


def items_by_type_from_api(data: dict[str, Any]) -> ItemsByType:
    """Convert a ``{type: [item, ...]}`` payload into :data:`ItemsByType`."""
    return {
        str(item_type): [ClothingItem.from_api(item) for item in (items or [])]
        for item_type, items in data.items()
    }


@dataclass
class SavedToken:
    """A bearer token persisted by the session cache."""

    token: str
    saved_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at
