"""Loading and validating user-selected images.

A selection arrives as a path on disk (file picker / camera capture), as
raw bytes, or as a ``data:`` URI (e.g. a preview fed back in).  Each
loader produces a :class:`SourceImage` with a media type: magic-byte
sniffing wins, the file extension is the fallback, and
``application/octet-stream`` is the last resort.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
from pathlib import Path
from urllib.parse import unquote_to_bytes

from closetcare.config import ImageSettings
from closetcare.errors import (
    ClosetcareImageNotFoundError,
    ClosetcareImageParseError,
    ClosetcareImageSizeError,
    ClosetcareImageTypeError,
)
from closetcare.models import SourceImage

# data:[<mediatype>][;base64],<data>
_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[^;,]+)?(?:;(?P<encoding>base64))?,(?P<data>.*)$",
    re.IGNORECASE | re.DOTALL,
)

_MAGIC_BYTES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"RIFF", "image/webp"),  # RIFF....WEBP
    (b"BM", "image/bmp"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
]

_FALLBACK_MEDIA_TYPE = "application/octet-stream"


def sniff_media_type(data: bytes) -> str | None:
    """Detect an image media type from the leading bytes of *data*."""
    for magic, mime in _MAGIC_BYTES:
        if data[:len(magic)] == magic:
            if magic == b"RIFF" and data[8:12] != b"WEBP":
                continue
            return mime
    return None


def _guess_from_name(name: str) -> str | None:
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type


def source_from_bytes(
    data: bytes,
    media_type: str | None = None,
    name: str = "image.jpg",
) -> SourceImage:
    """Wrap raw bytes as a :class:`SourceImage`.

    When *media_type* is omitted it is sniffed from *data*, then guessed
    from *name*.
    """
    if media_type is None:
        media_type = sniff_media_type(data) or _guess_from_name(name) or _FALLBACK_MEDIA_TYPE
    return SourceImage(data=data, media_type=media_type, name=name)


def _size_error(name: str, size_bytes: int, max_bytes: int) -> ClosetcareImageSizeError:
    return ClosetcareImageSizeError(
        message=f"Image size {size_bytes} bytes exceeds maximum {max_bytes} bytes",
        context={"name": name, "size_bytes": size_bytes, "max_bytes": max_bytes},
    )


def load_source(path: str | Path, settings: ImageSettings | None = None) -> SourceImage:
    """Read an image file from disk.

    The file size is checked against ``settings.max_source_bytes`` before
    anything is read.

    Raises
    ------
    ClosetcareImageNotFoundError
        If *path* does not exist or is not a regular file.
    ClosetcareImageSizeError
        If the file is larger than ``settings.max_source_bytes``.
    """
    settings = settings or ImageSettings()
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ClosetcareImageNotFoundError(
            message=f"Image file not found: {file_path}",
            context={"path": str(file_path)},
        )
    size_bytes = file_path.stat().st_size
    if size_bytes > settings.max_source_bytes:
        raise _size_error(file_path.name, size_bytes, settings.max_source_bytes)
    data = file_path.read_bytes()
    return source_from_bytes(data, name=file_path.name)


def source_from_data_uri(uri: str, name: str = "image.jpg") -> SourceImage:
    """Decode a ``data:`` URI into a :class:`SourceImage`.

    Raises
    ------
    ClosetcareImageParseError
        If the URI is malformed or its payload cannot be decoded.
    """
    match = _DATA_URI_RE.match(uri)
    if not match:
        raise ClosetcareImageParseError(
            message="Invalid data URI format",
            context={"src": _truncate_src(uri), "reason": "regex_no_match"},
        )

    media_type = match.group("mime") or _FALLBACK_MEDIA_TYPE
    raw_data = match.group("data")

    if match.group("encoding"):
        try:
            decoded = base64.b64decode(raw_data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ClosetcareImageParseError(
                message="Failed to decode base64 data URI",
                context={"src": _truncate_src(uri), "reason": "base64_decode_error"},
                cause=exc,
            ) from exc
    else:
        decoded = unquote_to_bytes(raw_data)

    return SourceImage(data=decoded, media_type=media_type.lower(), name=name)


def validate_source(source: SourceImage, settings: ImageSettings | None = None) -> SourceImage:
    """Check that *source* is declared as an image and is not too large.

    Returns *source* unchanged so the call can be chained.

    Raises
    ------
    ClosetcareImageTypeError
        If the declared media type is not ``image/*``.
    ClosetcareImageSizeError
        If the source exceeds ``settings.max_source_bytes``.
    """
    settings = settings or ImageSettings()

    if not source.media_type.lower().startswith("image/"):
        raise ClosetcareImageTypeError(
            message="Please select an image file",
            context={"name": source.name, "media_type": source.media_type},
        )

    if source.size_bytes > settings.max_source_bytes:
        raise _size_error(source.name, source.size_bytes, settings.max_source_bytes)

    return source


def _truncate_src(src: str, max_len: int = 200) -> str:
    """Truncate a source string for inclusion in error context."""
    if len(src) <= max_len:
        return src
    return src[:max_len] + "..."


def coerce_source(
    image: SourceImage | bytes | str | Path,
    settings: ImageSettings | None = None,
) -> SourceImage:
    """Accept a :class:`SourceImage`, raw bytes, a ``data:`` URI or a path.

    *settings* only matters for paths, whose size is checked before reading.
    """
    if isinstance(image, SourceImage):
        return image
    if isinstance(image, (bytes, bytearray)):
        return source_from_bytes(bytes(image))
    if isinstance(image, str) and image.startswith("data:"):
        return source_from_data_uri(image)
    return load_source(image, settings)
