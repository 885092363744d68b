"""Pillow decode/encode helpers shared by the compressor and the cropper.

Quality values throughout closetcare are floats in ``(0, 1]``, the scale
used by browser canvas encoders; :func:`encode_jpeg` maps them onto
Pillow's integer ``quality`` parameter.
"""

from __future__ import annotations

import base64
import io

from PIL import Image, ImageOps, UnidentifiedImageError

from closetcare.errors import ClosetcareImageDecodeError, ClosetcareImageEncodeError

JPEG_MEDIA_TYPE = "image/jpeg"

_DECODE_ERRORS: tuple[type[Exception], ...] = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    ValueError,
    SyntaxError,
)


def decode_image(data: bytes, *, name: str = "image", stage: str = "decode") -> Image.Image:
    """Decode *data* into a fully loaded Pillow image.

    EXIF orientation is applied so camera captures come out upright.

    Raises
    ------
    ClosetcareImageDecodeError
        If *data* is empty or is not a decodable image.
    """
    context = {"name": name, "size_bytes": len(data), "stage": stage}
    if not data:
        raise ClosetcareImageDecodeError(
            message=f"Cannot decode {name!r}: no image data",
            context=context,
        )
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        img = ImageOps.exif_transpose(img)
    except _DECODE_ERRORS as exc:
        raise ClosetcareImageDecodeError(
            message=f"Cannot decode {name!r}: {exc}",
            context=context,
            cause=exc,
        ) from exc
    return img


def flatten(img: Image.Image, fill_color: tuple[int, int, int]) -> Image.Image:
    """Return an RGB copy of *img*, compositing any transparency onto *fill_color*."""
    if img.mode == "RGB":
        return img
    if img.mode == "P" and "transparency" in img.info:
        img = img.convert("RGBA")
    if img.mode in ("RGBA", "LA", "PA"):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, fill_color)
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return img.convert("RGB")


def pillow_quality(quality: float) -> int:
    """Map a ``(0, 1]`` quality onto Pillow's ``1..100`` JPEG scale."""
    return max(1, min(100, round(quality * 100)))


def encode_jpeg(img: Image.Image, quality: float) -> bytes:
    """Encode an RGB image as JPEG at *quality* (``0 < quality <= 1``).

    Raises
    ------
    ClosetcareImageEncodeError
        If Pillow cannot write the image.
    """
    buffer = io.BytesIO()
    try:
        img.save(buffer, format="JPEG", quality=pillow_quality(quality))
    except (OSError, ValueError, KeyError) as exc:
        raise ClosetcareImageEncodeError(
            message=f"JPEG encode failed at quality {quality:g}: {exc}",
            context={"qualities": [quality]},
            cause=exc,
        ) from exc
    return buffer.getvalue()


def to_data_uri(data: bytes, media_type: str = JPEG_MEDIA_TYPE) -> str:
    """Return ``data:<media_type>;base64,<data>``."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"
