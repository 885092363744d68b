"""Compression stage: downscale and re-encode a source image under a byte budget.

The quality loop is a linear walk down a precomputed schedule
(``0.9, 0.8, ..., 0.1`` by default).  Computing the schedule up front
keeps every tried quality an exact number of steps from the initial
value, so float drift can never push an attempt below the floor.
"""

from __future__ import annotations

from PIL import Image

from closetcare.errors import ClosetcareImageEncodeError
from closetcare.models import CompressedImage, SourceImage
from closetcare.observability import NoopMetricsHook, get_logger

from .codec import decode_image, encode_jpeg, flatten

log = get_logger("closetcare.image")

# Decimal places kept when stepping quality; hides binary float noise.
_QUALITY_PRECISION = 6


def quality_schedule(
    initial: float = 0.9,
    step: float = 0.1,
    floor: float = 0.1,
) -> list[float]:
    """Return the qualities the compressor tries, highest first.

    The list starts at *initial* and descends by *step*; the last entry is
    the lowest value that is still ``>= floor``.

    Examples
    --------
    >>> quality_schedule()
    [0.9, 0.8, 0.7, 0.6, 0.5, 0.4, 0.3, 0.2, 0.1]
    >>> quality_schedule(0.9, 0.25, 0.3)
    [0.9, 0.65, 0.4]
    """
    if step <= 0:
        raise ValueError(f"step must be > 0, got {step}")
    if floor > initial:
        raise ValueError(f"floor ({floor}) must not exceed initial ({initial})")

    schedule: list[float] = []
    n = 0
    while True:
        quality = round(initial - n * step, _QUALITY_PRECISION)
        if quality < round(floor, _QUALITY_PRECISION):
            break
        schedule.append(quality)
        n += 1
    return schedule


def scaled_dimensions(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Fit ``(width, height)`` within *max_dimension*, preserving aspect ratio.

    Dimensions already within the bound are returned unchanged.  Otherwise
    the larger side becomes exactly *max_dimension* and the other side is
    rounded, never below 1 pixel.
    """
    if max(width, height) <= max_dimension:
        return width, height
    ratio = min(max_dimension / width, max_dimension / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def compress_image(
    source: SourceImage,
    max_size_bytes: int = 500 * 1024,
    max_dimension: int = 1200,
    *,
    initial_quality: float = 0.9,
    quality_step: float = 0.1,
    quality_floor: float = 0.1,
    fill_color: tuple[int, int, int] = (0, 0, 0),
    metrics=None,
) -> CompressedImage:
    """Re-encode *source* as a JPEG of at most *max_size_bytes*, best effort.

    1. Decode the source and apply its EXIF orientation.
    2. If the larger side exceeds *max_dimension*, scale down so it equals
       *max_dimension*.
    3. Encode at each quality of :func:`quality_schedule` in turn and stop
       at the first result within budget.  When the floor is reached the
       floor's encoding is returned even if it is still too large.

    Parameters
    ----------
    source:
        The user-selected image.
    max_size_bytes:
        Byte budget for the encoded result.
    max_dimension:
        Bound on the larger side, in pixels.
    initial_quality, quality_step, quality_floor:
        Shape of the quality schedule.
    fill_color:
        Background for transparent pixels.
    metrics:
        Optional :class:`~closetcare.observability.MetricsHook`.

    Returns
    -------
    CompressedImage

    Raises
    ------
    ClosetcareImageDecodeError
        If the source cannot be decoded.
    ClosetcareImageEncodeError
        If the encoder fails at every quality in the schedule.
    """
    metrics = metrics if metrics is not None else NoopMetricsHook()

    img = decode_image(source.data, name=source.name, stage="compress")
    original_size = img.size
    width, height = scaled_dimensions(img.width, img.height, max_dimension)
    if (width, height) != img.size:
        img = img.resize((width, height), Image.Resampling.LANCZOS)
    img = flatten(img, fill_color)

    schedule = quality_schedule(initial_quality, quality_step, quality_floor)
    best: tuple[bytes, float] | None = None
    last_error: ClosetcareImageEncodeError | None = None
    attempts = 0

    for quality in schedule:
        attempts += 1
        try:
            encoded = encode_jpeg(img, quality)
        except ClosetcareImageEncodeError as exc:
            last_error = exc
            log.warning(
                "JPEG encode failed, trying next quality",
                extra={
                    "extra_fields": {
                        "op": "compress_image",
                        "name": source.name,
                        "quality": quality,
                        "error": str(exc),
                    }
                },
            )
            continue

        best = (encoded, quality)
        if len(encoded) <= max_size_bytes:
            break

    metrics.increment("closetcare.image_compress_attempts", attempts)

    if best is None:
        raise ClosetcareImageEncodeError(
            message=f"Could not encode {source.name!r} at any quality",
            context={"name": source.name, "qualities": schedule, "stage": "compress"},
            cause=last_error,
        )

    data, quality = best
    within_budget = len(data) <= max_size_bytes
    log_fields = {
        "op": "compress_image",
        "name": source.name,
        "source_bytes": source.size_bytes,
        "source_size": f"{original_size[0]}x{original_size[1]}",
        "size": f"{width}x{height}",
        "bytes": len(data),
        "max_bytes": max_size_bytes,
        "quality": quality,
        "attempts": attempts,
    }
    if within_budget:
        log.debug("image compressed", extra={"extra_fields": log_fields})
    else:
        log.warning(
            "image still over budget at quality floor",
            extra={"extra_fields": log_fields},
        )

    return CompressedImage(
        data=data,
        width=width,
        height=height,
        quality=quality,
        attempts=attempts,
        within_budget=within_budget,
        name=source.name,
    )

