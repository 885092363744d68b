"""Upload orchestrator: compress, then fit into the final square.

Both stages are pure functions of their inputs, so the orchestrator holds
no state and independent calls may run concurrently.  A failure in either
stage propagates unchanged; there is no partial result.
"""

from __future__ import annotations

import time
from pathlib import Path

from closetcare.config import ImageSettings
from closetcare.errors import ClosetcareImageError
from closetcare.models import ProcessedImage, SourceImage
from closetcare.observability import NoopMetricsHook, get_logger

from .compress import compress_image
from .crop import crop_to_square
from .source import coerce_source, validate_source

log = get_logger("closetcare.image")


def process_image_for_upload(
    source: SourceImage,
    settings: ImageSettings | None = None,
    *,
    metrics=None,
) -> ProcessedImage:
    """Prepare a user-selected image for upload.

    Parameters
    ----------
    source:
        The selected image.
    settings:
        Pipeline constants; defaults to :class:`ImageSettings`.
    metrics:
        Optional :class:`~closetcare.observability.MetricsHook`.

    Returns
    -------
    ProcessedImage
        A ``target_size`` square JPEG and its preview data URI.

    Raises
    ------
    ClosetcareImageDecodeError, ClosetcareImageEncodeError, ClosetcareImageSurfaceError
        Whatever the failing stage raised, unwrapped.
    """
    settings = settings or ImageSettings()
    metrics = metrics if metrics is not None else NoopMetricsHook()

    t0 = time.monotonic()
    try:
        compressed = compress_image(
            source,
            settings.max_size_bytes,
            settings.max_dimension,
            initial_quality=settings.initial_quality,
            quality_step=settings.quality_step,
            quality_floor=settings.quality_floor,
            fill_color=settings.fill_color,
            metrics=metrics,
        )
        processed = crop_to_square(
            compressed,
            settings.target_size,
            quality=settings.final_quality,
            fill_color=settings.fill_color,
        )
    except ClosetcareImageError as exc:
        metrics.increment(
            "closetcare.image_failures_total",
            tags={"code": str(getattr(exc.code, "value", exc.code))},
        )
        log.warning(
            "image processing failed",
            extra={
                "extra_fields": {
                    "op": "process_image_for_upload",
                    "name": source.name,
                    "code": exc.code,
                    "error": exc.message,
                }
            },
        )
        raise

    elapsed_ms = (time.monotonic() - t0) * 1000
    metrics.timing("closetcare.image_process_ms", elapsed_ms)
    metrics.gauge("closetcare.image_bytes", processed.size_bytes)
    log.info(
        "image processed",
        extra={
            "extra_fields": {
                "op": "process_image_for_upload",
                "name": source.name,
                "source_bytes": source.size_bytes,
                "compressed_bytes": compressed.size_bytes,
                "quality": compressed.quality,
                "bytes": processed.size_bytes,
                "target_size": settings.target_size,
                "elapsed_ms": round(elapsed_ms, 1),
            }
        },
    )
    return processed


def prepare_upload(
    image: SourceImage | bytes | str | Path,
    settings: ImageSettings | None = None,
    *,
    metrics=None,
) -> ProcessedImage:
    """Load, validate and process a selected photo in one blocking call.

    Accepts anything :func:`coerce_source` does.  Reading a path, checking
    it and running the pipeline all happen here, so async callers can hand
    the whole call to a worker thread.
    """
    settings = settings or ImageSettings()
    source = validate_source(coerce_source(image, settings), settings)
    return process_image_for_upload(source, settings, metrics=metrics)
