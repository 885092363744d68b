"""Image preparation pipeline for clothing photos.

Exports
-------
load_source / source_from_bytes / source_from_data_uri / coerce_source
    Build a :class:`SourceImage` from a file, raw bytes, or a data URI.
validate_source
    Reject non-image media types and oversized files.
compress_image
    Downscale and re-encode under a byte budget (best effort).
crop_to_square
    Fit an image inside a fixed square canvas.
process_image_for_upload / prepare_upload
    Run both stages; the result carries the upload payload and a preview.
    ``prepare_upload`` also loads and validates the selection first.
"""

from .compress import compress_image, quality_schedule, scaled_dimensions
from .crop import crop_to_square, fit_box
from .pipeline import prepare_upload, process_image_for_upload
from .source import (
    coerce_source,
    load_source,
    sniff_media_type,
    source_from_bytes,
    source_from_data_uri,
    validate_source,
)

__all__ = [
    "coerce_source",
    "compress_image",
    "crop_to_square",
    "fit_box",
    "load_source",
    "prepare_upload",
    "process_image_for_upload",
    "quality_schedule",
    "scaled_dimensions",
    "sniff_media_type",
    "source_from_bytes",
    "source_from_data_uri",
    "validate_source",
]
