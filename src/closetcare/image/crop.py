"""Square stage: fit an image inside a fixed square canvas.

Despite the name the image is never cut: it is scaled so its longer side
matches the square and centred along the shorter axis, and the uncovered
band is filled with the letterbox colour.
"""

from __future__ import annotations

from PIL import Image

from closetcare.errors import ClosetcareImageSurfaceError
from closetcare.models import CompressedImage, ProcessedImage

from .codec import JPEG_MEDIA_TYPE, decode_image, encode_jpeg, to_data_uri

_SURFACE_ERRORS: tuple[type[Exception], ...] = (MemoryError, OSError, ValueError)


def fit_box(width: int, height: int, target_size: int) -> tuple[int, int, int, int]:
    """Compute where a ``width x height`` image lands on the square canvas.

    Returns ``(x, y, drawn_width, drawn_height)``.  With ``r = width /
    height``, a wide image (``r > 1``) spans the full width and is centred
    vertically; anything else spans the full height and is centred
    horizontally.  Drawn sizes are rounded (minimum 1 pixel) and offsets
    are floor-divided so the box always lies inside the canvas.

    Examples
    --------
    >>> fit_box(1200, 600, 400)
    (0, 100, 400, 200)
    >>> fit_box(300, 900, 300)
    (100, 0, 100, 300)
    """
    ratio = width / height
    if ratio > 1:
        drawn_width = target_size
        drawn_height = min(target_size, max(1, round(target_size / ratio)))
        return 0, (target_size - drawn_height) // 2, drawn_width, drawn_height
    drawn_height = target_size
    drawn_width = min(target_size, max(1, round(target_size * ratio)))
    return (target_size - drawn_width) // 2, 0, drawn_width, drawn_height


def _new_canvas(target_size: int, fill_color: tuple[int, int, int]) -> Image.Image:
    if target_size < 1:
        raise ClosetcareImageSurfaceError(
            message=f"Cannot create a {target_size}x{target_size} canvas",
            context={"target_size": target_size},
        )
    try:
        return Image.new("RGB", (target_size, target_size), fill_color)
    except _SURFACE_ERRORS as exc:
        raise ClosetcareImageSurfaceError(
            message=f"Cannot create a {target_size}x{target_size} canvas: {exc}",
            context={"target_size": target_size},
            cause=exc,
        ) from exc


def crop_to_square(
    image: CompressedImage,
    target_size: int = 400,
    *,
    quality: float = 0.8,
    fill_color: tuple[int, int, int] = (0, 0, 0),
) -> ProcessedImage:
    """Fit *image* into a ``target_size x target_size`` JPEG.

    Parameters
    ----------
    image:
        The compressed image.  Any object with ``data`` and ``name``
        attributes works, so a :class:`SourceImage` built from a preview
        can be fed straight back in.
    target_size:
        Side length of the output square.
    quality:
        JPEG quality of the final encoding.
    fill_color:
        Letterbox colour for the uncovered part of the canvas.

    Returns
    -------
    ProcessedImage
        ``data`` is the upload payload and ``preview`` is a data URI of the
        same bytes.

    Raises
    ------
    ClosetcareImageDecodeError
        If *image* cannot be decoded.
    ClosetcareImageSurfaceError
        If the canvas cannot be created.
    ClosetcareImageEncodeError
        If the canvas cannot be encoded.
    """
    img = decode_image(image.data, name=image.name, stage="crop")
    canvas = _new_canvas(target_size, fill_color)

    x, y, drawn_width, drawn_height = fit_box(img.width, img.height, target_size)
    fitted = img.convert("RGBA").resize(
        (drawn_width, drawn_height), Image.Resampling.LANCZOS,
    )
    canvas.paste(fitted, (x, y), mask=fitted.getchannel("A"))

    data = encode_jpeg(canvas, quality)
    return ProcessedImage(
        data=data,
        preview=to_data_uri(data, JPEG_MEDIA_TYPE),
        width=target_size,
        height=target_size,
        content_box=(x, y, drawn_width, drawn_height),
        name=image.name,
    )
