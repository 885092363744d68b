"""Full error hierarchy for the closetcare SDK.

Every public error class inherits from ClosetcareError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Error codes are defined as a :class:`str` enum so that they serialise
naturally to JSON and can be matched with simple ``==`` comparisons.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the SDK can raise."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    PERMISSION_ERROR = "PERMISSION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    SERVER_ERROR = "SERVER_ERROR"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    NETWORK_ERROR = "NETWORK_ERROR"
    SESSION_ERROR = "SESSION_ERROR"
    IMAGE_ERROR = "IMAGE_ERROR"
    IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
    IMAGE_TYPE_ERROR = "IMAGE_TYPE_ERROR"
    IMAGE_SIZE_ERROR = "IMAGE_SIZE_ERROR"
    IMAGE_PARSE_ERROR = "IMAGE_PARSE_ERROR"
    IMAGE_DECODE_ERROR = "IMAGE_DECODE_ERROR"
    IMAGE_ENCODE_ERROR = "IMAGE_ENCODE_ERROR"
    IMAGE_SURFACE_ERROR = "IMAGE_SURFACE_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class ClosetcareError(Exception):
    """Base exception for all closetcare errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# API / transport errors
# ---------------------------------------------------------------------------

class ClosetcareValidationError(ClosetcareError):
    """The API rejected the request payload (400, 422 or another 4xx).

    Context keys: ``status_code``, ``detail``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareAuthError(ClosetcareError):
    """The API returned 401, or an operation needs a token and none is set.

    Context keys: ``status_code``, ``operation``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.AUTH_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcarePermissionError(ClosetcareError):
    """The API returned 403 for the current user.

    Context keys: ``status_code``, ``operation``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.PERMISSION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareNotFoundError(ClosetcareError):
    """The API returned 404 -- the item or type does not exist.

    Context keys: ``status_code``, ``path``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareConflictError(ClosetcareError):
    """The API returned 409, e.g. signing up with an email already in use.

    Context keys: ``status_code``, ``detail``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CONFLICT,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareServerError(ClosetcareError):
    """The API failed with a 5xx or 429 response that was not retried.

    Non-idempotent requests (creating an item, logging in) are sent once,
    so a server failure on them surfaces here rather than as
    :class:`ClosetcareRetryExhaustedError`.  Also raised when a successful
    response carries a body that is not JSON.

    Context keys: ``status_code``, ``operation``; ``content_type`` for an
    unreadable body.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.SERVER_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareRetryExhaustedError(ClosetcareError):
    """All retry attempts have been exhausted for a retryable request.

    Context keys: ``attempts``, ``last_status_code``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.RETRY_EXHAUSTED,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareNetworkError(ClosetcareError):
    """A transport-level failure occurred (timeout, DNS, connection reset).

    Context keys: ``url``, ``attempt``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.NETWORK_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Session errors
# ---------------------------------------------------------------------------

class ClosetcareSessionError(ClosetcareError):
    """The on-disk token cache could not be read or written.

    Context keys: ``path``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.SESSION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Image errors
# ---------------------------------------------------------------------------

class ClosetcareImageError(ClosetcareError):
    """Base class for image-related errors.

    Context varies by subclass.
    """

    def __init__(
        self,
        code: str = ErrorCode.IMAGE_ERROR,
        message: str = "Image error",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareImageNotFoundError(ClosetcareImageError):
    """The selected image file does not exist on disk.

    Context keys: ``path``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_NOT_FOUND,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareImageTypeError(ClosetcareImageError):
    """The declared media type is not an image type.

    Context keys: ``name``, ``media_type``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_TYPE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareImageSizeError(ClosetcareImageError):
    """The source image exceeds the configured maximum source size.

    Context keys: ``name``, ``size_bytes``, ``max_bytes``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_SIZE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareImageParseError(ClosetcareImageError):
    """A data-URI image could not be decoded (malformed base64 / header).

    Context keys: ``src``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_PARSE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareImageDecodeError(ClosetcareImageError):
    """The image bytes are not a decodable image.

    Context keys: ``name``, ``size_bytes``, ``stage``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_DECODE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareImageEncodeError(ClosetcareImageError):
    """The JPEG encoder could not produce output.

    Context keys: ``name``, ``qualities``, ``stage``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_ENCODE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ClosetcareImageSurfaceError(ClosetcareImageError):
    """The square canvas used for cropping could not be created.

    Context keys: ``target_size``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_SURFACE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
