"""Tests for the closetcare error hierarchy."""

from __future__ import annotations

import pytest

from closetcare import errors
from closetcare.errors import ClosetcareError, ClosetcareImageError, ErrorCode


@pytest.mark.parametrize(
    "cls, code",
    [
        (errors.ClosetcareValidationError, ErrorCode.VALIDATION_ERROR),
        (errors.ClosetcareAuthError, ErrorCode.AUTH_ERROR),
        (errors.ClosetcarePermissionError, ErrorCode.PERMISSION_ERROR),
        (errors.ClosetcareNotFoundError, ErrorCode.NOT_FOUND),
        (errors.ClosetcareConflictError, ErrorCode.CONFLICT),
        (errors.ClosetcareServerError, ErrorCode.SERVER_ERROR),
        (errors.ClosetcareRetryExhaustedError, ErrorCode.RETRY_EXHAUSTED),
        (errors.ClosetcareNetworkError, ErrorCode.NETWORK_ERROR),
        (errors.ClosetcareSessionError, ErrorCode.SESSION_ERROR),
        (errors.ClosetcareImageNotFoundError, ErrorCode.IMAGE_NOT_FOUND),
        (errors.ClosetcareImageTypeError, ErrorCode.IMAGE_TYPE_ERROR),
        (errors.ClosetcareImageSizeError, ErrorCode.IMAGE_SIZE_ERROR),
        (errors.ClosetcareImageParseError, ErrorCode.IMAGE_PARSE_ERROR),
        (errors.ClosetcareImageDecodeError, ErrorCode.IMAGE_DECODE_ERROR),
        (errors.ClosetcareImageEncodeError, ErrorCode.IMAGE_ENCODE_ERROR),
        (errors.ClosetcareImageSurfaceError, ErrorCode.IMAGE_SURFACE_ERROR),
    ],
)
def test_codes(cls, code):
    err = cls("boom", context={"k": 1})
    assert err.code == code
    assert err.message == "boom"
    assert err.context == {"k": 1}
    assert str(err) == "boom"
    assert isinstance(err, ClosetcareError)


def test_image_errors_share_base():
    assert issubclass(errors.ClosetcareImageDecodeError, ClosetcareImageError)
    assert ClosetcareImageError().code == ErrorCode.IMAGE_ERROR


def test_cause_is_chained():
    cause = OSError("disk")
    err = errors.ClosetcareSessionError("cannot read", cause=cause)
    assert err.cause is cause
    assert err.__cause__ is cause


def test_repr_includes_context():
    err = errors.ClosetcareNotFoundError("missing", context={"path": "/x"})
    assert repr(err) == (
        "ClosetcareNotFoundError(code=<ErrorCode.NOT_FOUND: 'NOT_FOUND'>, "
        "message='missing', context={'path': '/x'})"
    )


def test_error_codes_are_strings():
    assert ErrorCode.AUTH_ERROR == "AUTH_ERROR"
