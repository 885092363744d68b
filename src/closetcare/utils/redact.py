"""Redaction of credentials and image payloads before they are logged.

Debug dumps of requests pass through :func:`redact` first.  It masks
bearer tokens and passwords, and swaps photo bytes and ``data:`` URIs for
short size placeholders so a dump never carries a whole image.
"""

from __future__ import annotations

import copy
import re
from typing import Any

_DATA_URI_RE = re.compile(
    r"data:[a-zA-Z0-9_.+-]+/[a-zA-Z0-9_.+-]+;base64,[A-Za-z0-9+/=]+"
)

_BEARER_RE = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)

# A key containing any of these (case-insensitive) has its value masked.
_SENSITIVE_KEYS: frozenset[str] = frozenset({
    "token",
    "password",
    "secret",
    "authorization",
    "cookie",
})


def _data_uri_placeholder(match: re.Match[str]) -> str:
    payload = match.group(0).split(";base64,", 1)[1]
    return f"<data_uri:{len(payload) * 3 // 4}_bytes>"


def _scrub_string(value: str, token: str | None) -> str:
    value = _DATA_URI_RE.sub(_data_uri_placeholder, value)
    if token and token in value:
        value = value.replace(token, "<redacted>")
    return _BEARER_RE.sub(lambda m: f"{m.group(1)}<redacted>", value)


def _redact_value(value: Any, token: str | None) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, token)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, token) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return f"<binary:{len(value)}_bytes>"
    if isinstance(value, str):
        return _scrub_string(value, token)
    return value


def _redact_dict(d: dict, token: str | None) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEYS):
            result[key] = "<redacted>"
        else:
            result[key] = _redact_value(value, token)
    return result


def redact(payload: dict, token: str | None = None) -> dict:
    """Return a copy of *payload* that is safe to log.

    * Values under keys like ``password``, ``access_token`` or
      ``Authorization`` become ``<redacted>``.
    * ``data:`` URIs become ``<data_uri:N_bytes>``.
    * ``bytes`` values (multipart photo parts) become ``<binary:N_bytes>``.
    * *token*, when given, is scrubbed from every remaining string.

    The original *payload* is never mutated.

    Examples
    --------
    >>> redact({"email": "a@b.c", "password": "hunter2"})
    {'email': 'a@b.c', 'password': '<redacted>'}
    >>> redact({"note": "sent Bearer abc.def"})
    {'note': 'sent Bearer <redacted>'}
    """
    return _redact_dict(copy.deepcopy(payload), token)
