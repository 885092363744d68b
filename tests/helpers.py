"""Builders shared by the closetcare tests."""

from __future__ import annotations

import io
import json
import random
from typing import Any

import httpx
from PIL import Image


def image_bytes(
    width: int,
    height: int,
    *,
    mode: str = "RGB",
    color: Any = (200, 30, 30),
    fmt: str = "PNG",
    **save_kwargs: Any,
) -> bytes:
    """Encode a solid-colour image of the given size."""
    buf = io.BytesIO()
    Image.new(mode, (width, height), color).save(buf, format=fmt, **save_kwargs)
    return buf.getvalue()


def noise_bytes(width: int, height: int, seed: int = 0) -> bytes:
    """Encode random RGB noise as PNG; noise compresses poorly as JPEG."""
    rng = random.Random(seed)
    img = Image.frombytes("RGB", (width, height), rng.randbytes(width * height * 3))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def make_response(
    status_code: int = 200,
    body: Any = None,
    headers: dict | None = None,
    method: str = "GET",
    url: str = "http://localhost:8000/clothing-items",
) -> httpx.Response:
    """Build an httpx.Response with a request attached so ``.url`` works."""
    content = json.dumps(body).encode() if body is not None else b""
    resp = httpx.Response(status_code, content=content, headers=headers or {})
    resp.request = httpx.Request(method, url)
    return resp


def item_json(item_id: str = "64f0c0ffee", **overrides: Any) -> dict[str, Any]:
    """A clothing item as the backend returns it."""
    data = {
        "_id": item_id,
        "name": "Blue jeans",
        "clothingItemType": "Pants",
        "image": "/static/images/jeans.jpg",
        "cleaning_interval_seconds": 14 * 86400,
        "last_cleaned": "2026-10-01T08:00:00Z",
        "next_cleaning_date": "2026-10-15T08:00:00Z",
        "is_archived": False,
        "created_at": "2026-09-01T10:00:00Z",
        "updated_at": "2026-10-01T08:00:00Z",
    }
    data.update(overrides)
    return data


def user_json(**overrides: Any) -> dict[str, Any]:
    data = {
        "_id": "u-1",
        "name": "Ada",
        "email": "ada@example.com",
        "created_at": "2026-01-01T00:00:00Z",
        "updated_at": "2026-01-02T00:00:00Z",
    }
    data.update(overrides)
    return data


class RecordingMetrics:
    """MetricsHook that records every call for assertions."""

    def __init__(self) -> None:
        self.counters: list[tuple[str, int, dict | None]] = []
        self.timings: list[tuple[str, float, dict | None]] = []
        self.gauges: list[tuple[str, float, dict | None]] = []

    def increment(self, name, value=1, tags=None):
        self.counters.append((name, value, tags))

    def timing(self, name, ms, tags=None):
        self.timings.append((name, ms, tags))

    def gauge(self, name, value, tags=None):
        self.gauges.append((name, value, tags))

    def names(self) -> set[str]:
        return {entry[0] for entry in (*self.counters, *self.timings, *self.gauges)}
