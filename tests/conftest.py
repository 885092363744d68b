"""Shared test fixtures for the closetcare test suite."""

from __future__ import annotations

import pytest

from closetcare.config import ClosetcareConfig
from closetcare.models import SourceImage
from tests.helpers import RecordingMetrics, image_bytes


@pytest.fixture
def config(tmp_path) -> ClosetcareConfig:
    """Fast, deterministic config whose token cache lives in *tmp_path*."""
    return ClosetcareConfig(
        session_file=str(tmp_path / "session.json"),
        retry_base_delay=0.0,
        retry_max_delay=0.0,
        retry_jitter=False,
    )


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture
def png_source() -> SourceImage:
    """A 2000x1000 PNG photo."""
    return SourceImage(data=image_bytes(2000, 1000), media_type="image/png", name="wide.png")
