"""Tests for closetcare.api.retries."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from closetcare.api.retries import compute_backoff, is_idempotent, should_retry


class TestIsIdempotent:
    @pytest.mark.parametrize("method", ["GET", "get", "PUT", "DELETE", "HEAD", "OPTIONS"])
    def test_idempotent(self, method):
        assert is_idempotent(method)

    @pytest.mark.parametrize("method", ["POST", "PATCH"])
    def test_not_idempotent(self, method):
        assert not is_idempotent(method)


class TestShouldRetry:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_status_on_get(self, status):
        assert should_retry("GET", status, None, 0, 3)

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 422, 501])
    def test_non_retryable_status(self, status):
        assert not should_retry("GET", status, None, 0, 3)

    def test_post_never_retried(self):
        assert not should_retry("POST", 503, None, 0, 3)
        assert not should_retry("POST", None, httpx.ConnectError("refused"), 0, 3)

    def test_put_retried(self):
        assert should_retry("PUT", 502, None, 0, 3)

    def test_last_attempt_not_retried(self):
        assert not should_retry("GET", 503, None, 2, 3)

    def test_network_exceptions_retried(self):
        assert should_retry("GET", None, httpx.ReadTimeout("slow"), 0, 3)
        assert should_retry("GET", None, httpx.ConnectError("refused"), 1, 3)

    def test_other_exceptions_not_retried(self):
        assert not should_retry("GET", None, ValueError("bad"), 0, 3)

    def test_nothing_to_judge(self):
        assert not should_retry("GET", None, None, 0, 3)


class TestComputeBackoff:
    def test_exponential_without_jitter(self):
        delays = [compute_backoff(n, base=0.5, maximum=10.0, jitter=False) for n in range(5)]
        assert delays == [0.5, 1.0, 2.0, 4.0, 8.0]

    def test_capped_at_maximum(self):
        assert compute_backoff(10, base=0.5, maximum=3.0, jitter=False) == 3.0

    def test_retry_after_used_and_capped(self):
        assert compute_backoff(0, retry_after=2.0, jitter=False) == 2.0
        assert compute_backoff(0, maximum=5.0, retry_after=60.0, jitter=False) == 5.0

    def test_negative_retry_after_clamped(self):
        assert compute_backoff(3, retry_after=-1.0, jitter=False) == 0.0

    def test_jitter_scales_between_half_and_full(self):
        with patch("closetcare.api.retries.random.random", return_value=0.0):
            assert compute_backoff(1, base=1.0, jitter=True) == 1.0
        with patch("closetcare.api.retries.random.random", return_value=1.0):
            assert compute_backoff(1, base=1.0, jitter=True) == 2.0
