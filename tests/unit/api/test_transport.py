"""Unit tests for closetcare/api/transport.py.

Covers:
- build_headers / _parse_retry_after / _error_detail
- _raise_for_status status mapping
- ApiTransport.request (success, errors, retries, debug dump, credentials)
- AsyncApiTransport equivalents
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from closetcare.api.transport import (
    ApiTransport,
    AsyncApiTransport,
    _error_detail,
    _parse_retry_after,
    _raise_for_status,
    build_headers,
)
from closetcare.config import ClosetcareConfig
from closetcare.errors import (
    ClosetcareAuthError,
    ClosetcareConflictError,
    ClosetcareNetworkError,
    ClosetcareNotFoundError,
    ClosetcarePermissionError,
    ClosetcareRetryExhaustedError,
    ClosetcareServerError,
    ClosetcareValidationError,
)
from tests.helpers import RecordingMetrics, make_response


def make_config(**overrides) -> ClosetcareConfig:
    """Return a ClosetcareConfig tuned for fast, deterministic tests."""
    defaults = dict(
        retry_max_attempts=3,
        retry_base_delay=0.0,
        retry_max_delay=0.0,
        retry_jitter=False,
    )
    defaults.update(overrides)
    return ClosetcareConfig(**defaults)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestBuildHeaders:
    def test_token_adds_bearer(self):
        assert build_headers("abc")["Authorization"] == "Bearer abc"

    def test_no_token_no_authorization(self):
        assert "Authorization" not in build_headers(None)
        assert "Authorization" not in build_headers("")

    def test_accepts_json(self):
        assert build_headers(None)["Accept"] == "application/json"


class TestParseRetryAfter:
    def test_numeric(self):
        assert _parse_retry_after(make_response(429, headers={"retry-after": "3"})) == 3.0

    def test_invalid(self):
        assert _parse_retry_after(make_response(429, headers={"retry-after": "soon"})) is None

    def test_missing(self):
        assert _parse_retry_after(make_response(429)) is None


class TestErrorDetail:
    def test_string_detail(self):
        message, detail = _error_detail(make_response(400, {"detail": "Email already registered"}))
        assert message == "Email already registered"
        assert detail == "Email already registered"

    def test_validation_list_detail(self):
        body = {"detail": [{"loc": ["body", "email"], "msg": "field required"},
                           {"loc": ["body", "password"], "msg": "too short"}]}
        message, _ = _error_detail(make_response(422, body))
        assert message == "field required; too short"

    def test_non_json_body_falls_back_to_text(self):
        resp = httpx.Response(502, content=b"Bad gateway from proxy")
        resp.request = httpx.Request("GET", "http://localhost:8000/")
        message, detail = _error_detail(resp)
        assert message == "Bad gateway from proxy"
        assert detail is None

    def test_empty_body_uses_reason_phrase(self):
        message, _ = _error_detail(make_response(404))
        assert message == "Not Found"


class TestRaiseForStatus:
    @pytest.mark.parametrize(
        "status, error_cls",
        [
            (400, ClosetcareValidationError),
            (401, ClosetcareAuthError),
            (403, ClosetcarePermissionError),
            (404, ClosetcareNotFoundError),
            (409, ClosetcareConflictError),
            (422, ClosetcareValidationError),
            (429, ClosetcareServerError),
            (500, ClosetcareServerError),
        ],
    )
    def test_mapping(self, status, error_cls):
        with pytest.raises(error_cls) as exc_info:
            _raise_for_status(make_response(status, {"detail": "nope"}), "GET", "/x")
        assert exc_info.value.context["status_code"] == status
        assert exc_info.value.message == "nope"

    def test_not_found_carries_path(self):
        with pytest.raises(ClosetcareNotFoundError) as exc_info:
            _raise_for_status(make_response(404), "GET", "/clothing-items/abc")
        assert exc_info.value.context["path"] == "/clothing-items/abc"


# ---------------------------------------------------------------------------
# ApiTransport.request
# ---------------------------------------------------------------------------

class TestApiTransportRequest:
    """Tests for ApiTransport.request()."""

    def _transport(self, **cfg_overrides) -> ApiTransport:
        return ApiTransport(make_config(**cfg_overrides))

    # -- Success cases -------------------------------------------------------

    def test_200_returns_json(self):
        transport = self._transport()
        resp = make_response(200, {"Shirts": []})
        with patch.object(transport._client, "request", return_value=resp):
            assert transport.request("GET", "/clothing-items", token="t") == {"Shirts": []}

    def test_list_body(self):
        transport = self._transport()
        with patch.object(transport._client, "request", return_value=make_response(200, [1, 2])):
            assert transport.request("GET", "/clothing-items/type/Shirts") == [1, 2]

    def test_204_returns_none(self):
        transport = self._transport()
        with patch.object(transport._client, "request", return_value=make_response(204)):
            assert transport.request("PUT", "/clothing-items/a/archive") is None

    def test_non_json_success_body_raises_server_error(self):
        transport = self._transport()
        resp = httpx.Response(
            200, content=b"<html>Bad gateway page</html>",
            headers={"content-type": "text/html"},
        )
        resp.request = httpx.Request("GET", "http://localhost:8000/clothing-items")
        with patch.object(transport._client, "request", return_value=resp):
            with pytest.raises(ClosetcareServerError) as exc_info:
                transport.request("GET", "/clothing-items", token="t")
        assert exc_info.value.context["status_code"] == 200
        assert exc_info.value.context["operation"] == "GET /clothing-items"
        assert exc_info.value.context["content_type"] == "text/html"

    # -- Credentials ---------------------------------------------------------

    def test_token_sent_per_request(self):
        transport = self._transport()
        with patch.object(
            transport._client, "request", return_value=make_response(200, {}),
        ) as mock_request:
            transport.request("GET", "/auth/me", token="tok-1")
            transport.request("GET", "/auth/me", token="tok-2")
        first, second = mock_request.call_args_list
        assert first.kwargs["headers"]["Authorization"] == "Bearer tok-1"
        assert second.kwargs["headers"]["Authorization"] == "Bearer tok-2"

    def test_anonymous_request_has_no_authorization(self):
        transport = self._transport()
        with patch.object(
            transport._client, "request", return_value=make_response(200, {}),
        ) as mock_request:
            transport.request("POST", "/auth/login", json={"email": "a", "password": "b"})
        assert "Authorization" not in mock_request.call_args.kwargs["headers"]

    def test_client_has_no_default_authorization(self):
        transport = self._transport()
        assert "authorization" not in transport._client.headers

    def test_extra_headers_merged(self):
        transport = self._transport()
        with patch.object(
            transport._client, "request", return_value=make_response(200, {}),
        ) as mock_request:
            transport.request("GET", "/x", token="t", headers={"X-Trace": "1"})
        headers = mock_request.call_args.kwargs["headers"]
        assert headers["X-Trace"] == "1"
        assert headers["Authorization"] == "Bearer t"

    # -- Error statuses ------------------------------------------------------

    def test_401_raises_auth_error_without_retry(self):
        transport = self._transport()
        with (
            patch.object(
                transport._client, "request",
                return_value=make_response(401, {"detail": "Could not validate credentials"}),
            ) as mock_request,
            pytest.raises(ClosetcareAuthError) as exc_info,
        ):
            transport.request("GET", "/auth/me", token="stale")
        assert exc_info.value.message == "Could not validate credentials"
        assert mock_request.call_count == 1

    def test_422_raises_validation_error(self):
        transport = self._transport()
        body = {"detail": [{"msg": "value is not a valid integer"}]}
        with (
            patch.object(transport._client, "request", return_value=make_response(422, body)),
            pytest.raises(ClosetcareValidationError) as exc_info,
        ):
            transport.request("PUT", "/clothing-items/a/cleaning-interval")
        assert exc_info.value.context["operation"] == "PUT /clothing-items/a/cleaning-interval"

    # -- Retries -------------------------------------------------------------

    def test_503_on_get_retried_then_succeeds(self):
        transport = self._transport()
        responses = iter([make_response(503), make_response(200, {"ok": True})])
        with patch.object(
            transport._client, "request", side_effect=lambda *a, **kw: next(responses),
        ) as mock_request:
            assert transport.request("GET", "/clothing-items") == {"ok": True}
        assert mock_request.call_count == 2

    def test_500_on_get_exhausts_retries(self):
        transport = self._transport(retry_max_attempts=3)
        with (
            patch.object(
                transport._client, "request", return_value=make_response(500),
            ) as mock_request,
            pytest.raises(ClosetcareRetryExhaustedError) as exc_info,
        ):
            transport.request("GET", "/clothing-items")
        assert mock_request.call_count == 3
        assert exc_info.value.context["attempts"] == 3
        assert exc_info.value.context["last_status_code"] == 500

    def test_500_on_post_sent_once(self):
        transport = self._transport()
        with (
            patch.object(
                transport._client, "request",
                return_value=make_response(500, {"detail": "Internal error"}),
            ) as mock_request,
            pytest.raises(ClosetcareServerError),
        ):
            transport.request("POST", "/clothing-items", json={})
        assert mock_request.call_count == 1

    def test_429_retry_after_honoured(self):
        transport = self._transport(retry_max_delay=5.0)
        responses = iter([
            make_response(429, headers={"retry-after": "2"}),
            make_response(200, {}),
        ])
        with (
            patch.object(transport._client, "request", side_effect=lambda *a, **kw: next(responses)),
            patch("closetcare.api.transport.time.sleep") as mock_sleep,
        ):
            transport.request("GET", "/clothing-items")
        mock_sleep.assert_called_once_with(2.0)

    def test_single_attempt_5xx_get_exhausted(self):
        transport = self._transport(retry_max_attempts=1)
        with (
            patch.object(transport._client, "request", return_value=make_response(502)),
            pytest.raises(ClosetcareRetryExhaustedError),
        ):
            transport.request("GET", "/clothing-items")

    # -- Network errors ------------------------------------------------------

    def test_timeout_retried_then_succeeds(self):
        transport = self._transport()
        calls = {"n": 0}

        def side_effect(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                raise httpx.ReadTimeout("timed out")
            return make_response(200, {"id": "1"})

        with patch.object(transport._client, "request", side_effect=side_effect):
            assert transport.request("GET", "/clothing-items/1") == {"id": "1"}
        assert calls["n"] == 2

    def test_network_error_on_last_attempt_raises_network_error(self):
        transport = self._transport(retry_max_attempts=2)
        with (
            patch.object(
                transport._client, "request", side_effect=httpx.ConnectError("refused"),
            ) as mock_request,
            pytest.raises(ClosetcareNetworkError) as exc_info,
        ):
            transport.request("GET", "/clothing-items")
        assert mock_request.call_count == 2
        assert exc_info.value.context["attempt"] == 2

    def test_network_error_on_post_not_retried(self):
        transport = self._transport()
        with (
            patch.object(
                transport._client, "request", side_effect=httpx.ConnectError("refused"),
            ) as mock_request,
            pytest.raises(ClosetcareNetworkError),
        ):
            transport.request("POST", "/auth/login", json={})
        assert mock_request.call_count == 1

    # -- Metrics / debug dump --------------------------------------------------

    def test_metrics_emitted(self):
        metrics = RecordingMetrics()
        transport = self._transport(metrics=metrics)
        responses = iter([make_response(503), make_response(200, {})])
        with patch.object(transport._client, "request", side_effect=lambda *a, **kw: next(responses)):
            transport.request("GET", "/clothing-items")
        counter_names = [name for name, _, _ in metrics.counters]
        assert counter_names.count("closetcare.requests_total") == 2
        assert counter_names.count("closetcare.retries_total") == 1
        assert "closetcare.request_duration_ms" in metrics.names()

    def test_debug_dump_redacts_password_and_token(self, capsys):
        transport = self._transport(debug_dump_payload=True)
        resp = make_response(200, {"access_token": "new-secret-token", "user": {}})
        with patch.object(transport._client, "request", return_value=resp):
            transport.request(
                "POST", "/auth/login",
                json={"email": "ada@example.com", "password": "hunter2"},
            )
        err = capsys.readouterr().err
        assert "ada@example.com" in err
        assert "hunter2" not in err
        assert "new-secret-token" not in err

    def test_debug_dump_replaces_photo_bytes(self, capsys):
        transport = self._transport(debug_dump_payload=True)
        with patch.object(transport._client, "request", return_value=make_response(200, {})):
            transport.request(
                "POST", "/clothing-items", token="tok",
                data={"name": "Shirt"},
                files={"image": ("a.jpg", b"\xff\xd8\xff" * 100, "image/jpeg")},
            )
        err = capsys.readouterr().err
        assert '"name": "Shirt"' in err
        assert '"image"' in err

    def test_no_debug_dump_when_disabled(self, capsys):
        transport = self._transport()
        with patch.object(transport._client, "request", return_value=make_response(200, {})):
            transport.request("GET", "/clothing-items")
        assert capsys.readouterr().err == ""

    # -- Lifecycle -----------------------------------------------------------

    def test_context_manager_closes(self):
        transport = self._transport()
        with patch.object(transport._client, "close") as mock_close:
            with transport:
                pass
        mock_close.assert_called_once()


# ---------------------------------------------------------------------------
# AsyncApiTransport.request
# ---------------------------------------------------------------------------

class TestAsyncApiTransportRequest:
    """Tests for AsyncApiTransport.request()."""

    def _transport(self, **cfg_overrides) -> AsyncApiTransport:
        return AsyncApiTransport(make_config(**cfg_overrides))

    async def test_200_returns_json(self):
        transport = self._transport()
        resp = make_response(200, {"_id": "1"})
        with patch.object(transport._client, "request", new=AsyncMock(return_value=resp)):
            assert await transport.request("GET", "/clothing-items/1", token="t") == {"_id": "1"}
        await transport.close()

    async def test_non_json_success_body_raises_server_error(self):
        transport = self._transport()
        resp = httpx.Response(200, content=b"not json")
        resp.request = httpx.Request("GET", "http://localhost:8000/auth/me")
        with patch.object(transport._client, "request", new=AsyncMock(return_value=resp)):
            with pytest.raises(ClosetcareServerError):
                await transport.request("GET", "/auth/me", token="t")
        await transport.close()

    async def test_token_sent(self):
        transport = self._transport()
        mock_request = AsyncMock(return_value=make_response(200, {}))
        with patch.object(transport._client, "request", new=mock_request):
            await transport.request("GET", "/auth/me", token="tok")
        assert mock_request.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"
        await transport.close()

    async def test_404_raises_not_found(self):
        transport = self._transport()
        with (
            patch.object(
                transport._client, "request",
                new=AsyncMock(return_value=make_response(404, {"detail": "Item not found"})),
            ),
            pytest.raises(ClosetcareNotFoundError) as exc_info,
        ):
            await transport.request("GET", "/clothing-items/zzz")
        assert exc_info.value.message == "Item not found"
        await transport.close()

    async def test_503_retried(self):
        transport = self._transport()
        mock_request = AsyncMock(side_effect=[make_response(503), make_response(200, {"a": 1})])
        with patch.object(transport._client, "request", new=mock_request):
            assert await transport.request("PUT", "/clothing-items/1/archive") == {"a": 1}
        assert mock_request.await_count == 2
        await transport.close()

    async def test_post_500_not_retried(self):
        transport = self._transport()
        mock_request = AsyncMock(return_value=make_response(500))
        with (
            patch.object(transport._client, "request", new=mock_request),
            pytest.raises(ClosetcareServerError),
        ):
            await transport.request("POST", "/auth/signup", json={})
        assert mock_request.await_count == 1
        await transport.close()

    async def test_network_error_exhausted(self):
        transport = self._transport(retry_max_attempts=2)
        mock_request = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with (
            patch.object(transport._client, "request", new=mock_request),
            pytest.raises(ClosetcareNetworkError),
        ):
            await transport.request("GET", "/clothing-items")
        assert mock_request.await_count == 2
        await transport.close()

    async def test_async_context_manager_closes(self):
        transport = self._transport()
        with patch.object(transport._client, "aclose", new=AsyncMock()) as mock_close:
            async with transport:
                pass
        mock_close.assert_awaited_once()
