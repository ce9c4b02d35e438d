"""Behavior-focused tests for rate limiting middleware."""

from unittest.mock import MagicMock

from starlette.applications import Starlette
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from area_realtime.adapters.web.rate_limit_middleware import (
    RateLimitMiddleware,
    extract_client_ip,
    retry_after_seconds,
)


def _limited_client(requests_per_minute: int) -> TestClient:
    async def ok(_request: object) -> PlainTextResponse:
        return PlainTextResponse("ok")

    app = Starlette(routes=[Route("/chat/rooms", ok), Route("/healthz", ok)])
    return TestClient(RateLimitMiddleware(app, requests_per_minute=requests_per_minute))


class TestExtractClientIp:
    """Tests for client IP extraction behavior."""

    def test_when_x_forwarded_for_has_chain_then_returns_first_ip(self) -> None:
        """Given X-Forwarded-For with IP chain, when extracting, then returns original client IP."""
        request = MagicMock()
        request.headers = {"X-Forwarded-For": "  203.0.113.50 , 70.41.3.18, 150.172.238.178"}
        request.client = None

        assert extract_client_ip(request) == "203.0.113.50"

    def test_when_x_forwarded_for_empty_then_uses_direct_client_ip(self) -> None:
        """Given empty X-Forwarded-For, when extracting, then falls back to direct IP."""
        request = MagicMock()
        request.headers = {"X-Forwarded-For": ""}
        request.client = MagicMock()
        request.client.host = "192.168.1.100"

        assert extract_client_ip(request) == "192.168.1.100"

    def test_when_no_client_info_available_then_returns_unknown(self) -> None:
        """Given no client information, when extracting, then returns 'unknown'."""
        request = MagicMock()
        request.headers = {}
        request.client = None

        assert extract_client_ip(request) == "unknown"


class TestRetryAfterSeconds:
    """Tests for retry_after extraction from rate limit results."""

    def test_when_result_has_state_with_retry_after_then_extracts_it(self) -> None:
        """Given result with state.retry_after, when extracting, then returns that value."""
        result = MagicMock()
        result.state.retry_after = 45.5

        assert retry_after_seconds(result) == 45.5

    def test_when_result_has_direct_retry_after_then_extracts_it(self) -> None:
        """Given result with direct retry_after, when extracting, then returns that value."""
        result = MagicMock(spec=["retry_after"])
        result.retry_after = 30.0

        assert retry_after_seconds(result) == 30.0

    def test_when_result_has_no_retry_after_then_returns_default(self) -> None:
        """Given result without retry_after, when extracting, then returns 60 seconds default."""
        assert retry_after_seconds(object()) == 60.0


class TestRateLimitMiddleware:
    """Tests for request limiting per client IP."""

    def test_when_limit_exceeded_then_returns_429_with_retry_after(self) -> None:
        """Given a limit of two per minute, when a third request arrives, then 429 is returned."""
        client = _limited_client(2)

        statuses = [client.get("/chat/rooms").status_code for _ in range(3)]

        assert statuses == [200, 200, 429]
        limited = client.get("/chat/rooms")
        assert "Retry-After" in limited.headers
        assert limited.json()["error"]["code"] == "rate_limited"

    def test_when_other_ip_then_has_its_own_budget(self) -> None:
        """Given one IP exhausted its budget, when another IP calls, then it is served."""
        client = _limited_client(1)

        first = client.get("/chat/rooms", headers={"X-Forwarded-For": "203.0.113.1"})
        second = client.get("/chat/rooms", headers={"X-Forwarded-For": "203.0.113.1"})
        other = client.get("/chat/rooms", headers={"X-Forwarded-For": "203.0.113.2"})

        assert (first.status_code, second.status_code, other.status_code) == (200, 429, 200)

    def test_when_health_check_then_never_limited(self) -> None:
        """Given an exhausted budget, when calling /healthz, then it still succeeds."""
        client = _limited_client(1)
        client.get("/chat/rooms")

        assert client.get("/chat/rooms").status_code == 429
        assert client.get("/healthz").status_code == 200
