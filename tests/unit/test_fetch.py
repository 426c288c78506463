"""
Unit tests for the HTTP fetch and the retry fetcher
"""

import httpx
import pytest
from unittest.mock import AsyncMock
from core.exceptions import ExhaustedRetriesError, FetchError, ParseError
from ingestion.adapters.foxpost import FoxpostAdapter
from ingestion.http_client import FeedHTTPClient
from ingestion.retry import fetch_with_retry


def client_for(handler):
    return FeedHTTPClient(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestFeedHTTPClient:
    """Test single-request fetch"""

    @pytest.mark.asyncio
    async def test_returns_body_and_sends_user_agent(self):
        seen = {}

        def handler(request):
            seen["ua"] = request.headers["user-agent"]
            return httpx.Response(200, content=b"[]")

        http = FeedHTTPClient(user_agent="LockerTest/1.0", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        assert await http.get("https://feeds.example/foxplus.json") == b"[]"
        assert seen["ua"] == "LockerTest/1.0"

    @pytest.mark.asyncio
    async def test_follows_redirects(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"location": "https://feeds.example/new"})
            return httpx.Response(200, content=b"moved")

        assert await client_for(handler).get("https://feeds.example/old") == b"moved"

    @pytest.mark.asyncio
    async def test_non_success_status_raises_fetch_error(self):
        http = client_for(lambda request: httpx.Response(503))

        with pytest.raises(FetchError) as exc_info:
            await http.get("https://feeds.example/down", label="GLS")

        assert exc_info.value.context["status_code"] == 503
        assert "GLS" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_error_raises_fetch_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError) as exc_info:
            await client_for(handler).get("https://feeds.example/")

        assert isinstance(exc_info.value.original_exception, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(FetchError, match="timed out"):
            await client_for(handler).get("https://feeds.example/")

    @pytest.mark.asyncio
    async def test_adapter_fetch_delegates_to_client(self):
        adapter = FoxpostAdapter(http_client=client_for(lambda request: httpx.Response(200, content=b"[]")))

        assert await adapter.fetch("https://cdn.foxpost.example/foxplus.json") == b"[]"


class TestFetchWithRetry:
    """Test bounded fixed-delay retry"""

    @pytest.mark.asyncio
    async def test_always_failing_fetch_called_exactly_max_attempts(self):
        adapter = FoxpostAdapter()
        adapter.fetch = AsyncMock(side_effect=FetchError("boom"))
        sleep = AsyncMock()

        with pytest.raises(ExhaustedRetriesError) as exc_info:
            await fetch_with_retry(adapter, "https://feeds.example/", max_attempts=3, delay=0, sleep=sleep)

        assert adapter.fetch.call_count == 3
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_error, FetchError)
        assert exc_info.value.__cause__ is exc_info.value.last_error
        # No sleep after the final attempt
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_success_short_circuits(self):
        adapter = FoxpostAdapter()
        adapter.fetch = AsyncMock(side_effect=[FetchError("flaky"), b"[]"])
        sleep = AsyncMock()

        raw = await fetch_with_retry(adapter, "https://feeds.example/", max_attempts=5, delay=2.5, sleep=sleep)

        assert raw == b"[]"
        assert adapter.fetch.call_count == 2
        sleep.assert_awaited_once_with(2.5)

    @pytest.mark.asyncio
    async def test_non_fetch_errors_are_not_retried(self):
        adapter = FoxpostAdapter()
        adapter.fetch = AsyncMock(side_effect=ParseError("structural"))

        with pytest.raises(ParseError):
            await fetch_with_retry(adapter, "https://feeds.example/", max_attempts=3, delay=0, sleep=AsyncMock())

        assert adapter.fetch.call_count == 1

    @pytest.mark.asyncio
    async def test_zero_attempts_still_tries_once(self):
        adapter = FoxpostAdapter()
        adapter.fetch = AsyncMock(side_effect=FetchError("boom"))

        with pytest.raises(ExhaustedRetriesError):
            await fetch_with_retry(adapter, "https://feeds.example/", max_attempts=0, delay=0, sleep=AsyncMock())

        assert adapter.fetch.call_count == 1
