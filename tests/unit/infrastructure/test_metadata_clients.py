"""Tests for the metadata source and the popular-list client."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from starpulse.domain.entities import DispatchResult, UpstreamError
from starpulse.infrastructure.common.retry import RetryPolicy
from starpulse.infrastructure.metadata import HttpxPopularClient, MetadataServiceSource

_POPULAR_URL = "https://popular.test/index.json"


class TestMetadataServiceSource:
    @pytest.fixture()
    def source(self) -> MetadataServiceSource:
        return MetadataServiceSource(url_template="https://meta.test/{repo}/details")

    def test_request_for(self, source: MetadataServiceSource) -> None:
        item = source.request_for("owner/repo")
        assert item.url == "https://meta.test/owner/repo/details"
        assert item.method == "GET"
        assert item.headers == {"Accept": "application/json"}

    def test_request_for_quotes_unsafe_characters(
        self, source: MetadataServiceSource
    ) -> None:
        assert source.url_for("owner/re po") == "https://meta.test/owner/re%20po/details"

    def test_interpret_success(self, source: MetadataServiceSource) -> None:
        result = DispatchResult(status=200, result={"stars": 10})
        assert source.interpret("owner/repo", result) == {"stars": 10}

    def test_interpret_item_error(self, source: MetadataServiceSource) -> None:
        with pytest.raises(UpstreamError, match="timed out"):
            source.interpret("owner/repo", DispatchResult.failure("timed out"))

    def test_interpret_non_2xx(self, source: MetadataServiceSource) -> None:
        with pytest.raises(UpstreamError, match="HTTP 404"):
            source.interpret("owner/repo", DispatchResult(status=404, result="nope"))

    def test_interpret_non_object(self, source: MetadataServiceSource) -> None:
        with pytest.raises(UpstreamError, match="Unexpected metadata payload"):
            source.interpret("owner/repo", DispatchResult(status=200, result="text"))


class TestHttpxPopularClient:
    @pytest.fixture()
    def client(self) -> HttpxPopularClient:
        return HttpxPopularClient(
            http_client=httpx.AsyncClient(),
            url=_POPULAR_URL,
            retry=RetryPolicy(max_attempts=2, initial_delay=0.5),
        )

    @respx.mock
    async def test_returns_repositories(self, client: HttpxPopularClient) -> None:
        respx.get(_POPULAR_URL).respond(
            json={"repositories": [{"name": "a/b"}, "junk", {"name": "c/d"}]}
        )
        assert await client.fetch_popular() == [{"name": "a/b"}, {"name": "c/d"}]

    @respx.mock
    async def test_retries_transient_failure(self, client: HttpxPopularClient) -> None:
        route = respx.get(_POPULAR_URL)
        route.side_effect = [
            httpx.Response(503),
            httpx.Response(200, json={"repositories": []}),
        ]
        with patch("starpulse.infrastructure.common.retry.asyncio") as m:
            m.sleep = AsyncMock()
            assert await client.fetch_popular() == []
        assert route.call_count == 2

    @respx.mock
    async def test_missing_list_raises_after_retries(
        self, client: HttpxPopularClient
    ) -> None:
        route = respx.get(_POPULAR_URL).respond(json={"items": []})
        with patch("starpulse.infrastructure.common.retry.asyncio") as m:
            m.sleep = AsyncMock()
            with pytest.raises(UpstreamError, match="repositories"):
                await client.fetch_popular()
        assert route.call_count == 2
