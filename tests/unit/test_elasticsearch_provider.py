"""Unit tests for the Elasticsearch store provider using httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from booksearch.config.settings import Settings
from booksearch.providers.store.elasticsearch_provider import ElasticsearchStoreProvider
from booksearch.utils.errors import InvalidStoreResponse, StoreError

_BASE_URL = "http://es.test:9200"


def _provider(handler: Callable[[httpx.Request], httpx.Response]) -> ElasticsearchStoreProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=_BASE_URL)
    return ElasticsearchStoreProvider(Settings(elasticsearch_url=_BASE_URL), http_client=client)


class _Recorder:
    """Request handler that records every request and replays canned responses."""

    def __init__(self, responses: dict[tuple[str, str], httpx.Response] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = responses or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        return self._responses.get(key, httpx.Response(200, json={"acknowledged": True}))


class TestIndexManagement:
    @pytest.mark.asyncio
    async def test_health(self) -> None:
        recorder = _Recorder({("GET", "/_cluster/health"): httpx.Response(200, json={"status": "yellow"})})
        assert await _provider(recorder).health() == {"status": "yellow"}

    @pytest.mark.asyncio
    async def test_index_exists(self) -> None:
        recorder = _Recorder({("HEAD", "/missing"): httpx.Response(404)})
        provider = _provider(recorder)

        assert await provider.index_exists("library") is True
        assert await provider.index_exists("missing") is False

    @pytest.mark.asyncio
    async def test_create_delete_and_mapping(self) -> None:
        recorder = _Recorder()
        provider = _provider(recorder)

        await provider.delete_index("library")
        await provider.create_index("library")
        await provider.put_mapping("library", {"location": {"type": "integer"}})
        await provider.refresh("library")

        assert [(r.method, r.url.path) for r in recorder.requests] == [
            ("DELETE", "/library"),
            ("PUT", "/library"),
            ("PUT", "/library/_mapping"),
            ("POST", "/library/_refresh"),
        ]
        assert json.loads(recorder.requests[2].content) == {
            "properties": {"location": {"type": "integer"}}
        }


class TestBulk:
    @pytest.mark.asyncio
    async def test_ndjson_payload(self) -> None:
        recorder = _Recorder(
            {("POST", "/library/_bulk"): httpx.Response(200, json={"errors": False, "items": [{}, {}]})}
        )
        docs = [{"title": "Moby Dick", "location": 0, "text": "Call me Ishmael."},
                {"title": "Moby Dick", "location": 1, "text": "Café"}]

        response = await _provider(recorder).bulk("library", docs)

        request = recorder.requests[0]
        assert request.headers["content-type"] == "application/x-ndjson"
        lines = request.content.decode("utf-8").split("\n")
        assert lines[-1] == ""
        assert [json.loads(line) for line in lines[:-1]] == [
            {"index": {}}, docs[0], {"index": {}}, docs[1],
        ]
        assert response["errors"] is False

    @pytest.mark.asyncio
    async def test_empty_batch_sends_nothing(self) -> None:
        recorder = _Recorder()
        assert await _provider(recorder).bulk("library", []) == {"errors": False, "items": []}
        assert recorder.requests == []


class TestErrors:
    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        recorder = _Recorder({
            ("POST", "/library/_search"): httpx.Response(
                400, json={"error": {"type": "parsing_exception", "reason": "unknown query [mtch]"}}
            )
        })

        with pytest.raises(StoreError) as exc_info:
            await _provider(recorder).search("library", {"query": {"mtch": {}}})
        assert exc_info.value.status_code == 400
        assert exc_info.value.provider_name == "elasticsearch"
        assert "unknown query [mtch]" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StoreError) as exc_info:
            await _provider(handler).health()
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        recorder = _Recorder({("POST", "/library/_search"): httpx.Response(200, text="<html>proxy</html>")})
        with pytest.raises(InvalidStoreResponse):
            await _provider(recorder).search("library", {})

    @pytest.mark.asyncio
    async def test_non_object_body(self) -> None:
        recorder = _Recorder({("POST", "/library/_search"): httpx.Response(200, json=[1, 2])})
        with pytest.raises(InvalidStoreResponse):
            await _provider(recorder).search("library", {})


class TestClientConfiguration:
    def test_provider_name(self) -> None:
        assert _provider(_Recorder()).get_provider_name() == "elasticsearch"

    @pytest.mark.asyncio
    async def test_api_key_header(self) -> None:
        provider = ElasticsearchStoreProvider(
            Settings(elasticsearch_url=_BASE_URL + "/", elasticsearch_api_key="secret")
        )
        try:
            assert provider._client.headers["Authorization"] == "ApiKey secret"
            assert str(provider._client.base_url).rstrip("/") == _BASE_URL
        finally:
            await provider.close()
