"""Elasticsearch store provider adapter.

Wraps the Elasticsearch REST API with a shared ``httpx.AsyncClient`` to
implement :class:`IStoreProvider`.  Works against Elasticsearch 7/8 and
OpenSearch clusters (typeless mappings, NDJSON ``_bulk``).
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from booksearch.config.settings import Settings
from booksearch.interfaces.store_provider import IStoreProvider
from booksearch.utils.errors import InvalidStoreResponse, StoreError

logger = structlog.get_logger(logger_name=__name__)

_NDJSON = "application/x-ndjson"


class ElasticsearchStoreProvider(IStoreProvider):
    """Store provider backed by an Elasticsearch cluster over HTTP.

    One ``httpx.AsyncClient`` is created per provider and reused for every
    call; pass *http_client* to inject a preconfigured client (tests use an
    ``httpx.MockTransport``).  Call :meth:`close` on shutdown.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = settings.elasticsearch_url.rstrip("/")
        if http_client is None:
            http_client = httpx.AsyncClient(
                base_url=self._base_url,
                auth=settings.get_basic_auth(),
                headers=settings.get_auth_headers(),
                timeout=settings.elasticsearch_timeout,
                verify=settings.elasticsearch_verify_certs,
            )
        self._client = http_client

    # ------------------------------------------------------------------
    # IStoreProvider implementation
    # ------------------------------------------------------------------

    async def health(self) -> dict[str, Any]:
        response = await self._request("GET", "/_cluster/health")
        return self._json(response)

    async def index_exists(self, index: str) -> bool:
        response = await self._request("HEAD", f"/{index}", allowed_statuses=(404,))
        return response.status_code == 200

    async def create_index(self, index: str) -> None:
        await self._request("PUT", f"/{index}")
        logger.info("es_index_created", index=index)

    async def delete_index(self, index: str) -> None:
        await self._request("DELETE", f"/{index}")
        logger.info("es_index_deleted", index=index)

    async def put_mapping(self, index: str, properties: dict[str, Any]) -> None:
        await self._request("PUT", f"/{index}/_mapping", json={"properties": properties})
        logger.info("es_mapping_applied", index=index, fields=sorted(properties))

    async def bulk(self, index: str, documents: list[dict[str, Any]]) -> dict[str, Any]:
        """Index *documents* with one ``_bulk`` request (one action line per document)."""
        if not documents:
            return {"errors": False, "items": []}

        lines: list[str] = []
        for doc in documents:
            lines.append('{"index":{}}')
            lines.append(json.dumps(doc, ensure_ascii=False))
        payload = ("\n".join(lines) + "\n").encode("utf-8")

        response = await self._request(
            "POST",
            f"/{index}/_bulk",
            content=payload,
            headers={"Content-Type": _NDJSON},
        )
        return self._json(response)

    async def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        response = await self._request("POST", f"/{index}/_search", json=body)
        return self._json(response)

    async def refresh(self, index: str) -> None:
        await self._request("POST", f"/{index}/_refresh")

    async def close(self) -> None:
        await self._client.aclose()

    def get_provider_name(self) -> str:
        return "elasticsearch"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        allowed_statuses: tuple[int, ...] = (),
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request, converting transport and HTTP errors into :class:`StoreError`."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(
                message=f"{method} {path} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code >= 400 and response.status_code not in allowed_statuses:
            raise StoreError(
                message=f"{method} {path} returned {response.status_code}: {self._error_reason(response)}",
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
            )
        return response

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise InvalidStoreResponse(
                message=f"Non-JSON response from {response.request.url.path}",
                provider_name=self.get_provider_name(),
            ) from exc
        if not isinstance(data, dict):
            raise InvalidStoreResponse(
                message=f"Expected a JSON object from {response.request.url.path}",
                provider_name=self.get_provider_name(),
            )
        return data

    @staticmethod
    def _error_reason(response: httpx.Response) -> str:
        """Pull ``error.reason`` out of an Elasticsearch error body when present."""
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return str(error.get("reason") or error.get("type") or error)
        if error:
            return str(error)
        return response.text[:200]
