"""Abstract base class for search-store providers.

Defines the contract the ingestion pipeline and the query layer need from
the full-text search engine.  The engine itself is a black box: ranking,
storage and consistency belong to it.  The concrete adapter wraps the
Elasticsearch REST API, but anything that speaks this contract (an
OpenSearch cluster, an in-memory fake in tests) can be injected instead.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


# Concrete implementation: ElasticsearchStoreProvider (booksearch/providers/store/)
class IStoreProvider(ABC):
    """Contract for the document store behind the library index.

    Every call is async.  Transport-level failures are raised as
    :class:`~booksearch.utils.errors.StoreError`; response bodies are
    returned as plain dicts and interpreted by the caller
    (see :mod:`booksearch.services.query.result_normalizer`).
    """

    @abstractmethod
    async def health(self) -> dict[str, Any]:
        """Return the cluster health document (at least a ``status`` key).

        Raises
        ------
        booksearch.utils.errors.StoreError
            If the store cannot be reached.
        """

    @abstractmethod
    async def index_exists(self, index: str) -> bool:
        """Return ``True`` if *index* exists."""

    @abstractmethod
    async def create_index(self, index: str) -> None:
        """Create an empty *index*."""

    @abstractmethod
    async def delete_index(self, index: str) -> None:
        """Delete *index* and every document in it."""

    @abstractmethod
    async def put_mapping(self, index: str, properties: dict[str, Any]) -> None:
        """Apply a field mapping (``{"field": {"type": ...}}``) to *index*."""

    @abstractmethod
    async def bulk(self, index: str, documents: list[dict[str, Any]]) -> dict[str, Any]:
        """Index *documents* in a single bulk request.

        Returns
        -------
        dict
            The raw bulk response: ``{"errors": bool, "items": [...]}`` with
            one item per document, in submission order.

        Raises
        ------
        booksearch.utils.errors.StoreError
            If the request as a whole fails.
        """

    @abstractmethod
    async def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        """Run a query DSL *body* against *index* and return the raw response."""

    @abstractmethod
    async def refresh(self, index: str) -> None:
        """Make recently written documents visible to search."""

    @abstractmethod
    async def close(self) -> None:
        """Release network resources held by the provider."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"elasticsearch"``."""
