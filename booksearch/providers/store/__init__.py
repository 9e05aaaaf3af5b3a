"""Search-store adapters implementing :class:`~booksearch.interfaces.IStoreProvider`."""

from booksearch.providers.store.elasticsearch_provider import ElasticsearchStoreProvider

__all__ = ["ElasticsearchStoreProvider"]
