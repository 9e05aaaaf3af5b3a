"""Query construction and execution for the library index.

Two query shapes are supported:

1. **Term search** -- full-text ``match`` on the paragraph text with every
   term required (``operator: and``) and the store's automatic fuzziness,
   paginated by ``from``/``size`` and highlighted on ``text``.
2. **Paragraph range** -- the paragraphs of one book, by exact title, whose
   ``location`` lies in ``[start, end)``, in reading order.

The ``build_*`` functions only produce query DSL bodies; :class:`QueryService`
sends them through the injected store and normalizes the responses.
"""

from __future__ import annotations

from typing import Any

import structlog

from booksearch.interfaces.store_provider import IStoreProvider
from booksearch.models.query import QueryResult
from booksearch.services.query.result_normalizer import normalize_search_response

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_PAGE_SIZE = 9


def build_term_query(term: str, offset: int = 0, page_size: int = DEFAULT_PAGE_SIZE) -> dict[str, Any]:
    """Return the fuzzy, AND-combined match query for *term*, starting at *offset*."""
    if not term or not term.strip():
        raise ValueError("term must be a non-empty string")
    if offset < 0:
        raise ValueError("offset must be >= 0")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    return {
        "from": offset,
        "size": page_size,
        "query": {
            "match": {
                "text": {
                    "query": term,
                    "operator": "and",
                    "fuzziness": "auto",
                }
            }
        },
        "highlight": {"fields": {"text": {}}},
    }


def build_paragraph_range_query(title: str, start: int, end: int) -> dict[str, Any]:
    """Return the query for paragraphs ``start <= location < end`` of *title*.

    The range is half-open so that the match count agrees with the page size
    of ``end - start``.
    """
    if not title:
        raise ValueError("title must be a non-empty string")
    if start < 0:
        raise ValueError("start must be >= 0")
    if end <= start:
        raise ValueError("end must be greater than start")

    return {
        "size": end - start,
        "sort": [{"location": "asc"}],
        "query": {
            "bool": {
                "filter": [
                    {"term": {"title": title}},
                    {"range": {"location": {"gte": start, "lt": end}}},
                ]
            }
        },
    }


class QueryService:
    """Runs the two supported queries against the library index.

    Store failures (:class:`~booksearch.utils.errors.StoreError`) and
    malformed responses (:class:`~booksearch.utils.errors.InvalidStoreResponse`)
    propagate; a query never returns a partially-populated result.

    Parameters
    ----------
    store:
        The search store (injected, shared with ingestion).
    index:
        Name of the index to query.
    page_size:
        Number of hits per page of term search.
    """

    def __init__(
        self,
        store: IStoreProvider,
        index: str,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._store = store
        self._index = index
        self._page_size = page_size

    async def search_by_term(self, term: str, offset: int = 0) -> QueryResult:
        """Fuzzy full-text search; one page of up to ``page_size`` highlighted hits."""
        body = build_term_query(term, offset, self._page_size)
        raw = await self._store.search(self._index, body)
        result = normalize_search_response(raw)
        logger.info(
            "term_search",
            term=term,
            offset=offset,
            total=result.total,
            returned=len(result.hits),
        )
        return result

    async def get_paragraph_range(self, title: str, start: int, end: int) -> QueryResult:
        """Paragraphs ``start <= location < end`` of the book *title*, in reading order."""
        body = build_paragraph_range_query(title, start, end)
        raw = await self._store.search(self._index, body)
        result = normalize_search_response(raw)
        logger.info(
            "paragraph_range",
            title=title,
            start=start,
            end=end,
            returned=len(result.hits),
        )
        return result
