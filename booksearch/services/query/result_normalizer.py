"""Translation of raw store search responses into :class:`QueryResult`.

This is the single place that knows about response shape differences
between store versions:

* ``hits.total`` is a bare integer on old clusters and a
  ``{"value": n, "relation": "eq" | "gte"}`` object on newer ones.
* Some clients wrap the payload in a ``body`` key (``{"body": {...}}``).

A response without a usable ``hits`` structure is an error, never an empty
result; an empty ``hits.hits`` list with ``total = 0`` is a valid result.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from booksearch.models.book import ParagraphDocument
from booksearch.models.query import QueryResult, SearchHit
from booksearch.utils.errors import InvalidStoreResponse


def normalize_search_response(raw: Any) -> QueryResult:
    """Return the ``{total, hits}`` view of a raw search response.

    Raises
    ------
    InvalidStoreResponse
        If the response, its ``hits`` object, ``hits.hits`` or
        ``hits.total`` is missing or malformed, or a hit has no valid
        ``_source`` document or carries a malformed ``_id``, ``_score`` or
        ``highlight``.
    """
    payload = _unwrap(raw)

    hits_obj = payload.get("hits")
    if not isinstance(hits_obj, dict):
        raise InvalidStoreResponse("Search response has no 'hits' object")

    raw_hits = hits_obj.get("hits")
    if not isinstance(raw_hits, list):
        raise InvalidStoreResponse("Search response has no 'hits.hits' list")

    total, relation = extract_total(hits_obj.get("total"))
    return QueryResult(
        total=total,
        relation=relation,
        hits=[_to_hit(h) for h in raw_hits],
    )


def extract_total(raw_total: Any) -> tuple[int, str]:
    """Return ``(count, relation)`` from either total representation."""
    # bool is an int subclass; a boolean total is never valid.
    if isinstance(raw_total, int) and not isinstance(raw_total, bool):
        value, relation = raw_total, "eq"
    elif isinstance(raw_total, dict):
        value = raw_total.get("value")
        relation = raw_total.get("relation", "eq")
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidStoreResponse("Search response 'hits.total.value' is not an integer")
        if relation not in ("eq", "gte"):
            raise InvalidStoreResponse(f"Unknown 'hits.total.relation': {relation!r}")
    else:
        raise InvalidStoreResponse("Search response has no usable 'hits.total'")

    if value < 0:
        raise InvalidStoreResponse("Search response 'hits.total' is negative")
    return value, relation


def _unwrap(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise InvalidStoreResponse("Search response is not a JSON object")
    if "hits" not in raw and isinstance(raw.get("body"), dict):
        return raw["body"]
    return raw


def _to_hit(raw_hit: Any) -> SearchHit:
    if not isinstance(raw_hit, dict):
        raise InvalidStoreResponse("Search hit is not an object")
    source = raw_hit.get("_source")
    if not isinstance(source, dict):
        raise InvalidStoreResponse("Search hit has no '_source' document")

    try:
        document = ParagraphDocument.model_validate(source)
    except ValidationError as exc:
        raise InvalidStoreResponse(f"Search hit '_source' is not a paragraph document: {exc}") from exc

    highlight = raw_hit.get("highlight")
    if highlight is not None and not isinstance(highlight, dict):
        raise InvalidStoreResponse("Search hit 'highlight' is not an object")

    try:
        return SearchHit(
            id=raw_hit.get("_id"),
            score=raw_hit.get("_score"),
            document=document,
            highlight=highlight,
        )
    except ValidationError as exc:
        raise InvalidStoreResponse(f"Search hit is malformed: {exc}") from exc
