"""Query layer: query DSL construction and response normalization."""

from booksearch.services.query.query_builder import (
    QueryService,
    build_paragraph_range_query,
    build_term_query,
)
from booksearch.services.query.result_normalizer import normalize_search_response

__all__ = [
    "QueryService",
    "build_paragraph_range_query",
    "build_term_query",
    "normalize_search_response",
]
