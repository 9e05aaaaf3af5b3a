"""booksearch domain models - re-exports all public model classes.

    - book.py       - ParsedBook, ParagraphDocument, MetadataField, index mapping
    - ingestion.py  - reload phases, per-file results, the aggregated report
    - query.py      - normalized query results
"""

from __future__ import annotations

from booksearch.models.book import (
    NOT_AVAILABLE,
    PARAGRAPH_MAPPING,
    UNKNOWN_AUTHOR,
    MetadataField,
    ParagraphDocument,
    ParsedBook,
)
from booksearch.models.ingestion import (
    BatchFailure,
    DocumentFailure,
    FileFailure,
    FileIngestionResult,
    IngestionReport,
    ReloadPhase,
)
from booksearch.models.query import QueryResult, SearchHit

__all__ = [
    "NOT_AVAILABLE",
    "PARAGRAPH_MAPPING",
    "UNKNOWN_AUTHOR",
    "BatchFailure",
    "DocumentFailure",
    "FileFailure",
    "FileIngestionResult",
    "IngestionReport",
    "MetadataField",
    "ParagraphDocument",
    "ParsedBook",
    "QueryResult",
    "ReloadPhase",
    "SearchHit",
]
