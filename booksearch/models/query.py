"""Query result models returned by the search and paragraph-range queries."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from booksearch.models.book import ParagraphDocument


class SearchHit(BaseModel):
    """One matching paragraph, optionally with highlighted fragments."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    score: float | None = None
    document: ParagraphDocument
    # Field name -> highlighted fragments, e.g. {"text": ["the <em>whale</em>"]}.
    highlight: dict[str, list[str]] | None = None


class QueryResult(BaseModel):
    """Normalized search response.

    ``total`` is the store's match count, which can be larger than
    ``len(hits)`` because results are paginated.
    """

    model_config = ConfigDict(frozen=True)

    total: int = Field(ge=0)
    relation: Literal["eq", "gte"] = "eq"
    hits: list[SearchHit] = Field(default_factory=list)
