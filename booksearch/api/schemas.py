"""Pydantic response schemas for the booksearch API.

Search and paragraph endpoints return :class:`~booksearch.models.query.QueryResult`
directly; the schemas here cover the operational endpoints and errors.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response of ``GET /health``."""

    success: bool
    message: str | None = None
    error: str | None = None


class ReloadResponse(BaseModel):
    """Response of ``GET /load-data``: summary counts plus the full report."""

    success: bool
    message: str
    summary: dict[str, int] = Field(default_factory=dict)
    report: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Structured error body returned when an application error escapes a route."""

    success: bool = False
    error: str
    detail: str
