"""FastAPI routes for the book library.

Four GET endpoints mirror the library service: a store health probe, a
full reload, fuzzy term search and a paragraph range lookup.  The
:class:`LibraryService` is resolved from ``app.state`` via ``Depends``
using the ``Annotated`` pattern.

# Endpoint        Method  Description
# /health         GET     Store reachable with a green/yellow status
# /load-data      GET     Drop, recreate and repopulate the index
# /search         GET     Fuzzy full-text search, 9 hits per page
# /paragraphs     GET     Ordered paragraphs [start, end) of one book
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from booksearch.api.schemas import HealthResponse, ReloadResponse
from booksearch.models.query import QueryResult
from booksearch.services.library_service import LibraryService
from booksearch.utils.errors import BookSearchError

logger = structlog.get_logger(logger_name=__name__)

router = APIRouter()


def _get_library_service(request: Request) -> LibraryService:
    """Return the library service from application state."""
    return request.app.state.library_service


LibraryDep = Annotated[LibraryService, Depends(_get_library_service)]


@router.get("/health", response_model=HealthResponse)
async def health(library: LibraryDep) -> HealthResponse | JSONResponse:
    """Report whether the search store is reachable and healthy."""
    if await library.check_health():
        return HealthResponse(success=True, message="Service is healthy")
    body = HealthResponse(success=False, error="Search store is unhealthy or unreachable")
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


@router.get("/load-data", response_model=ReloadResponse)
async def load_data(library: LibraryDep) -> ReloadResponse | JSONResponse:
    """Run a full reload and return its report.

    Per-file and per-document failures are part of a successful response;
    only a run-level failure (store unreachable, reset or discovery error)
    produces HTTP 500.
    """
    try:
        report = await library.trigger_reload()
    except BookSearchError as exc:
        logger.error("load_data_failed", error_type=type(exc).__name__, error=str(exc))
        body = ReloadResponse(success=False, message=exc.message)
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

    return ReloadResponse(
        success=True,
        message="Data loaded successfully",
        summary=report.summary(),
        report=report.model_dump(mode="json"),
    )


@router.get("/search", response_model=QueryResult)
async def search(
    library: LibraryDep,
    term: Annotated[str, Query(min_length=1, max_length=60, pattern=r"\S")],
    offset: Annotated[int, Query(ge=0)] = 0,
) -> QueryResult:
    """Fuzzy full-text search over paragraph text.

    A term made only of whitespace is rejected with 422.
    """
    return await library.search_by_term(term, offset)


@router.get("/paragraphs", response_model=QueryResult)
async def paragraphs(
    library: LibraryDep,
    book_title: Annotated[str, Query(alias="bookTitle", min_length=1, max_length=256)],
    start: Annotated[int, Query(ge=0)] = 0,
    end: Annotated[int, Query(ge=1)] = 10,
) -> QueryResult:
    """Return paragraphs ``start`` (inclusive) to ``end`` (exclusive) of one book.

    ``total`` counts the matches in ``[start, end)`` only.
    """
    if end <= start:
        raise HTTPException(status_code=422, detail="end must be greater than start")
    return await library.get_paragraph_range(book_title, start, end)
