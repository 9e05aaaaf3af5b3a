"""Public service surface consumed by the HTTP layer and the CLI.

:class:`LibraryService` bundles the query service, the reload orchestrator
and a health probe behind four calls, all sharing one injected store.
"""

from __future__ import annotations

import structlog

from booksearch.config.settings import Settings
from booksearch.interfaces.store_provider import IStoreProvider
from booksearch.models.ingestion import IngestionReport
from booksearch.models.query import QueryResult
from booksearch.services.ingestion.bulk_loader import BulkLoader
from booksearch.services.ingestion.ingestion_service import IngestionOrchestrator
from booksearch.services.query.query_builder import QueryService
from booksearch.utils.errors import BookSearchError
from booksearch.utils.retry import RetryPolicy, exponential_backoff

logger = structlog.get_logger(logger_name=__name__)

_HEALTHY_STATUSES = frozenset({"green", "yellow"})


class LibraryService:
    """Search, paragraph retrieval, full reload and health check for the library."""

    def __init__(
        self,
        store: IStoreProvider,
        query_service: QueryService,
        orchestrator: IngestionOrchestrator,
    ) -> None:
        self._store = store
        self._query_service = query_service
        self._orchestrator = orchestrator

    @classmethod
    def from_settings(cls, store: IStoreProvider, settings: Settings) -> LibraryService:
        """Wire the default services for *store* from application settings."""
        retry_policy = RetryPolicy(
            max_attempts=settings.connect_max_attempts or None,
            backoff=exponential_backoff(settings.connect_backoff_base, settings.connect_backoff_max),
        )
        orchestrator = IngestionOrchestrator(
            store=store,
            index=settings.index_name,
            books_dir=settings.books_dir,
            loader=BulkLoader(store, settings.index_name, batch_size=settings.bulk_batch_size),
            retry_policy=retry_policy,
            concurrency=settings.ingest_concurrency,
        )
        query_service = QueryService(store, settings.index_name, page_size=settings.search_page_size)
        return cls(store=store, query_service=query_service, orchestrator=orchestrator)

    @property
    def orchestrator(self) -> IngestionOrchestrator:
        return self._orchestrator

    async def search_by_term(self, term: str, offset: int = 0) -> QueryResult:
        return await self._query_service.search_by_term(term, offset)

    async def get_paragraph_range(self, title: str, start: int, end: int) -> QueryResult:
        return await self._query_service.get_paragraph_range(title, start, end)

    async def trigger_reload(self) -> IngestionReport:
        return await self._orchestrator.run_full_reload()

    async def check_health(self) -> bool:
        """Return ``True`` if the store answers with a green or yellow status."""
        try:
            health = await self._store.health()
        except BookSearchError as exc:
            logger.warning("health_check_failed", error=str(exc))
            return False
        status = str(health.get("status", "")).lower()
        logger.debug("health_check", status=status)
        return status in _HEALTHY_STATUSES
