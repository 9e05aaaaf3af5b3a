"""Orchestrator for a full reload of the library index.

Pipeline stages: **connect -> reset -> discover -> parse & load -> refresh**.

:class:`IngestionOrchestrator` coordinates the store, the
:class:`BookParser` and the :class:`BulkLoader` without any of them knowing
about each other, and walks the :class:`ReloadPhase` state machine:

    IDLE → CONNECTING_TO_STORE → RESETTING_INDEX → DISCOVERING_FILES →
    PARSING_AND_LOADING → DONE

A failure while connecting, resetting or discovering is fatal: the phase
becomes ``FAILED`` and the error propagates to the caller.  Once loading
has started, a broken file is recorded in the report and the next file is
processed.

All dependencies are injected via the constructor, so tests can pass an
in-memory store and a zero-wait retry policy.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

import structlog

from booksearch.interfaces.store_provider import IStoreProvider
from booksearch.models.book import PARAGRAPH_MAPPING
from booksearch.models.ingestion import (
    FileFailure,
    FileIngestionResult,
    IngestionReport,
    ReloadPhase,
)
from booksearch.services.ingestion.book_parser import BookParser
from booksearch.services.ingestion.bulk_loader import BulkLoader
from booksearch.utils.errors import (
    BookSearchError,
    FileDiscoveryFailure,
    IndexResetFailure,
    StoreUnreachable,
)
from booksearch.utils.retry import RetryPolicy

logger = structlog.get_logger(logger_name=__name__)

_UNHEALTHY_STATUSES = frozenset({"red"})


class IngestionOrchestrator:
    """Drives a full reload: reset the index and load every book in the source directory.

    Parameters
    ----------
    store:
        The search store (shared with the query layer).
    index:
        Name of the index to rebuild.
    books_dir:
        Directory scanned for ``*.txt`` book files.
    parser:
        Parses one file into a :class:`ParsedBook`.
    loader:
        Writes a parsed book to *index*; built from *store* when omitted.
    retry_policy:
        How long to wait for the store before giving up.
    concurrency:
        Maximum number of files parsed and loaded at the same time.
    """

    def __init__(
        self,
        store: IStoreProvider,
        index: str,
        books_dir: str | Path,
        parser: BookParser | None = None,
        loader: BulkLoader | None = None,
        retry_policy: RetryPolicy | None = None,
        concurrency: int = 1,
    ) -> None:
        self._store = store
        self._index = index
        self._books_dir = Path(books_dir)
        self._parser = parser or BookParser()
        self._loader = loader or BulkLoader(store, index)
        self._retry_policy = retry_policy or RetryPolicy()
        self._concurrency = max(1, concurrency)
        self._phase = ReloadPhase.IDLE
        # One reload at a time per orchestrator; a second caller waits.
        self._lock = asyncio.Lock()

    @property
    def books_dir(self) -> Path:
        return self._books_dir

    @property
    def phase(self) -> ReloadPhase:
        return self._phase

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run_full_reload(self) -> IngestionReport:
        """Rebuild the index from scratch and return the aggregated report.

        Raises
        ------
        StoreUnreachable
            If the store never reports healthy within the retry policy.
        IndexResetFailure
            If the index cannot be deleted, recreated or mapped.
        FileDiscoveryFailure
            If the books directory does not exist.
        """
        async with self._lock:
            start = time.monotonic()
            self._set_phase(ReloadPhase.IDLE)
            try:
                self._set_phase(ReloadPhase.CONNECTING_TO_STORE)
                await self.wait_for_store()

                self._set_phase(ReloadPhase.RESETTING_INDEX)
                await self.reset_index()

                self._set_phase(ReloadPhase.DISCOVERING_FILES)
                files = self.discover_files()
            except BookSearchError as exc:
                self._set_phase(ReloadPhase.FAILED, error=str(exc))
                raise

            self._set_phase(ReloadPhase.PARSING_AND_LOADING)
            outcomes = await self._process_files(files)

            await self._refresh()

            file_results = [o for o in outcomes if isinstance(o, FileIngestionResult)]
            files_failed = [o for o in outcomes if isinstance(o, FileFailure)]
            report = IngestionReport(
                index=self._index,
                files_discovered=len(files),
                file_results=file_results,
                files_failed=files_failed,
                elapsed=round(time.monotonic() - start, 3),
            )

            self._set_phase(ReloadPhase.DONE)
            logger.info("reload_complete", index=self._index, time_s=report.elapsed, **report.summary())
            return report

    async def wait_for_store(self) -> None:
        """Block until the store answers a health check, per the retry policy."""

        async def _check() -> None:
            health = await self._store.health()
            status = str(health.get("status", "")).lower()
            if status in _UNHEALTHY_STATUSES:
                raise StoreUnreachable(
                    message=f"Cluster health is {status}",
                    provider_name=self._store.get_provider_name(),
                )
            logger.info("store_connected", status=status or "unknown")

        try:
            await self._retry_policy.run(_check, description="store_health")
        except StoreUnreachable:
            raise
        except Exception as exc:
            raise StoreUnreachable(
                message=f"Store not reachable: {exc}",
                provider_name=self._store.get_provider_name(),
            ) from exc

    async def reset_index(self) -> None:
        """Delete the index if present, recreate it and apply the paragraph mapping."""
        try:
            if await self._store.index_exists(self._index):
                await self._store.delete_index(self._index)
            await self._store.create_index(self._index)
            await self._store.put_mapping(self._index, PARAGRAPH_MAPPING)
        except BookSearchError as exc:
            raise IndexResetFailure(
                message=f"Could not reset index '{self._index}': {exc}",
                provider_name=self._store.get_provider_name(),
            ) from exc
        logger.info("index_reset", index=self._index)

    def discover_files(self) -> list[Path]:
        """Return every ``*.txt`` file in the books directory, sorted by name."""
        if not self._books_dir.is_dir():
            raise FileDiscoveryFailure(str(self._books_dir))
        files = sorted(p for p in self._books_dir.glob("*.txt") if p.is_file())
        logger.info("books_discovered", books_dir=str(self._books_dir), count=len(files))
        return files

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _process_files(
        self, files: list[Path]
    ) -> list[FileIngestionResult | FileFailure]:
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _guarded(path: Path) -> FileIngestionResult | FileFailure:
            async with semaphore:
                return await self._process_file(path)

        # gather() keeps the input order, so the report lists files in name order.
        return list(await asyncio.gather(*(_guarded(p) for p in files)))

    async def _process_file(self, path: Path) -> FileIngestionResult | FileFailure:
        """Parse and load one file.  Any error is recorded, never raised."""
        logger.info("book_processing", file=path.name)
        try:
            book = self._parser.parse(path)
            return await self._loader.load(book)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "reload_file_failed",
                file=path.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return FileFailure(file=str(path), error_type=type(exc).__name__, reason=str(exc))

    async def _refresh(self) -> None:
        try:
            await self._store.refresh(self._index)
        except BookSearchError as exc:
            logger.warning("index_refresh_failed", index=self._index, error=str(exc))

    def _set_phase(self, phase: ReloadPhase, **context: str) -> None:
        previous = self._phase
        self._phase = phase
        logger.info("reload_phase", index=self._index, previous=previous.value, phase=phase.value, **context)
