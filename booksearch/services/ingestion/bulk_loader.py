"""Batched bulk loading of parsed books into the search index.

Every paragraph becomes one :class:`ParagraphDocument` whose ``location``
is its index in the book.  Documents are written in batches (500 by
default) to bound request size and memory; the last, possibly short, batch
is always flushed.

Failure accounting is per item and per batch:

* The store rejects some items of a batch (``errors: true``) -> each
  rejected item is recorded as a :class:`DocumentFailure` with its title,
  location and a text snippet.  The accepted items stay indexed.
* The bulk call itself fails (connection error, HTTP 4xx/5xx, malformed
  response) -> the batch is recorded as a :class:`BatchFailure` with its
  location range.

Neither case stops the remaining batches.  Both are logged.
"""

from __future__ import annotations

import time
from typing import Any

import structlog

from booksearch.interfaces.store_provider import IStoreProvider
from booksearch.models.book import ParagraphDocument, ParsedBook
from booksearch.models.ingestion import BatchFailure, DocumentFailure, FileIngestionResult
from booksearch.utils.errors import BookSearchError, BulkWriteFailure, DocumentRejected

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_BATCH_SIZE = 500
_SNIPPET_LENGTH = 80


class BulkLoader:
    """Writes a :class:`ParsedBook` to the index in bounded bulk batches.

    Parameters
    ----------
    store:
        The search store (injected).
    index:
        Name of the target index.
    batch_size:
        Maximum number of documents per bulk request.
    """

    def __init__(
        self,
        store: IStoreProvider,
        index: str,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._store = store
        self._index = index
        self._batch_size = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def load(self, book: ParsedBook) -> FileIngestionResult:
        """Index every paragraph of *book* and return the per-file result.

        Batches are submitted sequentially in location order.
        """
        start = time.monotonic()
        documents = book.to_documents()

        indexed = 0
        batches = 0
        document_failures: list[DocumentFailure] = []
        batch_failures: list[BatchFailure] = []

        for offset in range(0, len(documents), self._batch_size):
            batch = documents[offset : offset + self._batch_size]
            batches += 1
            first, last = batch[0].location, batch[-1].location
            logger.debug(
                "bulk_batch_submitting",
                title=book.title,
                start_location=first,
                end_location=last,
                size=len(batch),
            )

            try:
                response = await self._store.bulk(
                    self._index, [doc.model_dump() for doc in batch]
                )
            except BookSearchError as exc:
                batch_failures.append(self._batch_failure(book.title, first, last, str(exc)))
                continue

            items = response.get("items")
            if not isinstance(items, list):
                batch_failures.append(
                    self._batch_failure(book.title, first, last, "bulk response has no items list")
                )
                continue

            rejected = self._rejected_items(book.title, batch, items) if response.get("errors") else []
            document_failures.extend(rejected)
            indexed += len(batch) - len(rejected)

        elapsed = time.monotonic() - start
        result = FileIngestionResult(
            file=book.source,
            title=book.title,
            paragraphs=len(documents),
            documents_indexed=indexed,
            batches_submitted=batches,
            document_failures=document_failures,
            batch_failures=batch_failures,
            ingestion_time=round(elapsed, 3),
        )
        logger.info(
            "book_indexed",
            title=book.title,
            paragraphs=len(documents),
            indexed=indexed,
            batches=batches,
            rejected=len(document_failures),
            failed_batches=len(batch_failures),
            time_s=result.ingestion_time,
        )
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _rejected_items(
        title: str,
        batch: list[ParagraphDocument],
        items: list[Any],
    ) -> list[DocumentFailure]:
        """Match bulk response items to the batch by position and collect the rejected ones."""
        failures: list[DocumentFailure] = []
        for position, item in enumerate(items):
            if position >= len(batch) or not isinstance(item, dict):
                continue
            # Each item is keyed by its action: {"index": {...}} / {"create": {...}}.
            action = next(iter(item.values()), None)
            if not isinstance(action, dict) or not action.get("error"):
                continue

            doc = batch[position]
            error = action["error"]
            if isinstance(error, dict):
                error_type = str(error.get("type", "error"))
                reason = str(error.get("reason", error))
            else:
                error_type, reason = "error", str(error)

            rejected = DocumentRejected(doc.location, error_type, reason)
            failures.append(
                DocumentFailure(
                    title=title,
                    location=doc.location,
                    snippet=doc.text[:_SNIPPET_LENGTH],
                    reason=rejected.message,
                )
            )
            logger.warning(
                "bulk_document_rejected",
                title=title,
                location=doc.location,
                error_type=error_type,
                reason=reason,
                snippet=doc.text[:_SNIPPET_LENGTH],
            )
        return failures

    @staticmethod
    def _batch_failure(title: str, first: int, last: int, cause: str) -> BatchFailure:
        failure = BulkWriteFailure(first, last, cause)
        logger.error(
            "bulk_batch_failed",
            title=title,
            start_location=first,
            end_location=last,
            error=cause,
        )
        return BatchFailure(
            title=title,
            start_location=first,
            end_location=last,
            reason=failure.message,
        )
