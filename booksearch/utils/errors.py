"""Custom exception hierarchy for booksearch.

All application exceptions inherit from :class:`BookSearchError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "elasticsearch") caused the failure.

The hierarchy is organized by pipeline domain:

    BookSearchError  (base -- catch-all for any booksearch error)
    +-- MetadataMissing          (parse: required header field absent)
    +-- MalformedBookBoundary    (parse: START/END markers absent)
    +-- FileDiscoveryFailure     (reload: source directory absent)
    +-- StoreError               (one store call failed at transport level)
    +-- StoreUnreachable         (reload: store never became healthy)
    +-- IndexResetFailure        (reload: delete/create/mapping failed)
    +-- BulkWriteFailure         (load: a whole bulk batch failed)
    +-- DocumentRejected         (load: one bulk item was rejected)
    +-- InvalidStoreResponse     (query: response lacks the hits structure)
    +-- ConfigurationError       (startup / missing config)

Only the reload-fatal errors and query errors ever reach the caller.
``BulkWriteFailure`` and ``DocumentRejected`` are recorded inside the
ingestion report rather than raised past the bulk loader.
"""

from __future__ import annotations


class BookSearchError(Exception):
    """Base exception for all booksearch errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[elasticsearch] Connection refused``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Parse errors
# ---------------------------------------------------------------------------

class MetadataMissing(BookSearchError):
    """Raised when a required header field (e.g. ``Title``) is absent."""

    def __init__(self, field: str, source: str) -> None:
        self.field = field
        self.source = source
        super().__init__(message=f"Required metadata field '{field}' missing in {source}")


class MalformedBookBoundary(BookSearchError):
    """Raised when the START/END OF PROJECT GUTENBERG EBOOK markers cannot be located."""

    def __init__(self, source: str, detail: str = "start/end markers not found") -> None:
        self.source = source
        super().__init__(message=f"Malformed book boundary in {source}: {detail}")


class FileDiscoveryFailure(BookSearchError):
    """Raised when the books source directory does not exist."""

    def __init__(self, directory: str) -> None:
        self.directory = directory
        super().__init__(message=f"Books directory not found: {directory}")


# ---------------------------------------------------------------------------
# Store errors
# ---------------------------------------------------------------------------

class StoreError(BookSearchError):
    """Raised when a single call to the search store fails (transport or HTTP error)."""

    def __init__(
        self,
        message: str = "Search store request failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message=message, provider_name=provider_name)


class StoreUnreachable(BookSearchError):
    """Raised when the store stays unreachable after the retry policy is exhausted."""

    def __init__(
        self,
        message: str = "Search store is unreachable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IndexResetFailure(BookSearchError):
    """Raised when deleting, recreating, or mapping the target index fails."""

    def __init__(
        self,
        message: str = "Index reset failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class BulkWriteFailure(BookSearchError):
    """A whole bulk batch failed.  Recorded in the report, never raised past the loader."""

    def __init__(self, start_location: int, end_location: int, cause: str) -> None:
        self.start_location = start_location
        self.end_location = end_location
        super().__init__(
            message=f"Bulk write of locations {start_location}-{end_location} failed: {cause}"
        )


class DocumentRejected(BookSearchError):
    """A single bulk item was rejected by the store.  Recorded, never raised past the loader."""

    def __init__(self, location: int, error_type: str, reason: str) -> None:
        self.location = location
        self.error_type = error_type
        super().__init__(message=f"Document at location {location} rejected ({error_type}): {reason}")


class InvalidStoreResponse(BookSearchError):
    """Raised when a store response lacks the structure a query result needs."""

    def __init__(
        self,
        message: str = "Search store returned an invalid response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(BookSearchError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
