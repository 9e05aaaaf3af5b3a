"""Ingestion run models: per-file results and the aggregated reload report.

Failures are recorded as data rather than raised.  A rejected document or a
failed bulk batch never aborts its book, and a failed book never aborts the
reload; all of them end up in the :class:`IngestionReport` returned to the
caller of ``run_full_reload()``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# ReloadPhase - the state machine of a full reload.
# ---------------------------------------------------------------------------
class ReloadPhase(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Phases of a full reload.

        IDLE → CONNECTING_TO_STORE → RESETTING_INDEX → DISCOVERING_FILES →
        PARSING_AND_LOADING → DONE

    ``FAILED`` is reachable from the three phases before loading starts.
    Once files are being loaded, individual failures are recorded instead.
    """

    IDLE = "IDLE"
    CONNECTING_TO_STORE = "CONNECTING_TO_STORE"
    RESETTING_INDEX = "RESETTING_INDEX"
    DISCOVERING_FILES = "DISCOVERING_FILES"
    PARSING_AND_LOADING = "PARSING_AND_LOADING"
    DONE = "DONE"
    FAILED = "FAILED"


class DocumentFailure(BaseModel):
    """One bulk item the store rejected (e.g. a mapping mismatch)."""

    model_config = ConfigDict(frozen=True)

    title: str
    location: int = Field(ge=0)
    snippet: str = Field(description="First characters of the rejected paragraph.")
    reason: str


class BatchFailure(BaseModel):
    """A bulk request that failed as a whole (transport or request-level error)."""

    model_config = ConfigDict(frozen=True)

    title: str
    start_location: int = Field(ge=0)
    end_location: int = Field(ge=0, description="Inclusive location of the last document in the batch.")
    reason: str


class FileFailure(BaseModel):
    """A source file that could not be parsed or loaded."""

    model_config = ConfigDict(frozen=True)

    file: str
    error_type: str
    reason: str


# ---------------------------------------------------------------------------
# FileIngestionResult - BulkLoader output for one book.
# ---------------------------------------------------------------------------
class FileIngestionResult(BaseModel):
    """Outcome of loading a single parsed book into the index."""

    model_config = ConfigDict(frozen=True)

    file: str
    title: str
    paragraphs: int = Field(default=0, ge=0)
    documents_indexed: int = Field(default=0, ge=0)
    batches_submitted: int = Field(default=0, ge=0)
    document_failures: list[DocumentFailure] = Field(default_factory=list)
    batch_failures: list[BatchFailure] = Field(default_factory=list)
    ingestion_time: float = Field(default=0.0, ge=0.0)

    @property
    def ok(self) -> bool:
        return not self.document_failures and not self.batch_failures


# ---------------------------------------------------------------------------
# IngestionReport - aggregated result of a full reload.
# ---------------------------------------------------------------------------
class IngestionReport(BaseModel):
    """Summary of one full reload.  Not persisted; returned and logged."""

    model_config = ConfigDict(frozen=True)

    index: str
    files_discovered: int = Field(default=0, ge=0)
    file_results: list[FileIngestionResult] = Field(default_factory=list)
    files_failed: list[FileFailure] = Field(default_factory=list)
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
    elapsed: float = Field(default=0.0, ge=0.0)

    @property
    def files_processed(self) -> int:
        return len(self.file_results)

    @property
    def documents_indexed(self) -> int:
        return sum(r.documents_indexed for r in self.file_results)

    @property
    def document_failures(self) -> list[DocumentFailure]:
        return [f for r in self.file_results for f in r.document_failures]

    @property
    def batch_failures(self) -> list[BatchFailure]:
        return [f for r in self.file_results for f in r.batch_failures]

    def summary(self) -> dict[str, int]:
        """Aggregate counts suitable for a log line or an API response."""
        return {
            "files_discovered": self.files_discovered,
            "files_processed": self.files_processed,
            "files_failed": len(self.files_failed),
            "documents_indexed": self.documents_indexed,
            "document_failures": len(self.document_failures),
            "batch_failures": len(self.batch_failures),
        }
