# =============================================================================
# booksearch/cli/library.py - Library management CLI
# =============================================================================
#
# Operator tool for the book index.  Uses the same LibraryService as the
# HTTP API, built against the Elasticsearch store from Settings.
#
# Supported subcommands:
#
#   reload      - Drop, recreate and repopulate the index from a books dir
#   health      - Probe the store (exit 1 unless green/yellow)
#   search      - Fuzzy term search, one page of 9 hits
#   paragraphs  - Ordered paragraph range [start, end) of one book
#
# Usage examples:
#   python -m booksearch.cli reload --books-dir ./books
#   python -m booksearch.cli search "whale" --offset 9
#   python -m booksearch.cli paragraphs "Moby Dick" --start 10 --end 15
# =============================================================================

"""Command-line interface for reloading and querying the book index."""

from __future__ import annotations

import argparse
import asyncio
import sys

from booksearch.config.settings import Settings
from booksearch.models.ingestion import IngestionReport
from booksearch.models.query import QueryResult
from booksearch.providers.store.elasticsearch_provider import ElasticsearchStoreProvider
from booksearch.services.library_service import LibraryService
from booksearch.utils.errors import BookSearchError
from booksearch.utils.logging import configure_logging

_SNIPPET_LENGTH = 120


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _print_report(report: IngestionReport) -> None:
    summary = report.summary()
    print("\nReload complete:")
    print(f"  Index:             {report.index}")
    print(f"  Files discovered:  {summary['files_discovered']}")
    print(f"  Files processed:   {summary['files_processed']}")
    print(f"  Files failed:      {summary['files_failed']}")
    print(f"  Paragraphs loaded: {summary['documents_indexed']}")
    print(f"  Rejected docs:     {summary['document_failures']}")
    print(f"  Failed batches:    {summary['batch_failures']}")
    print(f"  Time:              {report.elapsed:.2f}s")

    for failure in report.files_failed:
        print(f"  ! {failure.file}: {failure.error_type}: {failure.reason}")
    for doc in report.document_failures:
        print(f"  ! {doc.title} #{doc.location}: {doc.reason}")
    for batch in report.batch_failures:
        print(f"  ! {batch.title} [{batch.start_location}..{batch.end_location}]: {batch.reason}")


def _print_hits(result: QueryResult) -> None:
    qualifier = "+" if result.relation == "gte" else ""
    print(f"{result.total}{qualifier} matches, showing {len(result.hits)}")
    for hit in result.hits:
        doc = hit.document
        text = doc.text
        if hit.highlight and hit.highlight.get("text"):
            text = " ... ".join(hit.highlight["text"])
        if len(text) > _SNIPPET_LENGTH:
            text = text[:_SNIPPET_LENGTH] + "..."
        print(f"\n[{doc.title} #{doc.location}] {doc.author}")
        print(f"  {text}")


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_reload(service: LibraryService) -> int:
    print(f"Reloading index from: {service.orchestrator.books_dir}")
    report = await service.trigger_reload()
    _print_report(report)
    return 0


async def _handle_health(service: LibraryService) -> int:
    if await service.check_health():
        print("Search store is healthy.")
        return 0
    print("Search store is unhealthy or unreachable.", file=sys.stderr)
    return 1


async def _handle_search(args: argparse.Namespace, service: LibraryService) -> int:
    result = await service.search_by_term(args.term, args.offset)
    _print_hits(result)
    return 0


async def _handle_paragraphs(args: argparse.Namespace, service: LibraryService) -> int:
    if args.end <= args.start:
        print("Error: --end must be greater than --start", file=sys.stderr)
        return 1
    result = await service.get_paragraph_range(args.title, args.start, args.end)
    _print_hits(result)
    return 0


async def _dispatch(args: argparse.Namespace, service: LibraryService) -> int:
    """Run the handler for ``args.command``; application and argument errors exit with 1."""
    try:
        if args.command == "reload":
            return await _handle_reload(service)
        if args.command == "health":
            return await _handle_health(service)
        if args.command == "search":
            return await _handle_search(args, service)
        if args.command == "paragraphs":
            return await _handle_paragraphs(args, service)
    except (BookSearchError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"Error: unknown command {args.command!r}", file=sys.stderr)
    return 1


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    store = ElasticsearchStoreProvider(settings=app_settings)
    try:
        service = LibraryService.from_settings(store, app_settings)
        return await _dispatch(args, service)
    finally:
        await store.close()


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the library CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m booksearch.cli",
        description="Load and query the booksearch paragraph index.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Library commands")

    # -- reload --
    reload_parser = subparsers.add_parser("reload", help="Rebuild the index from a books directory")
    reload_parser.add_argument(
        "--books-dir",
        dest="books_dir",
        default=None,
        help="Directory of .txt books (default: BOOKS_DIR setting)",
    )

    # -- health --
    subparsers.add_parser("health", help="Check search store health")

    # -- search --
    search_parser = subparsers.add_parser("search", help="Fuzzy full-text search")
    search_parser.add_argument("term", help="Search term")
    search_parser.add_argument("--offset", type=int, default=0, help="Result offset (default: 0)")

    # -- paragraphs --
    range_parser = subparsers.add_parser("paragraphs", help="Print a range of paragraphs")
    range_parser.add_argument("title", help="Exact book title")
    range_parser.add_argument("--start", type=int, default=0, help="First location (default: 0)")
    range_parser.add_argument("--end", type=int, default=10, help="Location after the last (default: 10)")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if getattr(args, "offset", 0) < 0 or getattr(args, "start", 0) < 0:
        print("Error: offsets must be non-negative", file=sys.stderr)
        return 1

    app_settings = Settings()
    if getattr(args, "books_dir", None):
        app_settings = app_settings.model_copy(update={"books_dir": args.books_dir})

    configure_logging(log_level=app_settings.log_level, stream=sys.stderr)
    return asyncio.run(_run(args, app_settings))


if __name__ == "__main__":
    sys.exit(main())
