"""Shared pytest fixtures for the booksearch test suite."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Callable

import pytest

from booksearch.interfaces.store_provider import IStoreProvider
from booksearch.utils.errors import StoreError

# ---------------------------------------------------------------------------
# Book text builders
# ---------------------------------------------------------------------------

MOBY_DICK_PARAGRAPHS = [
    "Call me Ishmael. Some years ago, never mind how long precisely, having "
    "little or no money in my purse, I thought I would sail about a little.",
    "It is a way I have of driving off the spleen and regulating the circulation.",
    "There now is your insular city of the Manhattoes, belted round by wharves.",
    "Circumambulate the city of a dreamy Sabbath afternoon.",
    "The whale is the largest animal that ever lived upon the earth.",
]


def make_book_text(
    title: str | None = "Moby Dick",
    paragraphs: list[str] | None = None,
    author: str | None = "Herman Melville",
    url_original: str | None = "https://www.gutenberg.org/ebooks/2701",
    url_youtube: str | None = "https://www.youtube.com/watch?v=moby",
    url_ivoox: str | None = "https://www.ivoox.com/moby-dick",
    markers: bool = True,
) -> str:
    """Build a Gutenberg-style book: header, START marker, paragraphs, END marker, licence."""
    paragraphs = MOBY_DICK_PARAGRAPHS if paragraphs is None else paragraphs
    header = ["The Project Gutenberg eBook of a test book", ""]
    for label, value in (
        ("Title", title),
        ("Author", author),
        ("Url Original", url_original),
        ("Url Youtube", url_youtube),
        ("Url Ivoox", url_ivoox),
    ):
        if value is not None:
            header.append(f"{label}: {value}")
    header.append("")

    name = (title or "UNTITLED").upper()
    body = "\n\n".join(paragraphs)
    parts = ["\n".join(header)]
    if markers:
        parts.append(f"*** START OF THE PROJECT GUTENBERG EBOOK {name} ***\n\n")
    parts.append(body)
    if markers:
        parts.append(f"\n\n*** END OF THE PROJECT GUTENBERG EBOOK {name} ***\n")
    parts.append("\nSection 1. General Terms of Use and Redistributing Project Gutenberg works.\n")
    return "\n".join(parts)


def write_book(directory: Path, filename: str, **kwargs: Any) -> Path:
    """Write a generated book to *directory*/*filename* and return its path."""
    path = directory / filename
    path.write_text(make_book_text(**kwargs), encoding="utf-8")
    return path


@pytest.fixture
def sample_book_text() -> str:
    return make_book_text()


@pytest.fixture
def books_dir(tmp_path: Path) -> Path:
    """An empty books directory."""
    directory = tmp_path / "books"
    directory.mkdir()
    return directory


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class InMemoryStore(IStoreProvider):
    """A small fake of the search store good enough for reload/query tests.

    Supports the two query shapes the application sends: a ``match`` on
    ``text`` (every word must appear, case-insensitive, no fuzziness) and a
    ``bool`` filter on exact ``title`` plus a ``location`` range.

    Hooks
    -----
    status:
        Reported cluster health.
    unreachable_calls:
        Number of upcoming ``health()`` calls that raise ``StoreError``.
    reject:
        Called with each document; a non-empty return value rejects the
        document with that reason.
    fail_bulk_calls:
        1-based bulk call numbers that raise ``StoreError``.
    """

    def __init__(self) -> None:
        self.indices: dict[str, list[dict[str, Any]]] = {}
        self.mappings: dict[str, dict[str, Any]] = {}
        self.status = "green"
        self.unreachable_calls = 0
        self.reject: Callable[[dict[str, Any]], str | None] | None = None
        self.fail_bulk_calls: set[int] = set()
        self.bulk_calls = 0
        self.bulk_sizes: list[int] = []
        self.health_calls = 0
        self.refreshed = 0
        self.closed = False
        self._next_id = 0

    async def health(self) -> dict[str, Any]:
        self.health_calls += 1
        if self.unreachable_calls > 0:
            self.unreachable_calls -= 1
            raise StoreError("connection refused", provider_name="memory")
        return {"status": self.status}

    async def index_exists(self, index: str) -> bool:
        return index in self.indices

    async def create_index(self, index: str) -> None:
        if index in self.indices:
            raise StoreError(f"index {index} already exists", provider_name="memory", status_code=400)
        self.indices[index] = []

    async def delete_index(self, index: str) -> None:
        self.indices.pop(index, None)
        self.mappings.pop(index, None)

    async def put_mapping(self, index: str, properties: dict[str, Any]) -> None:
        self.mappings[index] = dict(properties)

    async def bulk(self, index: str, documents: list[dict[str, Any]]) -> dict[str, Any]:
        self.bulk_calls += 1
        self.bulk_sizes.append(len(documents))
        if self.bulk_calls in self.fail_bulk_calls:
            raise StoreError("bulk request timed out", provider_name="memory")

        docs = self.indices.setdefault(index, [])
        items: list[dict[str, Any]] = []
        errors = False
        for doc in documents:
            reason = self.reject(doc) if self.reject else None
            if reason:
                errors = True
                items.append({
                    "index": {
                        "status": 400,
                        "error": {"type": "mapper_parsing_exception", "reason": reason},
                    }
                })
                continue
            self._next_id += 1
            docs.append({"_id": str(self._next_id), **doc})
            items.append({"index": {"_id": str(self._next_id), "status": 201}})
        return {"took": 1, "errors": errors, "items": items}

    async def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        docs = self.indices.get(index, [])
        query = body.get("query", {})
        highlight_words: list[str] = []

        if "match" in query:
            words = query["match"]["text"]["query"].lower().split()
            highlight_words = words
            matched = [d for d in docs if all(w in d["text"].lower() for w in words)]
        elif "bool" in query:
            matched = [d for d in docs if all(_passes(d, f) for f in query["bool"]["filter"])]
        else:
            matched = list(docs)

        for sort_key in body.get("sort", []):
            field, order = next(iter(sort_key.items()))
            matched.sort(key=lambda d: d[field], reverse=(order == "desc"))

        offset = body.get("from", 0)
        size = body.get("size", 10)
        page = matched[offset : offset + size]

        hits = []
        for doc in page:
            source = {k: v for k, v in doc.items() if k != "_id"}
            hit: dict[str, Any] = {"_id": doc["_id"], "_score": 1.0, "_source": source}
            if "highlight" in body and highlight_words:
                hit["highlight"] = {"text": [_highlight(source["text"], highlight_words)]}
            hits.append(hit)
        return {"hits": {"total": {"value": len(matched), "relation": "eq"}, "hits": hits}}

    async def refresh(self, index: str) -> None:
        self.refreshed += 1

    async def close(self) -> None:
        self.closed = True

    def get_provider_name(self) -> str:
        return "memory"


def _passes(doc: dict[str, Any], clause: dict[str, Any]) -> bool:
    if "term" in clause:
        field, value = next(iter(clause["term"].items()))
        return doc.get(field) == value
    if "range" in clause:
        field, bounds = next(iter(clause["range"].items()))
        value = doc.get(field)
        checks = {
            "gte": lambda b: value >= b,
            "gt": lambda b: value > b,
            "lte": lambda b: value <= b,
            "lt": lambda b: value < b,
        }
        return all(checks[op](bound) for op, bound in bounds.items())
    return True


def _highlight(text: str, words: list[str]) -> str:
    for word in words:
        text = re.sub(re.escape(word), lambda m: f"<em>{m.group(0)}</em>", text, flags=re.IGNORECASE)
    return text


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()
