"""Book and paragraph data models.

A source ``.txt`` file is parsed into one :class:`ParsedBook`; the bulk
loader then turns each of its paragraphs into a :class:`ParagraphDocument`,
the unit of storage in the search index.  All models are frozen.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_AUTHOR = "Unknown Author"
NOT_AVAILABLE = "N/A"


# ---------------------------------------------------------------------------
# MetadataField - how to find one header value in the raw text.
# ---------------------------------------------------------------------------
class MetadataField(BaseModel):
    """Definition of a single ``Label: value`` header field."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Field label as it appears in the header, e.g. 'Title'.")
    pattern: str = Field(description="Regular expression whose first group captures the value.")
    optional: bool = False
    default: str | None = Field(
        default=None,
        description="Value used when an optional field is absent or blank.",
    )


# ---------------------------------------------------------------------------
# ParsedBook - output of BookParser.parse().
# ---------------------------------------------------------------------------
class ParsedBook(BaseModel):
    """A fully parsed book: header metadata plus its paragraphs in reading order.

    The index of each paragraph is its ``location``; locations are dense,
    start at 0, and are never renumbered after parsing.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    author: str = UNKNOWN_AUTHOR
    url_original: str = NOT_AVAILABLE
    url_youtube: str = NOT_AVAILABLE
    url_ivoox: str = NOT_AVAILABLE
    paragraphs: tuple[str, ...] = ()
    source: str = Field(default="", description="Path of the file this book was parsed from.")

    def to_documents(self) -> list[ParagraphDocument]:
        """Convert every paragraph into a storage document with ``location = index``."""
        return [
            ParagraphDocument(
                author=self.author,
                title=self.title,
                url_original=self.url_original,
                url_youtube=self.url_youtube,
                url_ivoox=self.url_ivoox,
                location=location,
                text=text,
            )
            for location, text in enumerate(self.paragraphs)
        ]


# ---------------------------------------------------------------------------
# ParagraphDocument - one stored paragraph.
# ---------------------------------------------------------------------------
class ParagraphDocument(BaseModel):
    """A single paragraph as stored in the search index.

    Written once by the bulk loader and never updated in place; a reload
    replaces the whole index instead.
    """

    model_config = ConfigDict(frozen=True)

    author: str
    title: str
    url_original: str = NOT_AVAILABLE
    url_youtube: str = NOT_AVAILABLE
    url_ivoox: str = NOT_AVAILABLE
    location: int = Field(ge=0)
    text: str


# Index mapping applied on every reset.  Keyword fields are matched exactly
# (title filter), ``text`` is analysed for full-text search.
PARAGRAPH_MAPPING: dict[str, dict[str, str]] = {
    "title": {"type": "keyword"},
    "author": {"type": "keyword"},
    "url_original": {"type": "keyword"},
    "url_youtube": {"type": "keyword"},
    "url_ivoox": {"type": "keyword"},
    "location": {"type": "integer"},
    "text": {"type": "text"},
}
