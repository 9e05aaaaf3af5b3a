"""Parser for one plain-text book file.

Reads the file and composes the two extraction steps:

1. :class:`MetadataExtractor` over the whole text -> title, author, URLs
2. :class:`ParagraphSegmenter` over the marked body -> ordered paragraphs

Errors from either step propagate unchanged and name the file they came
from (``MetadataMissing.source`` / ``MalformedBookBoundary.source``).
"""

from __future__ import annotations

from pathlib import Path

import structlog

from booksearch.models.book import ParsedBook
from booksearch.services.ingestion.metadata_extractor import MetadataExtractor
from booksearch.services.ingestion.segmenter import ParagraphSegmenter

logger = structlog.get_logger(logger_name=__name__)


class BookParser:
    """Turns a ``.txt`` file into a :class:`ParsedBook`.

    Parameters
    ----------
    metadata_extractor:
        Header field extractor; a default instance when omitted.
    segmenter:
        Body paragraph splitter; a default instance when omitted.
    """

    def __init__(
        self,
        metadata_extractor: MetadataExtractor | None = None,
        segmenter: ParagraphSegmenter | None = None,
    ) -> None:
        self._metadata_extractor = metadata_extractor or MetadataExtractor()
        self._segmenter = segmenter or ParagraphSegmenter()

    def parse(self, file_path: str | Path) -> ParsedBook:
        """Read *file_path* and return its metadata and paragraphs.

        Raises
        ------
        MetadataMissing
            If the ``Title`` header is absent.
        MalformedBookBoundary
            If the START/END markers cannot be located.
        OSError
            If the file cannot be read.
        """
        source = str(file_path)
        text = self.read(source)
        return self.parse_text(text, source)

    def parse_text(self, text: str, source: str = "<text>") -> ParsedBook:
        """Parse already-loaded book *text*; *source* labels errors and logs."""
        metadata = self._metadata_extractor.extract(text, source)
        paragraphs = self._segmenter.segment(text, source)

        book = ParsedBook(**metadata, paragraphs=tuple(paragraphs), source=source)
        logger.info(
            "book_parsed",
            source=source,
            title=book.title,
            author=book.author,
            url_youtube=book.url_youtube,
            paragraphs=len(book.paragraphs),
        )
        return book

    @staticmethod
    def read(file_path: str) -> str:
        """Return the full UTF-8 text of *file_path* (a leading BOM is dropped)."""
        with open(file_path, encoding="utf-8-sig") as fh:
            return fh.read()
