"""Paragraph segmentation for Project Gutenberg style texts.

The readable body of a book sits between two marker lines::

    *** START OF THE PROJECT GUTENBERG EBOOK MOBY DICK ***
    ...body...
    *** END OF THE PROJECT GUTENBERG EBOOK MOBY DICK ***

Everything outside the markers (licence boilerplate, the metadata header)
is discarded.  The body is split on blank lines and each paragraph is
flattened onto a single line with the ``_italics_`` underscores removed.
"""

from __future__ import annotations

import re

from booksearch.utils.errors import MalformedBookBoundary

_START_MARKER = re.compile(
    r"^\*{3}\s*START OF (?:THIS|THE) PROJECT GUTENBERG EBOOK.+\*{3}[ \t\r]*$",
    re.MULTILINE,
)
_END_MARKER = re.compile(
    r"^\*{3}\s*END OF (?:THIS|THE) PROJECT GUTENBERG EBOOK.+\*{3}[ \t\r]*$",
    re.MULTILINE,
)

# A line break followed by one or more whitespace-only lines.  A run of
# blank lines is consumed as a single separator.
_PARAGRAPH_SEPARATOR = re.compile(r"\r?\n(?:[ \t\f\v]*\r?\n)+")
_LINE_BREAK = re.compile(r"[ \t]*\r?\n[ \t]*")


class ParagraphSegmenter:
    """Isolates the body of a book and splits it into cleaned paragraphs."""

    def extract_body(self, text: str, source: str = "<text>") -> str:
        """Return the text strictly between the START and END markers.

        Raises
        ------
        MalformedBookBoundary
            If either marker is missing or the END marker precedes START.
        """
        start = _START_MARKER.search(text)
        if start is None:
            raise MalformedBookBoundary(source, "START OF PROJECT GUTENBERG EBOOK marker not found")

        end = _END_MARKER.search(text, start.end())
        if end is None:
            raise MalformedBookBoundary(source, "END OF PROJECT GUTENBERG EBOOK marker not found after START")

        return text[start.end() : end.start()]

    def split(self, body: str) -> list[str]:
        """Split *body* into normalized, non-empty paragraphs in source order."""
        paragraphs: list[str] = []
        for raw in _PARAGRAPH_SEPARATOR.split(body):
            cleaned = self.normalize(raw)
            if cleaned:
                paragraphs.append(cleaned)
        return paragraphs

    def segment(self, text: str, source: str = "<text>") -> list[str]:
        """Extract the body of *text* and return its paragraphs."""
        return self.split(self.extract_body(text, source))

    @staticmethod
    def normalize(paragraph: str) -> str:
        """Join wrapped lines with single spaces, drop underscores, trim."""
        joined = _LINE_BREAK.sub(" ", paragraph.strip())
        return joined.replace("_", "").strip()
