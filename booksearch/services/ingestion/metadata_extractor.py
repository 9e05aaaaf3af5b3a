"""Header metadata extraction for plain-text books.

Each book starts with a fixed ``Label: value`` header::

    Title: Moby Dick
    Author: Herman Melville
    Url Original: https://...
    Url Youtube: https://...
    Url Ivoox: https://...

A field is described by a :class:`~booksearch.models.book.MetadataField`
(label, regex, optional flag, default).  Matching is anchored to the start
of a line, case-sensitive on the label, and never crosses a line break.

Policy: ``Title`` is required and its absence is fatal for the file.
``Author`` and the three URLs are optional; when missing or blank they fall
back to a sentinel default and a warning is logged.
"""

from __future__ import annotations

import re

import structlog

from booksearch.models.book import NOT_AVAILABLE, UNKNOWN_AUTHOR, MetadataField
from booksearch.utils.errors import MetadataMissing

logger = structlog.get_logger(logger_name=__name__)


def _label_pattern(label: str) -> str:
    # [ \t]* instead of \s* so an empty value cannot swallow the next line.
    return rf"^{re.escape(label)}:[ \t]*(.*)$"


TITLE = MetadataField(name="Title", pattern=_label_pattern("Title"))
AUTHOR = MetadataField(
    name="Author", pattern=_label_pattern("Author"), optional=True, default=UNKNOWN_AUTHOR
)
URL_YOUTUBE = MetadataField(
    name="Url Youtube", pattern=_label_pattern("Url Youtube"), optional=True, default=NOT_AVAILABLE
)
URL_ORIGINAL = MetadataField(
    name="Url Original", pattern=_label_pattern("Url Original"), optional=True, default=NOT_AVAILABLE
)
URL_IVOOX = MetadataField(
    name="Url Ivoox", pattern=_label_pattern("Url Ivoox"), optional=True, default=NOT_AVAILABLE
)

# Book attribute name -> field definition.
BOOK_FIELDS: dict[str, MetadataField] = {
    "title": TITLE,
    "author": AUTHOR,
    "url_youtube": URL_YOUTUBE,
    "url_original": URL_ORIGINAL,
    "url_ivoox": URL_IVOOX,
}


class MetadataExtractor:
    """Extracts header fields from raw book text.

    Stateless; compiled patterns are cached per instance.

    Parameters
    ----------
    fields:
        Mapping of output key to field definition.  Defaults to the five
        recognized book fields.
    """

    def __init__(self, fields: dict[str, MetadataField] | None = None) -> None:
        self._fields = dict(fields) if fields is not None else dict(BOOK_FIELDS)
        self._compiled: dict[str, re.Pattern[str]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract_field(self, text: str, spec: MetadataField, source: str = "<text>") -> str:
        """Return the trimmed value of *spec* in *text*.

        The first line matching the pattern wins.  A blank value counts as
        absent.

        Raises
        ------
        MetadataMissing
            If a required field is absent or blank.
        """
        match = self._pattern(spec).search(text)
        value = match.group(1).strip() if match else ""
        if value:
            return value

        if not spec.optional:
            raise MetadataMissing(spec.name, source)

        default = spec.default if spec.default is not None else ""
        logger.warning(
            "metadata_field_defaulted",
            field=spec.name,
            source=source,
            default=default,
        )
        return default

    def extract(self, text: str, source: str = "<text>") -> dict[str, str]:
        """Extract every configured field, keyed by book attribute name."""
        return {
            key: self.extract_field(text, spec, source)
            for key, spec in self._fields.items()
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _pattern(self, spec: MetadataField) -> re.Pattern[str]:
        compiled = self._compiled.get(spec.pattern)
        if compiled is None:
            compiled = re.compile(spec.pattern, re.MULTILINE)
            self._compiled[spec.pattern] = compiled
        return compiled
