"""Book ingestion pipeline for the library index.

Pipeline stages overview:

1. **Extract** (metadata_extractor.py / MetadataExtractor) -- reads the
   ``Title:`` / ``Author:`` / ``Url ...:`` header with sentinel defaults.

2. **Segment** (segmenter.py / ParagraphSegmenter) -- isolates the body
   between the Gutenberg START/END markers and splits it into paragraphs.

3. **Parse** (book_parser.py / BookParser) -- composes 1 and 2 into a
   :class:`~booksearch.models.book.ParsedBook` per file.

4. **Load** (bulk_loader.py / BulkLoader) -- writes paragraph documents in
   bulk batches, recording rejected items and failed batches.

5. **Orchestrate** (ingestion_service.py / IngestionOrchestrator) -- resets
   the index and runs 3 and 4 over every file, isolating per-file failures.
"""

from booksearch.services.ingestion.book_parser import BookParser
from booksearch.services.ingestion.bulk_loader import BulkLoader
from booksearch.services.ingestion.ingestion_service import IngestionOrchestrator
from booksearch.services.ingestion.metadata_extractor import MetadataExtractor
from booksearch.services.ingestion.segmenter import ParagraphSegmenter

__all__ = [
    "BookParser",
    "BulkLoader",
    "IngestionOrchestrator",
    "MetadataExtractor",
    "ParagraphSegmenter",
]
