"""booksearch - full-text search over a library of plain-text books.

Books are parsed into paragraphs, bulk-loaded into an Elasticsearch index,
and served through fuzzy term search and ordered paragraph-range queries.
"""

__version__ = "0.1.0"
