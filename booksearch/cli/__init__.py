"""Command-line tools for booksearch.

- ``python -m booksearch.cli`` - reload the index, check store health, and
  run term or paragraph-range queries from the terminal.
"""
