"""Concrete adapters for the interfaces in :mod:`booksearch.interfaces`."""
