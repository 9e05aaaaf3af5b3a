"""Configuration module - exports Settings and load_config."""

from booksearch.config.loader import load_config
from booksearch.config.settings import Settings

__all__ = ["Settings", "load_config"]
