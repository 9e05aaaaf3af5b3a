"""Shared utilities: error hierarchy, structured logging, and retry policy."""
