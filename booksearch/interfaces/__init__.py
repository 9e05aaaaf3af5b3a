"""Public interface definitions for external service providers.

The search store is accessed exclusively through :class:`IStoreProvider`.
The concrete adapter lives in ``booksearch/providers/store/`` and is built
once at startup (``booksearch/main.py`` or the CLI) and injected into the
services that need it.
"""

from booksearch.interfaces.store_provider import IStoreProvider

__all__ = ["IStoreProvider"]
