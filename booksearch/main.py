"""booksearch FastAPI application entry point.

Builds the Elasticsearch store provider and the library service once per
process, attaches them to ``app.state`` and mounts the API routes.
Configuration comes from ``.env`` and ``config/config.yaml``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from booksearch import __version__
from booksearch.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from booksearch.api.routes import router as api_router
from booksearch.config.loader import load_config
from booksearch.config.settings import Settings
from booksearch.providers.store.elasticsearch_provider import ElasticsearchStoreProvider
from booksearch.services.library_service import LibraryService
from booksearch.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    library_service: LibraryService | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    When *library_service* is given it is used as-is and the lifespan does
    not create (or close) a store connection.
    """
    app_settings = settings or Settings()
    config = load_config(settings=app_settings)
    configure_logging(
        log_level=app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
    )

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        store: ElasticsearchStoreProvider | None = None
        if getattr(application.state, "library_service", None) is None:
            store = ElasticsearchStoreProvider(settings=app_settings)
            application.state.library_service = LibraryService.from_settings(store, app_settings)

        _logger.info(
            "app_startup",
            version=__version__,
            environment=app_settings.app_env,
            store_url=app_settings.elasticsearch_url,
            index=app_settings.index_name,
        )

        yield

        if store is not None:
            await store.close()
            _logger.info("app_shutdown", message="store client closed")

    application = FastAPI(
        title=config.get("app", {}).get("title", "booksearch"),
        version=__version__,
        description=(
            "Parse plain-text books into paragraphs, load them into Elasticsearch "
            "and serve fuzzy term search and paragraph range queries."
        ),
        lifespan=_lifespan,
    )
    if library_service is not None:
        application.state.library_service = library_service

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=config.get("app", {}).get("cors_origins"))

    application.include_router(api_router)
    return application


def main() -> None:
    """Serve the application with uvicorn."""
    settings = Settings()
    uvicorn.run(
        "booksearch.main:create_app",
        factory=True,
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )


if __name__ == "__main__":
    main()
