"""YAML configuration loader with environment overrides.

Layers, later wins:

  1. ``config/config.yaml``: checked-in defaults (API title, CORS origins)
  2. ``.env`` and environment variables, read through :class:`Settings`

Only keys that :class:`Settings` knows about are overridden; anything else
in the YAML (``app.title``, ``app.cors_origins``) passes through untouched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from booksearch.config.settings import Settings
from booksearch.utils.errors import ConfigurationError

DEFAULT_CONFIG_PATH = "config/config.yaml"


def load_config(path: str = DEFAULT_CONFIG_PATH, settings: Settings | None = None) -> dict[str, Any]:
    """Return the YAML config at *path* with the env-derived values merged on top.

    A missing file yields just the env-derived values.

    Raises:
        ConfigurationError: If the file is not valid YAML or its top level
            is not a mapping.
    """
    config = _read_yaml(Path(path))
    settings = settings or Settings()
    _deep_merge(config, _settings_overrides(settings))
    return config


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}
    try:
        with open(config_path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    return data


def _settings_overrides(settings: Settings) -> dict[str, Any]:
    return {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "store": {
            "url": settings.elasticsearch_url,
            "index": settings.index_name,
            "timeout": settings.elasticsearch_timeout,
        },
        "ingestion": {
            "books_dir": settings.books_dir,
            "batch_size": settings.bulk_batch_size,
            "concurrency": settings.ingest_concurrency,
        },
        "search": {"page_size": settings.search_page_size},
        "logging": {"level": settings.log_level},
    }


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge *overrides* into *base* in place."""
    for key, value in overrides.items():
        if isinstance(base.get(key), dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
