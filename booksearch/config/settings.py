"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first):

  1. Environment variables, e.g. ``ELASTICSEARCH_URL=https://es:9200``
  2. A ``.env`` file in the working directory
  3. The defaults declared below

Field ``elasticsearch_url`` maps to env var ``ELASTICSEARCH_URL``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """booksearch application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Search store ===
    elasticsearch_url: str = "http://localhost:9200"
    elasticsearch_username: str = ""
    elasticsearch_password: str = ""
    elasticsearch_api_key: str = ""  # Takes precedence over username/password
    elasticsearch_timeout: float = 30.0
    elasticsearch_verify_certs: bool = True
    index_name: str = "library"

    # === Ingestion ===
    books_dir: str = "./books"
    bulk_batch_size: int = Field(default=500, ge=1)
    ingest_concurrency: int = Field(default=1, ge=1)
    # 0 = retry until the store is healthy.
    connect_max_attempts: int = Field(default=10, ge=0)
    connect_backoff_base: float = Field(default=0.5, ge=0.0)
    connect_backoff_max: float = Field(default=30.0, ge=0.0)

    # === Queries ===
    search_page_size: int = Field(default=9, ge=1)

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_auth_headers(self) -> dict[str, str]:
        """Return the Authorization header for an API key, if one is configured."""
        if self.elasticsearch_api_key:
            return {"Authorization": f"ApiKey {self.elasticsearch_api_key}"}
        return {}

    def get_basic_auth(self) -> tuple[str, str] | None:
        """Return ``(username, password)`` when basic auth is configured and no API key is."""
        if self.elasticsearch_api_key or not self.elasticsearch_username:
            return None
        return (self.elasticsearch_username, self.elasticsearch_password)
