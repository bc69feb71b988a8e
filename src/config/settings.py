"""Application settings loaded from environment variables via pydantic-settings.

Values come from (highest priority first):

  1. Environment variables, e.g. ``BACKEND_BASE_URL=https://app.example.com/api``
  2. The optional YAML file passed to :func:`src.config.loader.load_settings`
  3. A ``.env`` file in the working directory
  4. The defaults below

Field ``backend_api_token`` maps to env var ``BACKEND_API_TOKEN`` and so on;
pydantic-settings matches names case-insensitively.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Settings(BaseSettings):
    """Training-set manager settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Content Processing Backend ===
    backend_base_url: str = "http://localhost:3000/api"
    # Bearer token handed over by the auth/session provider; empty = no header.
    backend_api_token: str = ""
    # Some deployments expose the crawler as content/scrape-website instead.
    scrape_endpoint: str = "content/scrape"
    # Deadline for every backend call; the in-flight gate is released when hit.
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # === Tenant ===
    customer_id: int = 0

    # === Upload limits ===
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, gt=0)

    # === Retrain schedule ===
    default_retrain_time: str = "03:00"

    # === Notifications ===
    notification_success_seconds: float = Field(default=3.0, gt=0)
    notification_error_seconds: float = Field(default=5.0, gt=0)

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @field_validator("default_retrain_time")
    @classmethod
    def _check_time_of_day(cls, value: str) -> str:
        if not _TIME_OF_DAY.match(value):
            raise ValueError("default_retrain_time must be HH:MM (24-hour)")
        return value

    @field_validator("backend_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")
