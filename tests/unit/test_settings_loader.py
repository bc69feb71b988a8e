"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.config.loader import load_settings
from src.config.settings import Settings
from src.utils.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("BACKEND_BASE_URL", "CUSTOMER_ID", "NOTIFICATION_ERROR_SECONDS", "SCRAPE_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)
    # No stray .env file from the working directory.
    monkeypatch.chdir(tmp_path)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.backend_base_url == "http://localhost:3000/api"
        assert settings.max_upload_bytes == 20 * 1024 * 1024
        assert settings.request_timeout_seconds == 30.0
        assert settings.default_retrain_time == "03:00"
        assert settings.notification_success_seconds == 3.0
        assert settings.notification_error_seconds == 5.0

    def test_trailing_slash_is_stripped(self) -> None:
        assert Settings(backend_base_url="https://x.test/api/").backend_base_url == (
            "https://x.test/api"
        )

    def test_rejects_bad_default_time(self) -> None:
        with pytest.raises(PydanticValidationError):
            Settings(default_retrain_time="3am")

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CUSTOMER_ID", "17")
        assert Settings().customer_id == 17


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(str(tmp_path / "absent.yaml"))
        assert settings.scrape_endpoint == "content/scrape"

    def test_flat_and_grouped_keys(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text(
            "backend:\n"
            "  base_url: https://app.example.com/api\n"
            "  api_token: abc123\n"
            "notification_error_seconds: 8\n"
            "unknown_key: ignored\n"
        )

        settings = load_settings(str(config))

        assert settings.backend_base_url == "https://app.example.com/api"
        assert settings.backend_api_token == "abc123"
        assert settings.notification_error_seconds == 8.0

    def test_environment_wins_over_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("scrape_endpoint: content/scrape-website\ncustomer_id: 3\n")
        monkeypatch.setenv("CUSTOMER_ID", "99")

        settings = load_settings(str(config))

        assert settings.customer_id == 99
        assert settings.scrape_endpoint == "content/scrape-website"

    def test_non_mapping_file_is_rejected(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            load_settings(str(config))
