"""Unit tests for settings validation."""

import logging

import pytest
from pydantic import ValidationError

from auth_server.core.config import Settings, clear_settings_cache, get_settings
from auth_server.core.logging_utils import ROOT_LOGGER_NAME, configure_logging, get_logger


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings()

        assert settings.key_alias == "jwt"
        assert settings.access_token_validity_seconds == 43200
        assert settings.refresh_token_validity_seconds == 2592000
        assert settings.introspection_required_scope is None
        assert not settings.is_production

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("AUTH_KEY_ALIAS", "signing")
        monkeypatch.setenv("AUTH_ACCESS_TOKEN_VALIDITY_SECONDS", "600")

        settings = Settings()

        assert settings.key_alias == "signing"
        assert settings.access_token_validity_seconds == 600

    def test_test_passphrase_rejected_in_production(self):
        with pytest.raises(ValidationError, match="production"):
            Settings(api_env="production")

    def test_production_with_real_passphrase(self):
        settings = Settings(api_env="production", keystore_passphrase="s3cret-keystore")

        assert settings.is_production

    def test_refresh_must_outlive_access(self):
        with pytest.raises(ValidationError):
            Settings(access_token_validity_seconds=3600, refresh_token_validity_seconds=3600)

    def test_pool_sizes(self):
        with pytest.raises(ValidationError):
            Settings(database_pool_min=5, database_pool_max=2)

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            Settings(signing_secret="x")

    def test_settings_are_frozen(self):
        settings = Settings()

        with pytest.raises(ValidationError):
            settings.key_alias = "other"

    def test_cached_settings(self):
        clear_settings_cache()
        try:
            assert get_settings() is get_settings()
        finally:
            clear_settings_cache()


class TestLogging:
    """Tests for logging configuration."""

    def test_level_applies_after_loggers_exist(self):
        logger = get_logger("auth_server.services.example")
        root = logging.getLogger(ROOT_LOGGER_NAME)
        previous = root.level
        try:
            configure_logging(level="debug")

            assert root.level == logging.DEBUG
            assert logger.isEnabledFor(logging.DEBUG)
        finally:
            root.setLevel(previous)
