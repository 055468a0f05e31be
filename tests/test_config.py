"""Unit tests for bountyhook configuration."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from bountyhook.config import DEFAULT_HMAC_SECRET, Settings


class TestSettings:
    """Tests for Settings configuration."""

    def test_default_settings(self):
        """Defaults match the documented relay configuration."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.env == "development"
        assert settings.api_base_url == "https://bounty.owockibot.xyz"
        assert settings.poll_interval_ms == 30_000
        assert settings.port == 3200
        assert settings.hmac_secret == DEFAULT_HMAC_SECRET
        assert settings.state_file == Path("./webhook-state.json")
        assert settings.config_file == Path("./webhooks.json")
        assert settings.delivery_log_limit == 1000
        assert settings.max_retries == 3
        assert settings.retry_base_seconds == 1.0
        assert settings.delivery_timeout_seconds == 30.0
        assert settings.max_concurrent_deliveries == 1

    def test_env_override(self):
        """Settings can be overridden via BOUNTYHOOK_ environment variables."""
        env = {
            "BOUNTYHOOK_API_BASE_URL": "https://bounty.example.com",
            "BOUNTYHOOK_POLL_INTERVAL_MS": "60000",
            "BOUNTYHOOK_PORT": "8080",
            "BOUNTYHOOK_HMAC_SECRET": "s3cret",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.api_base_url == "https://bounty.example.com"
        assert settings.poll_interval_seconds == 60.0
        assert settings.port == 8080
        assert settings.hmac_secret == "s3cret"

    def test_trailing_slash_stripped(self):
        settings = Settings(env="test", api_base_url="https://bounty.example.com/")

        assert settings.api_base_url == "https://bounty.example.com"

    def test_poll_interval_floor(self):
        with pytest.raises(ValidationError):
            Settings(env="test", poll_interval_ms=500)

    def test_retry_bounds(self):
        with pytest.raises(ValidationError):
            Settings(env="test", max_retries=0)
        with pytest.raises(ValidationError):
            Settings(env="test", max_concurrent_deliveries=0)


class TestSecuritySettings:
    """Tests for production safeguards."""

    def test_production_rejects_default_secret(self):
        with pytest.raises(ValidationError, match="HMAC_SECRET"):
            Settings(env="production", hmac_secret=DEFAULT_HMAC_SECRET)

    def test_production_accepts_real_secret(self):
        settings = Settings(env="production", hmac_secret="a" * 64)
        assert settings.env == "production"

    def test_development_allows_default_secret(self):
        settings = Settings(env="development")
        assert settings.hmac_secret == DEFAULT_HMAC_SECRET

    def test_production_warns_on_plain_http(self):
        with pytest.warns(UserWarning, match="plain HTTP"):
            Settings(
                env="production",
                hmac_secret="a" * 64,
                api_base_url="http://bounty.example.com",
            )
