"""Configuration management for bountyhook."""

import logging
import warnings
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_HMAC_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """bountyhook configuration loaded from environment variables.

    All settings can be overridden via environment variables with
    the BOUNTYHOOK_ prefix. For example:
        BOUNTYHOOK_API_BASE_URL=https://bounty.example.com
        BOUNTYHOOK_POLL_INTERVAL_MS=60000

    Security Notes:
        - In production (BOUNTYHOOK_ENV=production) the default HMAC secret
          is rejected; subscribers could otherwise forge signatures.
    """

    # Environment
    env: Literal["development", "production", "test"] = Field(
        default="development",
        description="Environment: development, production, or test",
    )

    # Upstream feed
    api_base_url: str = Field(
        default="https://bounty.owockibot.xyz",
        description="Base URL of the bounty board API (GET <base>/bounties)",
    )
    poll_interval_ms: int = Field(
        default=30_000,
        ge=1_000,
        description="Milliseconds between poll cycles",
    )
    feed_timeout_seconds: float = Field(
        default=15.0,
        gt=0.0,
        description="HTTP timeout for the upstream feed request",
    )

    # Management API
    host: str = Field(default="0.0.0.0", description="Management API bind address")
    port: int = Field(default=3200, ge=1, le=65535, description="Management API port")

    # Signing
    hmac_secret: str = Field(
        default=DEFAULT_HMAC_SECRET,
        min_length=1,
        description="Default HMAC key for endpoints without their own secret",
    )

    # Persistence
    state_file: Path = Field(
        default=Path("./webhook-state.json"),
        description="Snapshot map and delivery log file",
    )
    config_file: Path = Field(
        default=Path("./webhooks.json"),
        description="Registered webhook endpoints file",
    )
    delivery_log_limit: int = Field(
        default=1000,
        ge=1,
        description="Delivery log entries kept on each flush (oldest dropped)",
    )

    # Delivery
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total delivery attempts per (event, endpoint)",
    )
    retry_base_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Initial retry delay (doubles each attempt)",
    )
    delivery_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="HTTP timeout for a single delivery attempt",
    )
    max_concurrent_deliveries: int = Field(
        default=1,
        ge=1,
        le=100,
        description="Endpoints delivered to concurrently for one event (1 = sequential)",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log format: json (production) or text (development)",
    )

    @model_validator(mode="after")
    def validate_security_settings(self) -> "Settings":
        """Reject the placeholder HMAC secret in production.

        In development and test the placeholder is accepted so the relay
        runs out of the box.
        """
        if self.hmac_secret == DEFAULT_HMAC_SECRET:
            if self.env == "production":
                raise ValueError(
                    "BOUNTYHOOK_HMAC_SECRET must be set in production. "
                    'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
                )
            logger.debug("Using placeholder HMAC secret (development only)")
        return self

    @model_validator(mode="after")
    def validate_api_base_url(self) -> "Settings":
        """Normalize the feed URL and warn about plain HTTP in production."""
        object.__setattr__(self, "api_base_url", self.api_base_url.rstrip("/"))
        if self.env == "production" and self.api_base_url.startswith("http://"):
            warnings.warn(
                "BOUNTYHOOK_API_BASE_URL uses plain HTTP in production.",
                UserWarning,
                stacklevel=2,
            )
            logger.warning("Bounty feed polled over plain HTTP in production")
        return self

    @property
    def poll_interval_seconds(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000

    model_config = {
        "env_prefix": "BOUNTYHOOK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
    }
