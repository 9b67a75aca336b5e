"""
Configuration Management

Credentials loaded from environment variables (or a .env file) using
Pydantic Settings.

Environment variables:
    PUSHER_APP_ID, PUSHER_KEY, PUSHER_SECRET
    PUSHER_ENCRYPTION_MASTER_KEY_BASE64        (optional, 32 bytes once decoded)
    PUSHER_WEBHOOK_ADDITIONAL_CREDENTIALS      (optional, "key:secret,key:secret")
"""

import logging
from typing import List, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from pusher_auth.core.credentials import Credentials
from pusher_auth.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


class PusherSettings(BaseSettings):
    """App credentials and encryption settings from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="PUSHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================================
    # App Credentials
    # ============================================================
    app_id: str = Field(..., description="App ID")
    key: str = Field(..., description="App key")
    secret: SecretStr = Field(..., description="App secret")

    # ============================================================
    # Encryption & Webhooks
    # ============================================================
    encryption_master_key_base64: Optional[SecretStr] = Field(
        None, description="Base64 32-byte master key for private-encrypted channels"
    )
    webhook_additional_credentials: str = Field(
        "", description="Extra 'key:secret' pairs accepted for webhooks (comma-separated)"
    )

    def to_credentials(self) -> Credentials:
        """
        Build the primary credentials.

        Raises:
            ConfigError: If a value is empty or the master key is invalid
        """
        master_key_b64 = None
        if self.encryption_master_key_base64 is not None:
            master_key_b64 = self.encryption_master_key_base64.get_secret_value()
        return Credentials.create(
            app_id=self.app_id,
            key=self.key,
            secret=self.secret.get_secret_value(),
            master_key_base64=master_key_b64,
        )

    def additional_webhook_credentials(self) -> List[Credentials]:
        """
        Parse the extra webhook credentials.

        Raises:
            ConfigError: If an entry is not 'key:secret'
        """
        result = []
        for i, entry in enumerate(self.webhook_additional_credentials.split(",")):
            entry = entry.strip()
            if not entry:
                continue
            key, sep, secret = entry.partition(":")
            if not sep or not key or not secret:
                raise ConfigError(f"Invalid webhook credential at position {i + 1}: expected 'key:secret'")
            result.append(Credentials.create(app_id=self.app_id, key=key, secret=secret))
        return result


_settings: Optional[PusherSettings] = None


def get_settings() -> PusherSettings:
    """
    Get the settings instance.

    Loads from the environment on first use and caches the result.
    """
    global _settings
    if _settings is None:
        _settings = PusherSettings()
        logger.info(
            f"Loaded settings for app {_settings.app_id} "
            f"(encryption {'enabled' if _settings.encryption_master_key_base64 else 'disabled'})"
        )
    return _settings


def reload_settings() -> PusherSettings:
    """Reload settings from the environment."""
    global _settings
    _settings = PusherSettings()
    return _settings
