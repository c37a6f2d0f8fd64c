"""Configuration management for the whale alert bot.

Handles all application configuration including environment variables, the
optional YAML UI file, and default settings. Provides structured configuration
classes for different aspects of the application (bot, auth, api, ui).
"""

from pathlib import Path

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings

# Development fallback, never use in production
DEFAULT_JWT_SECRET = "change-me"


class UiConfig(BaseSettings):
    """Chat UI tunables.

    Attributes:
        history_page_size: Number of history entries requested per page.
        default_mute_minutes: Duration offered by the mute button under alerts.
        wallet_title_max_length: Max characters of a wallet title on a button.
    """
    history_page_size: int = 10
    default_mute_minutes: int = 30
    wallet_title_max_length: int = 21


class AuthConfig(BaseSettings):
    """Token issuance settings for the login API.

    Attributes:
        jwt_secret: HMAC secret used to sign access and refresh tokens.
        access_ttl_sec: Access token lifetime in seconds.
        refresh_ttl_sec: Refresh token lifetime in seconds.
    """
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET, validation_alias="JWT_SECRET")
    access_ttl_sec: int = Field(default=900, validation_alias="JWT_ACCESS_TTL_SEC")
    refresh_ttl_sec: int = Field(default=604800, validation_alias="JWT_REFRESH_TTL_SEC")


class ApiConfig(BaseSettings):
    """Login HTTP server settings.

    Attributes:
        host: Interface the aiohttp server binds to.
        port: Port the aiohttp server listens on.
    """
    host: str = Field(default="127.0.0.1", validation_alias="API_HOST")
    port: int = Field(default=8080, validation_alias="API_PORT")


class BotConfig(BaseSettings):
    """Main Telegram bot configuration.

    Attributes:
        bot_token: Telegram bot API token, None disables login verification.
        port: Server port for webhook mode.
        listen_host: Interface the webhook server binds to.
        railway_domain: Railway public domain for webhooks.
        railway_url: Railway URL for webhooks (fallback).
        tma_base_url: Public URL of the Telegram Mini App, None if not deployed.
        app_version: Release tag appended to mini-app URLs to bust caches.
        tracking_service_factory: ``module:callable`` building the tracking service.
        users_repository_factory: ``module:callable`` building the users repository.
    """
    bot_token: str | None = Field(default=None, validation_alias="BOT_TOKEN")
    port: int = Field(default=8000, validation_alias="PORT")
    listen_host: str = Field(default="127.0.0.1", validation_alias="BOT_LISTEN_HOST")
    railway_domain: str | None = Field(default=None, validation_alias="RAILWAY_PUBLIC_DOMAIN")
    railway_url: str | None = Field(default=None, validation_alias="RAILWAY_URL")
    tma_base_url: str | None = Field(default=None, validation_alias="TMA_BASE_URL")
    app_version: str = Field(default="", validation_alias="APP_VERSION")
    tracking_service_factory: str | None = Field(
        default=None, validation_alias="TRACKING_SERVICE_FACTORY"
    )
    users_repository_factory: str | None = Field(
        default=None, validation_alias="USERS_REPOSITORY_FACTORY"
    )

    @property
    def webhook_domain(self) -> str | None:
        """Get webhook domain for Railway deployment.

        Returns:
            Domain string if available, None for polling mode.
        """
        return self.railway_domain or self.railway_url

    @property
    def use_webhook(self) -> bool:
        """Determine if webhook mode should be used.

        Returns:
            True if webhook domain is configured, False for polling mode.
        """
        return bool(self.webhook_domain)


class Config:
    """Application configuration manager.

    Centralizes loading and management of all configuration sources including
    environment variables, YAML files, and default values. Provides typed
    access to configuration sections for different application components.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to whale_alert_bot/config.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)

        self.bot = BotConfig()
        self.auth = AuthConfig()
        self.api = ApiConfig()

        ui_path = self.config_dir / "bot.yml"
        if ui_path.exists():
            with open(ui_path) as f:
                ui_data = (yaml.safe_load(f) or {}).get("ui", {})

            self.ui = UiConfig(
                history_page_size=ui_data.get("history_page_size", 10),
                default_mute_minutes=ui_data.get("default_mute_minutes", 30),
                wallet_title_max_length=ui_data.get("wallet_title_max_length", 21),
            )
        else:
            self.ui = UiConfig()

    def as_dict(self) -> dict:
        """Dump all sections for the DI container configuration provider."""
        return {
            "bot": self.bot.model_dump(),
            "auth": self.auth.model_dump(),
            "api": self.api.model_dump(),
            "ui": self.ui.model_dump(),
        }


# Global configuration instance
config = Config()
