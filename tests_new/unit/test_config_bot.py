"""Tests for environment and YAML driven configuration."""

from whale_alert_bot.config import AuthConfig, BotConfig, Config


def test_bot_config_listen_host_defaults_to_localhost(monkeypatch) -> None:
    """BotConfig should bind to localhost by default for safer webhooks."""
    monkeypatch.delenv("BOT_LISTEN_HOST", raising=False)

    bot_config = BotConfig()

    assert bot_config.listen_host == "127.0.0.1"


def test_bot_config_listen_host_env_override(monkeypatch) -> None:
    """Environment variable must override listen host when explicitly set."""
    monkeypatch.setenv("BOT_LISTEN_HOST", "0.0.0.0")

    bot_config = BotConfig()

    assert bot_config.listen_host == "0.0.0.0"


def test_webhook_mode_follows_public_domain(monkeypatch) -> None:
    monkeypatch.delenv("RAILWAY_PUBLIC_DOMAIN", raising=False)
    monkeypatch.delenv("RAILWAY_URL", raising=False)
    assert BotConfig().use_webhook is False

    monkeypatch.setenv("RAILWAY_URL", "bot.example.com")
    bot_config = BotConfig()

    assert bot_config.use_webhook is True
    assert bot_config.webhook_domain == "bot.example.com"


def test_missing_bot_token_is_none(monkeypatch) -> None:
    monkeypatch.delenv("BOT_TOKEN", raising=False)

    assert BotConfig().bot_token is None


def test_auth_ttl_defaults(monkeypatch) -> None:
    monkeypatch.delenv("JWT_ACCESS_TTL_SEC", raising=False)
    monkeypatch.delenv("JWT_REFRESH_TTL_SEC", raising=False)

    auth_config = AuthConfig()

    assert auth_config.access_ttl_sec == 900
    assert auth_config.refresh_ttl_sec == 604800


def test_ui_settings_from_yaml(tmp_path) -> None:
    (tmp_path / "bot.yml").write_text("ui:\n  history_page_size: 25\n")

    config = Config(config_dir=tmp_path)

    assert config.ui.history_page_size == 25
    assert config.ui.default_mute_minutes == 30


def test_ui_defaults_without_yaml(tmp_path) -> None:
    config = Config(config_dir=tmp_path)

    assert config.ui.history_page_size == 10
    assert config.as_dict()["ui"]["wallet_title_max_length"] == 21
