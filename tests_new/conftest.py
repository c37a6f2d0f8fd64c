"""Global test configuration and fixtures.

Provides shared fixtures for all test levels: environment setup, a mocked
tracking service, the bot components wired the same way the container wires
them, and helpers that build Telegram updates.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram import Message

from whale_alert_bot.bot.callback_codec import CallbackCodec
from whale_alert_bot.bot.command_parser import CommandParser
from whale_alert_bot.bot.dispatcher import Dispatcher
from whale_alert_bot.bot.handlers import BotHandlers
from whale_alert_bot.bot.keyboards import KeyboardBuilder
from whale_alert_bot.bot.response_formatter import ResponseFormatter
from whale_alert_bot.models import UserIdentity
from whale_alert_bot.services.session_queue import SessionQueue
from whale_alert_bot.services.tracking import TrackingServiceProtocol

# Test constants
TEST_BOT_TOKEN = "123456:TEST-token_placeholder"
TEST_TMA_BASE_URL = "https://tma.example.com"
TEST_USER_ID = 42


@pytest.fixture(autouse=True)
def test_environment():
    """Setup test environment variables for all tests."""
    test_env = {
        "BOT_TOKEN": TEST_BOT_TOKEN,
        "JWT_SECRET": "test-jwt-secret",
        "APP_VERSION": "",
        "RAILWAY_PUBLIC_DOMAIN": None,
        "RAILWAY_URL": None,
        "TMA_BASE_URL": None,
    }

    # Store original values
    original_env = {}
    for key, value in test_env.items():
        original_env[key] = os.environ.get(key)
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value

    yield

    # Restore original values
    for key, original_value in original_env.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


@pytest.fixture
def identity() -> UserIdentity:
    return UserIdentity(telegram_id=str(TEST_USER_ID), username="whale_watcher")


@pytest.fixture
def tracking_service() -> AsyncMock:
    """Tracking service mock; every protocol method is an AsyncMock."""
    service = AsyncMock(spec=TrackingServiceProtocol)
    service.list_wallet_options.return_value = []
    return service


@pytest.fixture
def keyboards() -> KeyboardBuilder:
    return KeyboardBuilder(tma_base_url=TEST_TMA_BASE_URL, app_version="1.4.0")


@pytest.fixture
def plain_keyboards() -> KeyboardBuilder:
    """Keyboards of a deployment without a Mini App."""
    return KeyboardBuilder()


@pytest.fixture
def dispatcher(tracking_service, keyboards) -> Dispatcher:
    return Dispatcher(
        tracking_service=tracking_service,
        keyboards=keyboards,
        formatter=ResponseFormatter(),
        app_version="1.4.0",
        history_page_size=10,
    )


@pytest.fixture
def bot_handlers(dispatcher, keyboards) -> BotHandlers:
    return BotHandlers(
        parser=CommandParser(),
        codec=CallbackCodec(),
        dispatcher=dispatcher,
        queue=SessionQueue(),
        formatter=ResponseFormatter(),
        keyboards=keyboards,
    )


def _message(text: str | None = None) -> MagicMock:
    message = MagicMock(spec=Message)
    message.text = text
    message.message_id = 7
    message.reply_text = AsyncMock()
    return message


def _text_update(text: str, user_id: int | None = TEST_USER_ID) -> MagicMock:
    """Build a message update as delivered by python-telegram-bot."""
    update = MagicMock()
    update.update_id = 1001
    update.message = _message(text)
    update.effective_message = update.message
    update.effective_chat = MagicMock(id=555)
    update.callback_query = None
    update.effective_user = (
        MagicMock(id=user_id, username="whale_watcher") if user_id is not None else None
    )
    return update


def _callback_update(data: str | None, user_id: int | None = TEST_USER_ID) -> MagicMock:
    """Build a callback query update for a tapped inline button."""
    update = MagicMock()
    update.update_id = 1002
    update.message = None
    update.callback_query = MagicMock()
    update.callback_query.data = data
    update.callback_query.answer = AsyncMock()
    update.callback_query.message = _message()
    update.effective_message = update.callback_query.message
    update.effective_chat = MagicMock(id=555)
    update.effective_user = (
        MagicMock(id=user_id, username="whale_watcher") if user_id is not None else None
    )
    return update


@pytest.fixture
def make_text_update():
    return _text_update


@pytest.fixture
def make_callback_update():
    return _callback_update
