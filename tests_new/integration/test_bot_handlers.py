"""Integration tests for bot handlers with a mocked tracking service.

Parser, codec, session queue, dispatcher, formatter and keyboards are the
real components; only the tracking service and Telegram objects are mocked.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from telegram import InlineKeyboardMarkup, ReplyKeyboardMarkup
from telegram.error import TelegramError

from whale_alert_bot.bot import messages
from whale_alert_bot.models import ChainKey, HistoryPage
from whale_alert_bot.services.tracking import TrackingError


def _reply(message) -> tuple[str, dict]:
    call = message.reply_text.await_args
    text = call.kwargs.get("text") if "text" in call.kwargs else call.args[0]
    return text, call.kwargs


class TestTextMessages:
    @pytest.mark.asyncio
    async def test_single_command_reply(self, bot_handlers, tracking_service, make_text_update):
        tracking_service.track_wallet.return_value = "Now tracking #3"
        update = make_text_update("/track eth 0xABC whale one")

        await bot_handlers.handle_text(update, AsyncMock())

        tracking_service.track_wallet.assert_awaited_once()
        user, address, label, chain = tracking_service.track_wallet.await_args.args
        assert (user.telegram_id, address, label, chain) == (
            "42",
            "0xABC",
            "whale one",
            ChainKey.ETHEREUM_MAINNET,
        )
        text, kwargs = _reply(update.message)
        assert text == "Now tracking #3"
        assert isinstance(kwargs["reply_markup"], ReplyKeyboardMarkup)
        assert kwargs["disable_web_page_preview"] is True

    @pytest.mark.asyncio
    async def test_batch_reply_is_framed(self, bot_handlers, tracking_service, make_text_update):
        tracking_service.list_wallets.return_value = "1 wallet"
        tracking_service.remove_wallet.side_effect = TrackingError("Wallet #9 not found")
        update = make_text_update("/list\n\n/untrack #9")

        await bot_handlers.handle_text(update, AsyncMock())

        text, kwargs = _reply(update.message)
        assert text == (
            "2 commands processed\n\n"
            "1. Line 1:\n1 wallet\n\n"
            "2. Line 3:\nCommand failed: Wallet #9 not found"
        )
        assert isinstance(kwargs["reply_markup"], ReplyKeyboardMarkup)
        update.message.reply_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_history_reply_uses_html_and_paging(
        self, bot_handlers, tracking_service, make_text_update
    ):
        tracking_service.get_history_page.return_value = HistoryPage(
            message="<b>3 txs</b>", wallet_id=3, has_next_page=True
        )
        update = make_text_update("/history #3")

        await bot_handlers.handle_text(update, AsyncMock())

        _, kwargs = _reply(update.message)
        assert kwargs["parse_mode"] == "HTML"
        assert isinstance(kwargs["reply_markup"], InlineKeyboardMarkup)

    @pytest.mark.asyncio
    async def test_text_without_commands_is_ignored(self, bot_handlers, make_text_update):
        update = make_text_update("just chatting")

        await bot_handlers.handle_text(update, AsyncMock())

        update.message.reply_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_error_gives_one_batch_error(
        self, bot_handlers, tracking_service, make_text_update
    ):
        tracking_service.list_wallets.side_effect = RuntimeError("db down")
        update = make_text_update("/list\n/status")

        await bot_handlers.handle_text(update, AsyncMock())

        text, _ = _reply(update.message)
        assert text == "Error processing commands: db down"
        update.message.reply_text.assert_awaited_once()
        tracking_service.get_user_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_user_runs_without_queue(self, bot_handlers, tracking_service, make_text_update):
        update = make_text_update("/help\n/list", user_id=None)

        with patch.object(bot_handlers.queue, "enqueue", AsyncMock()) as enqueue:
            await bot_handlers.handle_text(update, AsyncMock())

        enqueue.assert_not_awaited()
        text, _ = _reply(update.message)
        assert messages.USER_NOT_IDENTIFIED in text
        tracking_service.list_wallets.assert_not_awaited()


class TestCallbackQueries:
    @pytest.mark.asyncio
    async def test_wallet_menu_callback(self, bot_handlers, tracking_service, make_callback_update):
        tracking_service.get_wallet_detail.return_value = "Wallet #3"
        update = make_callback_update("wallet_menu:3")

        await bot_handlers.handle_callback_query(update, AsyncMock())

        update.callback_query.answer.assert_awaited_once_with(messages.CALLBACK_WORKING)
        tracking_service.get_wallet_detail.assert_awaited_once()
        assert tracking_service.get_wallet_detail.await_args.args[1] == "#3"
        message = update.callback_query.message
        text, kwargs = _reply(message)
        assert text == "Wallet #3"
        assert isinstance(kwargs["reply_markup"], InlineKeyboardMarkup)

    @pytest.mark.asyncio
    async def test_callback_without_data(self, bot_handlers, make_callback_update):
        update = make_callback_update(None)

        await bot_handlers.handle_callback_query(update, AsyncMock())

        update.callback_query.answer.assert_awaited_once_with(messages.CALLBACK_NOT_SUPPORTED)

    @pytest.mark.asyncio
    async def test_unknown_callback(self, bot_handlers, tracking_service, make_callback_update):
        update = make_callback_update("wallet_menu:abc")

        await bot_handlers.handle_callback_query(update, AsyncMock())

        update.callback_query.answer.assert_awaited_once_with(messages.CALLBACK_UNKNOWN)
        assert tracking_service.mock_calls == []

    @pytest.mark.asyncio
    async def test_callback_without_user(self, bot_handlers, make_callback_update):
        update = make_callback_update("wallet_menu:3", user_id=None)

        await bot_handlers.handle_callback_query(update, AsyncMock())

        update.callback_query.answer.assert_awaited_once_with(messages.USER_NOT_IDENTIFIED)

    @pytest.mark.asyncio
    async def test_failed_answer_does_not_stop_the_action(
        self, bot_handlers, tracking_service, make_callback_update
    ):
        tracking_service.mute_alerts.return_value = "Muted for 30 minutes"
        update = make_callback_update("wallet_mute:30")
        update.callback_query.answer.side_effect = TelegramError("query is too old")

        await bot_handlers.handle_callback_query(update, AsyncMock())

        text, _ = _reply(update.callback_query.message)
        assert text == "Muted for 30 minutes"

    @pytest.mark.asyncio
    async def test_callback_unexpected_error(self, bot_handlers, tracking_service, make_callback_update):
        tracking_service.remove_wallet.side_effect = RuntimeError("timeout")
        update = make_callback_update("wallet_untrack:3")

        await bot_handlers.handle_callback_query(update, AsyncMock())

        text, _ = _reply(update.callback_query.message)
        assert text == "Error processing commands: timeout"
