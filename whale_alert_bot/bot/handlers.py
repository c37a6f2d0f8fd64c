"""Telegram update handlers.

Thin glue between python-telegram-bot and the protocol layer: text messages
are parsed into commands, button taps are decoded into callback targets, and
both run through the per-user session queue before the dispatcher executes
them. Replies are framed by the response formatter.
"""

import logging

from telegram import CallbackQuery, Message, Update
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from ..models import ExecutionResult, UserIdentity
from ..services.session_queue import SessionQueue
from .callback_codec import CallbackCodec
from .command_parser import CommandParser
from .dispatcher import Dispatcher
from .keyboards import KeyboardBuilder
from .messages import (
    BATCH_ERROR,
    CALLBACK_NOT_SUPPORTED,
    CALLBACK_UNKNOWN,
    CALLBACK_WORKING,
    USER_NOT_IDENTIFIED,
)
from .response_formatter import ResponseFormatter
from .types import UpdateMeta

logger = logging.getLogger(__name__)


def identity_from_update(update: Update) -> UserIdentity | None:
    """Build the sender identity, None when Telegram supplied no user."""
    user = update.effective_user
    if user is None:
        return None
    return UserIdentity(telegram_id=str(user.id), username=user.username)


def update_meta(update: Update) -> UpdateMeta:
    message = update.effective_message
    chat = update.effective_chat
    return {
        "update_id": update.update_id,
        "chat_id": chat.id if chat else None,
        "message_id": message.message_id if message else None,
    }


class BotHandlers:
    """Handlers registered with the telegram Application.

    Work for one user is serialized through the session queue so that a
    second message never interleaves with the first one's business calls.
    """

    def __init__(
        self,
        parser: CommandParser,
        codec: CallbackCodec,
        dispatcher: Dispatcher,
        queue: SessionQueue,
        formatter: ResponseFormatter,
        keyboards: KeyboardBuilder,
    ):
        self.parser = parser
        self.codec = codec
        self.dispatcher = dispatcher
        self.queue = queue
        self.formatter = formatter
        self.keyboards = keyboards

    async def handle_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle a text message holding one or more commands.

        Text without any recognized command is ignored. Results of all
        commands are sent back as one reply.

        Args:
            update: Telegram update object containing message data.
            context: Bot context for accessing application instance.
        """
        message = update.message
        if message is None or message.text is None:
            return

        meta = update_meta(update)
        commands = self.parser.parse(message.text)
        if not commands:
            logger.debug("No commands in message update_id=%s", meta["update_id"])
            return

        identity = identity_from_update(update)
        logger.info(
            "Received %d command(s) from %s update_id=%s",
            len(commands),
            identity.telegram_id if identity else "unknown",
            meta["update_id"],
        )

        try:
            if identity is None:
                results = await self.dispatcher.run(None, commands, meta)
            else:
                results = await self.queue.enqueue(
                    identity.telegram_id, lambda: self.dispatcher.run(identity, commands, meta)
                )
        except Exception as e:
            logger.warning("Error processing commands update_id=%s: %s", meta["update_id"], e)
            await self._reply_error(message, e)
            return

        await self._reply(message, results)

    async def handle_callback_query(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle an inline keyboard button tap.

        The query is always answered so the client stops its spinner; the
        result of the action is sent as a new message.

        Args:
            update: Telegram update object containing the callback query.
            context: Bot context for accessing application instance.
        """
        query = update.callback_query
        if query is None:
            return

        if not query.data:
            await self._answer(query, CALLBACK_NOT_SUPPORTED)
            return

        target = self.codec.decode(query.data)
        if target is None:
            logger.info("Unknown callback data: %s", query.data)
            await self._answer(query, CALLBACK_UNKNOWN)
            return

        identity = identity_from_update(update)
        if identity is None:
            await self._answer(query, USER_NOT_IDENTIFIED)
            return

        await self._answer(query, CALLBACK_WORKING)

        message = query.message if isinstance(query.message, Message) else None
        try:
            result = await self.queue.enqueue(
                identity.telegram_id, lambda: self.dispatcher.run_callback(identity, target)
            )
        except Exception as e:
            logger.warning("Error processing callback %s: %s", target.action, e)
            if message is not None:
                await self._reply_error(message, e)
            return

        if message is None:
            logger.warning("Callback %s has no message to reply to", target.action)
            return
        await self._reply(message, [result])

    async def _reply(self, message: Message, results: list[ExecutionResult]) -> None:
        text = self.formatter.format_results(results)
        keyboard = self.formatter.resolve_keyboard(results)
        if keyboard is None:
            keyboard = self.keyboards.main_menu()
        await message.reply_text(
            text,
            reply_markup=keyboard,
            parse_mode=self.formatter.resolve_parse_mode(results),
            disable_web_page_preview=True,
        )

    async def _reply_error(self, message: Message, error: Exception) -> None:
        await message.reply_text(
            BATCH_ERROR.format(error=error),
            reply_markup=self.keyboards.main_menu(),
            disable_web_page_preview=True,
        )

    @staticmethod
    async def _answer(query: CallbackQuery, text: str) -> None:
        try:
            await query.answer(text)
        except TelegramError as e:
            logger.warning("Failed to answer callback query: %s", e)
