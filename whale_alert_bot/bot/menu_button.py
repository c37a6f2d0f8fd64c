"""Chat menu button pointing at the Mini App."""

import logging

from telegram import Bot, MenuButtonWebApp, WebAppInfo
from telegram.error import TelegramError

from .keyboards import KeyboardBuilder
from .messages import BUTTON_MINI_APP

logger = logging.getLogger(__name__)


async def sync_menu_button(bot: Bot, keyboards: KeyboardBuilder) -> bool:
    """Set the default chat menu button to open the Mini App.

    Does nothing when no Mini App URL is configured. Telegram errors are
    logged and do not stop start-up.

    Returns:
        True if the menu button was updated.
    """
    app_url = keyboards.tma_root_url()
    if app_url is None:
        logger.info("Mini App URL not configured, keeping default menu button")
        return False

    try:
        await bot.set_chat_menu_button(
            menu_button=MenuButtonWebApp(text=BUTTON_MINI_APP, web_app=WebAppInfo(url=app_url))
        )
    except TelegramError as e:
        logger.warning("Failed to set chat menu button: %s", e)
        return False

    logger.info("Chat menu button set to %s", app_url)
    return True
