"""Application entry point.

Main module that initializes and runs the Telegram bot application. Handles both
webhook mode (for production deployment on Railway) and polling mode (for local
development). Configures logging and registers the text and callback handlers.
"""

import logging

from telegram.ext import Application, CallbackQueryHandler, MessageHandler, filters

from .bot.menu_button import sync_menu_button
from .config import config
from .core.container import create_container

# Logging
logging.basicConfig(
    format="%(asctime)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Main application entry point.

    Builds the DI container, registers handlers and starts the bot in either
    webhook mode (production) or polling mode (development).

    Raises:
        RuntimeError: If BOT_TOKEN or TRACKING_SERVICE_FACTORY is not set.
    """
    if not config.bot.bot_token:
        raise RuntimeError("Set BOT_TOKEN environment variable")
    if not config.bot.tracking_service_factory:
        raise RuntimeError("Set TRACKING_SERVICE_FACTORY environment variable")

    container = create_container(config)
    handlers = container.handlers()
    keyboards = container.keyboards()

    # Create application
    app = Application.builder().token(config.bot.bot_token).build()

    async def post_init(application: Application) -> None:
        await sync_menu_button(application.bot, keyboards)

    app.post_init = post_init

    # Slash commands are parsed by the command parser, so they pass through the text filter
    app.add_handler(MessageHandler(filters.TEXT, handlers.handle_text))
    app.add_handler(CallbackQueryHandler(handlers.handle_callback_query))

    # Run in webhook or polling mode
    if config.bot.use_webhook:
        path = f"/{config.bot.bot_token}"
        webhook_url = f"https://{config.bot.webhook_domain}{path}"
        logger.info("Starting webhook at https://%s/<token>", config.bot.webhook_domain)

        app.run_webhook(
            listen=config.bot.listen_host,
            port=config.bot.port,
            url_path=path,
            webhook_url=webhook_url,
        )
    else:
        logger.warning("No public domain found; falling back to long-polling")
        app.run_polling()


if __name__ == "__main__":
    main()
