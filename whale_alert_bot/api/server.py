"""Login API entry point.

Runs the aiohttp application with the Telegram login endpoints used by the
web app and the Mini App.
"""

import logging

from aiohttp import web

from ..config import DEFAULT_JWT_SECRET, config
from ..core.container import create_container
from .auth_routes import create_app

logging.basicConfig(
    format="%(asctime)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Start the login API server.

    A missing BOT_TOKEN is not fatal here: the server starts and rejects every
    login until the token is configured.

    Raises:
        RuntimeError: If USERS_REPOSITORY_FACTORY is not set.
    """
    if not config.bot.users_repository_factory:
        raise RuntimeError("Set USERS_REPOSITORY_FACTORY environment variable")
    if not config.bot.bot_token:
        logger.warning("BOT_TOKEN is not set; all logins will be rejected")
    if config.auth.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is not set; tokens are signed with the development default")

    container = create_container(config)
    app = create_app(container.auth_service())

    logger.info("Starting login API on %s:%d", config.api.host, config.api.port)
    web.run_app(app, host=config.api.host, port=config.api.port, print=None)


if __name__ == "__main__":
    main()
