"""Dependency-injection container.

This module defines a dependency-injection (DI) container that wires together
the bot's protocol layer. The tracking service and the users repository live
outside this package; they are declared as dependencies and provided at
start-up.
"""

import importlib
import logging
from collections.abc import Callable
from typing import Any

from dependency_injector import containers, providers

from whale_alert_bot.bot.callback_codec import CallbackCodec
from whale_alert_bot.bot.command_parser import CommandParser
from whale_alert_bot.bot.dispatcher import Dispatcher
from whale_alert_bot.bot.handlers import BotHandlers
from whale_alert_bot.bot.keyboards import KeyboardBuilder
from whale_alert_bot.bot.response_formatter import ResponseFormatter
from whale_alert_bot.config import Config
from whale_alert_bot.config import config as default_config
from whale_alert_bot.services.auth_service import AuthService
from whale_alert_bot.services.session_queue import SessionQueue
from whale_alert_bot.services.telegram_auth import TelegramAuthVerifier

logger = logging.getLogger(__name__)


class Container(containers.DeclarativeContainer):
    """DI container for the application.

    This container holds the wiring for all the application's components.
    """

    config = providers.Configuration()

    # External collaborators
    tracking_service = providers.Dependency()
    users_repository = providers.Dependency()

    # Services
    session_queue = providers.Singleton(SessionQueue)
    auth_verifier = providers.Singleton(TelegramAuthVerifier, bot_token=config.bot.bot_token)
    auth_service = providers.Singleton(
        AuthService,
        verifier=auth_verifier,
        users_repository=users_repository,
        jwt_secret=config.auth.jwt_secret,
        access_ttl_sec=config.auth.access_ttl_sec,
        refresh_ttl_sec=config.auth.refresh_ttl_sec,
    )

    # Bot components
    callback_codec = providers.Singleton(CallbackCodec)
    command_parser = providers.Singleton(CommandParser)
    response_formatter = providers.Singleton(ResponseFormatter)
    keyboards = providers.Singleton(
        KeyboardBuilder,
        tma_base_url=config.bot.tma_base_url,
        app_version=config.bot.app_version,
        history_page_size=config.ui.history_page_size,
        wallet_title_max_length=config.ui.wallet_title_max_length,
        default_mute_minutes=config.ui.default_mute_minutes,
        codec=callback_codec,
    )
    dispatcher = providers.Singleton(
        Dispatcher,
        tracking_service=tracking_service,
        keyboards=keyboards,
        formatter=response_formatter,
        app_version=config.bot.app_version,
        history_page_size=config.ui.history_page_size,
    )
    handlers = providers.Singleton(
        BotHandlers,
        parser=command_parser,
        codec=callback_codec,
        dispatcher=dispatcher,
        queue=session_queue,
        formatter=response_formatter,
        keyboards=keyboards,
    )


def load_factory(path: str) -> Callable[[], Any]:
    """Resolve a ``package.module:callable`` path."""
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Expected 'module:callable', got {path!r}")
    return getattr(importlib.import_module(module_name), attr)


def create_container(app_config: Config = default_config) -> Container:
    """Build the container from the loaded configuration.

    The tracking service and users repository are created by the factories
    named in TRACKING_SERVICE_FACTORY and USERS_REPOSITORY_FACTORY. A
    dependency whose factory is not configured stays unset and fails when it
    is first needed.
    """
    container = Container()
    container.config.from_dict(app_config.as_dict())

    tracking_path = app_config.bot.tracking_service_factory
    if tracking_path:
        container.tracking_service.override(providers.Singleton(load_factory(tracking_path)))
        logger.info("Tracking service factory: %s", tracking_path)

    users_path = app_config.bot.users_repository_factory
    if users_path:
        container.users_repository.override(providers.Singleton(load_factory(users_path)))
        logger.info("Users repository factory: %s", users_path)

    return container
