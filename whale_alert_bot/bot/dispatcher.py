"""Routing of parsed commands and decoded callbacks to the tracking service.

The dispatcher holds no business logic. It checks that commands needing a
user have one, turns arguments into tracking service calls and shapes the
answers into ExecutionResult values with their keyboards.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable

from ..models import (
    CallbackAction,
    CallbackTarget,
    CommandKind,
    ExecutionResult,
    FilterTarget,
    GlobalFilterMode,
    GlobalFiltersPayload,
    HistoryDirection,
    HistoryKind,
    HistoryQuery,
    HistorySource,
    ParsedCommand,
    UserIdentity,
    WalletFilterState,
)
from ..services.tracking import TrackingError, TrackingServiceProtocol
from . import messages
from .command_parser import parse_on_off, parse_track_args, resolve_filter_target
from .keyboards import KeyboardBuilder
from .response_formatter import ResponseFormatter, response_formatter
from .types import UpdateMeta

logger = logging.getLogger(__name__)

PublicCommandHandler = Callable[[ParsedCommand], Awaitable[ExecutionResult]]
UserCommandHandler = Callable[[UserIdentity, ParsedCommand], Awaitable[ExecutionResult]]
CallbackHandler = Callable[[UserIdentity, CallbackTarget], Awaitable[ExecutionResult]]

CALLBACK_SOURCE_LINE = 1
IGNORE_SOURCE = "alert_button"
HTML = "HTML"

_WALLET_REF = re.compile(r"#?([0-9]+)")


def parse_wallet_ref(raw: str) -> int | None:
    """Numeric wallet id of a ``#3``/``3`` reference, None for addresses."""
    match = _WALLET_REF.fullmatch(raw.strip())
    return int(match.group(1)) if match else None


def toggle_dex_lists(
    include: list[str], exclude: list[str], payload: GlobalFiltersPayload
) -> tuple[list[str], list[str]]:
    """Apply a global DEX toggle to copies of the include and exclude lists.

    Enabling a DEX in one mode removes it from the other list so a DEX is
    never both included and excluded.

    Args:
        include: Current include list.
        exclude: Current exclude list.
        payload: Toggle request with ``dex_key`` and ``enabled`` set.

    Returns:
        New ``(include, exclude)`` lists.
    """
    include, exclude = list(include), list(exclude)
    if payload.dex_key is None or payload.enabled is None:
        return include, exclude

    dex = payload.dex_key.value
    edited, other = (include, exclude) if payload.mode is GlobalFilterMode.INCLUDE else (exclude, include)

    if payload.enabled and dex not in edited:
        edited.append(dex)
    elif not payload.enabled and dex in edited:
        edited.remove(dex)

    if dex in other:
        other.remove(dex)

    return include, exclude


def _dex_filter_value(dexes: list[str]) -> str:
    return ",".join(dexes) if dexes else "off"


class Dispatcher:
    """Maps commands and callback actions to handlers.

    Commands in ``_user_commands`` need a known user; without one they answer
    USER_NOT_IDENTIFIED and the tracking service is not called.
    """

    def __init__(
        self,
        tracking_service: TrackingServiceProtocol,
        keyboards: KeyboardBuilder,
        formatter: ResponseFormatter = response_formatter,
        app_version: str = "",
        history_page_size: int = 10,
    ):
        """Initialize dispatcher.

        Args:
            tracking_service: Business layer that executes the commands.
            keyboards: Builder for reply keyboards.
            formatter: Renderer for filter screens.
            app_version: Release tag shown by /status.
            history_page_size: Page size for history opened from buttons.
        """
        self.tracking = tracking_service
        self.keyboards = keyboards
        self.formatter = formatter
        self.app_version = app_version
        self.history_page_size = history_page_size

        self._public_commands: dict[CommandKind, PublicCommandHandler] = {
            CommandKind.START: self._start,
            CommandKind.HELP: self._help,
            CommandKind.APP: self._app,
            CommandKind.TRACK_HINT: self._track_hint,
            CommandKind.HISTORY_HINT: self._history_hint,
            CommandKind.UNTRACK_HINT: self._untrack_hint,
        }
        self._user_commands: dict[CommandKind, UserCommandHandler] = {
            CommandKind.TRACK: self._track,
            CommandKind.LIST: self._list,
            CommandKind.UNTRACK: self._untrack,
            CommandKind.HISTORY: self._history,
            CommandKind.WALLET: self._wallet,
            CommandKind.STATUS: self._status,
            CommandKind.FILTER: self._filter,
            CommandKind.THRESHOLD: self._threshold,
            CommandKind.FILTERS: self._filters,
            CommandKind.WALLET_FILTERS: self._wallet_filters,
            CommandKind.WALLET_FILTER: self._wallet_filter,
            CommandKind.QUIET: self._quiet,
            CommandKind.TZ: self._timezone,
            CommandKind.MUTE: self._mute,
        }
        self._callbacks: dict[CallbackAction, CallbackHandler] = {
            CallbackAction.MENU: self._on_wallet_menu,
            CallbackAction.HISTORY: self._on_history,
            CallbackAction.HISTORY_PAGE: self._on_history,
            CallbackAction.HISTORY_REFRESH: self._on_history,
            CallbackAction.UNTRACK: self._on_untrack,
            CallbackAction.MUTE: self._on_mute,
            CallbackAction.IGNORE_24H: self._on_ignore,
            CallbackAction.WALLET_FILTERS: self._on_wallet_filters,
            CallbackAction.WALLET_FILTER_TOGGLE: self._on_wallet_filters,
            CallbackAction.GLOBAL_FILTERS: self._on_global_filters,
            CallbackAction.GLOBAL_FILTERS_MODE: self._on_global_filters,
            CallbackAction.GLOBAL_FILTERS_TOGGLE: self._on_global_filters_change,
            CallbackAction.GLOBAL_FILTERS_RESET: self._on_global_filters_change,
        }

    async def run(
        self,
        identity: UserIdentity | None,
        commands: list[ParsedCommand],
        meta: UpdateMeta | None = None,
    ) -> list[ExecutionResult]:
        """Execute the commands of one message in order.

        A TrackingError only fails its own command. Any other exception stops
        the batch and propagates to the caller.

        Args:
            identity: Sender of the message, None when Telegram gave no user.
            commands: Commands parsed from the message.
            meta: Update identifiers for logging.

        Returns:
            One result per command, in command order.
        """
        return [await self.run_command(identity, command, meta) for command in commands]

    async def run_command(
        self, identity: UserIdentity | None, command: ParsedCommand, meta: UpdateMeta | None = None
    ) -> ExecutionResult:
        update_id = meta["update_id"] if meta else None

        public_handler = self._public_commands.get(command.command)
        if public_handler is not None:
            return await public_handler(command)

        user_handler = self._user_commands.get(command.command)
        if user_handler is None:
            logger.info("No handler for /%s line=%d", command.command, command.source_line)
            return self._result(command, messages.UNKNOWN_COMMAND)

        if identity is None:
            logger.warning(
                "Command /%s rejected: user is missing line=%d update_id=%s",
                command.command,
                command.source_line,
                update_id,
            )
            return self._result(command, messages.USER_NOT_IDENTIFIED)

        try:
            return await user_handler(identity, command)
        except TrackingError as e:
            logger.info("Command /%s failed for %s: %s", command.command, identity.telegram_id, e)
            return self._result(command, messages.COMMAND_FAILED.format(error=e))

    async def run_callback(self, identity: UserIdentity, target: CallbackTarget) -> ExecutionResult:
        """Execute a decoded inline-button action.

        Args:
            identity: User who tapped the button.
            target: Decoded callback target.

        Returns:
            Result to send as a new message.
        """
        handler = self._callbacks[target.action]
        try:
            return await handler(identity, target)
        except TrackingError as e:
            logger.info("Callback %s failed for %s: %s", target.action, identity.telegram_id, e)
            return ExecutionResult(
                source_line=CALLBACK_SOURCE_LINE, message=messages.COMMAND_FAILED.format(error=e)
            )

    @staticmethod
    def _result(command: ParsedCommand, message: str, **kwargs) -> ExecutionResult:
        return ExecutionResult(source_line=command.source_line, message=message, **kwargs)

    @staticmethod
    def _arg(command: ParsedCommand, index: int) -> str | None:
        return command.args[index] if len(command.args) > index else None

    # Commands without a user

    async def _start(self, command: ParsedCommand) -> ExecutionResult:
        return self._result(command, messages.START_MESSAGE)

    async def _help(self, command: ParsedCommand) -> ExecutionResult:
        return self._result(command, messages.HELP_MESSAGE)

    async def _app(self, command: ParsedCommand) -> ExecutionResult:
        keyboard = self.keyboards.app_entry()
        if keyboard is None:
            return self._result(command, messages.APP_NOT_CONFIGURED)
        return self._result(command, messages.APP_OPEN, keyboard=keyboard)

    async def _track_hint(self, command: ParsedCommand) -> ExecutionResult:
        return self._result(command, messages.TRACK_HINT_MESSAGE)

    async def _history_hint(self, command: ParsedCommand) -> ExecutionResult:
        return self._result(command, messages.HISTORY_HINT_MESSAGE)

    async def _untrack_hint(self, command: ParsedCommand) -> ExecutionResult:
        return self._result(command, messages.UNTRACK_HINT_MESSAGE)

    # Commands of a known user

    async def _track(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        track_args = parse_track_args(command.args)
        if track_args is None:
            return self._result(command, messages.TRACK_USAGE)

        message = await self.tracking.track_wallet(
            user, track_args.address, track_args.label, track_args.chain_key
        )
        return self._result(command, message)

    async def _list(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        message = await self.tracking.list_wallets(user)
        wallets = await self.tracking.list_wallet_options(user)
        keyboard = self.keyboards.wallet_menu(wallets) if wallets else None
        return self._result(command, message, keyboard=keyboard)

    async def _untrack(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        wallet_ref = self._arg(command, 0)
        if wallet_ref is None:
            return self._result(command, messages.UNTRACK_USAGE)
        return self._result(command, await self.tracking.remove_wallet(user, wallet_ref))

    async def _history(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        raw_address = self._arg(command, 0)
        if raw_address is None:
            return self._result(command, messages.HISTORY_USAGE)

        page = await self.tracking.get_history_page(
            user,
            HistoryQuery(
                raw_address=raw_address,
                raw_limit=self._arg(command, 1),
                raw_kind=self._arg(command, 2),
                raw_direction=self._arg(command, 3),
                source=HistorySource.COMMAND,
            ),
        )
        return self._result(
            command, page.message, keyboard=self.keyboards.history_actions(page), parse_mode=HTML
        )

    async def _wallet(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        wallet_ref = self._arg(command, 0)
        if wallet_ref is None:
            return self._result(command, messages.WALLET_USAGE)

        message = await self.tracking.get_wallet_detail(user, wallet_ref)
        wallet_id = parse_wallet_ref(wallet_ref)
        keyboard = self.keyboards.wallet_actions(wallet_id) if wallet_id is not None else None
        return self._result(command, message, keyboard=keyboard)

    async def _status(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        user_status = await self.tracking.get_user_status(user)
        header = messages.STATUS_HEADER.format(version=self.app_version or "n/a")
        return self._result(command, f"{header}\n\n{user_status}")

    async def _filter(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        if len(command.args) < 2:
            return self._result(command, messages.FILTER_USAGE)

        key = command.args[0].strip().lower()
        value = " ".join(command.args[1:])
        setters: dict[str, Callable[[UserIdentity, str], Awaitable[str]]] = {
            "min_amount_usd": self.tracking.set_min_amount_usd,
            "cex": self.tracking.set_cex_flow_filter,
            "type": self.tracking.set_smart_filter_type,
            "include_dex": self.tracking.set_include_dex_filter,
            "exclude_dex": self.tracking.set_exclude_dex_filter,
        }
        setter = setters.get(key)
        if setter is None:
            return self._result(command, messages.FILTER_UNKNOWN_KEY)
        return self._result(command, await setter(user, value))

    async def _threshold(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        value = self._arg(command, 0)
        if not value:
            return self._result(command, messages.THRESHOLD_USAGE)
        return self._result(command, await self.tracking.set_threshold_usd(user, value))

    async def _filters(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        raw_target, raw_state = self._arg(command, 0), self._arg(command, 1)

        if raw_target is None and raw_state is None:
            return await self._global_filters_result(user, GlobalFilterMode.INCLUDE, command.source_line)
        if raw_target is None or raw_state is None:
            return self._result(command, messages.FILTERS_USAGE)

        enabled = parse_on_off(raw_state)
        if enabled is None:
            return self._result(command, messages.FILTERS_INVALID_STATE)
        target = resolve_filter_target(raw_target)
        if target is None:
            return self._result(command, messages.FILTERS_UNKNOWN_TARGET)

        message = await self.tracking.set_event_type_filter(user, target, enabled)
        screen = await self._global_filters_result(user, GlobalFilterMode.INCLUDE, command.source_line)
        return screen.model_copy(update={"message": f"{message}\n\n{screen.message}"})

    async def _wallet_filters(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        wallet_ref = self._arg(command, 0)
        if wallet_ref is None:
            return self._result(command, messages.WALLET_FILTERS_USAGE)

        state = await self.tracking.get_wallet_filter_state(user, wallet_ref)
        return self._wallet_filters_result(state, command.source_line)

    async def _wallet_filter(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        if len(command.args) < 3:
            return self._result(command, messages.WALLET_FILTER_USAGE)

        wallet_ref = command.args[0]
        target = resolve_filter_target(command.args[1])
        enabled = parse_on_off(command.args[2])
        if target is None or enabled is None:
            return self._result(command, messages.WALLET_FILTER_INVALID)

        state = await self.tracking.set_wallet_event_type_filter(user, wallet_ref, target, enabled)
        return self._wallet_filters_result(state, command.source_line)

    async def _quiet(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        window = self._arg(command, 0)
        if not window:
            return self._result(command, messages.QUIET_USAGE)
        return self._result(command, await self.tracking.set_quiet_hours(user, window))

    async def _timezone(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        timezone = self._arg(command, 0)
        if not timezone:
            return self._result(command, messages.TZ_USAGE)
        return self._result(command, await self.tracking.set_user_timezone(user, timezone))

    async def _mute(self, user: UserIdentity, command: ParsedCommand) -> ExecutionResult:
        minutes = self._arg(command, 0)
        if not minutes:
            return self._result(command, messages.MUTE_USAGE)
        return self._result(command, await self.tracking.mute_alerts(user, minutes))

    # Shared screens

    def _wallet_filters_result(self, state: WalletFilterState, source_line: int) -> ExecutionResult:
        return ExecutionResult(
            source_line=source_line,
            message=self.formatter.format_wallet_filters(state),
            keyboard=self.keyboards.wallet_filters(state),
        )

    async def _global_filters_result(
        self, user: UserIdentity, mode: GlobalFilterMode, source_line: int
    ) -> ExecutionResult:
        settings = await self.tracking.get_settings(user)
        return ExecutionResult(
            source_line=source_line,
            message=self.formatter.format_global_filters(settings, mode),
            keyboard=self.keyboards.global_filters(settings, mode),
        )

    # Callbacks

    async def _on_wallet_menu(self, user: UserIdentity, target: CallbackTarget) -> ExecutionResult:
        message = await self.tracking.get_wallet_detail(user, f"#{target.wallet_id}")
        return ExecutionResult(
            source_line=CALLBACK_SOURCE_LINE,
            message=message,
            keyboard=self.keyboards.wallet_actions(target.wallet_id),
        )

    async def _on_history(self, user: UserIdentity, target: CallbackTarget) -> ExecutionResult:
        offset = getattr(target, "offset", 0)
        limit = getattr(target, "limit", self.history_page_size)
        kind = getattr(target, "kind", HistoryKind.ALL)
        direction = getattr(target, "direction", HistoryDirection.ALL)

        page = await self.tracking.get_history_page(
            user,
            HistoryQuery(
                raw_address=f"#{target.wallet_id}",
                raw_limit=str(limit),
                raw_offset=str(offset),
                raw_kind=kind.value,
                raw_direction=direction.value,
                source=HistorySource.CALLBACK,
            ),
        )
        return ExecutionResult(
            source_line=CALLBACK_SOURCE_LINE,
            message=page.message,
            keyboard=self.keyboards.history_actions(page),
            parse_mode=HTML,
        )

    async def _on_untrack(self, user: UserIdentity, target: CallbackTarget) -> ExecutionResult:
        message = await self.tracking.remove_wallet(user, f"#{target.wallet_id}")
        return ExecutionResult(source_line=CALLBACK_SOURCE_LINE, message=message)

    async def _on_mute(self, user: UserIdentity, target: CallbackTarget) -> ExecutionResult:
        message = await self.tracking.mute_alerts(user, str(target.mute_minutes))
        return ExecutionResult(source_line=CALLBACK_SOURCE_LINE, message=message)

    async def _on_ignore(self, user: UserIdentity, target: CallbackTarget) -> ExecutionResult:
        message = await self.tracking.mute_wallet(
            user, f"#{target.wallet_id}", target.mute_minutes, IGNORE_SOURCE
        )
        return ExecutionResult(source_line=CALLBACK_SOURCE_LINE, message=message)

    async def _on_wallet_filters(self, user: UserIdentity, target: CallbackTarget) -> ExecutionResult:
        wallet_ref = f"#{target.wallet_id}"
        if target.action is CallbackAction.WALLET_FILTER_TOGGLE:
            state = await self.tracking.set_wallet_event_type_filter(
                user, wallet_ref, FilterTarget(target.target), target.enabled
            )
        else:
            state = await self.tracking.get_wallet_filter_state(user, wallet_ref)
        return self._wallet_filters_result(state, CALLBACK_SOURCE_LINE)

    async def _on_global_filters(self, user: UserIdentity, target: CallbackTarget) -> ExecutionResult:
        return await self._global_filters_result(user, target.payload.mode, CALLBACK_SOURCE_LINE)

    async def _on_global_filters_change(
        self, user: UserIdentity, target: CallbackTarget
    ) -> ExecutionResult:
        payload: GlobalFiltersPayload = target.payload
        is_include = payload.mode is GlobalFilterMode.INCLUDE

        if payload.is_reset:
            if is_include:
                await self.tracking.set_include_dex_filter(user, "off")
            else:
                await self.tracking.set_exclude_dex_filter(user, "off")
        else:
            settings = await self.tracking.get_settings(user)
            include, exclude = toggle_dex_lists(settings.include_dexes, settings.exclude_dexes, payload)
            await self.tracking.set_include_dex_filter(user, _dex_filter_value(include))
            await self.tracking.set_exclude_dex_filter(user, _dex_filter_value(exclude))

        return await self._global_filters_result(user, payload.mode, CALLBACK_SOURCE_LINE)
