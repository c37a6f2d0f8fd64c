"""Response formatting for bot replies.

Combines per-command execution results into one reply and renders the filter
screens shown by commands and callbacks.
"""

import logging

from telegram import InlineKeyboardMarkup, ReplyKeyboardMarkup

from ..models import ExecutionResult, GlobalFilterMode, UserSettings, WalletFilterState
from .messages import (
    BATCH_HEADER,
    BATCH_ITEM,
    COMMAND_NOT_RECOGNIZED,
    GLOBAL_FILTERS_TEMPLATE,
    WALLET_FILTERS_INHERITED,
    WALLET_FILTERS_OVERRIDE,
    WALLET_FILTERS_TEMPLATE,
    WALLET_NO_LABEL,
)

logger = logging.getLogger(__name__)


class ResponseFormatter:
    """Formats execution results and filter screens into message text.

    Responsibilities:
    - Frame multi-command batches with a header and per-line sections
    - Decide which keyboard and parse mode a batch reply carries
    - Render the wallet and global filter screens
    """

    def format_results(self, results: list[ExecutionResult]) -> str:
        """Combine the results of one message into reply text.

        A single result is sent as is. Several results get a
        ``"N commands processed"`` header and one ``"i. Line n:"`` section each.

        Args:
            results: Results in command order.

        Returns:
            Reply text.
        """
        if not results:
            return COMMAND_NOT_RECOGNIZED

        if len(results) == 1:
            return results[0].message

        sections = [
            BATCH_ITEM.format(index=index, line=result.source_line, message=result.message)
            for index, result in enumerate(results, start=1)
        ]
        return "\n\n".join([BATCH_HEADER.format(count=len(results)), *sections])

    def resolve_keyboard(
        self, results: list[ExecutionResult]
    ) -> InlineKeyboardMarkup | ReplyKeyboardMarkup | None:
        """Keyboard of a single-result reply; batches fall back to the menu keyboard."""
        if len(results) == 1:
            return results[0].keyboard
        return None

    def resolve_parse_mode(self, results: list[ExecutionResult]) -> str | None:
        if len(results) == 1:
            return results[0].parse_mode
        return None

    def format_wallet_filters(self, state: WalletFilterState) -> str:
        """Render the per-wallet filter screen."""
        return WALLET_FILTERS_TEMPLATE.format(
            wallet_id=state.wallet_id,
            label=state.wallet_label or WALLET_NO_LABEL,
            chain=state.chain_key,
            address=state.wallet_address,
            transfer="on" if state.allow_transfer else "off",
            swap="on" if state.allow_swap else "off",
            source=WALLET_FILTERS_OVERRIDE if state.has_wallet_override else WALLET_FILTERS_INHERITED,
        )

    def format_global_filters(self, settings: UserSettings, mode: GlobalFilterMode) -> str:
        """Render the global DEX filter screen for the list being edited."""
        return GLOBAL_FILTERS_TEMPLATE.format(
            mode=mode,
            include=", ".join(settings.include_dexes) or "all",
            exclude=", ".join(settings.exclude_dexes) or "all",
        )


response_formatter = ResponseFormatter()
