"""Parsing of chat messages into bot commands.

A message may hold several commands, one per line, plus reply-keyboard
button labels. ``/track`` may spread its address and label over the lines
that follow it. Parsing never fails: lines that are not commands are skipped.
"""

from __future__ import annotations

import logging
import re
from typing import Final

from ..models import ChainKey, CommandKind, FilterTarget, ParsedCommand, TrackArgs
from . import messages

logger = logging.getLogger(__name__)

COMMAND_PREFIX: Final = "/"

COMMAND_TABLE: Final[dict[str, CommandKind]] = {
    "start": CommandKind.START,
    "app": CommandKind.APP,
    "help": CommandKind.HELP,
    "track": CommandKind.TRACK,
    "list": CommandKind.LIST,
    "untrack": CommandKind.UNTRACK,
    "history": CommandKind.HISTORY,
    "wallet": CommandKind.WALLET,
    "status": CommandKind.STATUS,
    "filter": CommandKind.FILTER,
    "threshold": CommandKind.THRESHOLD,
    "filters": CommandKind.FILTERS,
    "walletfilters": CommandKind.WALLET_FILTERS,
    "wfilter": CommandKind.WALLET_FILTER,
    "quiet": CommandKind.QUIET,
    "tz": CommandKind.TZ,
    "mute": CommandKind.MUTE,
}

MENU_BUTTON_TABLE: Final[dict[str, CommandKind]] = {
    messages.BUTTON_MAIN_MENU: CommandKind.START,
    messages.BUTTON_APP: CommandKind.APP,
    messages.BUTTON_MINI_APP: CommandKind.APP,
    messages.BUTTON_TRACK: CommandKind.TRACK_HINT,
    messages.BUTTON_LIST: CommandKind.LIST,
    messages.BUTTON_STATUS: CommandKind.STATUS,
    messages.BUTTON_HISTORY: CommandKind.HISTORY_HINT,
    messages.BUTTON_FILTERS: CommandKind.FILTERS,
    messages.BUTTON_UNTRACK: CommandKind.UNTRACK_HINT,
    messages.BUTTON_HELP: CommandKind.HELP,
}

CHAIN_ALIASES: Final[dict[str, ChainKey]] = {
    "eth": ChainKey.ETHEREUM_MAINNET,
    "ethereum": ChainKey.ETHEREUM_MAINNET,
    "sol": ChainKey.SOLANA_MAINNET,
    "solana": ChainKey.SOLANA_MAINNET,
    "tron": ChainKey.TRON_MAINNET,
    "trx": ChainKey.TRON_MAINNET,
}


def resolve_chain_alias(raw_alias: str) -> ChainKey | None:
    """Map a user-typed chain alias to its chain, case-insensitively."""
    return CHAIN_ALIASES.get(raw_alias.strip().lower())


def parse_on_off(raw_state: str) -> bool | None:
    """Parse an ``on``/``off`` token, None for anything else."""
    normalized = raw_state.strip().lower()
    if normalized == "on":
        return True
    if normalized == "off":
        return False
    return None


def resolve_filter_target(raw_target: str) -> FilterTarget | None:
    """Parse a ``transfer``/``swap`` token, None for anything else."""
    normalized = raw_target.strip().lower()
    try:
        return FilterTarget(normalized)
    except ValueError:
        return None


def parse_track_args(args: list[str]) -> TrackArgs | None:
    """Interpret ``/track`` arguments as chain alias, address and label.

    Args:
        args: Arguments of a parsed ``/track`` command.

    Returns:
        TrackArgs if the first argument is a known chain alias and an address
        follows, None otherwise. Remaining arguments are joined into the label.
    """
    if len(args) < 2 or not args[0] or not args[1]:
        return None

    chain_key = resolve_chain_alias(args[0])
    if chain_key is None:
        return None

    label = " ".join(args[2:]).strip() or None
    return TrackArgs(chain_key=chain_key, address=args[1].strip(), label=label)


class CommandParser:
    """Turns message text into an ordered list of ParsedCommand."""

    LINE_SPLIT: Final[re.Pattern[str]] = re.compile(r"\r?\n")
    # /track <alias> <address> <label> spans at most two continuation lines
    MAX_TRACK_CONTINUATION: Final = 2

    def parse(self, text: str) -> list[ParsedCommand]:
        """Parse every command in a message.

        Args:
            text: Raw message text.

        Returns:
            Commands in source-line order. Unknown commands and plain text
            produce nothing.
        """
        lines = self.LINE_SPLIT.split(text)
        commands: list[ParsedCommand] = []

        index = 0
        while index < len(lines):
            line = lines[index].strip()
            line_number = index + 1
            index += 1

            if not line:
                continue

            menu_command = MENU_BUTTON_TABLE.get(line)
            if menu_command is not None:
                commands.append(ParsedCommand(command=menu_command, args=[], source_line=line_number))
                continue

            if not line.startswith(COMMAND_PREFIX):
                continue

            parsed = self._parse_command_line(lines, line_number - 1, line)
            if parsed is None:
                logger.debug("Dropped unknown command on line %d", line_number)
                continue

            commands.append(parsed)
            index += self._consumed_lines(line, parsed)

        return commands

    def _parse_command_line(
        self, lines: list[str], line_index: int, line: str
    ) -> ParsedCommand | None:
        tokens = line.split()
        command_name = tokens[0][len(COMMAND_PREFIX):].split("@", 1)[0].lower()
        if not command_name:
            return None

        command = COMMAND_TABLE.get(command_name)
        if command is None:
            return None

        args = tokens[1:]
        if command is CommandKind.TRACK:
            args = self._resolve_track_args(args, lines, line_index)

        return ParsedCommand(command=command, args=args, source_line=line_index + 1)

    def _resolve_track_args(self, args: list[str], lines: list[str], line_index: int) -> list[str]:
        if not args or resolve_chain_alias(args[0]) is None:
            return args

        if len(args) == 1:
            address = self._read_plain_line(lines, line_index + 1)
            if not address:
                return args
            label = self._read_plain_line(lines, line_index + 2)
            return [args[0], address, label] if label else [args[0], address]

        if len(args) == 2:
            label = self._read_plain_line(lines, line_index + 1)
            return [args[0], args[1], label] if label else args

        return args

    def _consumed_lines(self, line: str, parsed: ParsedCommand) -> int:
        """Count the continuation lines a ``/track`` command absorbed."""
        if parsed.command is not CommandKind.TRACK:
            return 0

        inline_args = len(line.split()) - 1
        consumed = len(parsed.args) - inline_args
        return min(max(consumed, 0), self.MAX_TRACK_CONTINUATION)

    @staticmethod
    def _read_plain_line(lines: list[str], index: int) -> str:
        if index >= len(lines):
            return ""
        line = lines[index].strip()
        if not line or line.startswith(COMMAND_PREFIX):
            return ""
        return line
