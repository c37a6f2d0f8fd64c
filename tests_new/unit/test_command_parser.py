"""Unit tests for message parsing and command argument helpers."""

import pytest

from whale_alert_bot.bot import messages
from whale_alert_bot.bot.command_parser import (
    CommandParser,
    parse_on_off,
    parse_track_args,
    resolve_chain_alias,
    resolve_filter_target,
)
from whale_alert_bot.models import ChainKey, CommandKind, FilterTarget


@pytest.fixture
def parser() -> CommandParser:
    return CommandParser()


class TestCommandParser:
    def test_track_on_one_line(self, parser):
        commands = parser.parse("/track eth 0xABC123 label")

        assert len(commands) == 1
        assert commands[0].command is CommandKind.TRACK
        assert commands[0].args == ["eth", "0xABC123", "label"]
        assert commands[0].source_line == 1

    def test_track_address_and_label_on_following_lines(self, parser):
        commands = parser.parse("/track sol\nADDR\nlabel")

        assert len(commands) == 1
        assert commands[0].args == ["sol", "ADDR", "label"]
        assert commands[0].source_line == 1

    def test_track_label_on_following_line(self, parser):
        commands = parser.parse("/track eth 0xABC\nmy whale\n/list")

        assert [c.command for c in commands] == [CommandKind.TRACK, CommandKind.LIST]
        assert commands[0].args == ["eth", "0xABC", "my whale"]
        assert commands[1].source_line == 3

    def test_track_continuation_stops_at_command_line(self, parser):
        commands = parser.parse("/track eth\n/list")

        assert [c.command for c in commands] == [CommandKind.TRACK, CommandKind.LIST]
        assert commands[0].args == ["eth"]
        assert commands[1].source_line == 2

    def test_two_track_blocks_have_distinct_lines(self, parser):
        text = "/track eth\n0xAAA\nfirst\n/track sol\nSoLAddr\nsecond"

        commands = parser.parse(text)

        assert len(commands) == 2
        assert commands[0].args == ["eth", "0xAAA", "first"]
        assert commands[0].source_line == 1
        assert commands[1].args == ["sol", "SoLAddr", "second"]
        assert commands[1].source_line == 4

    def test_track_with_unknown_alias_keeps_raw_tokens(self, parser):
        commands = parser.parse("/track btc\nbc1qxyz")

        assert len(commands) == 1
        assert commands[0].args == ["btc"]

    def test_multiple_commands_with_blank_lines(self, parser):
        commands = parser.parse("/list\n\n  \n/status\r\n/history #3 20")

        assert [(c.command, c.source_line) for c in commands] == [
            (CommandKind.LIST, 1),
            (CommandKind.STATUS, 4),
            (CommandKind.HISTORY, 5),
        ]
        assert commands[2].args == ["#3", "20"]

    def test_bot_mention_and_case_are_ignored(self, parser):
        commands = parser.parse("/HELP@WhaleAlertBot")

        assert commands[0].command is CommandKind.HELP

    def test_unknown_command_and_plain_text_are_dropped(self, parser):
        assert parser.parse("hello there\n/unknown arg\n/") == []

    def test_menu_button_labels(self, parser):
        text = "\n".join([messages.BUTTON_LIST, messages.BUTTON_TRACK, messages.BUTTON_MINI_APP])

        commands = parser.parse(text)

        assert [c.command for c in commands] == [
            CommandKind.LIST,
            CommandKind.TRACK_HINT,
            CommandKind.APP,
        ]
        assert all(c.args == [] for c in commands)

    def test_menu_label_with_surrounding_whitespace(self, parser):
        commands = parser.parse(f"  {messages.BUTTON_HELP}  ")

        assert commands[0].command is CommandKind.HELP

    def test_every_slash_command_is_recognized(self, parser):
        names = [
            "start", "app", "help", "track", "list", "untrack", "history", "wallet",
            "status", "filter", "threshold", "filters", "walletfilters", "wfilter",
            "quiet", "tz", "mute",
        ]

        commands = parser.parse("\n".join(f"/{name}" for name in names))

        assert [c.command.value for c in commands] == names


class TestArgumentHelpers:
    @pytest.mark.parametrize(
        "alias,expected",
        [
            ("eth", ChainKey.ETHEREUM_MAINNET),
            ("Ethereum", ChainKey.ETHEREUM_MAINNET),
            ("SOL", ChainKey.SOLANA_MAINNET),
            ("solana", ChainKey.SOLANA_MAINNET),
            ("tron", ChainKey.TRON_MAINNET),
            ("trx", ChainKey.TRON_MAINNET),
            ("btc", None),
        ],
    )
    def test_resolve_chain_alias(self, alias, expected):
        assert resolve_chain_alias(alias) == expected

    @pytest.mark.parametrize("raw,expected", [("on", True), ("OFF", False), (" On ", True), ("yes", None)])
    def test_parse_on_off(self, raw, expected):
        assert parse_on_off(raw) is expected

    def test_resolve_filter_target(self):
        assert resolve_filter_target("Transfer") is FilterTarget.TRANSFER
        assert resolve_filter_target("swap") is FilterTarget.SWAP
        assert resolve_filter_target("mint") is None

    def test_parse_track_args_with_label(self):
        track_args = parse_track_args(["eth", "0xABC", "big", "fish"])

        assert track_args is not None
        assert track_args.chain_key is ChainKey.ETHEREUM_MAINNET
        assert track_args.address == "0xABC"
        assert track_args.label == "big fish"

    def test_parse_track_args_without_label(self):
        track_args = parse_track_args(["sol", "Addr"])

        assert track_args is not None
        assert track_args.label is None

    @pytest.mark.parametrize("args", [[], ["eth"], ["btc", "addr"]])
    def test_parse_track_args_invalid(self, args):
        assert parse_track_args(args) is None
