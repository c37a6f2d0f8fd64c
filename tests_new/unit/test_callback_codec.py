"""Unit tests for inline button callback data encoding and decoding."""

import pytest

from whale_alert_bot.bot.callback_codec import MAX_CALLBACK_DATA_BYTES, CallbackCodec
from whale_alert_bot.models import (
    DexKey,
    FilterTarget,
    GlobalFilterMode,
    GlobalFiltersModeTarget,
    GlobalFiltersResetTarget,
    GlobalFiltersTarget,
    GlobalFiltersToggleTarget,
    HistoryDirection,
    HistoryKind,
    HistoryPageTarget,
    HistoryRefreshTarget,
    IgnoreWalletTarget,
    MuteTarget,
    WalletFiltersTarget,
    WalletFilterToggleTarget,
    WalletHistoryTarget,
    WalletMenuTarget,
    WalletUntrackTarget,
)

ALL_TARGETS = [
    WalletMenuTarget(wallet_id=3),
    WalletUntrackTarget(wallet_id=4),
    WalletHistoryTarget(wallet_id=5),
    MuteTarget(mute_minutes=30),
    IgnoreWalletTarget(wallet_id=6),
    WalletFiltersTarget(wallet_id=7),
    WalletFilterToggleTarget(wallet_id=16, target=FilterTarget.SWAP, enabled=True),
    GlobalFiltersTarget(),
    GlobalFiltersModeTarget(mode=GlobalFilterMode.EXCLUDE),
    GlobalFiltersResetTarget(mode=GlobalFilterMode.INCLUDE),
    GlobalFiltersToggleTarget(mode=GlobalFilterMode.EXCLUDE, dex_key=DexKey.ONE_INCH, enabled=False),
    HistoryPageTarget(
        wallet_id=8, offset=20, limit=10, kind=HistoryKind.ERC20, direction=HistoryDirection.OUT
    ),
    HistoryRefreshTarget(wallet_id=9, limit=10, kind=HistoryKind.ETH, direction=HistoryDirection.IN),
]


@pytest.fixture
def codec() -> CallbackCodec:
    return CallbackCodec()


class TestRoundTrip:
    @pytest.mark.parametrize("target", ALL_TARGETS, ids=lambda target: target.action.value)
    def test_decode_inverts_encode(self, codec, target):
        data = codec.encode(target)

        assert len(data.encode()) <= MAX_CALLBACK_DATA_BYTES
        assert codec.decode(data) == target


class TestEncode:
    def test_wire_format(self, codec):
        assert codec.encode(WalletMenuTarget(wallet_id=3)) == "wallet_menu:3"
        assert codec.encode(IgnoreWalletTarget(wallet_id=6)) == "alert_ignore_24h:6"
        assert codec.encode(GlobalFiltersTarget()) == "gf:refresh"
        assert (
            codec.encode(
                GlobalFiltersToggleTarget(
                    mode=GlobalFilterMode.INCLUDE, dex_key=DexKey.UNISWAP, enabled=True
                )
            )
            == "gf:toggle:include:uniswap:on"
        )
        assert (
            codec.encode(HistoryPageTarget(wallet_id=8, offset=10, limit=10))
            == "wallet_history_page:8:10:10:all:all"
        )

    def test_oversized_payload_is_refused(self, codec):
        target = HistoryPageTarget(wallet_id=10**30, offset=10**15, limit=10**6)

        with pytest.raises(ValueError):
            codec.encode(target)


class TestDecode:
    def test_wallet_filter_toggle(self, codec):
        target = codec.decode("wallet_filter_toggle:16:transfer:off")

        assert target == WalletFilterToggleTarget(
            wallet_id=16, target=FilterTarget.TRANSFER, enabled=False
        )

    def test_wallet_filter_toggle_wrong_arity(self, codec):
        assert codec.decode("wallet_filter_toggle:16:transfer") is None

    def test_hash_prefixed_wallet_id(self, codec):
        assert codec.decode("wallet_menu:#12") == WalletMenuTarget(wallet_id=12)

    def test_tokens_are_case_insensitive(self, codec):
        target = codec.decode("gf:toggle:EXCLUDE:Curve:ON")

        assert target == GlobalFiltersToggleTarget(
            mode=GlobalFilterMode.EXCLUDE, dex_key=DexKey.CURVE, enabled=True
        )

    def test_ignore_has_fixed_mute_duration(self, codec):
        target = codec.decode("alert_ignore_24h:5")

        assert isinstance(target, IgnoreWalletTarget)
        assert target.mute_minutes == 1440

    def test_history_page_without_filters_defaults_to_all(self, codec):
        target = codec.decode("wallet_history_page:4:10:10")

        assert target == HistoryPageTarget(
            wallet_id=4, offset=10, limit=10, kind=HistoryKind.ALL, direction=HistoryDirection.ALL
        )

    def test_history_refresh_without_filters(self, codec):
        assert codec.decode("wallet_history_refresh:4:25") == HistoryRefreshTarget(wallet_id=4, limit=25)

    def test_bare_history_is_not_claimed_by_page_variants(self, codec):
        assert codec.decode("wallet_history:4") == WalletHistoryTarget(wallet_id=4)

    def test_global_filters_payload(self, codec):
        reset = codec.decode("gf:reset:exclude")

        assert reset.payload.mode is GlobalFilterMode.EXCLUDE
        assert reset.payload.is_reset is True
        assert codec.decode("gf:refresh").payload.mode is GlobalFilterMode.INCLUDE

    @pytest.mark.parametrize(
        "data",
        [
            "",
            "unknown:1",
            "wallet_menu:",
            "wallet_menu:abc",
            "wallet_menu:-1",
            "wallet_menu:1:2",
            "wallet_untrack:1.5",
            "wallet_mute:ten",
            "wallet_history_page:4:10",
            "wallet_history_page:4:10:10:all",
            "wallet_history_page:4:10:0",
            "wallet_history_page:4:10:10:nft:all",
            "wallet_history_refresh:4:10:all:sideways",
            "wallet_history_refresh:4",
            "gf:mode:both",
            "gf:reset:",
            "gf:toggle:include:unknown_dex:on",
            "gf:toggle:include:curve:maybe",
            "gf:refresh:extra",
            "wallet_filter_toggle:16:mint:on",
            "wallet_filters:x",
        ],
    )
    def test_malformed_data_decodes_to_none(self, codec, data):
        assert codec.decode(data) is None
