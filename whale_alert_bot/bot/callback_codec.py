"""Callback-data codec for inline keyboard buttons.

Every button carries ``<prefix><field>:<field>...``. Telegram limits callback
data to 64 bytes, so fields are bare decimal numbers and lower-case tokens.
Decoding tries each prefix in a fixed order and returns None when nothing
matches or when the payload after a matching prefix is malformed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Final, TypeVar

from ..models import (
    CallbackTarget,
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

logger = logging.getLogger(__name__)

MAX_CALLBACK_DATA_BYTES: Final = 64

WALLET_MENU_PREFIX: Final = "wallet_menu:"
WALLET_UNTRACK_PREFIX: Final = "wallet_untrack:"
WALLET_HISTORY_PREFIX: Final = "wallet_history:"
WALLET_HISTORY_PAGE_PREFIX: Final = "wallet_history_page:"
WALLET_HISTORY_REFRESH_PREFIX: Final = "wallet_history_refresh:"
WALLET_MUTE_PREFIX: Final = "wallet_mute:"
ALERT_IGNORE_PREFIX: Final = "alert_ignore_24h:"
WALLET_FILTERS_PREFIX: Final = "wallet_filters:"
WALLET_FILTER_TOGGLE_PREFIX: Final = "wallet_filter_toggle:"
GLOBAL_FILTERS_REFRESH: Final = "gf:refresh"
GLOBAL_FILTERS_MODE_PREFIX: Final = "gf:mode:"
GLOBAL_FILTERS_RESET_PREFIX: Final = "gf:reset:"
GLOBAL_FILTERS_TOGGLE_PREFIX: Final = "gf:toggle:"

_DIGITS = re.compile(r"[0-9]+")

E = TypeVar("E", HistoryKind, HistoryDirection, FilterTarget, GlobalFilterMode, DexKey)


def _parse_int(raw: str) -> int | None:
    if not _DIGITS.fullmatch(raw):
        return None
    return int(raw)


def _parse_wallet_id(raw: str) -> int | None:
    return _parse_int(raw.strip().removeprefix("#"))


def _parse_token(enum_type: type[E], raw: str) -> E | None:
    try:
        return enum_type(raw.strip().lower())
    except ValueError:
        return None


def _parse_on_off(raw: str) -> bool | None:
    normalized = raw.strip().lower()
    if normalized == "on":
        return True
    if normalized == "off":
        return False
    return None


def _on_off(enabled: bool) -> str:
    return "on" if enabled else "off"


class CallbackCodec:
    """Encodes CallbackTarget values to callback data and back."""

    def __init__(self) -> None:
        self._decoders: list[Callable[[str], CallbackTarget | None]] = [
            self._decode_menu,
            self._decode_untrack,
            self._decode_mute,
            self._decode_ignore,
            self._decode_filter_toggle,
            self._decode_filters,
            self._decode_global_filters,
            self._decode_history_page,
            self._decode_history_refresh,
            self._decode_history,
        ]

    def encode(self, target: CallbackTarget) -> str:
        """Encode a target into callback data.

        Args:
            target: Any callback target variant.

        Returns:
            Callback data string.

        Raises:
            ValueError: If the result exceeds the 64 byte platform limit.
        """
        data = self._encode(target)
        if len(data.encode("utf-8")) > MAX_CALLBACK_DATA_BYTES:
            raise ValueError(f"Callback data exceeds {MAX_CALLBACK_DATA_BYTES} bytes: {data!r}")
        return data

    def decode(self, data: str) -> CallbackTarget | None:
        """Decode callback data.

        Args:
            data: Raw callback data from a callback query.

        Returns:
            The decoded target, or None if no prefix matched with a valid payload.
        """
        for decoder in self._decoders:
            target = decoder(data)
            if target is not None:
                return target

        logger.debug("No callback decoder matched %r", data)
        return None

    def _encode(self, target: CallbackTarget) -> str:
        match target:
            case WalletMenuTarget(wallet_id=wallet_id):
                return f"{WALLET_MENU_PREFIX}{wallet_id}"
            case WalletUntrackTarget(wallet_id=wallet_id):
                return f"{WALLET_UNTRACK_PREFIX}{wallet_id}"
            case WalletHistoryTarget(wallet_id=wallet_id):
                return f"{WALLET_HISTORY_PREFIX}{wallet_id}"
            case MuteTarget(mute_minutes=minutes):
                return f"{WALLET_MUTE_PREFIX}{minutes}"
            case IgnoreWalletTarget(wallet_id=wallet_id):
                return f"{ALERT_IGNORE_PREFIX}{wallet_id}"
            case WalletFiltersTarget(wallet_id=wallet_id):
                return f"{WALLET_FILTERS_PREFIX}{wallet_id}"
            case WalletFilterToggleTarget(wallet_id=wallet_id, target=filter_target, enabled=enabled):
                return f"{WALLET_FILTER_TOGGLE_PREFIX}{wallet_id}:{filter_target}:{_on_off(enabled)}"
            case GlobalFiltersTarget():
                return GLOBAL_FILTERS_REFRESH
            case GlobalFiltersModeTarget(mode=mode):
                return f"{GLOBAL_FILTERS_MODE_PREFIX}{mode}"
            case GlobalFiltersResetTarget(mode=mode):
                return f"{GLOBAL_FILTERS_RESET_PREFIX}{mode}"
            case GlobalFiltersToggleTarget(mode=mode, dex_key=dex_key, enabled=enabled):
                return f"{GLOBAL_FILTERS_TOGGLE_PREFIX}{mode}:{dex_key}:{_on_off(enabled)}"
            case HistoryPageTarget():
                return (
                    f"{WALLET_HISTORY_PAGE_PREFIX}{target.wallet_id}:{target.offset}:"
                    f"{target.limit}:{target.kind}:{target.direction}"
                )
            case HistoryRefreshTarget():
                return (
                    f"{WALLET_HISTORY_REFRESH_PREFIX}{target.wallet_id}:{target.limit}:"
                    f"{target.kind}:{target.direction}"
                )
        raise TypeError(f"Unsupported callback target: {type(target).__name__}")

    @staticmethod
    def _payload(data: str, prefix: str) -> list[str] | None:
        if not data.startswith(prefix):
            return None
        return data[len(prefix):].split(":")

    def _decode_menu(self, data: str) -> CallbackTarget | None:
        parts = self._payload(data, WALLET_MENU_PREFIX)
        if parts is None or len(parts) != 1:
            return None
        wallet_id = _parse_wallet_id(parts[0])
        return WalletMenuTarget(wallet_id=wallet_id) if wallet_id is not None else None

    def _decode_untrack(self, data: str) -> CallbackTarget | None:
        parts = self._payload(data, WALLET_UNTRACK_PREFIX)
        if parts is None or len(parts) != 1:
            return None
        wallet_id = _parse_wallet_id(parts[0])
        return WalletUntrackTarget(wallet_id=wallet_id) if wallet_id is not None else None

    def _decode_history(self, data: str) -> CallbackTarget | None:
        parts = self._payload(data, WALLET_HISTORY_PREFIX)
        if parts is None or len(parts) != 1:
            return None
        wallet_id = _parse_wallet_id(parts[0])
        return WalletHistoryTarget(wallet_id=wallet_id) if wallet_id is not None else None

    def _decode_mute(self, data: str) -> CallbackTarget | None:
        parts = self._payload(data, WALLET_MUTE_PREFIX)
        if parts is None or len(parts) != 1:
            return None
        minutes = _parse_int(parts[0])
        return MuteTarget(mute_minutes=minutes) if minutes is not None else None

    def _decode_ignore(self, data: str) -> CallbackTarget | None:
        parts = self._payload(data, ALERT_IGNORE_PREFIX)
        if parts is None or len(parts) != 1:
            return None
        wallet_id = _parse_wallet_id(parts[0])
        return IgnoreWalletTarget(wallet_id=wallet_id) if wallet_id is not None else None

    def _decode_filters(self, data: str) -> CallbackTarget | None:
        parts = self._payload(data, WALLET_FILTERS_PREFIX)
        if parts is None or len(parts) != 1:
            return None
        wallet_id = _parse_wallet_id(parts[0])
        return WalletFiltersTarget(wallet_id=wallet_id) if wallet_id is not None else None

    def _decode_filter_toggle(self, data: str) -> CallbackTarget | None:
        parts = self._payload(data, WALLET_FILTER_TOGGLE_PREFIX)
        if parts is None or len(parts) != 3:
            return None

        wallet_id = _parse_wallet_id(parts[0])
        filter_target = _parse_token(FilterTarget, parts[1])
        enabled = _parse_on_off(parts[2])
        if wallet_id is None or filter_target is None or enabled is None:
            return None

        return WalletFilterToggleTarget(wallet_id=wallet_id, target=filter_target, enabled=enabled)

    def _decode_global_filters(self, data: str) -> CallbackTarget | None:
        if data == GLOBAL_FILTERS_REFRESH:
            return GlobalFiltersTarget()

        parts = self._payload(data, GLOBAL_FILTERS_MODE_PREFIX)
        if parts is not None:
            mode = _parse_token(GlobalFilterMode, parts[0]) if len(parts) == 1 else None
            return GlobalFiltersModeTarget(mode=mode) if mode is not None else None

        parts = self._payload(data, GLOBAL_FILTERS_RESET_PREFIX)
        if parts is not None:
            mode = _parse_token(GlobalFilterMode, parts[0]) if len(parts) == 1 else None
            return GlobalFiltersResetTarget(mode=mode) if mode is not None else None

        parts = self._payload(data, GLOBAL_FILTERS_TOGGLE_PREFIX)
        if parts is None or len(parts) != 3:
            return None

        mode = _parse_token(GlobalFilterMode, parts[0])
        dex_key = _parse_token(DexKey, parts[1])
        enabled = _parse_on_off(parts[2])
        if mode is None or dex_key is None or enabled is None:
            return None

        return GlobalFiltersToggleTarget(mode=mode, dex_key=dex_key, enabled=enabled)

    def _decode_history_page(self, data: str) -> CallbackTarget | None:
        parts = self._payload(data, WALLET_HISTORY_PAGE_PREFIX)
        if parts is None or len(parts) not in (3, 5):
            return None

        wallet_id = _parse_wallet_id(parts[0])
        offset = _parse_int(parts[1])
        limit = _parse_int(parts[2])
        if wallet_id is None or offset is None or not limit:
            return None

        filters = self._parse_history_filters(parts[3:])
        if filters is None:
            return None

        kind, direction = filters
        return HistoryPageTarget(
            wallet_id=wallet_id, offset=offset, limit=limit, kind=kind, direction=direction
        )

    def _decode_history_refresh(self, data: str) -> CallbackTarget | None:
        parts = self._payload(data, WALLET_HISTORY_REFRESH_PREFIX)
        if parts is None or len(parts) not in (2, 4):
            return None

        wallet_id = _parse_wallet_id(parts[0])
        limit = _parse_int(parts[1])
        if wallet_id is None or not limit:
            return None

        filters = self._parse_history_filters(parts[2:])
        if filters is None:
            return None

        kind, direction = filters
        return HistoryRefreshTarget(wallet_id=wallet_id, limit=limit, kind=kind, direction=direction)

    @staticmethod
    def _parse_history_filters(parts: list[str]) -> tuple[HistoryKind, HistoryDirection] | None:
        if not parts:
            return HistoryKind.ALL, HistoryDirection.ALL

        kind = _parse_token(HistoryKind, parts[0])
        direction = _parse_token(HistoryDirection, parts[1])
        if kind is None or direction is None:
            return None
        return kind, direction


callback_codec = CallbackCodec()
