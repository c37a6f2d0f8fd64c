"""Ports of the external tracking service and users repository.

The bot does not track wallets, evaluate alert filters or persist anything
itself. It calls an object implementing TrackingServiceProtocol and relays
the returned text to the user. Implementations raise TrackingError for
expected failures such as an unknown wallet id; its message is shown to the
user as is.
"""

from typing import Any, Protocol

from ..models import (
    ChainKey,
    FilterTarget,
    HistoryPage,
    HistoryQuery,
    TrackedWalletOption,
    UserIdentity,
    UserSettings,
    WalletFilterState,
)


class TrackingError(Exception):
    """Business rule violation reported by the tracking service."""


class TrackingServiceProtocol(Protocol):
    """Protocol of the wallet tracking service consumed by the dispatcher.

    Raw user input (wallet references like ``#3`` or an address, amounts,
    time windows) is passed through unparsed; validating it is the service's
    job. Methods returning ``str`` return the reply text.
    """

    async def track_wallet(
        self, user: UserIdentity, address: str, label: str | None, chain_key: ChainKey
    ) -> str:
        ...

    async def list_wallets(self, user: UserIdentity) -> str:
        ...

    async def list_wallet_options(self, user: UserIdentity) -> list[TrackedWalletOption]:
        """Wallets of the user for the inline wallet menu."""
        ...

    async def remove_wallet(self, user: UserIdentity, wallet_ref: str) -> str:
        ...

    async def get_wallet_detail(self, user: UserIdentity, wallet_ref: str) -> str:
        ...

    async def get_history_page(self, user: UserIdentity, query: HistoryQuery) -> HistoryPage:
        ...

    async def get_user_status(self, user: UserIdentity) -> str:
        ...

    async def set_threshold_usd(self, user: UserIdentity, value: str) -> str:
        ...

    async def set_min_amount_usd(self, user: UserIdentity, value: str) -> str:
        ...

    async def set_cex_flow_filter(self, user: UserIdentity, value: str) -> str:
        ...

    async def set_smart_filter_type(self, user: UserIdentity, value: str) -> str:
        ...

    async def set_include_dex_filter(self, user: UserIdentity, value: str) -> str:
        """Replace the include list; ``value`` is comma separated or ``off``."""
        ...

    async def set_exclude_dex_filter(self, user: UserIdentity, value: str) -> str:
        """Replace the exclude list; ``value`` is comma separated or ``off``."""
        ...

    async def set_event_type_filter(
        self, user: UserIdentity, target: FilterTarget, enabled: bool
    ) -> str:
        ...

    async def get_settings(self, user: UserIdentity) -> UserSettings:
        ...

    async def get_wallet_filter_state(
        self, user: UserIdentity, wallet_ref: str
    ) -> WalletFilterState:
        ...

    async def set_wallet_event_type_filter(
        self, user: UserIdentity, wallet_ref: str, target: FilterTarget, enabled: bool
    ) -> WalletFilterState:
        ...

    async def set_quiet_hours(self, user: UserIdentity, window: str) -> str:
        ...

    async def set_user_timezone(self, user: UserIdentity, timezone: str) -> str:
        ...

    async def mute_alerts(self, user: UserIdentity, minutes: str) -> str:
        """Pause all alerts; ``minutes`` is a number or ``off``."""
        ...

    async def mute_wallet(
        self, user: UserIdentity, wallet_ref: str, minutes: int, source: str
    ) -> str:
        """Pause alerts of one wallet."""
        ...

    async def unmute_wallet(self, user: UserIdentity, wallet_ref: str) -> str:
        ...


class UsersRepositoryProtocol(Protocol):
    """Persistence of bot users, keyed by Telegram id."""

    async def find_or_create(self, telegram_id: str, username: str | None) -> Any:
        ...
