"""Reply and inline keyboards.

All callback data is produced by the callback codec so every button the bot
sends can be decoded again when it is tapped.
"""

import logging
from urllib.parse import quote

from telegram import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
    WebAppInfo,
)

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
    HistoryPage,
    HistoryPageTarget,
    HistoryRefreshTarget,
    IgnoreWalletTarget,
    MuteTarget,
    TrackedWalletOption,
    UserSettings,
    WalletFiltersTarget,
    WalletFilterState,
    WalletFilterToggleTarget,
    WalletHistoryTarget,
    WalletMenuTarget,
    WalletUntrackTarget,
)
from . import messages
from .callback_codec import CallbackCodec, callback_codec

logger = logging.getLogger(__name__)

SHORT_ADDRESS_PREFIX = 8
SHORT_ADDRESS_SUFFIX = 6
ELLIPSIS = "..."


def append_version_query(url: str, app_version: str) -> str:
    """Append ``v=<app_version>`` so clients refetch the Mini App after a release.

    Args:
        url: Mini App URL, with or without a query string.
        app_version: Release tag; blank leaves the URL unchanged.

    Returns:
        URL with the version parameter added.
    """
    version = app_version.strip()
    if not version:
        return url

    separator = "&" if "?" in url else "?"
    return f"{url}{separator}v={quote(version, safe='')}"


class KeyboardBuilder:
    """Builds the keyboards attached to bot replies."""

    def __init__(
        self,
        tma_base_url: str | None = None,
        app_version: str = "",
        history_page_size: int = 10,
        wallet_title_max_length: int = 21,
        default_mute_minutes: int = 30,
        codec: CallbackCodec = callback_codec,
    ):
        """Initialize keyboard builder.

        Args:
            tma_base_url: Public Mini App URL, None when the Mini App is not deployed.
            app_version: Release tag appended to Mini App URLs.
            history_page_size: Page size used by history buttons.
            wallet_title_max_length: Max wallet title length on wallet menu buttons.
            default_mute_minutes: Duration of the mute button under alerts.
            codec: Callback data codec.
        """
        base_url = (tma_base_url or "").strip().rstrip("/")
        self.tma_base_url = base_url or None
        self.app_version = app_version
        self.history_page_size = history_page_size
        self.wallet_title_max_length = wallet_title_max_length
        self.default_mute_minutes = default_mute_minutes
        self.codec = codec

    def tma_root_url(self) -> str | None:
        if self.tma_base_url is None:
            return None
        return append_version_query(f"{self.tma_base_url}/", self.app_version)

    def wallet_app_url(self, wallet_id: int) -> str | None:
        if self.tma_base_url is None:
            return None
        return append_version_query(f"{self.tma_base_url}/wallets/{wallet_id}", self.app_version)

    def _button(self, text: str, target: CallbackTarget) -> InlineKeyboardButton:
        return InlineKeyboardButton(text, callback_data=self.codec.encode(target))

    def main_menu(self) -> ReplyKeyboardMarkup:
        """Persistent reply keyboard whose labels the parser maps to commands."""
        rows: list[list[KeyboardButton | str]] = [
            [messages.BUTTON_TRACK, messages.BUTTON_LIST, messages.BUTTON_HISTORY],
            [messages.BUTTON_FILTERS, messages.BUTTON_STATUS, messages.BUTTON_HELP],
            [messages.BUTTON_UNTRACK, messages.BUTTON_MAIN_MENU],
        ]

        app_url = self.tma_root_url()
        if app_url is not None:
            rows.insert(0, [KeyboardButton(messages.BUTTON_MINI_APP, web_app=WebAppInfo(url=app_url))])
        else:
            rows.insert(0, [messages.BUTTON_APP])

        return ReplyKeyboardMarkup(rows, resize_keyboard=True, is_persistent=True)

    def app_entry(self) -> InlineKeyboardMarkup | None:
        app_url = self.tma_root_url()
        if app_url is None:
            return None
        return InlineKeyboardMarkup(
            [[InlineKeyboardButton(messages.BUTTON_OPEN_APP, web_app=WebAppInfo(url=app_url))]]
        )

    def wallet_menu(self, wallets: list[TrackedWalletOption]) -> InlineKeyboardMarkup:
        """One button per tracked wallet opening its wallet card."""
        return InlineKeyboardMarkup(
            [
                [
                    self._button(
                        self._wallet_button_text(wallet), WalletMenuTarget(wallet_id=wallet.wallet_id)
                    )
                ]
                for wallet in wallets
            ]
        )

    def wallet_actions(self, wallet_id: int) -> InlineKeyboardMarkup:
        """Actions shown under a wallet card."""
        rows = [
            [
                self._button(messages.BUTTON_FILTERS, WalletFiltersTarget(wallet_id=wallet_id)),
                self._button(messages.BUTTON_REFRESH, WalletMenuTarget(wallet_id=wallet_id)),
            ],
            [
                self._button(
                    messages.BUTTON_HISTORY,
                    HistoryRefreshTarget(wallet_id=wallet_id, limit=self.history_page_size),
                ),
                self._button(
                    messages.BUTTON_ERC20,
                    HistoryRefreshTarget(
                        wallet_id=wallet_id,
                        limit=self.history_page_size,
                        kind=HistoryKind.ERC20,
                        direction=HistoryDirection.ALL,
                    ),
                ),
            ],
            [self._button(messages.BUTTON_DELETE, WalletUntrackTarget(wallet_id=wallet_id))],
        ]

        wallet_url = self.wallet_app_url(wallet_id)
        if wallet_url is not None:
            rows.insert(
                2,
                [InlineKeyboardButton(messages.BUTTON_OPEN_TMA, web_app=WebAppInfo(url=wallet_url))],
            )

        return InlineKeyboardMarkup(rows)

    def alert_actions(self, wallet_id: int) -> InlineKeyboardMarkup:
        """Buttons attached to alert messages of a tracked wallet."""
        return InlineKeyboardMarkup(
            [
                [
                    self._button(
                        messages.BUTTON_MUTE.format(minutes=self.default_mute_minutes),
                        MuteTarget(mute_minutes=self.default_mute_minutes),
                    ),
                    self._button(messages.BUTTON_IGNORE_24H, IgnoreWalletTarget(wallet_id=wallet_id)),
                ],
                [self._button(messages.BUTTON_HISTORY, WalletHistoryTarget(wallet_id=wallet_id))],
            ]
        )

    def history_actions(self, page: HistoryPage) -> InlineKeyboardMarkup | None:
        """Paging buttons for a history page of a tracked wallet.

        Returns:
            Inline keyboard, or None when the page is not tied to a tracked wallet.
        """
        if page.wallet_id is None:
            return None

        wallet_id = page.wallet_id
        rows = []
        if page.has_next_page:
            rows.append(
                [
                    self._button(
                        messages.BUTTON_MORE.format(limit=page.limit),
                        HistoryPageTarget(
                            wallet_id=wallet_id,
                            offset=page.offset + page.limit,
                            limit=page.limit,
                            kind=page.kind,
                            direction=page.direction,
                        ),
                    )
                ]
            )

        rows.append(
            [
                self._button(
                    messages.BUTTON_REFRESH,
                    HistoryRefreshTarget(
                        wallet_id=wallet_id, limit=page.limit, kind=page.kind, direction=page.direction
                    ),
                ),
                self._button(messages.BUTTON_BACK, WalletMenuTarget(wallet_id=wallet_id)),
            ]
        )
        rows.append([self._button(messages.BUTTON_DELETE, WalletUntrackTarget(wallet_id=wallet_id))])
        return InlineKeyboardMarkup(rows)

    def wallet_filters(self, state: WalletFilterState) -> InlineKeyboardMarkup:
        """Toggle buttons for the per-wallet transfer and swap filters."""
        wallet_id = state.wallet_id
        return InlineKeyboardMarkup(
            [
                [
                    self._button(
                        f"{'✅' if state.allow_transfer else '❌'} Transfer",
                        WalletFilterToggleTarget(
                            wallet_id=wallet_id,
                            target=FilterTarget.TRANSFER,
                            enabled=not state.allow_transfer,
                        ),
                    ),
                    self._button(
                        f"{'✅' if state.allow_swap else '❌'} Swap",
                        WalletFilterToggleTarget(
                            wallet_id=wallet_id, target=FilterTarget.SWAP, enabled=not state.allow_swap
                        ),
                    ),
                ],
                [
                    self._button(messages.BUTTON_BACK, WalletMenuTarget(wallet_id=wallet_id)),
                    self._button(messages.BUTTON_HISTORY, WalletHistoryTarget(wallet_id=wallet_id)),
                ],
                [self._button(messages.BUTTON_TO_GLOBAL_FILTERS, GlobalFiltersTarget())],
            ]
        )

    def global_filters(self, settings: UserSettings, mode: GlobalFilterMode) -> InlineKeyboardMarkup:
        """Mode switch, one toggle per DEX (two per row) and reset/refresh."""
        is_include = mode is GlobalFilterMode.INCLUDE
        selected = settings.include_dexes if is_include else settings.exclude_dexes

        rows = [
            [
                self._button(
                    f"{'✅' if is_include else '▫️'} include",
                    GlobalFiltersModeTarget(mode=GlobalFilterMode.INCLUDE),
                ),
                self._button(
                    f"{'▫️' if is_include else '✅'} exclude",
                    GlobalFiltersModeTarget(mode=GlobalFilterMode.EXCLUDE),
                ),
            ]
        ]

        dexes = list(DexKey)
        for index in range(0, len(dexes), 2):
            rows.append([self._dex_toggle(mode, selected, dex) for dex in dexes[index:index + 2]])

        rows.append(
            [
                self._button(messages.BUTTON_RESET, GlobalFiltersResetTarget(mode=mode)),
                self._button(messages.BUTTON_REFRESH, GlobalFiltersTarget()),
            ]
        )
        return InlineKeyboardMarkup(rows)

    def _dex_toggle(
        self, mode: GlobalFilterMode, selected: list[str], dex: DexKey
    ) -> InlineKeyboardButton:
        enabled = dex.value in selected
        return self._button(
            f"{'✅' if enabled else '☑️'} {dex.value}",
            GlobalFiltersToggleTarget(mode=mode, dex_key=dex, enabled=not enabled),
        )

    def _wallet_button_text(self, wallet: TrackedWalletOption) -> str:
        title = (wallet.wallet_label or self._short_address(wallet.wallet_address)).strip()
        if len(title) > self.wallet_title_max_length + len(ELLIPSIS):
            title = f"{title[:self.wallet_title_max_length]}{ELLIPSIS}"
        return f"📁 #{wallet.wallet_id} {title}"

    @staticmethod
    def _short_address(address: str) -> str:
        return f"{address[:SHORT_ADDRESS_PREFIX]}{ELLIPSIS}{address[-SHORT_ADDRESS_SUFFIX:]}"
