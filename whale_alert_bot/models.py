"""Data models for the whale alert bot.

Defines Pydantic models for all data structures passed between the parser,
the callback codec, the dispatcher and the tracking service: user identity,
parsed commands, decoded callback targets, execution results and the
structured results returned by the tracking service.
"""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from telegram import InlineKeyboardMarkup, ReplyKeyboardMarkup


class ChainKey(StrEnum):
    """Canonical blockchain identifiers understood by the tracking service."""

    ETHEREUM_MAINNET = "ethereum_mainnet"
    SOLANA_MAINNET = "solana_mainnet"
    TRON_MAINNET = "tron_mainnet"


class CommandKind(StrEnum):
    """Commands the bot can execute.

    The ``*_HINT`` kinds have no slash form; they are produced only by the
    reply-keyboard menu buttons.
    """

    START = "start"
    APP = "app"
    HELP = "help"
    TRACK = "track"
    LIST = "list"
    UNTRACK = "untrack"
    HISTORY = "history"
    WALLET = "wallet"
    STATUS = "status"
    FILTER = "filter"
    THRESHOLD = "threshold"
    FILTERS = "filters"
    WALLET_FILTERS = "walletfilters"
    WALLET_FILTER = "wfilter"
    QUIET = "quiet"
    TZ = "tz"
    MUTE = "mute"
    TRACK_HINT = "track_hint"
    HISTORY_HINT = "history_hint"
    UNTRACK_HINT = "untrack_hint"


class HistoryKind(StrEnum):
    ALL = "all"
    ETH = "eth"
    ERC20 = "erc20"


class HistoryDirection(StrEnum):
    ALL = "all"
    IN = "in"
    OUT = "out"


class HistorySource(StrEnum):
    """Where a history request came from, used by the service for rate limits."""

    COMMAND = "command"
    CALLBACK = "callback"


class FilterTarget(StrEnum):
    """Event types that can be switched on and off per wallet or globally."""

    TRANSFER = "transfer"
    SWAP = "swap"


class GlobalFilterMode(StrEnum):
    INCLUDE = "include"
    EXCLUDE = "exclude"


class DexKey(StrEnum):
    """DEX identifiers offered by the global filter keyboard."""

    UNISWAP = "uniswap"
    CURVE = "curve"
    SUSHISWAP = "sushiswap"
    BALANCER = "balancer"
    ONE_INCH = "1inch"
    PANCAKESWAP = "pancakeswap"
    DODO = "dodo"
    OTHER = "other"


class CallbackAction(StrEnum):
    """Action kinds carried by inline-keyboard callback data."""

    MENU = "menu"
    HISTORY = "history"
    UNTRACK = "untrack"
    MUTE = "mute"
    IGNORE_24H = "ignore_24h"
    WALLET_FILTERS = "wallet_filters"
    WALLET_FILTER_TOGGLE = "wallet_filter_toggle"
    GLOBAL_FILTERS = "global_filters"
    GLOBAL_FILTERS_MODE = "global_filters_mode"
    GLOBAL_FILTERS_TOGGLE = "global_filters_toggle"
    GLOBAL_FILTERS_RESET = "global_filters_reset"
    HISTORY_PAGE = "history_page"
    HISTORY_REFRESH = "history_refresh"


MUTE_24H_MINUTES = 1440


class UserIdentity(BaseModel):
    """Verified Telegram user.

    Attributes:
        telegram_id: Telegram user id as a decimal string.
        username: Telegram username, None when the user has none.
    """

    model_config = ConfigDict(frozen=True)

    telegram_id: str
    username: str | None = None


class ParsedCommand(BaseModel):
    """One command recognized in an inbound message.

    Attributes:
        command: Command kind looked up from the command table.
        args: Arguments in source order.
        source_line: 1-based line of the message the command started on.
    """

    command: CommandKind
    args: list[str] = Field(default_factory=list)
    source_line: int = Field(gt=0)


class TrackArgs(BaseModel):
    """Arguments of ``/track`` after chain alias resolution."""

    chain_key: ChainKey
    address: str
    label: str | None = None


# Callback targets. Every variant is frozen and carries only its own fields.


class _CallbackTargetBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class WalletMenuTarget(_CallbackTargetBase):
    action: Literal[CallbackAction.MENU] = CallbackAction.MENU
    wallet_id: int = Field(ge=0)


class WalletUntrackTarget(_CallbackTargetBase):
    action: Literal[CallbackAction.UNTRACK] = CallbackAction.UNTRACK
    wallet_id: int = Field(ge=0)


class WalletHistoryTarget(_CallbackTargetBase):
    """First history page of a wallet with default paging and filters."""

    action: Literal[CallbackAction.HISTORY] = CallbackAction.HISTORY
    wallet_id: int = Field(ge=0)


class MuteTarget(_CallbackTargetBase):
    action: Literal[CallbackAction.MUTE] = CallbackAction.MUTE
    mute_minutes: int = Field(ge=0)


class IgnoreWalletTarget(_CallbackTargetBase):
    """Silence one wallet for a day, sent from alert messages."""

    action: Literal[CallbackAction.IGNORE_24H] = CallbackAction.IGNORE_24H
    wallet_id: int = Field(ge=0)
    mute_minutes: Literal[1440] = MUTE_24H_MINUTES


class WalletFiltersTarget(_CallbackTargetBase):
    action: Literal[CallbackAction.WALLET_FILTERS] = CallbackAction.WALLET_FILTERS
    wallet_id: int = Field(ge=0)


class WalletFilterToggleTarget(_CallbackTargetBase):
    action: Literal[CallbackAction.WALLET_FILTER_TOGGLE] = CallbackAction.WALLET_FILTER_TOGGLE
    wallet_id: int = Field(ge=0)
    target: FilterTarget
    enabled: bool


class GlobalFiltersPayload(BaseModel):
    """Global DEX filter request nested in the ``gf:`` callback variants.

    Attributes:
        mode: List being edited, include or exclude.
        dex_key: DEX to toggle, None unless toggling.
        enabled: New state of ``dex_key``, None unless toggling.
        is_reset: True when the whole list for ``mode`` is cleared.
    """

    model_config = ConfigDict(frozen=True)

    mode: GlobalFilterMode = GlobalFilterMode.INCLUDE
    dex_key: DexKey | None = None
    enabled: bool | None = None
    is_reset: bool = False


class GlobalFiltersTarget(_CallbackTargetBase):
    """Refresh of the global filter view, always shown in include mode."""

    action: Literal[CallbackAction.GLOBAL_FILTERS] = CallbackAction.GLOBAL_FILTERS

    @property
    def payload(self) -> GlobalFiltersPayload:
        return GlobalFiltersPayload()


class GlobalFiltersModeTarget(_CallbackTargetBase):
    action: Literal[CallbackAction.GLOBAL_FILTERS_MODE] = CallbackAction.GLOBAL_FILTERS_MODE
    mode: GlobalFilterMode

    @property
    def payload(self) -> GlobalFiltersPayload:
        return GlobalFiltersPayload(mode=self.mode)


class GlobalFiltersToggleTarget(_CallbackTargetBase):
    action: Literal[CallbackAction.GLOBAL_FILTERS_TOGGLE] = CallbackAction.GLOBAL_FILTERS_TOGGLE
    mode: GlobalFilterMode
    dex_key: DexKey
    enabled: bool

    @property
    def payload(self) -> GlobalFiltersPayload:
        return GlobalFiltersPayload(mode=self.mode, dex_key=self.dex_key, enabled=self.enabled)


class GlobalFiltersResetTarget(_CallbackTargetBase):
    action: Literal[CallbackAction.GLOBAL_FILTERS_RESET] = CallbackAction.GLOBAL_FILTERS_RESET
    mode: GlobalFilterMode

    @property
    def payload(self) -> GlobalFiltersPayload:
        return GlobalFiltersPayload(mode=self.mode, is_reset=True)


class HistoryPageTarget(_CallbackTargetBase):
    action: Literal[CallbackAction.HISTORY_PAGE] = CallbackAction.HISTORY_PAGE
    wallet_id: int = Field(ge=0)
    offset: int = Field(ge=0)
    limit: int = Field(gt=0)
    kind: HistoryKind = HistoryKind.ALL
    direction: HistoryDirection = HistoryDirection.ALL


class HistoryRefreshTarget(_CallbackTargetBase):
    action: Literal[CallbackAction.HISTORY_REFRESH] = CallbackAction.HISTORY_REFRESH
    wallet_id: int = Field(ge=0)
    limit: int = Field(gt=0)
    kind: HistoryKind = HistoryKind.ALL
    direction: HistoryDirection = HistoryDirection.ALL


CallbackTarget = Annotated[
    WalletMenuTarget
    | WalletUntrackTarget
    | WalletHistoryTarget
    | MuteTarget
    | IgnoreWalletTarget
    | WalletFiltersTarget
    | WalletFilterToggleTarget
    | GlobalFiltersTarget
    | GlobalFiltersModeTarget
    | GlobalFiltersToggleTarget
    | GlobalFiltersResetTarget
    | HistoryPageTarget
    | HistoryRefreshTarget,
    Field(discriminator="action"),
]


class ExecutionResult(BaseModel):
    """Outcome of one command or callback.

    Attributes:
        source_line: Line of the command in the message, 1 for callbacks.
        message: Reply text.
        keyboard: Reply markup to attach, None for the default menu keyboard.
        parse_mode: Telegram parse mode for ``message``, None for plain text.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    source_line: int
    message: str
    keyboard: InlineKeyboardMarkup | ReplyKeyboardMarkup | None = None
    parse_mode: str | None = None


# Results returned by the tracking service


class TrackedWalletOption(BaseModel):
    wallet_id: int
    wallet_address: str
    wallet_label: str | None = None


class HistoryQuery(BaseModel):
    """History request forwarded to the tracking service unparsed.

    The service owns validation of address, limit and filter tokens.
    """

    raw_address: str
    raw_limit: str | None = None
    raw_offset: str | None = None
    raw_kind: str | None = None
    raw_direction: str | None = None
    source: HistorySource = HistorySource.COMMAND


class HistoryPage(BaseModel):
    """One rendered page of wallet history.

    Attributes:
        message: Rendered page text (HTML).
        wallet_id: Tracked wallet id, None for addresses not in the user's list.
        offset: Offset of the first entry.
        limit: Page size.
        kind: Transaction kind filter applied.
        direction: Direction filter applied.
        has_next_page: Whether another page exists after this one.
    """

    message: str
    wallet_id: int | None = None
    offset: int = 0
    limit: int = 10
    kind: HistoryKind = HistoryKind.ALL
    direction: HistoryDirection = HistoryDirection.ALL
    has_next_page: bool = False


class WalletFilterState(BaseModel):
    """Effective event-type filters of one tracked wallet."""

    wallet_id: int
    wallet_address: str
    wallet_label: str | None = None
    chain_key: ChainKey
    allow_transfer: bool = True
    allow_swap: bool = True
    has_wallet_override: bool = False


class UserSettings(BaseModel):
    """Global alert settings relevant to the DEX filter screens."""

    include_dexes: list[str] = Field(default_factory=list)
    exclude_dexes: list[str] = Field(default_factory=list)
