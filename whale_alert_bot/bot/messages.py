"""Telegram bot message templates and constants.

Contains all user-facing message templates, usage hints, error messages and
menu button labels. Centralizes message management for easy localization and
consistent user experience across commands and callbacks.
"""

# Menu button labels (reply keyboard)
BUTTON_MAIN_MENU = "🏠 Main menu"
BUTTON_APP = "📱 App"
BUTTON_MINI_APP = "🚀 Mini App"
BUTTON_TRACK = "➕ Add address"
BUTTON_LIST = "📋 My list"
BUTTON_STATUS = "📈 Status"
BUTTON_HISTORY = "📜 History"
BUTTON_FILTERS = "⚙️ Filters"
BUTTON_UNTRACK = "🗑 Remove address"
BUTTON_HELP = "❓ Help"

# Inline button labels
BUTTON_BACK = "📁 Back"
BUTTON_REFRESH = "🔄 Refresh"
BUTTON_DELETE = "🗑 Delete"
BUTTON_MORE = "➡️ Next {limit}"
BUTTON_ERC20 = "🪙 ERC20"
BUTTON_OPEN_TMA = "📱 Open in Mini App"
BUTTON_OPEN_APP = "📱 Open app"
BUTTON_TO_GLOBAL_FILTERS = "↩️ To global /filters"
BUTTON_RESET = "🧹 Reset"
BUTTON_IGNORE_24H = "🙈 Ignore 24h"
BUTTON_MUTE = "🔕 Mute {minutes} min"

START_MESSAGE = "\n".join(
    [
        "Whale Alert Bot is ready.",
        "🚀 The Mini App is available from the menu button and the button below.",
        "Quick action buttons are under the input field.",
        "",
        "What I can do:",
        "1. Track wallet addresses.",
        "2. Show your list with ids for quick commands.",
        "3. Show recent transactions on Ethereum, Solana and TRON.",
        "",
        "Quick start:",
        "/track <eth|sol|tron> <address> [label]",
        "/list",
        "/wallet #id",
        "/history <address|#id> [limit]",
        "/app",
        "/status",
        "/threshold <amount|off>",
        "/filters",
        "/mute <minutes|off>",
        "",
        "You can send several commands in one message, one per line.",
        "Details: /help",
    ]
)

HELP_MESSAGE = "\n".join(
    [
        "Commands:",
        "/track <eth|sol|tron> <address> [label] - track an address",
        "/list - list tracked addresses with their ids",
        "/wallet <#id> - wallet card with action buttons",
        "/app - open the Telegram Mini App",
        "/untrack <address|id> - stop tracking an address",
        "/history <address|#id> [limit] [kind] [direction] - recent transactions",
        "/status - watcher status and quota",
        "/threshold <amount|off> - USD alert threshold",
        "/filter min_amount_usd <amount|off> - legacy alias for /threshold",
        "/filter cex <off|in|out|all> - CEX flow filter",
        "/filter type <all|buy|sell|transfer> - trade type filter",
        "/filter include_dex <dex|off> - only alert on these DEXes",
        "/filter exclude_dex <dex|off> - never alert on these DEXes",
        "/filters - show or change filters",
        "/walletfilters <#id> - filters of one wallet",
        "/wfilter <#id> <transfer|swap> <on|off> - switch a wallet filter",
        "/quiet <HH:mm-HH:mm|off> - quiet hours",
        "/tz <Area/City> - time zone for quiet hours",
        "/mute <minutes|off> - pause alerts",
        "",
        "Examples:",
        "/track eth 0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045 vitalik",
        "/track sol 11111111111111111111111111111111 system",
        "/history #1 10",
        "/filters transfer off",
        "/wfilter #3 transfer off",
        "/quiet 23:00-07:00",
        "/untrack #1",
        "",
        "You can also use the menu buttons under the input field.",
    ]
)

TRACK_HINT_MESSAGE = (
    "Adding an address:\n"
    "/track <eth|sol|tron> <address> [label]\n\n"
    "Examples:\n"
    "/track eth 0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045 vitalik\n"
    "/track sol 11111111111111111111111111111111 system\n"
    "/track tron TLa2f6VPqDgRE67v1736s7bJ8Ray5wYjU7 treasury"
)

HISTORY_HINT_MESSAGE = (
    "Transaction history:\n"
    "/history <address|#id> [limit]\n"
    "Examples:\n"
    "/history #1 10\n"
    "/history 0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045 5"
)

UNTRACK_HINT_MESSAGE = (
    "Removing an address:\n"
    "/untrack <address|id>\n"
    "Examples:\n"
    "/untrack #1\n"
    "/untrack 0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
)

# Usage messages for missing arguments
TRACK_USAGE = "\n".join(
    [
        "Send an address to track.",
        "Format:",
        "/track <eth|sol|tron> <address> [label]",
        "Example:",
        "/track eth 0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045 vitalik",
    ]
)
UNTRACK_USAGE = "Send an id or address to remove.\nFormat: /untrack <address|id>\nExample: /untrack #3"
HISTORY_USAGE = "\n".join(
    [
        "Send an address or an id from /list.",
        "Format: /history <address|#id> [limit] [kind] [direction]",
        "Examples:",
        "/history #3 10",
        "/history #3 10 erc20 out",
    ]
)
WALLET_USAGE = "Send a wallet id.\nFormat: /wallet #3\nSee ids: /list"
WALLET_FILTERS_USAGE = "Send a wallet id.\nFormat: /walletfilters #3\nSee ids: /list"
WALLET_FILTER_USAGE = "Format: /wfilter <#id> <transfer|swap> <on|off>\nExample: /wfilter #3 transfer off"
WALLET_FILTER_INVALID = "Invalid arguments. Use /wfilter <#id> <transfer|swap> <on|off>."
FILTER_USAGE = "\n".join(
    [
        "Formats:",
        "/filter min_amount_usd <amount|off> (legacy alias -> /threshold)",
        "/filter cex <off|in|out|all>",
        "/filter type <all|buy|sell|transfer>",
        "/filter include_dex <dex|off>",
        "/filter exclude_dex <dex|off>",
    ]
)
FILTER_UNKNOWN_KEY = (
    "Supported: cex, type, include_dex, exclude_dex, min_amount_usd (legacy alias -> /threshold)."
)
FILTERS_USAGE = "Format: /filters <transfer|swap> <on|off>\nOr: /filters"
FILTERS_INVALID_STATE = "Invalid value. Use on/off."
FILTERS_UNKNOWN_TARGET = "Unknown filter. Use transfer or swap."
THRESHOLD_USAGE = "Format: /threshold <amount|off>\nExample: /threshold 50000"
QUIET_USAGE = "Format: /quiet <HH:mm-HH:mm|off>\nExample: /quiet 23:00-07:00"
TZ_USAGE = "Format: /tz <Area/City>\nExample: /tz Europe/Moscow"
MUTE_USAGE = "Send a duration in minutes or off.\nFormat: /mute <minutes|off>\nExample: /mute 30"

# Dispatcher and transport outcomes
USER_NOT_IDENTIFIED = "Could not identify the user."
UNKNOWN_COMMAND = "Unknown command. Use /help."
COMMAND_NOT_RECOGNIZED = "Command not recognized."
COMMAND_FAILED = "Command failed: {error}"
BATCH_ERROR = "Error processing commands: {error}"
BATCH_HEADER = "{count} commands processed"
BATCH_ITEM = "{index}. Line {line}:\n{message}"

# Callback answers
CALLBACK_NOT_SUPPORTED = "Action not supported."
CALLBACK_UNKNOWN = "Unknown action."
CALLBACK_WORKING = "Working..."

# Mini App
APP_NOT_CONFIGURED = "The Mini App is not configured yet. Set TMA_BASE_URL (for example https://your-domain/tma)."
APP_OPEN = "Open the Mini App with the button below."

# Status
STATUS_HEADER = "Bot status:\n- app version: {version}"

# Filter screens
WALLET_FILTERS_TEMPLATE = "\n".join(
    [
        "⚙️ Filters of wallet #{wallet_id} ({label})",
        "Chain: {chain}",
        "Address: {address}",
        "- effective transfer: {transfer}",
        "- effective swap: {swap}",
        "- source: {source}",
        "- DEX filters come from the global /filters",
        "",
        "Commands:",
        "/walletfilters #{wallet_id}",
        "/wfilter #{wallet_id} transfer <on|off>",
        "/wfilter #{wallet_id} swap <on|off>",
    ]
)
WALLET_NO_LABEL = "no label"
WALLET_FILTERS_OVERRIDE = "wallet specific"
WALLET_FILTERS_INHERITED = "inherited from /filters"

GLOBAL_FILTERS_TEMPLATE = "\n".join(
    [
        "⚙️ Global DEX filters",
        "Editing mode: {mode}",
        "- include_dex: {include}",
        "- exclude_dex: {exclude}",
        "",
        "Tap a DEX below to switch it on or off.",
    ]
)
