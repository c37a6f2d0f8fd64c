"""Whale Alert Bot Application Package.

Telegram-facing protocol layer of a wallet-tracking alert service. Turns chat
messages and inline-keyboard taps into calls on the tracking service and
verifies the two Telegram login handshakes used by the web client.

The application follows a modular architecture with separate concerns for:
- Command parsing and callback-data encoding
- Per-user sequential execution of bot work
- Login verification and token issuance
- Reply and keyboard formatting
"""
