"""Typed structures shared across bot components."""

from __future__ import annotations

from typing import TypedDict


class UpdateMeta(TypedDict):
    """Identifiers of the Telegram update being processed, used in log lines."""

    update_id: int | None
    chat_id: int | None
    message_id: int | None
