"""Verification of Telegram login handshakes.

Two flows are supported and kept apart because Telegram derives their
secrets differently:

* Login widget: ``secret = SHA256(bot_token)`` over the flat field set.
* Mini App ``initData``: ``secret = HMAC_SHA256(key="WebAppData", msg=bot_token)``
  over the query-string pairs.

In both flows the signed payload is every field except ``hash``, sorted by key,
rendered as ``key=value`` and joined with newlines. Data older than five
minutes is rejected. Both functions are pure: the caller supplies the bot
token and the current time.
"""

import hashlib
import hmac
import json
import re
import time
from collections.abc import Callable, Iterable, Mapping
from enum import StrEnum
from typing import Any
from urllib.parse import parse_qsl

from pydantic import BaseModel, StrictInt, StrictStr, ValidationError, field_validator

from ..models import UserIdentity

MAX_AUTH_AGE_SEC = 300
WEB_APP_HMAC_KEY = b"WebAppData"

_DIGITS = re.compile(r"[0-9]+")


class AuthErrorReason(StrEnum):
    UNCONFIGURED = "unconfigured"
    BAD_SIGNATURE = "bad_signature"
    STALE = "stale"
    MALFORMED_USER = "malformed_user"
    MISSING_FIELD = "missing_field"


class AuthError(Exception):
    """Login data was rejected.

    The reason is for logs only. Clients must only ever see a generic
    "unauthorized" so the failing check is not revealed.
    """

    def __init__(self, reason: AuthErrorReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else str(reason))


class _WebAppUser(BaseModel):
    """``user`` JSON object embedded in Mini App initData."""

    id: StrictInt
    username: StrictStr | None = None

    @field_validator("id")
    @classmethod
    def _positive_id(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("id must be positive")
        return value

    @field_validator("username", mode="before")
    @classmethod
    def _username_is_string(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("username must be a string when present")
        return value


def build_check_string(pairs: Iterable[tuple[str, str]]) -> str:
    """Render signed pairs as Telegram's data-check-string.

    Args:
        pairs: Key/value pairs, ``hash`` already removed.

    Returns:
        ``key=value`` lines sorted by key and joined with ``\\n``.
    """
    return "\n".join(f"{key}={value}" for key, value in sorted(pairs, key=lambda pair: pair[0]))


def _hashes_equal(expected_hex: str, received_hex: str) -> bool:
    if len(expected_hex) != len(received_hex):
        return False
    return hmac.compare_digest(expected_hex.encode(), received_hex.encode())


def _canonical_value(value: Any) -> str:
    """String form of a widget field, matching how the widget serializes it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _parse_auth_date(raw: Any) -> int:
    if isinstance(raw, bool):
        raise AuthError(AuthErrorReason.MISSING_FIELD, "auth_date is malformed")
    try:
        auth_date = int(raw)
    except (TypeError, ValueError, OverflowError):
        raise AuthError(AuthErrorReason.MISSING_FIELD, "auth_date is malformed") from None
    if auth_date <= 0:
        raise AuthError(AuthErrorReason.MISSING_FIELD, "auth_date is malformed")
    return auth_date


def _check_fresh(auth_date: int, now: float) -> None:
    if int(now) - auth_date > MAX_AUTH_AGE_SEC:
        raise AuthError(AuthErrorReason.STALE, f"auth_date {auth_date} is too old")


def _normalize_username(username: str | None) -> str | None:
    if username is None:
        return None
    return username.strip() or None


def verify_widget_login(fields: Mapping[str, Any], bot_token: str | None, now: float) -> UserIdentity:
    """Verify data returned by the Telegram login widget.

    Args:
        fields: Flat widget fields including ``hash``, ``id`` and ``auth_date``.
        bot_token: Bot API token, None when the bot is not configured.
        now: Current UNIX time in seconds.

    Returns:
        Identity of the logged-in user.

    Raises:
        AuthError: If the token is missing, a required field is absent, the
            signature does not match, the data is stale or the id is invalid.
    """
    if not bot_token:
        raise AuthError(AuthErrorReason.UNCONFIGURED, "bot token is not configured")

    received_hash = fields.get("hash")
    if not isinstance(received_hash, str) or not received_hash:
        raise AuthError(AuthErrorReason.MISSING_FIELD, "hash")
    for required in ("id", "auth_date"):
        if fields.get(required) is None:
            raise AuthError(AuthErrorReason.MISSING_FIELD, required)
    auth_date = _parse_auth_date(fields["auth_date"])

    check_string = build_check_string(
        (key, _canonical_value(value))
        for key, value in fields.items()
        if key != "hash" and value is not None
    )
    secret_key = hashlib.sha256(bot_token.encode()).digest()
    expected_hash = hmac.new(secret_key, check_string.encode(), hashlib.sha256).hexdigest()
    if not _hashes_equal(expected_hash, received_hash):
        raise AuthError(AuthErrorReason.BAD_SIGNATURE, "widget hash mismatch")

    _check_fresh(auth_date, now)

    user_id = fields["id"]
    if isinstance(user_id, str) and _DIGITS.fullmatch(user_id):
        user_id = int(user_id)
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        raise AuthError(AuthErrorReason.MALFORMED_USER, "id is not a positive integer")

    username = fields.get("username")
    if username is not None and not isinstance(username, str):
        raise AuthError(AuthErrorReason.MALFORMED_USER, "username is not a string")

    return UserIdentity(telegram_id=str(user_id), username=_normalize_username(username))


def verify_init_data(raw: str, bot_token: str | None, now: float) -> UserIdentity:
    """Verify a Telegram Mini App ``initData`` query string.

    Args:
        raw: The URL-encoded ``initData`` blob exactly as the client sent it.
        bot_token: Bot API token, None when the bot is not configured.
        now: Current UNIX time in seconds.

    Returns:
        Identity of the Mini App user.

    Raises:
        AuthError: If the token is missing, ``hash``/``auth_date``/``user`` is
            absent, the signature does not match, the data is stale or the
            ``user`` JSON is malformed.
    """
    if not bot_token:
        raise AuthError(AuthErrorReason.UNCONFIGURED, "bot token is not configured")

    pairs = parse_qsl(raw, keep_blank_values=True)
    first_values: dict[str, str] = {}
    for key, value in pairs:
        first_values.setdefault(key, value)

    for required in ("hash", "auth_date", "user"):
        if not first_values.get(required, "").strip():
            raise AuthError(AuthErrorReason.MISSING_FIELD, required)
    auth_date = _parse_auth_date(first_values["auth_date"])

    # URL decoding turns the "+" of query_id into a space
    check_string = build_check_string(
        (key, value.replace(" ", "+") if key == "query_id" else value)
        for key, value in pairs
        if key != "hash"
    )
    secret_key = hmac.new(WEB_APP_HMAC_KEY, bot_token.encode(), hashlib.sha256).digest()
    expected_hash = hmac.new(secret_key, check_string.encode(), hashlib.sha256).hexdigest()
    if not _hashes_equal(expected_hash, first_values["hash"]):
        raise AuthError(AuthErrorReason.BAD_SIGNATURE, "initData hash mismatch")

    _check_fresh(auth_date, now)

    try:
        user = _WebAppUser.model_validate(json.loads(first_values["user"]))
    except (json.JSONDecodeError, ValidationError) as e:
        raise AuthError(AuthErrorReason.MALFORMED_USER, str(e)) from None

    return UserIdentity(telegram_id=str(user.id), username=_normalize_username(user.username))


class TelegramAuthVerifier:
    """Binds both verification flows to a bot token and a clock."""

    def __init__(self, bot_token: str | None, clock: Callable[[], float] = time.time):
        self.bot_token = bot_token
        self.clock = clock

    def verify_widget(self, fields: Mapping[str, Any]) -> UserIdentity:
        return verify_widget_login(fields, self.bot_token, self.clock())

    def verify_init_data(self, raw: str) -> UserIdentity:
        return verify_init_data(raw, self.bot_token, self.clock())
