"""Session tokens for users who logged in through Telegram.

Verified identities are exchanged for a signed access/refresh token pair.
Every failure, whatever its cause, is reported to callers as
UnauthorizedError; the concrete reason only goes to the log.
"""

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import jwt
from pydantic import BaseModel

from ..models import UserIdentity
from .telegram_auth import AuthError, TelegramAuthVerifier
from .tracking import UsersRepositoryProtocol

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


class UnauthorizedError(Exception):
    """Login or refresh was refused."""


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str


class AuthService:
    """Issues JWTs for Telegram widget and Mini App logins."""

    def __init__(
        self,
        verifier: TelegramAuthVerifier,
        users_repository: UsersRepositoryProtocol,
        jwt_secret: str,
        access_ttl_sec: int = 900,
        refresh_ttl_sec: int = 604800,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize auth service.

        Args:
            verifier: Checks Telegram login payloads.
            users_repository: Creates the user record on first login.
            jwt_secret: HMAC secret for signing tokens.
            access_ttl_sec: Access token lifetime.
            refresh_ttl_sec: Refresh token lifetime.
            clock: Source of the current unix time.
        """
        self.verifier = verifier
        self.users_repository = users_repository
        self.jwt_secret = jwt_secret
        self.access_ttl_sec = access_ttl_sec
        self.refresh_ttl_sec = refresh_ttl_sec
        self.clock = clock

    async def login_with_widget(self, fields: Mapping[str, Any]) -> TokenPair:
        """Log in with the fields posted by the Telegram Login Widget."""
        try:
            identity = self.verifier.verify_widget(fields)
        except AuthError as e:
            logger.warning("Widget login rejected: %s", e)
            raise UnauthorizedError() from e
        return await self._issue(identity)

    async def login_with_init_data(self, init_data: str) -> TokenPair:
        """Log in with the raw ``initData`` string of a Mini App launch."""
        try:
            identity = self.verifier.verify_init_data(init_data)
        except AuthError as e:
            logger.warning("Mini App login rejected: %s", e)
            raise UnauthorizedError() from e
        return await self._issue(identity)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Issue a new token pair from a valid refresh token."""
        claims = self._decode(refresh_token)
        if claims.get("type") != REFRESH_TOKEN:
            logger.warning("Refresh rejected: token type is %s", claims.get("type"))
            raise UnauthorizedError()

        identity = UserIdentity(telegram_id=str(claims["sub"]), username=claims.get("username"))
        return self.issue_tokens(identity)

    def decode_access_token(self, token: str) -> UserIdentity:
        """Identity carried by an access token."""
        claims = self._decode(token)
        if claims.get("type") != ACCESS_TOKEN:
            raise UnauthorizedError()
        return UserIdentity(telegram_id=str(claims["sub"]), username=claims.get("username"))

    def issue_tokens(self, identity: UserIdentity) -> TokenPair:
        return TokenPair(
            access_token=self._encode(identity, ACCESS_TOKEN, self.access_ttl_sec),
            refresh_token=self._encode(identity, REFRESH_TOKEN, self.refresh_ttl_sec),
        )

    async def _issue(self, identity: UserIdentity) -> TokenPair:
        await self.users_repository.find_or_create(identity.telegram_id, identity.username)
        logger.info("User %s logged in", identity.telegram_id)
        return self.issue_tokens(identity)

    def _encode(self, identity: UserIdentity, token_type: str, ttl_sec: int) -> str:
        issued_at = int(self.clock())
        claims = {
            "sub": identity.telegram_id,
            "username": identity.username,
            "type": token_type,
            "iat": issued_at,
            "exp": issued_at + ttl_sec,
        }
        return jwt.encode(claims, self.jwt_secret, algorithm=JWT_ALGORITHM)

    def _decode(self, token: str) -> dict[str, Any]:
        try:
            # expiry is checked against the injected clock below
            claims = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[JWT_ALGORITHM],
                options={"verify_exp": False, "verify_iat": False, "require": ["sub", "type", "exp"]},
            )
        except jwt.PyJWTError as e:
            logger.warning("Token rejected: %s", e)
            raise UnauthorizedError() from e

        if int(claims["exp"]) <= int(self.clock()):
            logger.warning("Token rejected: expired")
            raise UnauthorizedError()
        return claims
