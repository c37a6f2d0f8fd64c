"""Login endpoints of the web app.

POST /api/auth/telegram   Telegram Login Widget fields as a JSON object
POST /api/auth/tma        {"initData": "<raw Mini App init data>"}
POST /api/auth/refresh    {"refreshToken": "<token>"}

Successful calls return {"accessToken": ..., "refreshToken": ...}. Rejected
logins return 401 {"error": "unauthorized"} without saying which check failed.
"""

import json
import logging
from typing import Any

from aiohttp import web

from ..services.auth_service import AuthService, TokenPair, UnauthorizedError

logger = logging.getLogger(__name__)

AUTH_SERVICE_KEY = web.AppKey("auth_service", AuthService)


def _tokens_response(tokens: TokenPair) -> web.Response:
    return web.json_response(
        {"accessToken": tokens.access_token, "refreshToken": tokens.refresh_token}
    )


def _unauthorized() -> web.Response:
    return web.json_response({"error": "unauthorized"}, status=401)


def _bad_request(detail: str) -> web.Response:
    return web.json_response({"error": "bad_request", "detail": detail}, status=400)


async def _read_object(request: web.Request) -> dict[str, Any] | None:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return None
    return body if isinstance(body, dict) else None


async def telegram_login(request: web.Request) -> web.Response:
    body = await _read_object(request)
    if body is None:
        return _bad_request("expected a JSON object")

    try:
        tokens = await request.app[AUTH_SERVICE_KEY].login_with_widget(body)
    except UnauthorizedError:
        return _unauthorized()
    return _tokens_response(tokens)


async def tma_login(request: web.Request) -> web.Response:
    body = await _read_object(request)
    if body is None or not isinstance(body.get("initData"), str):
        return _bad_request("initData is required")

    try:
        tokens = await request.app[AUTH_SERVICE_KEY].login_with_init_data(body["initData"])
    except UnauthorizedError:
        return _unauthorized()
    return _tokens_response(tokens)


async def refresh_tokens(request: web.Request) -> web.Response:
    body = await _read_object(request)
    if body is None or not isinstance(body.get("refreshToken"), str):
        return _bad_request("refreshToken is required")

    try:
        tokens = await request.app[AUTH_SERVICE_KEY].refresh(body["refreshToken"])
    except UnauthorizedError:
        return _unauthorized()
    return _tokens_response(tokens)


def create_app(auth_service: AuthService) -> web.Application:
    """Build the aiohttp application serving the login endpoints."""
    app = web.Application()
    app[AUTH_SERVICE_KEY] = auth_service
    app.router.add_post("/api/auth/telegram", telegram_login)
    app.router.add_post("/api/auth/tma", tma_login)
    app.router.add_post("/api/auth/refresh", refresh_tokens)
    logger.debug("Auth routes registered")
    return app
