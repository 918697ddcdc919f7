"""Request Dependencies — collaborators and identities resolved per request.

Invariants:
    - Process-wide collaborators (data store, generator, limiter, board cache, settings)
      are read from app.state, never from module globals
    - require_admin_key runs as a router dependency, i.e. before the body is parsed
    - Session tokens are read from the configured cookie; malformed values read as absent
"""

from fastapi import Header, Request

from rainbowkidz.config import Settings
from rainbowkidz.core.board_cache import BoardCache
from rainbowkidz.core.domain_types import GuestId
from rainbowkidz.core.enforce_access import require_admin
from rainbowkidz.core.guest_identity import read_session_token
from rainbowkidz.core.rate_limiter import RateLimiter
from rainbowkidz.infrastructure.data_store import DataStoreClient
from rainbowkidz.infrastructure.text_generation import TextGenerationClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_data_store(request: Request) -> DataStoreClient:
    return request.app.state.data_store


def get_text_generator(request: Request) -> TextGenerationClient:
    return request.app.state.text_generator


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_board_cache(request: Request) -> BoardCache:
    return request.app.state.board_cache


def get_session_token(request: Request) -> GuestId | None:
    """Guest token from the session cookie only (no body fallback)."""
    settings = get_app_settings(request)
    return read_session_token(request.cookies, cookie_name=settings.session_cookie_name)


def session_token_or(request: Request, fallback: str | None) -> GuestId | None:
    """Guest token from the cookie, else from a body-supplied `guest_id`."""
    settings = get_app_settings(request)
    return read_session_token(
        request.cookies, fallback=fallback, cookie_name=settings.session_cookie_name,
    )


def get_client_ip(request: Request) -> str:
    """Network origin: proxy header first, then the socket peer, then 'unknown'."""
    settings = get_app_settings(request)
    forwarded = request.headers.get(settings.client_ip_header)
    if forwarded:
        return forwarded.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def require_admin_key(
    request: Request,
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
) -> None:
    require_admin(x_admin_key, get_app_settings(request).admin_key)
