"""Guest Identity Codec — reads and issues the pseudonymous guest session cookie.

Invariants:
    - A session token is a random UUIDv4; issuing one needs no server-side allocation
    - Only canonical UUID strings are accepted; anything else (braced, urn:, dash-less,
      uppercase, padded) reads as "no session", so the echoed guest_id always equals
      the cookie value
    - The cookie lives 365 days, is Secure, HttpOnly and SameSite=None
    - A token is valid as a cookie whether or not a guest row exists yet

Design Decisions:
    - No signature or server-side expiry: the token is a low-stakes handle, not a credential
    - SameSite=None: the board frontend is served from a different origin
"""

import uuid
from typing import Mapping

from starlette.responses import Response

from rainbowkidz.core.domain_types import GuestId

SESSION_COOKIE_NAME = "bbs_gid"
SESSION_MAX_AGE_SECONDS = 86_400 * 365


def new_session_token() -> GuestId:
    return GuestId(str(uuid.uuid4()))


def parse_session_token(raw: object) -> GuestId | None:
    """The token if it is a canonical (lowercase, hyphenated) UUID, else None."""
    if not isinstance(raw, str) or not raw:
        return None
    try:
        canonical = str(uuid.UUID(raw))
    except ValueError:
        return None
    return GuestId(raw) if canonical == raw else None


def read_session_token(
    cookies: Mapping[str, str],
    fallback: object = None,
    cookie_name: str = SESSION_COOKIE_NAME,
) -> GuestId | None:
    """Token from the session cookie, else from `fallback` (a body field), else None."""
    return parse_session_token(cookies.get(cookie_name)) or parse_session_token(fallback)


def issue_session_cookie(
    response: Response,
    token: str,
    cookie_name: str = SESSION_COOKIE_NAME,
    max_age: int = SESSION_MAX_AGE_SECONDS,
) -> None:
    response.set_cookie(
        key=cookie_name,
        value=token,
        max_age=max_age,
        path="/",
        secure=True,
        httponly=True,
        samesite="none",
    )
