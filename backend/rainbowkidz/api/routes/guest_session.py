"""Guest Session — cookie issuance, own profile, nickname registration.

Invariants:
    - guest/init without a valid cookie issues a fresh token and never touches the data store
    - guest/init with a token reports has_nickname from the guest row (absent row → False)
    - Nickname flow order: session → rate limits → blocked check → validation → cooldown RPC →
      availability RPC → upsert. Uniqueness and cooldown are enforced remotely
    - The first successful nickname registration creates the guest row (upsert on id)
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from rainbowkidz.api.deps import (
    get_app_settings,
    get_client_ip,
    get_data_store,
    get_rate_limiter,
    get_session_token,
    session_token_or,
)
from rainbowkidz.config import Settings
from rainbowkidz.core.domain_types import GuestId, RemoteProcedure, Table
from rainbowkidz.core.enforce_access import require_guest, require_unblocked_guest
from rainbowkidz.core.enforce_input import check_nickname
from rainbowkidz.core.errors import ConflictError, InputValidationError, RateLimitedError
from rainbowkidz.core.guest_identity import issue_session_cookie, new_session_token
from rainbowkidz.core.rate_limit_policy import LimitedAction, enforce_rate_limit
from rainbowkidz.core.rate_limiter import RateLimiter
from rainbowkidz.infrastructure.data_store import DataStoreClient, eq
from rainbowkidz.schemas.guest import NicknameRequest
from rainbowkidz.services.board_queries import GUEST_COLUMNS, fetch_guest, utc_now_iso

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["guest"])


@router.post("/guest/init")
async def init_guest(
    response: Response,
    token: GuestId | None = Depends(get_session_token),
    settings: Settings = Depends(get_app_settings),
    store: DataStoreClient = Depends(get_data_store),
):
    """Issue a guest session cookie, or confirm the existing one."""
    if not token:
        token = new_session_token()
        issue_session_cookie(
            response, token,
            cookie_name=settings.session_cookie_name,
            max_age=settings.session_cookie_max_age_seconds,
        )
        logger.info("Issued guest session", extra={"guest_id": token})
        return {"ok": True, "guest_id": token, "has_nickname": False}

    guest = await store.first(Table.GUESTS, "id,nickname", where=[eq("id", token)])
    return {
        "ok": True,
        "guest_id": token,
        "has_nickname": bool(guest and guest.get("nickname")),
    }


@router.get("/me")
async def get_me(
    token: GuestId | None = Depends(get_session_token),
    store: DataStoreClient = Depends(get_data_store),
):
    if not token:
        return {"ok": True, "guest": None}
    guest = await store.first(Table.GUESTS, GUEST_COLUMNS, where=[eq("id", token)])
    return {"ok": True, "guest": guest}


@router.post("/guest/nickname")
async def change_nickname(
    request: Request,
    payload: NicknameRequest | None = None,
    settings: Settings = Depends(get_app_settings),
    store: DataStoreClient = Depends(get_data_store),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Register or change the caller's nickname (once per cooldown period)."""
    payload = payload or NicknameRequest()
    token = require_guest(session_token_or(request, payload.guest_id))
    enforce_rate_limit(limiter, LimitedAction.NICKNAME, token, get_client_ip(request))
    require_unblocked_guest(await fetch_guest(store, token))

    error = check_nickname(payload.nickname)
    if error:
        raise InputValidationError(error)
    nickname = payload.nickname.strip()

    can_change = await store.rpc(
        RemoteProcedure.CAN_CHANGE_NICKNAME,
        {"p_guest_id": token, "p_cooldown_days": settings.nickname_cooldown_days},
    )
    if not can_change:
        raise RateLimitedError(f"nickname_cooldown_{settings.nickname_cooldown_days}days")

    available = await store.rpc(
        RemoteProcedure.CHECK_NICKNAME_AVAILABLE,
        {"p_nickname": nickname, "p_guest_id": token},
    )
    if not available:
        raise ConflictError("nickname_taken")

    now = utc_now_iso()
    rows = await store.insert(
        Table.GUESTS,
        {"id": token, "nickname": nickname, "last_seen_at": now, "nickname_changed_at": now},
        on_conflict="id", duplicates="merge",
    )
    logger.info("Nickname registered", extra={"guest_id": token})
    stored = rows[0].get("nickname") if rows else None
    return {"ok": True, "guest_id": token, "nickname": stored or nickname}
