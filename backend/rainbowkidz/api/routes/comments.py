"""Comments — list, guest create, and owner delete.

Invariants:
    - Listing returns live comments oldest first (limit ≤ 200)
    - Create order: session → rate limits → guest gate → live post → validation → insert
    - A guest comment stores the author's nickname at write time
    - Only the authoring, unblocked guest (cookie identity) may delete a comment
"""

import logging

from fastapi import APIRouter, Depends, Path, Query, Request, status

from rainbowkidz.api.deps import (
    get_client_ip,
    get_data_store,
    get_rate_limiter,
    get_session_token,
    session_token_or,
)
from rainbowkidz.core.domain_types import AuthorType, GuestId, Table
from rainbowkidz.core.enforce_access import (
    require_guest,
    require_owner,
    require_unblocked_guest,
    require_writable_guest,
)
from rainbowkidz.core.enforce_input import COMMENT_BODY_MAX, check_comment_body, sanitize_text
from rainbowkidz.core.errors import InputValidationError
from rainbowkidz.core.pagination import clamp_page
from rainbowkidz.core.rate_limit_policy import LimitedAction, enforce_rate_limit
from rainbowkidz.core.rate_limiter import RateLimiter
from rainbowkidz.infrastructure.data_store import DataStoreClient, eq, is_null
from rainbowkidz.schemas.board import GuestCommentCreate
from rainbowkidz.services.board_queries import (
    fetch_guest,
    list_live_comments,
    require_live_post,
    soft_delete,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["comments"])


@router.get("/posts/{post_id:int}/comments")
async def list_comments(
    post_id: int = Path(gt=0),
    limit: int | None = Query(None),
    store: DataStoreClient = Depends(get_data_store),
):
    page = clamp_page(limit, 0, default=100, cap=200)
    return {"ok": True, "comments": await list_live_comments(store, post_id, page.limit)}


@router.post("/posts/{post_id:int}/comments", status_code=status.HTTP_201_CREATED)
async def create_guest_comment(
    request: Request,
    post_id: int = Path(gt=0),
    payload: GuestCommentCreate | None = None,
    store: DataStoreClient = Depends(get_data_store),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    payload = payload or GuestCommentCreate()
    token = require_guest(session_token_or(request, payload.guest_id))
    enforce_rate_limit(limiter, LimitedAction.COMMENT, token, get_client_ip(request))

    guest = require_writable_guest(await fetch_guest(store, token))
    await require_live_post(store, post_id)

    body = sanitize_text(payload.body, COMMENT_BODY_MAX)
    error = check_comment_body(body)
    if error:
        raise InputValidationError(error)

    rows = await store.insert(Table.COMMENTS, {
        "post_id": post_id,
        "author_type": AuthorType.GUEST.value,
        "guest_id": token,
        "nickname": guest.get("nickname"),
        "body": body,
    })
    logger.info(f"Guest comment on post {post_id}", extra={"guest_id": token})
    return {"ok": True, "comment": rows[0] if rows else None}


@router.delete("/comments/{comment_id:int}")
async def delete_own_comment(
    comment_id: int = Path(gt=0),
    token: GuestId | None = Depends(get_session_token),
    store: DataStoreClient = Depends(get_data_store),
):
    token = require_guest(token)
    require_unblocked_guest(await fetch_guest(store, token))
    comment = await store.first(
        Table.COMMENTS, "id,guest_id",
        where=[eq("id", comment_id), is_null("deleted_at")],
    )
    require_owner(comment, token, "comment")
    await soft_delete(store, Table.COMMENTS, comment_id)
    return {"ok": True}
