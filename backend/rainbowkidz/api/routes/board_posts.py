"""Board Posts — board listings, guest post creation, post detail, deletion, views.

Invariants:
    - Write flow order: session → rate limits → guest gate → validation → board → insert
    - Board listings put pinned posts first, then newest first
    - Post detail hides tombstoned posts; its comment list degrades to [] on failure
    - Only the authoring, unblocked guest (cookie identity) may delete a post; deletion
      is a tombstone
    - View counting is read-then-write: concurrent views may be lost, never double counted

Design Decisions:
    - Guest posts always land in the free board (settings.free_board_slug)
    - Post row and comments are fetched concurrently for the detail view
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Path, Query, Request, status

from rainbowkidz.api.deps import (
    get_app_settings,
    get_board_cache,
    get_client_ip,
    get_data_store,
    get_rate_limiter,
    get_session_token,
    session_token_or,
)
from rainbowkidz.config import Settings
from rainbowkidz.core.board_cache import BoardCache
from rainbowkidz.core.domain_types import AuthorType, GuestId, Table
from rainbowkidz.core.enforce_access import (
    require_guest,
    require_owner,
    require_unblocked_guest,
    require_writable_guest,
)
from rainbowkidz.core.enforce_input import normalize_post, validate_post
from rainbowkidz.core.errors import DataStoreError, InputValidationError, ResourceNotFoundError
from rainbowkidz.core.pagination import clamp_page
from rainbowkidz.core.rate_limit_policy import LimitedAction, enforce_rate_limit
from rainbowkidz.core.rate_limiter import RateLimiter
from rainbowkidz.infrastructure.data_store import DataStoreClient, desc, eq, is_null
from rainbowkidz.schemas.board import GuestPostCreate
from rainbowkidz.services.board_queries import (
    character_fields,
    count_likes,
    fetch_guest,
    get_live_post,
    guest_nickname,
    list_live_comments,
    resolve_board_or_404,
    soft_delete,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["posts"])

DETAIL_COMMENT_LIMIT = 200


@router.get("/boards/{slug}/posts")
async def list_board_posts(
    slug: str,
    limit: int | None = Query(None),
    offset: int | None = Query(None),
    store: DataStoreClient = Depends(get_data_store),
    cache: BoardCache = Depends(get_board_cache),
):
    page = clamp_page(limit, offset, default=20, cap=50)
    board_id = await resolve_board_or_404(cache, slug)
    posts = await store.select(
        Table.POSTS,
        "id,title,body,created_at,comment_count,view_count,author_type,is_notice,"
        "is_pinned,system_user_id,system_users(display_name,emoji),guests(nickname)",
        where=[eq("board_id", board_id), is_null("deleted_at")],
        order=[desc("is_pinned"), desc("created_at")],
        limit=page.limit, offset=page.offset,
    )
    return {
        "ok": True,
        "posts": [
            {
                "id": p["id"],
                "title": p.get("title"),
                "body": p.get("body"),
                "created_at": p.get("created_at"),
                "comment_count": p.get("comment_count"),
                "view_count": p.get("view_count"),
                "is_notice": p.get("is_notice"),
                "is_pinned": p.get("is_pinned"),
                "author_type": p.get("author_type"),
                **character_fields(p),
                "nickname": guest_nickname(p),
            }
            for p in posts
        ],
        "limit": page.limit,
        "offset": page.offset,
    }


@router.post("/posts", status_code=status.HTTP_201_CREATED)
async def create_guest_post(
    request: Request,
    payload: GuestPostCreate | None = None,
    settings: Settings = Depends(get_app_settings),
    store: DataStoreClient = Depends(get_data_store),
    limiter: RateLimiter = Depends(get_rate_limiter),
    cache: BoardCache = Depends(get_board_cache),
):
    """Guest post in the free board."""
    payload = payload or GuestPostCreate()
    token = require_guest(session_token_or(request, payload.guest_id))
    enforce_rate_limit(limiter, LimitedAction.POST, token, get_client_ip(request))

    require_writable_guest(await fetch_guest(store, token))

    title, body = normalize_post(payload.title, payload.body)
    error = validate_post(title, body)
    if error:
        raise InputValidationError(error)

    board_id = await resolve_board_or_404(cache, settings.free_board_slug)
    rows = await store.insert(Table.POSTS, {
        "board_id": board_id,
        "author_type": AuthorType.GUEST.value,
        "guest_id": token,
        "title": title,
        "body": body,
    })
    post = rows[0] if rows else None
    logger.info(
        f"Guest post created: {post and post.get('id')}", extra={"guest_id": token},
    )
    return {"ok": True, "post": post}


async def _comments_or_empty(store: DataStoreClient, post_id: int) -> list[dict]:
    try:
        return await list_live_comments(store, post_id, DETAIL_COMMENT_LIMIT)
    except DataStoreError as e:
        logger.warning(f"Comments unavailable for post {post_id}: {e.message}")
        return []


@router.get("/posts/{post_id:int}")
async def get_post_detail(
    post_id: int = Path(gt=0),
    store: DataStoreClient = Depends(get_data_store),
):
    """Post with yar count and its comments (oldest first)."""
    post, comments = await asyncio.gather(
        get_live_post(
            store, post_id,
            "id,title,body,created_at,view_count,comment_count,author_type,is_notice,"
            "system_user_id,system_users(display_name,emoji),guests(nickname)",
        ),
        _comments_or_empty(store, post_id),
    )
    if not post:
        raise ResourceNotFoundError("post_not_found")
    yar_count = await count_likes(store, post_id)
    return {
        "ok": True,
        "post": {
            "id": post["id"],
            "title": post.get("title"),
            "body": post.get("body"),
            "created_at": post.get("created_at"),
            "view_count": post.get("view_count"),
            "comment_count": post.get("comment_count"),
            "yar_count": yar_count,
            "is_notice": post.get("is_notice"),
            "author_type": post.get("author_type"),
            **character_fields(post),
            "nickname": guest_nickname(post),
        },
        "comments": comments,
    }


@router.delete("/posts/{post_id:int}")
async def delete_own_post(
    post_id: int = Path(gt=0),
    token: GuestId | None = Depends(get_session_token),
    store: DataStoreClient = Depends(get_data_store),
):
    token = require_guest(token)
    require_unblocked_guest(await fetch_guest(store, token))
    post = await get_live_post(store, post_id, "id,guest_id")
    require_owner(post, token, "post")
    await soft_delete(store, Table.POSTS, post_id)
    logger.info(f"Guest post {post_id} deleted", extra={"guest_id": token})
    return {"ok": True}


@router.post("/posts/{post_id:int}/view")
async def record_view(
    post_id: int = Path(gt=0),
    store: DataStoreClient = Depends(get_data_store),
):
    post = await get_live_post(store, post_id, "view_count")
    if not post:
        raise ResourceNotFoundError("post_not_found")
    view_count = (post.get("view_count") or 0) + 1
    await store.update(Table.POSTS, {"view_count": view_count}, where=[eq("id", post_id)])
    return {"ok": True, "view_count": view_count}
