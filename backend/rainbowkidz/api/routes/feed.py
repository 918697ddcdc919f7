"""Feed, Notices & Board Preview — read-only front-page listings.

Invariants:
    - Feed: system-authored, non-notice, live posts, newest first, with yar counts
    - Notices: live notice posts, newest first (limit ≤ 10)
    - Preview: latest live guest posts of the free board (limit ≤ 10)
"""

from fastapi import APIRouter, Depends, Query

from rainbowkidz.api.deps import get_app_settings, get_board_cache, get_data_store
from rainbowkidz.config import Settings
from rainbowkidz.core.board_cache import BoardCache
from rainbowkidz.core.domain_types import AuthorType, Table
from rainbowkidz.core.pagination import clamp_page
from rainbowkidz.infrastructure.data_store import DataStoreClient, desc, eq, is_null
from rainbowkidz.services.board_queries import (
    character_fields,
    guest_nickname,
    like_counts,
    resolve_board_or_404,
)

router = APIRouter(prefix="/api/v1", tags=["feed"])


@router.get("/feed")
async def get_feed(
    limit: int | None = Query(None),
    offset: int | None = Query(None),
    store: DataStoreClient = Depends(get_data_store),
):
    """Character posts feed with yar counts (one batched like query)."""
    page = clamp_page(limit, offset, default=20, cap=50)
    posts = await store.select(
        Table.POSTS,
        "id,title,body,created_at,view_count,comment_count,system_user_id,"
        "system_users(display_name,emoji)",
        where=[
            eq("author_type", AuthorType.SYSTEM.value),
            eq("is_notice", False),
            is_null("deleted_at"),
        ],
        order=[desc("created_at")], limit=page.limit, offset=page.offset,
    )
    yars = await like_counts(store, [p["id"] for p in posts])
    return {
        "ok": True,
        "posts": [
            {
                "id": p["id"],
                "title": p.get("title"),
                "body": p.get("body"),
                "created_at": p.get("created_at"),
                "view_count": p.get("view_count") or 0,
                "comment_count": p.get("comment_count") or 0,
                "yar_count": yars.get(p["id"], 0),
                "system_user_id": p.get("system_user_id"),
                **character_fields(p),
            }
            for p in posts
        ],
        "limit": page.limit,
        "offset": page.offset,
    }


@router.get("/notices")
async def get_notices(
    limit: int | None = Query(None),
    store: DataStoreClient = Depends(get_data_store),
):
    page = clamp_page(limit, 0, default=5, cap=10)
    notices = await store.select(
        Table.POSTS, "id,title,body,created_at,system_users(display_name,emoji)",
        where=[eq("is_notice", True), is_null("deleted_at")],
        order=[desc("created_at")], limit=page.limit,
    )
    return {
        "ok": True,
        "notices": [
            {
                "id": n["id"],
                "title": n.get("title"),
                "body": n.get("body"),
                "created_at": n.get("created_at"),
                "author": character_fields(n)["character_name"],
                "author_emoji": character_fields(n)["character_emoji"],
            }
            for n in notices
        ],
    }


@router.get("/boards/free/preview")
async def preview_free_board(
    limit: int | None = Query(None),
    settings: Settings = Depends(get_app_settings),
    store: DataStoreClient = Depends(get_data_store),
    cache: BoardCache = Depends(get_board_cache),
):
    """Latest guest posts of the free board, for the front page."""
    page = clamp_page(limit, 0, default=3, cap=10)
    board_id = await resolve_board_or_404(cache, settings.free_board_slug)
    posts = await store.select(
        Table.POSTS, "id,title,body,created_at,comment_count,guests(nickname)",
        where=[
            eq("board_id", board_id),
            eq("author_type", AuthorType.GUEST.value),
            is_null("deleted_at"),
        ],
        order=[desc("created_at")], limit=page.limit,
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
                "nickname": guest_nickname(p),
            }
            for p in posts
        ],
    }
