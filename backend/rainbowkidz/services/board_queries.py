"""Board Queries — shared data-store reads and writes used by several route modules.

Invariants:
    - Every post/comment read filters tombstoned rows (deleted_at is null)
    - Soft delete sets deleted_at to the current UTC time; rows are never removed
    - Like counts are decorative: a failed count reads as 0 (logged), never fails the request
    - Missing boards/posts raise ResourceNotFoundError with the endpoint's code
"""

import logging
from datetime import datetime, timezone

from rainbowkidz.core.board_cache import BoardCache
from rainbowkidz.core.domain_types import Table
from rainbowkidz.core.errors import DataStoreError, ResourceNotFoundError
from rainbowkidz.infrastructure.data_store import DataStoreClient, asc, eq, in_, is_null

logger = logging.getLogger(__name__)

GUEST_COLUMNS = "id,nickname,is_blocked"
COMMENT_COLUMNS = "id,body,created_at,author_type,nickname,system_users(display_name,emoji)"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def character_fields(row: dict) -> dict:
    """Flatten the embedded system_users projection."""
    character = row.get("system_users") or {}
    return {
        "character_name": character.get("display_name"),
        "character_emoji": character.get("emoji"),
    }


def guest_nickname(row: dict) -> str | None:
    return (row.get("guests") or {}).get("nickname")


async def fetch_guest(store: DataStoreClient, guest_id: str) -> dict | None:
    return await store.first(Table.GUESTS, GUEST_COLUMNS, where=[eq("id", guest_id)])


async def resolve_board_or_404(cache: BoardCache, slug: str) -> int:
    board_id = await cache.resolve(slug)
    if not board_id:
        raise ResourceNotFoundError("board_not_found")
    return board_id


async def get_live_post(
    store: DataStoreClient, post_id: int, columns: str = "id",
) -> dict | None:
    return await store.first(
        Table.POSTS, columns, where=[eq("id", post_id), is_null("deleted_at")],
    )


async def require_live_post(
    store: DataStoreClient, post_id: int, columns: str = "id",
) -> dict:
    post = await get_live_post(store, post_id, columns)
    if not post:
        raise ResourceNotFoundError("post_not_found")
    return post


async def list_live_comments(
    store: DataStoreClient, post_id: int, limit: int, columns: str = COMMENT_COLUMNS,
) -> list[dict]:
    return await store.select(
        Table.COMMENTS, columns,
        where=[eq("post_id", post_id), is_null("deleted_at")],
        order=[asc("created_at")], limit=limit,
    )


async def soft_delete(store: DataStoreClient, table: Table, row_id: int) -> None:
    await store.update(table, {"deleted_at": utc_now_iso()}, where=[eq("id", row_id)])


async def count_likes(store: DataStoreClient, post_id: int) -> int:
    try:
        rows = await store.select(Table.POST_LIKES, "id", where=[eq("post_id", post_id)])
    except DataStoreError as e:
        logger.warning(f"Like count unavailable for post {post_id}: {e.message}")
        return 0
    return len(rows)


async def like_counts(store: DataStoreClient, post_ids: list[int]) -> dict[int, int]:
    """Yar count per post id for a page of posts (one query)."""
    if not post_ids:
        return {}
    try:
        rows = await store.select(
            Table.POST_LIKES, "post_id", where=[in_("post_id", post_ids)],
        )
    except DataStoreError as e:
        logger.warning(f"Like counts unavailable: {e.message}")
        return {}
    counts: dict[int, int] = {}
    for row in rows:
        counts[row["post_id"]] = counts.get(row["post_id"], 0) + 1
    return counts