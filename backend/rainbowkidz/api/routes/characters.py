"""Characters — public character roster ranked by activity, and per-character posts."""

from fastapi import APIRouter, Depends, Path, Query

from rainbowkidz.api.deps import get_data_store
from rainbowkidz.core.domain_types import Table
from rainbowkidz.core.pagination import clamp_page
from rainbowkidz.infrastructure.data_store import DataStoreClient, desc, eq, is_null
from rainbowkidz.services.character_activity import ranked_characters

router = APIRouter(prefix="/api/v1/characters", tags=["characters"])


@router.get("")
async def list_characters(store: DataStoreClient = Depends(get_data_store)):
    """All characters with post/view/comment totals, highest score first."""
    return {"ok": True, "characters": await ranked_characters(store)}


@router.get("/{character_id:int}/posts")
async def list_character_posts(
    character_id: int = Path(gt=0),
    limit: int | None = Query(None),
    offset: int | None = Query(None),
    store: DataStoreClient = Depends(get_data_store),
):
    page = clamp_page(limit, offset, default=20, cap=50)
    posts = await store.select(
        Table.POSTS, "id,title,body,created_at,view_count,comment_count",
        where=[eq("system_user_id", character_id), is_null("deleted_at")],
        order=[desc("created_at")], limit=page.limit, offset=page.offset,
    )
    return {"ok": True, "posts": posts, "limit": page.limit, "offset": page.offset}
