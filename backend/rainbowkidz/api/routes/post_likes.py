"""Post Likes ("yar") — add or remove a nickname's like on a post.

Invariants:
    - Likes are keyed by (post_id, nickname); the data store enforces uniqueness
    - Adding twice is a no-op (duplicate insert ignored); removing an absent like is a no-op
    - Response always carries the fresh yar_count (0 if the count read fails)

Design Decisions:
    - Identity is the nickname in the body, not the session cookie: anyone who knows a
      nickname may remove that nickname's like
"""

from fastapi import APIRouter, Depends, Path

from rainbowkidz.api.deps import get_data_store
from rainbowkidz.core.domain_types import LikeAction, Table
from rainbowkidz.core.enforce_input import check_like_nickname
from rainbowkidz.core.errors import InputValidationError, UnauthorizedError
from rainbowkidz.infrastructure.data_store import DataStoreClient, eq
from rainbowkidz.schemas.board import LikeRequest
from rainbowkidz.services.board_queries import count_likes

router = APIRouter(prefix="/api/v1/posts", tags=["likes"])


def _like_nickname(payload: LikeRequest | None) -> str:
    nickname = ((payload and payload.nickname) or "").strip()
    if not nickname:
        raise UnauthorizedError("nickname_required")
    error = check_like_nickname(nickname)
    if error:
        raise InputValidationError(error)
    return nickname


@router.post("/{post_id:int}/yar")
async def add_like(
    post_id: int = Path(gt=0),
    payload: LikeRequest | None = None,
    store: DataStoreClient = Depends(get_data_store),
):
    nickname = _like_nickname(payload)
    await store.insert(
        Table.POST_LIKES, {"post_id": post_id, "nickname": nickname},
        returning=False, on_conflict="post_id,nickname", duplicates="ignore",
    )
    return {
        "ok": True,
        "yar_count": await count_likes(store, post_id),
        "action": LikeAction.ADDED.value,
    }


@router.delete("/{post_id:int}/yar")
async def remove_like(
    post_id: int = Path(gt=0),
    payload: LikeRequest | None = None,
    store: DataStoreClient = Depends(get_data_store),
):
    nickname = _like_nickname(payload)
    await store.delete(
        Table.POST_LIKES, where=[eq("post_id", post_id), eq("nickname", nickname)],
    )
    return {
        "ok": True,
        "yar_count": await count_likes(store, post_id),
        "action": LikeAction.REMOVED.value,
    }
