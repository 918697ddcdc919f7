"""Character Activity — ranks all characters by their live posts' activity.

Invariants:
    - Per-character stats are fetched concurrently and awaited jointly (asyncio.gather)
    - A failed stats fetch counts as zero activity for that character (logged)
    - A failed character list fetch propagates as DataStoreError
"""

import asyncio
import logging

from rainbowkidz.core.activity_score import rank_characters, summarize_activity
from rainbowkidz.core.domain_types import Table
from rainbowkidz.core.errors import DataStoreError
from rainbowkidz.infrastructure.data_store import DataStoreClient, asc, eq, is_null

logger = logging.getLogger(__name__)

CHARACTER_COLUMNS = (
    "id,slug,display_name,emoji,group_type,animal_type,gender,birthday,age,mbti,"
    "personality,likes,dislikes,hobby,secret,speech_style,image_url,color"
)


async def _character_posts(store: DataStoreClient, character_id: int) -> list[dict]:
    try:
        return await store.select(
            Table.POSTS, "view_count,comment_count",
            where=[eq("system_user_id", character_id), is_null("deleted_at")],
        )
    except DataStoreError as e:
        logger.warning(f"Activity stats unavailable for character {character_id}: {e.message}")
        return []


async def ranked_characters(store: DataStoreClient) -> list[dict]:
    characters = await store.select(
        Table.SYSTEM_USERS, CHARACTER_COLUMNS, order=[asc("id")],
    )
    post_sets = await asyncio.gather(
        *(_character_posts(store, c["id"]) for c in characters),
    )
    return rank_characters(characters, [summarize_activity(p) for p in post_sets])
