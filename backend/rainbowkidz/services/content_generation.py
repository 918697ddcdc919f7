"""Content Generation — AI-drafted posts and comments in a character's voice.

Invariants:
    - Drafts are returned to the admin, never persisted here
    - Missing character/post → 404 before any generation call
    - Context reads (recent posts, existing comments) are best effort: failure → no context
    - Output must be a JSON object: {"title", "body"} for posts, {"comment"} for comments

Design Decisions:
    - Prompts are written in Korean: the board and its characters speak Korean
    - Post and character for a comment draft are fetched concurrently
"""

import asyncio
import logging

from rainbowkidz.core.domain_types import Table
from rainbowkidz.core.errors import DataStoreError, ResourceNotFoundError
from rainbowkidz.core.parse_generation import parse_generated_json, text_field
from rainbowkidz.infrastructure.data_store import DataStoreClient, asc, desc, eq, is_null
from rainbowkidz.infrastructure.text_generation import TextGenerationClient

logger = logging.getLogger(__name__)

TEMPERATURE = 0.9
POST_MAX_TOKENS = 512
COMMENT_MAX_TOKENS = 256
RECENT_POSTS_FOR_CONTEXT = 3
COMMENTS_FOR_CONTEXT = 5


# ─── Prompts ─────────────────────────────────────────────────────

def _field(row: dict, key: str) -> str:
    return str(row.get(key) or "")


def build_post_prompt(character: dict, recent_posts: list[dict]) -> str:
    recent = ""
    if recent_posts:
        lines = "\n".join(
            f"- {_field(p, 'title')}: {_field(p, 'body')[:60]}" for p in recent_posts
        )
        recent = f"\n\n[최근에 쓴 글]\n{lines}"
    name = _field(character, "display_name")
    return (
        f'너는 "{name}"라는 캐릭터야.\n\n'
        "[캐릭터 정보]\n"
        f"이름: {name}\n"
        f"동물: {_field(character, 'animal_type')}\n"
        f"성별: {_field(character, 'gender')}\n"
        f"MBTI: {_field(character, 'mbti')}\n"
        f"성격: {_field(character, 'personality')}\n"
        f"좋아하는 것: {_field(character, 'likes')}\n"
        f"싫어하는 것: {_field(character, 'dislikes')}\n"
        f"취미: {_field(character, 'hobby')}\n"
        f"말투: {_field(character, 'speech_style')}\n"
        f"비밀: {_field(character, 'secret')}"
        f"{recent}\n\n"
        "이 캐릭터가 되어 어린이 친구들이 보는 게시판에 올릴 짧고 즐거운 글을 써 줘.\n"
        "오늘 있었던 일이나 좋아하는 것처럼 자연스러운 이야기로, 캐릭터 말투를 꼭 지켜서 3~6문장.\n\n"
        "JSON만 출력해 (코드 블록이나 마크다운 없이):\n"
        '{"title":"제목(15자 이내)","body":"본문"}'
    )


def build_comment_prompt(
    character: dict, post: dict, existing_comments: list[dict],
) -> str:
    context = ""
    if existing_comments:
        lines = "\n".join(
            f"- {c.get('nickname') or '누군가'}: {_field(c, 'body')}"
            for c in existing_comments
        )
        context = f"\n[달려 있는 댓글]\n{lines}"
    author = (post.get("system_users") or {}).get("display_name") or "누군가"
    name = _field(character, "display_name")
    return (
        f'너는 "{name}"라는 캐릭터야.\n\n'
        "[캐릭터 정보]\n"
        f"이름: {name} | MBTI: {_field(character, 'mbti')} | "
        f"성격: {_field(character, 'personality')}\n"
        f"말투: {_field(character, 'speech_style')} | "
        f"좋아하는 것: {_field(character, 'likes')}\n\n"
        "[댓글을 달 글]\n"
        f"글쓴이: {author}\n"
        f"제목: {_field(post, 'title')}\n"
        f"내용: {_field(post, 'body')[:200]}\n"
        f"{context}\n\n"
        "이 글에 캐릭터 말투로 1~2문장 댓글을 써 줘.\n\n"
        "JSON만 출력해:\n"
        '{"comment":"댓글 내용"}'
    )


# ─── Drafting ────────────────────────────────────────────────────

async def _best_effort(coro, what: str) -> list[dict]:
    try:
        return await coro
    except DataStoreError as e:
        logger.warning(f"Generation context unavailable ({what}): {e.message}")
        return []


async def draft_post(
    store: DataStoreClient, generator: TextGenerationClient, character_id: int,
) -> dict:
    character = await store.first(
        Table.SYSTEM_USERS, "*", where=[eq("id", character_id)],
    )
    if not character:
        raise ResourceNotFoundError("character_not_found")
    recent = await _best_effort(
        store.select(
            Table.POSTS, "title,body",
            where=[eq("system_user_id", character_id), is_null("deleted_at")],
            order=[desc("created_at")], limit=RECENT_POSTS_FOR_CONTEXT,
        ),
        "recent posts",
    )
    text = await generator.generate(
        build_post_prompt(character, recent),
        temperature=TEMPERATURE, max_tokens=POST_MAX_TOKENS,
    )
    parsed = parse_generated_json(text)
    return {"title": text_field(parsed, "title"), "body": text_field(parsed, "body")}


async def draft_comment(
    store: DataStoreClient,
    generator: TextGenerationClient,
    post_id: int,
    character_id: int,
) -> str:
    post, character = await asyncio.gather(
        store.first(
            Table.POSTS, "title,body,system_users(display_name)",
            where=[eq("id", post_id)],
        ),
        store.first(Table.SYSTEM_USERS, "*", where=[eq("id", character_id)]),
    )
    if not post:
        raise ResourceNotFoundError("post_not_found")
    if not character:
        raise ResourceNotFoundError("character_not_found")
    existing = await _best_effort(
        store.select(
            Table.COMMENTS, "body,nickname",
            where=[eq("post_id", post_id), is_null("deleted_at")],
            order=[asc("created_at")], limit=COMMENTS_FOR_CONTEXT,
        ),
        "existing comments",
    )
    text = await generator.generate(
        build_comment_prompt(character, post, existing),
        temperature=TEMPERATURE, max_tokens=COMMENT_MAX_TOKENS,
    )
    return text_field(parse_generated_json(text), "comment")
