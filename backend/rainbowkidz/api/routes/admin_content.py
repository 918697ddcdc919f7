"""Admin Content — character-authored posts/comments, AI drafts, moderation, profiles.

Invariants:
    - Every route requires the admin key (router dependency, checked before anything else)
    - System posts and comments are written as author_type "system" with the character id
    - AI drafts are returned, never stored: publishing goes through system/posts or system-comment
    - Generation routes check the generator is configured before validating fields
    - Character profile updates only write whitelisted, explicitly sent fields

Design Decisions:
    - Image upload overwrites characters/{id}.{ext}; a failed image_url update is an
      error (the uploaded object stays and is overwritten on retry)
"""

import logging
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status

from rainbowkidz.api.deps import (
    get_app_settings,
    get_board_cache,
    get_data_store,
    get_text_generator,
    require_admin_key,
)
from rainbowkidz.config import Settings
from rainbowkidz.core.board_cache import BoardCache
from rainbowkidz.core.domain_types import AuthorType, Table
from rainbowkidz.core.enforce_input import (
    COMMENT_BODY_MAX,
    check_comment_body,
    normalize_post,
    sanitize_text,
    validate_post,
)
from rainbowkidz.core.errors import DataStoreError, InputValidationError
from rainbowkidz.infrastructure.data_store import DataStoreClient, eq
from rainbowkidz.infrastructure.text_generation import TextGenerationClient
from rainbowkidz.schemas.admin import (
    CharacterProfileUpdate,
    GenerateCommentRequest,
    GeneratePostRequest,
    SystemCommentCreate,
    SystemPostCreate,
)
from rainbowkidz.services.board_queries import resolve_board_or_404, soft_delete
from rainbowkidz.services.content_generation import draft_comment, draft_post

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1", tags=["admin"], dependencies=[Depends(require_admin_key)],
)

DEFAULT_CHARACTER_NAME = "캐릭터"
DEFAULT_IMAGE_EXTENSION = "jpg"
DEFAULT_IMAGE_CONTENT_TYPE = "image/jpeg"


# ─── System content ──────────────────────────────────────────────

@router.post("/system/posts", status_code=status.HTTP_201_CREATED)
async def create_system_post(
    payload: SystemPostCreate | None = None,
    settings: Settings = Depends(get_app_settings),
    store: DataStoreClient = Depends(get_data_store),
    cache: BoardCache = Depends(get_board_cache),
):
    """Character-authored post (optionally a notice and/or pinned) in the free board."""
    payload = payload or SystemPostCreate()
    if not payload.system_user_id:
        raise InputValidationError("system_user_required")

    title, body = normalize_post(payload.title, payload.body)
    error = validate_post(title, body)
    if error:
        raise InputValidationError(error)

    board_id = await resolve_board_or_404(cache, settings.free_board_slug)
    rows = await store.insert(Table.POSTS, {
        "board_id": board_id,
        "author_type": AuthorType.SYSTEM.value,
        "system_user_id": payload.system_user_id,
        "title": title,
        "body": body,
        "content_type": "system",
        "is_notice": payload.is_notice,
        "is_pinned": payload.is_pinned,
    })
    post = rows[0] if rows else None
    logger.info(f"System post created by character {payload.system_user_id}")
    return {"ok": True, "post": post}


@router.post("/admin/system-comment", status_code=status.HTTP_201_CREATED)
async def create_system_comment(
    payload: SystemCommentCreate | None = None,
    store: DataStoreClient = Depends(get_data_store),
):
    payload = payload or SystemCommentCreate()
    if not (payload.post_id and payload.system_user_id and payload.body):
        raise InputValidationError("missing_fields")

    body = sanitize_text(payload.body, COMMENT_BODY_MAX)
    error = check_comment_body(body)
    if error:
        raise InputValidationError(error)

    try:
        character = await store.first(
            Table.SYSTEM_USERS, "display_name", where=[eq("id", payload.system_user_id)],
        )
    except DataStoreError as e:
        logger.warning(f"Character name unavailable: {e.message}")
        character = None
    nickname = (character or {}).get("display_name") or DEFAULT_CHARACTER_NAME

    rows = await store.insert(Table.COMMENTS, {
        "post_id": payload.post_id,
        "author_type": AuthorType.SYSTEM.value,
        "system_user_id": payload.system_user_id,
        "nickname": nickname,
        "body": body,
    })
    return {"ok": True, "comment": rows[0] if rows else None}


# ─── AI drafts ───────────────────────────────────────────────────

@router.post("/admin/generate-post")
async def generate_post(
    payload: GeneratePostRequest | None = None,
    store: DataStoreClient = Depends(get_data_store),
    generator: TextGenerationClient = Depends(get_text_generator),
):
    """Draft a post in the character's voice. Nothing is stored."""
    generator.ensure_configured()
    payload = payload or GeneratePostRequest()
    if not payload.character_id:
        raise InputValidationError("character_id_required")
    draft = await draft_post(store, generator, payload.character_id)
    return {"ok": True, **draft}


@router.post("/admin/generate-comment")
async def generate_comment(
    payload: GenerateCommentRequest | None = None,
    store: DataStoreClient = Depends(get_data_store),
    generator: TextGenerationClient = Depends(get_text_generator),
):
    generator.ensure_configured()
    payload = payload or GenerateCommentRequest()
    if not (payload.post_id and payload.character_id):
        raise InputValidationError("post_id_and_character_id_required")
    comment = await draft_comment(store, generator, payload.post_id, payload.character_id)
    return {"ok": True, "comment": comment}


# ─── Moderation & characters ─────────────────────────────────────

@router.delete("/admin/posts/{post_id:int}")
async def force_delete_post(
    post_id: int = Path(gt=0),
    store: DataStoreClient = Depends(get_data_store),
):
    await soft_delete(store, Table.POSTS, post_id)
    logger.info(f"Post {post_id} removed by admin")
    return {"ok": True}


@router.patch("/admin/characters/{character_id:int}")
async def update_character(
    character_id: int = Path(gt=0),
    payload: CharacterProfileUpdate | None = None,
    store: DataStoreClient = Depends(get_data_store),
):
    update = payload.to_update() if payload else {}
    if not update:
        raise InputValidationError("no_fields_to_update")
    await store.update(Table.SYSTEM_USERS, update, where=[eq("id", character_id)])
    return {"ok": True}


def _image_extension(filename: str | None) -> str:
    suffix = PurePosixPath(filename or "").suffix.lstrip(".").lower()
    return suffix or DEFAULT_IMAGE_EXTENSION


@router.post("/admin/upload-image")
async def upload_character_image(
    image: UploadFile | None = File(None),
    character_id: str | None = Form(None),
    store: DataStoreClient = Depends(get_data_store),
):
    """Upload a character portrait and point the profile's image_url at it."""
    if image is None or not character_id:
        raise InputValidationError("missing_image_or_character_id")
    character_id = character_id.strip()
    if not (character_id.isascii() and character_id.isdigit()) or int(character_id) <= 0:
        raise InputValidationError("invalid_character_id")

    object_path = f"characters/{character_id}.{_image_extension(image.filename)}"
    content = await image.read()
    image_url = await store.upload_object(
        object_path, content, image.content_type or DEFAULT_IMAGE_CONTENT_TYPE,
    )
    await store.update(
        Table.SYSTEM_USERS, {"image_url": image_url}, where=[eq("id", int(character_id))],
    )
    logger.info(f"Character {character_id} image uploaded to {object_path}")
    return {"ok": True, "image_url": image_url}
