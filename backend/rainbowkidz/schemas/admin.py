"""Admin Schemas — request bodies for system-authored content and character tools.

Invariants:
    - Ids are positive integers when present; absence is reported with the
      endpoint-specific code (e.g. system_user_required), not a schema error
    - CharacterProfileUpdate only knows whitelisted columns; unknown keys are ignored
    - Only fields the caller actually sent are written (model_fields_set)
"""

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class SystemPostCreate(BaseModel):
    """Character-authored post or notice."""
    system_user_id: int | None = Field(None, gt=0)
    title: str | None = None
    body: str | None = None
    is_notice: StrictBool = False
    is_pinned: StrictBool = False


class GeneratePostRequest(BaseModel):
    character_id: int | None = Field(None, gt=0)


class GenerateCommentRequest(BaseModel):
    post_id: int | None = Field(None, gt=0)
    character_id: int | None = Field(None, gt=0)


class SystemCommentCreate(BaseModel):
    """Character-authored comment (often an accepted AI draft)."""
    post_id: int | None = Field(None, gt=0)
    system_user_id: int | None = Field(None, gt=0)
    body: str | None = None


class CharacterProfileUpdate(BaseModel):
    """Whitelisted character profile columns. Empty values are stored as null."""
    model_config = ConfigDict(extra="ignore")

    display_name: str | None = None
    emoji: str | None = None
    group_type: str | None = None
    animal_type: str | None = None
    gender: str | None = None
    birthday: str | None = None
    age: int | None = None
    mbti: str | None = None
    personality: str | None = None
    likes: str | None = None
    dislikes: str | None = None
    hobby: str | None = None
    secret: str | None = None
    speech_style: str | None = None
    image_url: str | None = None
    color: str | None = None

    def to_update(self) -> dict:
        """Only the sent fields; falsy values become null."""
        return {
            name: (getattr(self, name) or None)
            for name in self.model_fields_set
        }
