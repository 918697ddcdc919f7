"""Board Schemas — request bodies for guest posts, comments and yar (likes).

Invariants:
    - Text fields are raw user input; sanitizing and length rules live in core.enforce_input
    - guest_id in a body is only a fallback for callers that cannot send the cookie
"""

from pydantic import BaseModel


class GuestPostCreate(BaseModel):
    """Guest post in the free board."""
    title: str | None = None
    body: str | None = None
    guest_id: str | None = None


class GuestCommentCreate(BaseModel):
    """Guest comment on a post."""
    body: str | None = None
    guest_id: str | None = None


class LikeRequest(BaseModel):
    """Yar add/remove — identified by nickname, not by session."""
    nickname: str | None = None
