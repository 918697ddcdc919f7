"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - GuestId is the canonical (lowercase, hyphenated) UUID string from the session cookie
    - Post/comment/character ids are positive integers assigned by the data store
    - All valid author kinds encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON/query strings without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

GuestId = NewType("GuestId", str)
BoardSlug = NewType("BoardSlug", str)
PostId = NewType("PostId", int)
CommentId = NewType("CommentId", int)
CharacterId = NewType("CharacterId", int)


# ─── Enums ───────────────────────────────────────────────────────

class AuthorType(str, Enum):
    """Who wrote a post or comment — maps to the `author_type` column."""
    GUEST = "guest"
    SYSTEM = "system"


class LikeAction(str, Enum):
    """Result label of a yar (like) mutation."""
    ADDED = "added"
    REMOVED = "removed"


class Table(str, Enum):
    """Remote tables and views the gateway queries."""
    GUESTS = "guests"
    BOARDS = "boards"
    POSTS = "posts"
    COMMENTS = "comments"
    POST_LIKES = "post_likes"
    SYSTEM_USERS = "system_users"


class RemoteProcedure(str, Enum):
    """Stored procedures that enforce nickname rules atomically."""
    CAN_CHANGE_NICKNAME = "can_change_nickname"
    CHECK_NICKNAME_AVAILABLE = "check_nickname_available"
