"""Input Enforcement — normalizes and bounds-checks user-supplied text.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - check_* functions return an error code on violation, None on success
    - Each violated rule has its own code so the frontend can show precise feedback
    - sanitize_text always strips scripts and tags BEFORE trimming and truncating

Design Decisions:
    - Return codes (not exceptions): composable with `or`, first error wins,
      same pattern as the access gate
"""

import re

TITLE_MAX = 80
POST_BODY_MAX = 5000
COMMENT_BODY_MAX = 1000
NICKNAME_MAX = 10

TITLE_MIN = 2
POST_BODY_MIN = 5

NICKNAME_CHARSET = r"0-9A-Za-z가-힣ㄱ-ㅎㅏ-ㅣ"
_NICKNAME_RE = re.compile(rf"^[{NICKNAME_CHARSET}]+$")
_LIKE_NICKNAME_RE = re.compile(rf"^[{NICKNAME_CHARSET}]{{1,{NICKNAME_MAX}}}$")

# Terms that imply staff authority; matched case-insensitively as substrings
RESERVED_NICKNAME_TERMS = ("관리자", "admin", "운영자", "선생님", "teacher", "system")

_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


def sanitize_text(text: object, max_length: int) -> str:
    """Drop <script> blocks and all tags, trim, then truncate to max_length."""
    cleaned = _TAG_RE.sub("", _SCRIPT_RE.sub("", str(text or "")))
    return cleaned.strip()[:max_length]


# ─── Nickname ────────────────────────────────────────────────────

def check_nickname(value: object) -> str | None:
    """Registration rules: type, length, charset, reserved terms."""
    if not isinstance(value, str):
        return "nickname_must_be_string"
    nick = value.strip()
    if not 1 <= len(nick) <= NICKNAME_MAX:
        return "nickname_length_1_10"
    if not _NICKNAME_RE.match(nick):
        return "nickname_invalid_chars"
    lowered = nick.lower()
    if any(term.lower() in lowered for term in RESERVED_NICKNAME_TERMS):
        return "nickname_forbidden"
    return None


def check_like_nickname(value: str | None) -> str | None:
    """Yar (like) nickname: charset and length only. Presence is checked by the caller."""
    if not _LIKE_NICKNAME_RE.match(value or ""):
        return "invalid_nickname"
    return None


# ─── Posts & Comments ────────────────────────────────────────────

def check_title(title: str) -> str | None:
    if len(title) < TITLE_MIN:
        return "title_too_short"
    return None


def check_post_body(body: str) -> str | None:
    if len(body) < POST_BODY_MIN:
        return "body_too_short"
    return None


def check_comment_body(body: str) -> str | None:
    if not body:
        return "comment_too_short"
    return None


def normalize_post(raw_title: object, raw_body: object) -> tuple[str, str]:
    return (
        sanitize_text(raw_title, TITLE_MAX),
        sanitize_text(raw_body, POST_BODY_MAX),
    )


def validate_post(title: str, body: str) -> str | None:
    """Chain post checks on already-sanitized fields. Returns first error or None."""
    return check_title(title) or check_post_body(body)
