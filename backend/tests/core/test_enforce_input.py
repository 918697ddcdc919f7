"""Input Enforcement — sanitizing and content rules for nicknames, posts, comments.

Tests cover:
    - sanitize_text drops script blocks and tags, trims, truncates after cleaning
    - Nickname rules in order: type, length, charset, reserved terms
    - Like nicknames: charset/length only
    - Post title/body minimums are measured after sanitizing
    - Comment body must be non-empty after sanitizing
"""

from rainbowkidz.core.enforce_input import (
    check_comment_body,
    check_like_nickname,
    check_nickname,
    normalize_post,
    sanitize_text,
    validate_post,
)


# ─── sanitize_text ───────────────────────────────────────────────

def test_sanitize_removes_script_blocks_with_content():
    assert sanitize_text("hi<script>alert(1)</script>there", 100) == "hithere"


def test_sanitize_removes_script_case_insensitively_across_lines():
    assert sanitize_text("a<SCRIPT type='x'>\nbad()\n</Script>b", 100) == "ab"


def test_sanitize_removes_other_tags_keeps_text():
    assert sanitize_text("<b>bold</b> <i>it</i>", 100) == "bold it"


def test_sanitize_trims_then_truncates():
    assert sanitize_text("   abcdef   ", 3) == "abc"


def test_sanitize_handles_none():
    assert sanitize_text(None, 10) == ""


# ─── check_nickname ──────────────────────────────────────────────

def test_valid_nicknames_pass():
    for nick in ("하늘", "sky123", "ㅋㅋ", "Abc가나다"):
        assert check_nickname(nick) is None


def test_nickname_must_be_string():
    assert check_nickname(None) == "nickname_must_be_string"
    assert check_nickname(123) == "nickname_must_be_string"


def test_nickname_length_bounds():
    assert check_nickname("   ") == "nickname_length_1_10"
    assert check_nickname("a" * 11) == "nickname_length_1_10"
    assert check_nickname("a" * 10) is None


def test_nickname_charset():
    assert check_nickname("하늘 바다") == "nickname_invalid_chars"
    assert check_nickname("sky!") == "nickname_invalid_chars"
    assert check_nickname("<b>x") == "nickname_invalid_chars"


def test_nickname_reserved_terms_case_insensitive():
    assert check_nickname("Admin1") == "nickname_forbidden"
    assert check_nickname("우리선생님") == "nickname_forbidden"
    assert check_nickname("SYSTEMx") == "nickname_forbidden"


def test_length_is_checked_before_charset():
    assert check_nickname("!" * 11) == "nickname_length_1_10"


# ─── check_like_nickname ─────────────────────────────────────────

def test_like_nickname_rules():
    assert check_like_nickname("하늘") is None
    assert check_like_nickname("admin") is None
    assert check_like_nickname("a" * 11) == "invalid_nickname"
    assert check_like_nickname("a b") == "invalid_nickname"


# ─── posts & comments ────────────────────────────────────────────

def test_post_minimums_measured_after_sanitizing():
    title, body = normalize_post("<b>a</b>", "<i>hello</i>")
    assert (title, body) == ("a", "hello")
    assert validate_post(title, body) == "title_too_short"


def test_post_body_too_short():
    title, body = normalize_post("안녕", "<p>hi</p>")
    assert validate_post(title, body) == "body_too_short"


def test_post_fields_truncated_to_maximums():
    title, body = normalize_post("t" * 200, "b" * 6000)
    assert len(title) == 80
    assert len(body) == 5000
    assert validate_post(title, body) is None


def test_comment_body_empty_after_sanitizing():
    assert check_comment_body(sanitize_text("<script>x</script>", 1000)) == "comment_too_short"
    assert check_comment_body("ok") is None
