"""Access Enforcement — guest session, writability, ownership, admin key.

Tests cover:
    - Missing session → 401 guest_not_initialized
    - Absent row / no nickname → 403 nickname_required; blocked → 403 user_blocked
    - Ownership: missing row → 404 {resource}_not_found, other guest → 403 not_your_{resource}
    - Admin key: unset secret never matches; exact match required
"""

import pytest

from rainbowkidz.core.enforce_access import (
    is_admin_key,
    require_admin,
    require_guest,
    require_owner,
    require_unblocked_guest,
    require_writable_guest,
)
from rainbowkidz.core.errors import ForbiddenError, ResourceNotFoundError, UnauthorizedError


def test_require_guest_rejects_missing_token():
    with pytest.raises(UnauthorizedError) as exc_info:
        require_guest(None)
    assert exc_info.value.code == "guest_not_initialized"
    assert exc_info.value.http_status == 401


def test_require_guest_returns_token():
    assert require_guest("g1") == "g1"


def test_writable_guest_needs_row_and_nickname():
    for row in (None, {"id": "g1", "nickname": None, "is_blocked": False}):
        with pytest.raises(ForbiddenError) as exc_info:
            require_writable_guest(row)
        assert exc_info.value.code == "nickname_required"


def test_blocked_guest_cannot_write():
    with pytest.raises(ForbiddenError) as exc_info:
        require_writable_guest({"id": "g1", "nickname": "하늘", "is_blocked": True})
    assert exc_info.value.code == "user_blocked"
    assert exc_info.value.http_status == 403


def test_unblocked_check_rejects_only_blocked_rows():
    assert require_unblocked_guest(None) is None
    row = {"id": "g1", "nickname": None, "is_blocked": False}
    assert require_unblocked_guest(row) is row
    with pytest.raises(ForbiddenError) as exc_info:
        require_unblocked_guest({"id": "g1", "nickname": None, "is_blocked": True})
    assert exc_info.value.code == "user_blocked"


def test_owner_check_missing_row_is_not_found():
    with pytest.raises(ResourceNotFoundError) as exc_info:
        require_owner(None, "g1", "comment")
    assert exc_info.value.code == "comment_not_found"


def test_owner_check_other_guest_is_forbidden():
    with pytest.raises(ForbiddenError) as exc_info:
        require_owner({"id": 5, "guest_id": "g2"}, "g1", "post")
    assert exc_info.value.code == "not_your_post"


def test_owner_check_passes_for_author():
    row = {"id": 5, "guest_id": "g1"}
    assert require_owner(row, "g1", "post") is row


def test_admin_key_requires_configured_secret():
    assert not is_admin_key("", "")
    assert not is_admin_key("anything", "")
    assert not is_admin_key(None, "secret")


def test_admin_key_exact_match():
    assert is_admin_key("secret", "secret")
    assert not is_admin_key("secret ", "secret")
    assert not is_admin_key("Secret", "secret")


def test_require_admin_raises_unauthorized():
    with pytest.raises(UnauthorizedError) as exc_info:
        require_admin("wrong", "secret")
    assert exc_info.value.code == "unauthorized"
