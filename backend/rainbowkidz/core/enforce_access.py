"""Access Enforcement — guest ownership and administrator credential checks.

Invariants:
    - Two independent trust levels: guest (session token) and administrator (shared secret)
    - No session → 401; session present but not allowed → 403; no elevation path between guests
    - Blocked guests and guests without a nickname may read but never write
    - Admin access requires a configured secret AND an exact (constant-time) header match
    - Checks run before any write: a failing check leaves no partial side effect

Design Decisions:
    - Raise typed errors (not codes): each rule maps to a distinct HTTP status,
      and the global handler renders all of them
    - Rows are plain dicts as returned by the data store — no ORM layer
"""

import secrets

from rainbowkidz.core.domain_types import GuestId
from rainbowkidz.core.errors import (
    ErrorContext,
    ForbiddenError,
    ResourceNotFoundError,
    UnauthorizedError,
)


def require_guest(token: GuestId | None) -> GuestId:
    """Session presence: missing token → 401 guest_not_initialized."""
    if not token:
        raise UnauthorizedError("guest_not_initialized")
    return token


def require_unblocked_guest(guest_row: dict | None) -> dict | None:
    """Any guest mutation: a blocked row → 403 user_blocked. An absent row passes."""
    if guest_row and guest_row.get("is_blocked"):
        raise ForbiddenError(
            "user_blocked", ErrorContext(guest_id=guest_row.get("id")),
        )
    return guest_row


def require_writable_guest(guest_row: dict | None) -> dict:
    """Posting/commenting precondition: a registered, unblocked guest with a nickname."""
    if not guest_row or not guest_row.get("nickname"):
        raise ForbiddenError("nickname_required")
    require_unblocked_guest(guest_row)
    return guest_row


def require_owner(
    row: dict | None, token: GuestId, resource: str,
) -> dict:
    """Ownership of a post/comment row: missing → 404, other guest → 403."""
    if not row:
        raise ResourceNotFoundError(f"{resource}_not_found")
    if row.get("guest_id") != token:
        raise ForbiddenError(
            f"not_your_{resource}", ErrorContext(guest_id=token),
        )
    return row


def is_admin_key(provided: str | None, expected: str | None) -> bool:
    """Equality (not existence) of the shared secret grants admin."""
    if not expected or not provided:
        return False
    return secrets.compare_digest(provided.encode(), expected.encode())


def require_admin(provided: str | None, expected: str | None) -> None:
    if not is_admin_key(provided, expected):
        raise UnauthorizedError("unauthorized")
