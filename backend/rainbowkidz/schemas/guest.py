"""Guest Schemas — request bodies for the guest session endpoints.

Invariants:
    - Every field is optional at the schema level: rule checks (length, charset,
      reserved terms) run in core.enforce_input AFTER the rate limiter, so an abusive
      caller cannot probe the validator without consuming quota
"""

from typing import Any

from pydantic import BaseModel


class NicknameRequest(BaseModel):
    """Register or change the caller's nickname."""
    nickname: Any = None  # type checked by check_nickname after the rate limiter
    guest_id: str | None = None  # fallback when the cookie is not sent
