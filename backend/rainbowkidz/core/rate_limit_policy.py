"""Rate-Limit Policies — per-action key schemes and thresholds.

Invariants:
    - Every guarded action has exactly two keys: per-guest and per-network-origin
    - The guest key is checked first; a rejection there does not consume origin quota
    - Rejection raises RateLimitedError carrying the action-specific code and Retry-After

Design Decisions:
    - One table for all thresholds: reviewers can see every limit in one place
"""

import logging
from dataclasses import dataclass
from enum import Enum

from rainbowkidz.core.errors import RateLimitedError
from rainbowkidz.core.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class LimitedAction(str, Enum):
    NICKNAME = "nick"
    POST = "post"
    COMMENT = "comment"


@dataclass(frozen=True)
class WindowLimit:
    max_requests: int
    window_seconds: float
    error_code: str


@dataclass(frozen=True)
class ActionPolicy:
    per_guest: WindowLimit
    per_origin: WindowLimit


POLICIES: dict[LimitedAction, ActionPolicy] = {
    LimitedAction.NICKNAME: ActionPolicy(
        per_guest=WindowLimit(1, 60, "rate_limit"),
        per_origin=WindowLimit(5, 60, "rate_limit_ip"),
    ),
    LimitedAction.POST: ActionPolicy(
        per_guest=WindowLimit(1, 20, "rate_limit_post"),
        per_origin=WindowLimit(3, 600, "rate_limit_ip"),
    ),
    LimitedAction.COMMENT: ActionPolicy(
        per_guest=WindowLimit(1, 5, "rate_limit_comment"),
        per_origin=WindowLimit(10, 60, "rate_limit_ip"),
    ),
}


def guest_key(action: LimitedAction, guest_id: str) -> str:
    return f"{action.value}:{guest_id}"


def origin_key(action: LimitedAction, client_ip: str) -> str:
    return f"{action.value}:ip:{client_ip}"


def enforce_rate_limit(
    limiter: RateLimiter, action: LimitedAction, guest_id: str, client_ip: str,
) -> None:
    """Check both keys for an action. Raises RateLimitedError on the first rejection."""
    policy = POLICIES[action]
    for key, limit in (
        (guest_key(action, guest_id), policy.per_guest),
        (origin_key(action, client_ip), policy.per_origin),
    ):
        decision = limiter.check(key, limit.max_requests, limit.window_seconds)
        if not decision.allowed:
            logger.info(
                f"Rate limit hit for {action.value}",
                extra={"rate_key": key, "error_code": limit.error_code},
            )
            raise RateLimitedError(
                limit.error_code,
                retry_after_seconds=decision.retry_after(limiter.clock()),
            )
