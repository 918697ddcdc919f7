"""Rate Limit Policy — per-action guest/origin limits and error codes.

Tests cover:
    - Policy table matches the board's published limits
    - Guest key is checked before the origin key
    - Rejections raise RateLimitedError with the limit's code and Retry-After
    - Origin rejection reports rate_limit_ip even for a fresh guest
"""

import pytest

from rainbowkidz.core.errors import RateLimitedError
from rainbowkidz.core.rate_limit_policy import (
    POLICIES,
    LimitedAction,
    enforce_rate_limit,
    guest_key,
    origin_key,
)
from rainbowkidz.core.rate_limiter import RateLimiter


def _limiter() -> RateLimiter:
    return RateLimiter(clock=lambda: 500.0)


def test_policy_limits():
    nick, post, comment = (
        POLICIES[LimitedAction.NICKNAME], POLICIES[LimitedAction.POST],
        POLICIES[LimitedAction.COMMENT],
    )
    assert (nick.per_guest.max_requests, nick.per_guest.window_seconds) == (1, 60)
    assert (nick.per_origin.max_requests, nick.per_origin.window_seconds) == (5, 60)
    assert (post.per_guest.max_requests, post.per_guest.window_seconds) == (1, 20)
    assert (post.per_origin.max_requests, post.per_origin.window_seconds) == (3, 600)
    assert (comment.per_guest.max_requests, comment.per_guest.window_seconds) == (1, 5)
    assert (comment.per_origin.max_requests, comment.per_origin.window_seconds) == (10, 60)


def test_error_codes_per_action():
    assert POLICIES[LimitedAction.NICKNAME].per_guest.error_code == "rate_limit"
    assert POLICIES[LimitedAction.POST].per_guest.error_code == "rate_limit_post"
    assert POLICIES[LimitedAction.COMMENT].per_guest.error_code == "rate_limit_comment"
    assert {p.per_origin.error_code for p in POLICIES.values()} == {"rate_limit_ip"}


def test_key_formats():
    assert guest_key(LimitedAction.POST, "g1") == "post:g1"
    assert origin_key(LimitedAction.COMMENT, "1.2.3.4") == "comment:ip:1.2.3.4"
    assert guest_key(LimitedAction.NICKNAME, "g1") == "nick:g1"


def test_second_post_by_same_guest_rejected_with_guest_code():
    limiter = _limiter()
    enforce_rate_limit(limiter, LimitedAction.POST, "g1", "1.1.1.1")
    with pytest.raises(RateLimitedError) as exc_info:
        enforce_rate_limit(limiter, LimitedAction.POST, "g1", "1.1.1.1")
    assert exc_info.value.code == "rate_limit_post"
    assert exc_info.value.http_status == 429
    assert exc_info.value.response_headers() == {"Retry-After": "20"}


def test_origin_limit_applies_across_guests():
    limiter = _limiter()
    for gid in ("g1", "g2", "g3"):
        enforce_rate_limit(limiter, LimitedAction.POST, gid, "9.9.9.9")
    with pytest.raises(RateLimitedError) as exc_info:
        enforce_rate_limit(limiter, LimitedAction.POST, "g4", "9.9.9.9")
    assert exc_info.value.code == "rate_limit_ip"


def test_guest_rejection_does_not_consume_origin_allowance():
    limiter = _limiter()
    enforce_rate_limit(limiter, LimitedAction.POST, "g1", "9.9.9.9")
    for _ in range(3):
        with pytest.raises(RateLimitedError):
            enforce_rate_limit(limiter, LimitedAction.POST, "g1", "9.9.9.9")
    enforce_rate_limit(limiter, LimitedAction.POST, "g2", "9.9.9.9")
    enforce_rate_limit(limiter, LimitedAction.POST, "g3", "9.9.9.9")


def test_actions_do_not_share_counters():
    limiter = _limiter()
    enforce_rate_limit(limiter, LimitedAction.POST, "g1", "1.1.1.1")
    enforce_rate_limit(limiter, LimitedAction.COMMENT, "g1", "1.1.1.1")
    enforce_rate_limit(limiter, LimitedAction.NICKNAME, "g1", "1.1.1.1")
