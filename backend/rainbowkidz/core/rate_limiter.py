"""Fixed-Window Rate Limiter — process-local counters keyed by arbitrary strings.

Invariants:
    - First call for a key opens a window [now, now + window] with count 1 and is allowed
    - Within a window, calls are allowed while count < max_requests; each allowed call increments
    - After reset_at has passed (now > reset_at) the window restarts with count 1
    - A client can burst up to 2 * max_requests across a window boundary (kept on purpose)
    - When the table exceeds max_entries, expired records are swept before inserting;
      records still inside their window are never evicted

Design Decisions:
    - Owned object (one per app, on app.state) instead of module global: tests build isolated
      instances with a fake clock
    - No locking: all mutation happens synchronously inside one event-loop turn.
      A multi-threaded host must wrap check() in a lock
"""

import math
import time
from dataclasses import dataclass
from typing import Callable

DEFAULT_MAX_ENTRIES = 10_000


@dataclass
class RateLimitRecord:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateDecision:
    """Outcome of a single limiter check."""
    allowed: bool
    reset_at: float

    def retry_after(self, now: float) -> int:
        """Whole seconds until the window resets (at least 1 when rejected)."""
        if self.allowed:
            return 0
        return max(1, math.ceil(self.reset_at - now))


class RateLimiter:
    """Fixed-window counters with opportunistic eviction of expired records."""

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries
        self.clock = clock
        self._records: dict[str, RateLimitRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def check(self, key: str, max_requests: int, window_seconds: float) -> RateDecision:
        now = self.clock()
        if len(self._records) > self.max_entries:
            self._sweep_expired(now)

        record = self._records.get(key)
        if record is None or now > record.reset_at:
            record = RateLimitRecord(count=1, reset_at=now + window_seconds)
            self._records[key] = record
            return RateDecision(allowed=True, reset_at=record.reset_at)

        if record.count >= max_requests:
            return RateDecision(allowed=False, reset_at=record.reset_at)
        record.count += 1
        return RateDecision(allowed=True, reset_at=record.reset_at)

    def allow(self, key: str, max_requests: int, window_seconds: float) -> bool:
        return self.check(key, max_requests, window_seconds).allowed

    def _sweep_expired(self, now: float) -> None:
        expired = [k for k, rec in self._records.items() if now > rec.reset_at]
        for k in expired:
            del self._records[k]
