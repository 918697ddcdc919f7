"""Pagination clamps for list endpoints."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Page:
    limit: int
    offset: int


def clamp_page(limit: int | None, offset: int | None, default: int, cap: int) -> Page:
    """Limit defaults to `default`, bounded to [1, cap]; offset is never negative."""
    lim = default if limit is None else limit
    return Page(limit=max(1, min(lim, cap)), offset=max(offset or 0, 0))
