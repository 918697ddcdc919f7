"""Character Activity Score — ranks characters by their posting activity.

Invariants:
    - score = post_count * 0.4 + comment_count * 0.3 + view_count * 0.3
    - Missing/null counters count as 0
    - Ranking is descending by score and stable for ties (data-store order kept)
"""

POST_WEIGHT = 0.4
COMMENT_WEIGHT = 0.3
VIEW_WEIGHT = 0.3


def summarize_activity(posts: list[dict]) -> dict:
    """Aggregate post/view/comment counts and the weighted score."""
    post_count = len(posts)
    view_count = sum(p.get("view_count") or 0 for p in posts)
    comment_count = sum(p.get("comment_count") or 0 for p in posts)
    return {
        "post_count": post_count,
        "view_count": view_count,
        "comment_count": comment_count,
        "score": (
            post_count * POST_WEIGHT
            + comment_count * COMMENT_WEIGHT
            + view_count * VIEW_WEIGHT
        ),
    }


def rank_characters(characters: list[dict], activity: list[dict]) -> list[dict]:
    """Merge each character with its activity summary and sort by score."""
    merged = [{**c, **a} for c, a in zip(characters, activity)]
    return sorted(merged, key=lambda c: c["score"], reverse=True)
