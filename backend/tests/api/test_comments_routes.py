"""Comment Routes — list, guest create, own delete.

Tests cover:
    - Listing: oldest first, tombstones hidden, character projection, limit cap
    - Create: gate order, nickname copied from guest row, sanitizing, rate limit
    - Delete: owner only (cookie identity)
"""

from rainbowkidz.core.domain_types import Table


def _post(store, **fields):
    return store.seed(
        Table.POSTS,
        **{"board_id": 1, "author_type": "guest", "title": "제목", "body": "본문입니다", **fields},
    )


async def test_list_comments(client, store, character):
    post = _post(store)
    store.seed(Table.COMMENTS, post_id=post["id"], body="a", author_type="guest", nickname="하늘")
    store.seed(Table.COMMENTS, post_id=post["id"], body="b", author_type="system",
               system_user_id=character["id"], nickname="토끼")
    store.seed(Table.COMMENTS, post_id=post["id"], body="c", deleted_at="2026-02-01T00:00:00+00:00")
    store.seed(Table.COMMENTS, post_id=post["id"] + 100, body="other post")
    res = await client.get(f"/api/v1/posts/{post['id']}/comments")
    comments = res.json()["comments"]
    assert [c["body"] for c in comments] == ["a", "b"]
    assert comments[1]["system_users"] == {"display_name": "토끼", "emoji": "🐰"}
    assert comments[0]["system_users"] is None


async def test_list_comments_limit(client, store):
    post = _post(store)
    for i in range(5):
        store.seed(Table.COMMENTS, post_id=post["id"], body=str(i))
    res = await client.get(f"/api/v1/posts/{post['id']}/comments?limit=2")
    assert [c["body"] for c in res.json()["comments"]] == ["0", "1"]


async def test_create_comment(client, store, sign_in):
    guest_id = sign_in("하늘")
    post = _post(store)
    res = await client.post(
        f"/api/v1/posts/{post['id']}/comments", json={"body": "<b>좋아요</b>"},
    )
    assert res.status_code == 201
    comment = res.json()["comment"]
    assert comment["body"] == "좋아요"
    assert comment["nickname"] == "하늘"
    assert comment["guest_id"] == guest_id
    assert comment["author_type"] == "guest"
    assert comment["post_id"] == post["id"]


async def test_comment_on_deleted_post(client, store, sign_in):
    sign_in("하늘")
    post = _post(store, deleted_at="2026-02-01T00:00:00+00:00")
    res = await client.post(f"/api/v1/posts/{post['id']}/comments", json={"body": "hi"})
    assert res.status_code == 404
    assert res.json()["error"] == "post_not_found"


async def test_guest_gate_precedes_post_lookup(client, sign_in):
    sign_in(None)
    res = await client.post("/api/v1/posts/9999/comments", json={"body": "hi"})
    assert res.status_code == 403
    assert res.json()["error"] == "nickname_required"


async def test_empty_comment_after_sanitizing(client, store, sign_in):
    sign_in("하늘")
    post = _post(store)
    res = await client.post(
        f"/api/v1/posts/{post['id']}/comments", json={"body": "<script>x</script>"},
    )
    assert res.status_code == 400
    assert res.json()["error"] == "comment_too_short"


async def test_comment_rate_limit(client, store, sign_in):
    sign_in("하늘")
    post = _post(store)
    await client.post(f"/api/v1/posts/{post['id']}/comments", json={"body": "하나"})
    res = await client.post(f"/api/v1/posts/{post['id']}/comments", json={"body": "둘"})
    assert res.status_code == 429
    assert res.json()["error"] == "rate_limit_comment"


async def test_blocked_guest_cannot_comment(client, store, sign_in):
    post = _post(store)
    sign_in("하늘", is_blocked=True)
    res = await client.post(f"/api/v1/posts/{post['id']}/comments", json={"body": "안녕"})
    assert res.status_code == 403
    assert res.json()["error"] == "user_blocked"
    assert store.rows(Table.COMMENTS) == []


async def test_comment_requires_session(client):
    res = await client.post("/api/v1/posts/1/comments", json={"body": "hi"})
    assert res.status_code == 401


async def test_delete_own_comment(client, store, sign_in):
    guest_id = sign_in("하늘")
    comment = store.seed(Table.COMMENTS, post_id=1, body="x", guest_id=guest_id)
    res = await client.delete(f"/api/v1/comments/{comment['id']}")
    assert res.json() == {"ok": True}
    assert store.rows(Table.COMMENTS)[0]["deleted_at"] is not None


async def test_delete_other_guests_comment(client, store, sign_in):
    comment = store.seed(Table.COMMENTS, post_id=1, body="x", guest_id="someone-else")
    sign_in("하늘")
    res = await client.delete(f"/api/v1/comments/{comment['id']}")
    assert res.status_code == 403
    assert res.json()["error"] == "not_your_comment"


async def test_blocked_guest_cannot_delete_own_comment(client, store, sign_in):
    guest_id = sign_in("하늘", is_blocked=True)
    comment = store.seed(Table.COMMENTS, post_id=1, body="x", guest_id=guest_id)
    res = await client.delete(f"/api/v1/comments/{comment['id']}")
    assert res.status_code == 403
    assert res.json()["error"] == "user_blocked"
    assert store.rows(Table.COMMENTS)[0]["deleted_at"] is None


async def test_delete_missing_comment(client, sign_in):
    sign_in("하늘")
    res = await client.delete("/api/v1/comments/31337")
    assert res.status_code == 404
    assert res.json()["error"] == "comment_not_found"
