"""Post listing with engagement counts and the viewer's like flag."""

from datetime import datetime, timedelta

from socialhub.models.like import Like
from socialhub.models.post import Post
from socialhub.models.reply import Reply

T0 = datetime(2024, 3, 1, 9, 0, 0)


async def _seed_posts(add_rows, author, fan, other):
    older, newer = await add_rows(
        Post(author_id=author.id, content="first post", created_at=T0),
        Post(author_id=author.id, content="second post", image="https://example.com/p.png",
             created_at=T0 + timedelta(hours=1)),
    )
    await add_rows(
        Like(user_id=fan.id, post_id=older.id),
        Like(user_id=other.id, post_id=older.id),
        Like(user_id=other.id, post_id=newer.id),
        Reply(user_id=fan.id, post_id=older.id, content="nice"),
        Post(author_id=other.id, content="not by author", created_at=T0 + timedelta(hours=2)),
    )
    return older, newer


async def test_posts_newest_first_with_counts(client, make_user, add_rows):
    author = await make_user("writer")
    fan = await make_user()
    other = await make_user()
    older, newer = await _seed_posts(add_rows, author, fan, other)

    res = await client.get(f"/users/{author.id}/posts")

    assert res.status_code == 200
    posts = res.json()
    assert [p["id"] for p in posts] == [newer.id, older.id]

    assert posts[0]["content"] == "second post"
    assert posts[0]["image"] == "https://example.com/p.png"
    assert posts[0]["likeCount"] == 1
    assert posts[0]["replyCount"] == 0

    assert posts[1]["likeCount"] == 2
    assert posts[1]["replyCount"] == 1
    assert all(p["authorUsername"] == "writer" for p in posts)
    assert all(p["likedByMe"] is False for p in posts)


async def test_liked_by_me_is_viewer_relative(client, make_user, add_rows, auth_headers):
    author = await make_user()
    fan = await make_user()
    other = await make_user()
    older, newer = await _seed_posts(add_rows, author, fan, other)

    posts = (await client.get(f"/users/{author.id}/posts", headers=auth_headers(fan.id))).json()

    liked = {p["id"]: p["likedByMe"] for p in posts}
    assert liked == {older.id: True, newer.id: False}


async def test_posts_for_author_without_posts(client, make_user):
    author = await make_user()
    assert (await client.get(f"/users/{author.id}/posts")).json() == []
    assert (await client.get("/users/999/posts")).json() == []


async def test_posts_invalid_author_id(client):
    res = await client.get("/users/zero/posts")
    assert res.status_code == 400
    assert "user_id" in res.json()["error"]
