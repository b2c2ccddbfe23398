from typing import List, Optional, Dict, Any

from sqlalchemy import exists, false, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from socialhub.models.like import Like
from socialhub.models.post import Post
from socialhub.models.reply import Reply
from socialhub.models.user import User


async def get_user_posts(db: AsyncSession, author_id: int, viewer_id: Optional[int]) -> List[Dict[str, Any]]:
    """
    All posts by ``author_id``, newest first, with like/reply counts and
    whether ``viewer_id`` has liked each one. Anonymous viewers never have.
    """
    like_count = (
        select(func.count(Like.id))
        .where(Like.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    reply_count = (
        select(func.count(Reply.id))
        .where(Reply.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    if viewer_id is not None:
        liked_by_me = exists().where(Like.post_id == Post.id, Like.user_id == viewer_id)
    else:
        liked_by_me = false()

    result = await db.execute(
        select(
            Post.id,
            Post.content,
            Post.image,
            Post.created_at,
            User.username.label("author_username"),
            like_count.label("like_count"),
            reply_count.label("reply_count"),
            liked_by_me.label("liked_by_me"),
        )
        .join(User, Post.author_id == User.id)
        .filter(Post.author_id == author_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
    )
    return [
        {**row._mapping, "liked_by_me": bool(row.liked_by_me)}
        for row in result
    ]
