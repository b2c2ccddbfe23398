from typing import List, Dict, Any, Optional
import logging

from sqlalchemy import delete, exists, false, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from socialhub.models.follow import Follow
from socialhub.models.user import User
from socialhub.services import user_service

logger = logging.getLogger(__name__)


class FollowConflictError(Exception):
    """A concurrent toggle created the same edge first."""

    def __init__(self, follower_id: int, followed_id: int):
        super().__init__(f"Follow {follower_id} -> {followed_id} was modified concurrently")
        self.follower_id = follower_id
        self.followed_id = followed_id


def _follower_count(user_id: int):
    return (
        select(func.count(Follow.id))
        .where(Follow.followed_id == user_id)
        .scalar_subquery()
    )


def _following_count(user_id: int):
    return (
        select(func.count(Follow.id))
        .where(Follow.follower_id == user_id)
        .scalar_subquery()
    )


async def count_followers(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(select(_follower_count(user_id)))
    return result.scalar_one()


async def is_following(db: AsyncSession, follower_id: int, followed_id: int) -> bool:
    result = await db.execute(
        select(
            exists().where(
                Follow.follower_id == follower_id,
                Follow.followed_id == followed_id,
            )
        )
    )
    return bool(result.scalar_one())


async def get_follow_stats(db: AsyncSession, user_id: int, viewer_id: Optional[int]) -> Dict[str, Any]:
    """
    Fresh follower/following counts for ``user_id`` plus whether ``viewer_id``
    follows them. The three aggregates are independent and go out as a single
    statement.
    """
    if viewer_id is not None and viewer_id != user_id:
        viewer_follows = exists().where(
            Follow.follower_id == viewer_id,
            Follow.followed_id == user_id,
        )
    else:
        viewer_follows = false()

    result = await db.execute(
        select(
            _follower_count(user_id).label("follower_count"),
            _following_count(user_id).label("following_count"),
            viewer_follows.label("is_following"),
        )
    )
    row = result.one()
    return {
        "follower_count": row.follower_count,
        "following_count": row.following_count,
        "is_following": bool(row.is_following),
    }


async def build_profile(db: AsyncSession, user: User, viewer_id: Optional[int]) -> Dict[str, Any]:
    stats = await get_follow_stats(db, user.id, viewer_id)
    return {"user": user, **stats}


async def get_user_profile(db: AsyncSession, user_id: int, viewer_id: Optional[int]) -> Optional[Dict[str, Any]]:
    """
    Get a user together with their follow aggregates, or None if missing.
    """
    user = await user_service.get_user(db, user_id)
    if not user:
        return None
    return await build_profile(db, user, viewer_id)


async def toggle_follow(db: AsyncSession, follower_id: int, followed_id: int) -> Optional[Dict[str, Any]]:
    """
    Invert the follow edge follower_id -> followed_id.

    Returns the new state and the target's fresh follower count, or None when
    a follow is requested for a user that does not exist. Unfollowing does not
    check the target. A lost race on insert raises FollowConflictError.
    """
    currently_following = await is_following(db, follower_id, followed_id)

    if currently_following:
        await db.execute(
            delete(Follow).where(
                Follow.follower_id == follower_id,
                Follow.followed_id == followed_id,
            )
        )
        await db.commit()
        logger.info(f"User {follower_id} unfollowed {followed_id}")
    else:
        target = await user_service.get_user(db, followed_id)
        if not target:
            logger.info(f"Follow target {followed_id} not found")
            return None

        db.add(Follow(follower_id=follower_id, followed_id=followed_id))
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Concurrent follow {follower_id} -> {followed_id}: {e.orig}")
            raise FollowConflictError(follower_id, followed_id) from e
        logger.info(f"User {follower_id} now follows {followed_id}")

    return {
        "message": "Unfollowed successfully." if currently_following else "Followed successfully.",
        "is_following": not currently_following,
        "new_follower_count": await count_followers(db, followed_id),
    }


async def get_followers(db: AsyncSession, user_id: int, limit: int, offset: int) -> List[User]:
    """
    Users following ``user_id``, most recent follow first.
    """
    result = await db.execute(
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .filter(Follow.followed_id == user_id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()


async def get_following(db: AsyncSession, user_id: int, limit: int, offset: int) -> List[User]:
    """
    Users that ``user_id`` follows, most recent follow first.
    """
    result = await db.execute(
        select(User)
        .join(Follow, Follow.followed_id == User.id)
        .filter(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()
