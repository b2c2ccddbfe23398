from typing import List, Optional, Dict, Any
import logging

from sqlalchemy import exists, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from socialhub.models.follow import Follow
from socialhub.models.user import User
from socialhub.schemas.user import UserCreate, UserProfileUpdate
from socialhub.utils.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


async def create_user(db: AsyncSession, user_in: UserCreate) -> User:
    """
    Create a new user with a hashed password.
    """
    db_user = User(
        username=user_in.username,
        email=user_in.email,
        full_name=user_in.full_name,
        hashed_password=get_password_hash(user_in.password),
    )
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)

    logger.info(f"Created user {db_user.id} ({db_user.username})")
    return db_user


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    """
    Get a user by ID.
    """
    result = await db.execute(select(User).filter(User.id == user_id))
    return result.scalars().first()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).filter(User.email == email))
    return result.scalars().first()


async def get_user_by_username_or_email(db: AsyncSession, username: str, email: str) -> Optional[User]:
    result = await db.execute(
        select(User).filter(or_(User.username == username, User.email == email))
    )
    return result.scalars().first()


async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """
    Authenticate a user by email and password.
    """
    user = await get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def search_user_by_username(db: AsyncSession, term: str) -> Optional[User]:
    """
    Case-insensitive substring match on username.

    Only one user is returned: the most recently created among the matches.
    """
    pattern = f"%{_escape_like(term.lower())}%"
    result = await db.execute(
        select(User)
        .filter(func.lower(User.username).like(pattern, escape="\\"))
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(1)
    )
    return result.scalars().first()


async def list_users(db: AsyncSession, viewer_id: int, limit: int, offset: int) -> List[Dict[str, Any]]:
    """
    Page through every user except the viewer, newest accounts first,
    flagging the ones the viewer already follows.
    """
    is_following = (
        exists()
        .where(Follow.follower_id == viewer_id, Follow.followed_id == User.id)
        .label("is_following")
    )
    result = await db.execute(
        select(User.id, User.username, User.full_name, User.image, is_following)
        .filter(User.id != viewer_id)
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return [dict(row._mapping) for row in result]


async def update_profile(db: AsyncSession, user_id: int, profile_in: Optional[UserProfileUpdate]) -> Optional[User]:
    """
    Apply a partial bio/image update.

    Fields left out (or sent as null) keep their stored value. When nothing
    is supplied the current record is returned without a write.
    """
    user = await get_user(db, user_id)
    if not user:
        return None

    changes = profile_in.model_dump(exclude_none=True) if profile_in else {}
    if not changes:
        return user

    if "bio" in changes:
        user.bio = changes["bio"]
    if "image" in changes:
        user.image = changes["image"]

    await db.commit()
    await db.refresh(user)

    logger.info(f"Updated profile of user {user_id}: {sorted(changes)}")
    return user
