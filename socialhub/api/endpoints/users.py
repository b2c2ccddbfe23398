from typing import Annotated, Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.api.deps import Pagination, get_current_user_id, get_optional_user_id
from socialhub.db.init_db import get_db
from socialhub.schemas.post import PostWithStats
from socialhub.schemas.social import FollowToggle, FollowToggleResult
from socialhub.schemas.user import (
    UserAccount,
    UserCreate,
    UserListItem,
    UserProfile,
    UserProfileUpdate,
    UserSummary,
)
from socialhub.services import post_service, social_service, user_service
from socialhub.services.social_service import FollowConflictError

router = APIRouter()

UserId = Annotated[int, Path(gt=0, description="User ID must be a positive integer.")]


@router.get("", response_model=List[UserListItem])
async def list_users(
    pagination: Pagination = Depends(),
    current_user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    List every other user, newest first, with the caller's follow status.
    """
    return await user_service.list_users(
        db, viewer_id=current_user_id, limit=pagination.limit, offset=pagination.offset
    )


@router.post("", response_model=UserAccount, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Register a new user.
    """
    user = await user_service.get_user_by_username_or_email(
        db, username=user_in.username, email=user_in.email
    )
    if user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A user with this username or email already exists.",
        )
    return await user_service.create_user(db, user_in=user_in)


@router.get("/search", response_model=UserProfile)
async def search_user(
    username: Optional[str] = Query(None),
    viewer_id: Optional[int] = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Find the newest user whose username contains the query, case-insensitively.
    """
    term = (username or "").strip()
    if not term:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Query parameter "username" is required and cannot be empty.',
        )

    user = await user_service.search_user_by_username(db, term)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return await social_service.build_profile(db, user, viewer_id)


@router.get("/{user_id}", response_model=UserProfile)
async def get_user_profile(
    user_id: UserId,
    viewer_id: Optional[int] = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Get a user profile with follower/following counts.
    """
    profile = await social_service.get_user_profile(db, user_id=user_id, viewer_id=viewer_id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return profile


@router.patch("/{user_id}/update", response_model=UserAccount)
async def update_user_profile(
    user_id: UserId,
    profile_in: Optional[UserProfileUpdate] = None,
    current_user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Update the caller's bio and/or image. Omitted fields are left unchanged.
    """
    if user_id != current_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: you can only update your own profile",
        )

    user = await user_service.update_profile(db, user_id=current_user_id, profile_in=profile_in)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


async def _read_follow_toggle(request: Request) -> FollowToggle:
    """Parse the toggle body, reporting failures as field-level validation errors."""
    try:
        payload = await request.json()
    except ValueError:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "Request body must be valid JSON", "input": None}]
        )
    try:
        return FollowToggle.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in e.errors()]
        )


@router.post(
    "/{user_id}/toggle-follow",
    response_model=FollowToggleResult,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": FollowToggle.model_json_schema(by_alias=True)}},
        }
    },
)
async def toggle_follow(
    user_id: UserId,
    request: Request,
    current_user_id: Optional[int] = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Follow the user if the caller isn't following them yet, unfollow otherwise.
    """
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized: missing or invalid token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        follow_in = await _read_follow_toggle(request)
    except RequestValidationError:
        if current_user_id is None:
            raise unauthorized
        raise

    if current_user_id is not None and follow_in.follower_id != current_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: you cannot act on behalf of another user",
        )
    if follow_in.follower_id == user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A user cannot follow themselves",
        )
    if current_user_id is None:
        raise unauthorized

    try:
        result = await social_service.toggle_follow(
            db, follower_id=current_user_id, followed_id=user_id
        )
    except FollowConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Follow state changed concurrently, please retry",
        )

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User to follow not found",
        )
    return result


@router.get("/{user_id}/posts", response_model=List[PostWithStats])
async def get_user_posts(
    user_id: UserId,
    viewer_id: Optional[int] = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Get all posts by a user, newest first, with like and reply counts.
    """
    return await post_service.get_user_posts(db, author_id=user_id, viewer_id=viewer_id)


@router.get("/{user_id}/followers", response_model=List[UserSummary])
async def get_followers(
    user_id: UserId,
    pagination: Pagination = Depends(),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Get the users following this user.
    """
    user = await user_service.get_user(db, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return await social_service.get_followers(
        db, user_id=user_id, limit=pagination.limit, offset=pagination.offset
    )


@router.get("/{user_id}/following", response_model=List[UserSummary])
async def get_following(
    user_id: UserId,
    pagination: Pagination = Depends(),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Get the users this user follows.
    """
    user = await user_service.get_user(db, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return await social_service.get_following(
        db, user_id=user_id, limit=pagination.limit, offset=pagination.offset
    )
