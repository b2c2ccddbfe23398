from typing import Optional

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from socialhub.core.config import settings
from socialhub.utils.security import verify_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[int]:
    """
    Resolve the caller's user id from the bearer token, or None for anonymous.

    A missing, expired or malformed token is indistinguishable from no token.
    """
    if credentials is None or not credentials.credentials:
        return None

    payload = verify_access_token(credentials.credentials)
    if payload is None:
        return None

    user_id = payload.get("id")
    # bool is an int subclass; a token claiming id=true is not an identity
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        return None
    return user_id


def get_current_user_id(
    user_id: Optional[int] = Depends(get_optional_user_id),
) -> int:
    """Same as get_optional_user_id but rejects anonymous callers with 401."""
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: missing or invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


class Pagination:
    """``limit``/``page`` query parameters turned into a LIMIT/OFFSET pair."""

    def __init__(
        self,
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        page: int = Query(1, ge=1),
    ):
        self.limit = limit
        self.page = page
        self.offset = (page - 1) * limit
