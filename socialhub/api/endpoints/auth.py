from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.db.init_db import get_db
from socialhub.schemas.user import Token, TokenRequest
from socialhub.services import user_service
from socialhub.utils.security import create_access_token

router = APIRouter()


@router.post("/token", response_model=Token)
async def issue_token(
    credentials: TokenRequest,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Exchange email and password for a bearer token.
    """
    user = await user_service.authenticate_user(
        db, email=credentials.email, password=credentials.password
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"access_token": create_access_token({"id": user.id}), "token_type": "bearer"}
