from typing import Optional
from datetime import datetime
from pydantic import EmailStr, Field, HttpUrl, TypeAdapter, ValidationError, field_validator

from socialhub.schemas.base import CamelModel

_http_url = TypeAdapter(HttpUrl)


# Shared properties
class UserBase(CamelModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.]+$")
    email: EmailStr
    full_name: Optional[str] = Field(None, max_length=100)


# Properties to receive via API on creation
class UserCreate(UserBase):
    password: str = Field(..., min_length=8)


# Properties to receive via API on profile update.
# Absent and null both mean "keep the stored value".
class UserProfileUpdate(CamelModel):
    bio: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = None

    @field_validator("image")
    @classmethod
    def image_must_be_http_url(cls, v: Optional[str]) -> Optional[str]:
        # Validated as a URL but stored exactly as sent
        if v is not None:
            try:
                _http_url.validate_python(v)
            except ValidationError:
                raise ValueError("Image must be a valid URL.")
        return v


# Public view of a user, embedded in profile and search responses
class UserPublic(CamelModel):
    id: int
    username: str
    full_name: Optional[str] = None
    bio: Optional[str] = None
    image: Optional[str] = None
    created_at: Optional[datetime] = None


# Owner's view of their own account
class UserAccount(UserPublic):
    email: EmailStr
    updated_at: Optional[datetime] = None


# Compact row used by listings
class UserSummary(CamelModel):
    id: int
    username: str
    full_name: Optional[str] = None
    image: Optional[str] = None


class UserListItem(UserSummary):
    is_following: bool = False


class UserProfile(CamelModel):
    user: UserPublic
    follower_count: int
    following_count: int
    is_following: bool


# Token exchange
class TokenRequest(CamelModel):
    email: EmailStr
    password: str


class Token(CamelModel):
    access_token: str
    token_type: str = "bearer"
