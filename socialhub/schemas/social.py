from pydantic import Field, StrictInt

from socialhub.schemas.base import CamelModel


class FollowToggle(CamelModel):
    follower_id: StrictInt = Field(..., gt=0)


class FollowToggleResult(CamelModel):
    message: str
    is_following: bool
    new_follower_count: int
