from typing import Optional
from datetime import datetime

from socialhub.schemas.base import CamelModel


class PostWithStats(CamelModel):
    id: int
    content: str
    image: Optional[str] = None
    created_at: datetime
    author_username: str
    like_count: int
    reply_count: int
    liked_by_me: bool
