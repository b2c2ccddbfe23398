# Import all models here to ensure they are registered with SQLAlchemy
# before metadata.create_all runs.
from socialhub.db.base_class import Base  # noqa: F401
from socialhub.models.user import User  # noqa: F401
from socialhub.models.follow import Follow  # noqa: F401
from socialhub.models.post import Post  # noqa: F401
from socialhub.models.like import Like  # noqa: F401
from socialhub.models.reply import Reply  # noqa: F401
