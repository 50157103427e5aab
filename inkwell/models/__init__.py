from inkwell.models.user import User
from inkwell.models.post import Post

__all__ = ["User", "Post"]
