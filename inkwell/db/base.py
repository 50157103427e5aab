"""SQLAlchemy declarative base and model imports for Alembic."""
from inkwell.db.session import Base  # noqa: F401
from inkwell.models.user import User  # noqa: F401
from inkwell.models.post import Post  # noqa: F401

__all__ = ["Base", "User", "Post"]
