"""Denormalized post counter on users.

The fast path adjusts ``users.posts`` with a single UPDATE alongside each post
write. Those adjustments are best-effort: a failure is logged and swallowed, so the
counter can drift from the real number of posts. ``reconcile_post_counts`` recomputes
it from the posts table.
"""
import logging
from uuid import UUID

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.models.post import Post
from inkwell.models.user import User

logger = logging.getLogger(__name__)


async def _adjust_post_count(db: AsyncSession, user_id: UUID, new_value, action: str) -> bool:
    try:
        user = await db.get(User, user_id)
        if user is None:
            logger.info(
                "Post counter update skipped, user not found",
                extra={"user_id": str(user_id), "action": action},
            )
            return False
        # SQL expression, so the UPDATE is computed by the database
        user.posts = new_value
        await db.commit()
        await db.refresh(user)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning(
            "Post counter update failed",
            extra={"user_id": str(user_id), "action": action, "error": str(exc)},
        )
        return False
    return True


async def increment_post_count(db: AsyncSession, user_id: UUID) -> bool:
    return await _adjust_post_count(db, user_id, User.posts + 1, "increment")


async def decrement_post_count(db: AsyncSession, user_id: UUID) -> bool:
    """Decrement, floored at zero."""
    return await _adjust_post_count(
        db, user_id, case((User.posts > 0, User.posts - 1), else_=0), "decrement"
    )


async def reconcile_post_counts(db: AsyncSession, user_id: UUID | None = None) -> dict[UUID, tuple[int, int]]:
    """Recompute users.posts from the posts table.

    Returns the users whose stored counter drifted as {user_id: (stored, actual)}.
    Limit to one user with ``user_id``.
    """
    counts = (
        select(Post.creator_id, func.count(Post.id).label("actual"))
        .group_by(Post.creator_id)
        .subquery()
    )
    q = select(User.id, User.posts, func.coalesce(counts.c.actual, 0)).outerjoin(
        counts, counts.c.creator_id == User.id
    )
    if user_id is not None:
        q = q.where(User.id == user_id)
    result = await db.execute(q)

    drifted: dict[UUID, tuple[int, int]] = {}
    for uid, stored, actual in result.all():
        if (stored or 0) != actual:
            drifted[uid] = (stored or 0, actual)

    for uid, (stored, actual) in drifted.items():
        await db.execute(update(User).where(User.id == uid).values(posts=actual))
        logger.warning(
            "Post counter drift repaired",
            extra={"user_id": str(uid), "stored": stored, "actual": actual},
        )
    await db.commit()
    return drifted
