"""Repair jobs for the eventual consistency between records and media files."""
import logging
import time
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.core.config import settings
from inkwell.models.post import Post
from inkwell.models.user import User
from inkwell.services.post_service import discard_media
from inkwell.services.storage_service import StorageBackend

logger = logging.getLogger(__name__)


async def referenced_media(db: AsyncSession) -> set[str]:
    """Filenames referenced by a post thumbnail or a user avatar."""
    thumbs = await db.execute(select(Post.thumbnail).where(Post.thumbnail.is_not(None)))
    avatars = await db.execute(select(User.avatar).where(User.avatar.is_not(None)))
    return {name for (name,) in thumbs.all() if name} | {name for (name,) in avatars.all() if name}


async def sweep_orphaned_media(
    db: AsyncSession,
    storage: StorageBackend,
    dry_run: bool = False,
    min_age_seconds: int | None = None,
) -> list[str]:
    """Delete stored files no record points at. Returns the orphaned filenames.

    Files modified within the last ``min_age_seconds`` (default
    ``ORPHAN_MIN_AGE_SECONDS``) are left alone: a create or edit writes its file
    before the row that references it commits.
    """
    if min_age_seconds is None:
        min_age_seconds = settings.ORPHAN_MIN_AGE_SECONDS
    cutoff = time.time() - min_age_seconds
    referenced = await referenced_media(db)
    orphans = []
    for name in storage.list_filenames():
        if name in referenced:
            continue
        try:
            if storage.modified_at(name) > cutoff:
                continue
        except FileNotFoundError:
            continue
        orphans.append(name)
    if not dry_run:
        for name in orphans:
            discard_media(storage, name)
    logger.info("Orphaned media sweep finished", extra={"orphans": len(orphans), "dry_run": dry_run})
    return orphans


async def find_missing_thumbnails(db: AsyncSession, storage: StorageBackend) -> list[UUID]:
    """Posts whose thumbnail file is not in the media store."""
    result = await db.execute(select(Post.id, Post.thumbnail))
    missing = [post_id for post_id, thumbnail in result.all() if thumbnail and not storage.exists(thumbnail)]
    for post_id in missing:
        logger.warning("Post thumbnail missing from media store", extra={"post_id": str(post_id)})
    return missing
