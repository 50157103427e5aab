"""Post lifecycle: create, read, edit, delete.

Writes follow a fixed order: validate -> write file -> write record -> update counter.
File and record writes are not transactional. A crash between the file write and the
record write leaves an orphaned file (see maintenance_service.sweep_orphaned_media);
a failure after the record write leaves counter drift (see
user_service.reconcile_post_counts). Cleanup of replaced or deleted thumbnails and
counter updates are best-effort: failures are logged and never change the outcome of
the primary write.
"""
import logging
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.core.config import settings
from inkwell.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    StorageError,
    ValidationError,
)
from inkwell.models.post import Post
from inkwell.schemas.post import PostResponse
from inkwell.services.storage_service import MediaUpload, StorageBackend, generate_filename
from inkwell.services.user_service import decrement_post_count, increment_post_count

logger = logging.getLogger(__name__)


def discard_media(storage: StorageBackend, filename: str | None, post_id: UUID | None = None) -> bool:
    """Best-effort removal of a media file. Never raises."""
    if not filename:
        return False
    try:
        deleted = storage.delete(filename)
    except (OSError, StorageError) as exc:
        logger.warning(
            "Failed to delete media file",
            extra={"media_filename": filename, "post_id": str(post_id) if post_id else None, "error": str(exc)},
        )
        return False
    if not deleted:
        logger.info("Media file already gone", extra={"media_filename": filename})
    return deleted


def _check_thumbnail_size(thumbnail: MediaUpload, message: str) -> None:
    if thumbnail.size > settings.MAX_THUMBNAIL_BYTES:
        raise ValidationError(message)


def _store_thumbnail(storage: StorageBackend, thumbnail: MediaUpload) -> str:
    filename = generate_filename(thumbnail.filename)
    storage.save(filename, thumbnail.data)
    return filename


async def create_post(
    db: AsyncSession,
    storage: StorageBackend,
    creator_id: UUID,
    title: str | None,
    category: str | None,
    description: str | None,
    thumbnail: MediaUpload | None,
) -> Post:
    if not title or not category or not description or thumbnail is None:
        raise ValidationError("Fill in all fields and choose a thumbnail")
    _check_thumbnail_size(thumbnail, "Thumbnail too big. File should be less than 2MB")

    filename = _store_thumbnail(storage, thumbnail)

    post = Post(
        title=title,
        category=category,
        description=description,
        thumbnail=filename,
        creator_id=creator_id,
    )
    db.add(post)
    try:
        await db.commit()
        await db.refresh(post)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Post insert failed", extra={"creator_id": str(creator_id), "error": str(exc)})
        discard_media(storage, filename)
        raise PersistenceError("Post couldn't be created") from exc

    logger.info("Post created", extra={"post_id": str(post.id), "creator_id": str(creator_id)})
    if not await increment_post_count(db, creator_id):
        # A failed counter update rolls the session back, which expires the post
        await db.refresh(post)
    return post


async def list_posts(db: AsyncSession) -> list[Post]:
    result = await db.execute(select(Post).order_by(desc(Post.updated_at)))
    return list(result.scalars().all())


async def get_post(db: AsyncSession, post_id: UUID) -> Post:
    post = await db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post Not Found.")
    return post


async def list_posts_by_category(db: AsyncSession, category: str) -> list[Post]:
    result = await db.execute(
        select(Post).where(Post.category == category).order_by(desc(Post.created_at))
    )
    return list(result.scalars().all())


async def list_posts_by_user(db: AsyncSession, user_id: UUID) -> list[Post]:
    result = await db.execute(
        select(Post).where(Post.creator_id == user_id).order_by(desc(Post.created_at))
    )
    return list(result.scalars().all())


async def edit_post(
    db: AsyncSession,
    storage: StorageBackend,
    post_id: UUID,
    title: str | None,
    category: str | None,
    description: str | None,
    thumbnail: MediaUpload | None = None,
    editor_id: UUID | None = None,
) -> Post:
    """Update text fields and optionally replace the thumbnail.

    Ownership is only checked when ENFORCE_EDIT_OWNERSHIP is set.
    """
    if not title or not category or len(description or "") < settings.MIN_EDIT_DESCRIPTION_LENGTH:
        raise ValidationError("Fill in all fields")

    post = await db.get(Post, post_id)
    if thumbnail is None:
        if post is None:
            raise PersistenceError("Couldn't update post", status_code=400)
    elif post is None:
        raise NotFoundError("Post not found")

    if settings.ENFORCE_EDIT_OWNERSHIP and post.creator_id != editor_id:
        raise ForbiddenError("Not authorized to edit this post")

    old_thumbnail = None
    new_thumbnail = None
    if thumbnail is not None:
        # Old file is removed only after the record points at the new one
        old_thumbnail = post.thumbnail
        _check_thumbnail_size(thumbnail, "Thumbnail too big. Should be less than 2MB")
        new_thumbnail = _store_thumbnail(storage, thumbnail)
        post.thumbnail = new_thumbnail

    post.title = title
    post.category = category
    post.description = description
    try:
        await db.commit()
        await db.refresh(post)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Post update failed", extra={"post_id": str(post_id), "error": str(exc)})
        discard_media(storage, new_thumbnail, post_id)
        raise PersistenceError("Couldn't update post") from exc

    if old_thumbnail and old_thumbnail != new_thumbnail:
        discard_media(storage, old_thumbnail, post_id)
    logger.info(
        "Post updated",
        extra={"post_id": str(post_id), "thumbnail_replaced": new_thumbnail is not None},
    )
    return post


async def delete_post(db: AsyncSession, storage: StorageBackend, post_id: UUID, caller_id: UUID) -> None:
    post = await db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    if post.creator_id != caller_id:
        raise ForbiddenError("Not authorized to delete this post")

    thumbnail = post.thumbnail
    creator_id = post.creator_id
    try:
        await db.delete(post)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Post delete failed", extra={"post_id": str(post_id), "error": str(exc)})
        raise PersistenceError("Server error while deleting post") from exc

    discard_media(storage, thumbnail, post_id)
    await decrement_post_count(db, creator_id)
    logger.info("Post deleted", extra={"post_id": str(post_id), "creator_id": str(creator_id)})


def post_to_response(post: Post, storage: StorageBackend | None = None) -> PostResponse:
    return PostResponse(
        id=post.id,
        title=post.title,
        category=post.category,
        description=post.description,
        thumbnail=post.thumbnail,
        thumbnail_url=storage.url_for(post.thumbnail) if storage and post.thumbnail else None,
        creator=post.creator_id,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )
