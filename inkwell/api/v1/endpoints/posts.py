"""Posts CRUD. Reads are public; writes need a bearer token."""
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.api.deps import get_current_user_id, get_db, get_storage, read_upload
from inkwell.schemas.post import PostDeleted, PostResponse
from inkwell.services import post_service
from inkwell.services.post_service import post_to_response
from inkwell.services.storage_service import StorageBackend

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    title: str | None = Form(None),
    category: str | None = Form(None),
    description: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    current_user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    post = await post_service.create_post(
        db,
        storage,
        current_user_id,
        title,
        category,
        description,
        await read_upload(thumbnail),
    )
    return post_to_response(post, storage)


@router.get("", response_model=list[PostResponse])
async def list_posts(
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    posts = await post_service.list_posts(db)
    return [post_to_response(p, storage) for p in posts]


@router.get("/categories/{category}", response_model=list[PostResponse])
async def list_category_posts(
    category: str,
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    posts = await post_service.list_posts_by_category(db, category)
    return [post_to_response(p, storage) for p in posts]


@router.get("/users/{user_id}", response_model=list[PostResponse])
async def list_user_posts(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    posts = await post_service.list_posts_by_user(db, user_id)
    return [post_to_response(p, storage) for p in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: UUID,
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    post = await post_service.get_post(db, post_id)
    return post_to_response(post, storage)


@router.patch("/{post_id}", response_model=PostResponse)
async def edit_post(
    post_id: UUID,
    title: str | None = Form(None),
    category: str | None = Form(None),
    description: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    current_user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    post = await post_service.edit_post(
        db,
        storage,
        post_id,
        title,
        category,
        description,
        thumbnail=await read_upload(thumbnail),
        editor_id=current_user_id,
    )
    return post_to_response(post, storage)


@router.delete("/{post_id}", response_model=PostDeleted)
async def delete_post(
    post_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
):
    await post_service.delete_post(db, storage, post_id, current_user_id)
    return PostDeleted(message="Post deleted successfully")
