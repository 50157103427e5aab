"""User registration, login and author profiles."""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.api.deps import get_current_user, get_db
from inkwell.core.exceptions import NotFoundError, ValidationError
from inkwell.models.user import User
from inkwell.schemas.user import LoginRequest, Token, UserCreate, UserResponse
from inkwell.services.auth_service import (
    authenticate_user,
    create_token_for_user,
    create_user,
    get_user_by_email,
    get_user_by_id,
    list_authors,
    user_to_response,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    if await get_user_by_email(db, data.email):
        raise ValidationError("Email already exists")
    try:
        user = await create_user(db, data)
        await db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise ValidationError("Email already exists") from exc
    return user_to_response(user, include_email=True)


@router.post("/login", response_model=Token)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate_user(db, data.email, data.password)
    if not user:
        raise ValidationError("Invalid credentials")
    return Token(
        access_token=create_token_for_user(user),
        user=user_to_response(user, include_email=True),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return user_to_response(current_user, include_email=True)


@router.get("", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    return [user_to_response(u) for u in await list_authors(db)]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user_to_response(user)
