"""Authentication and user lookup business logic."""
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.core.security import verify_password, get_password_hash, create_access_token
from inkwell.models.user import User
from inkwell.schemas.user import UserCreate, UserResponse


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def list_authors(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(desc(User.posts), User.name))
    return list(result.scalars().all())


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    user = User(
        name=data.name,
        email=data.email.lower(),
        password_hash=get_password_hash(data.password),
        posts=0,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def user_to_response(user: User, include_email: bool = False) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email if include_email else None,
        avatar=user.avatar,
        posts=user.posts or 0,
        created_at=user.created_at,
    )


def create_token_for_user(user: User) -> str:
    return create_access_token(user.id)
