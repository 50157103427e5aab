"""Shared fixtures: per-test SQLite database, media store and API client."""
import os
import tempfile
from pathlib import Path

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="inkwell-tests-"))
# Settings are read at import time, so configure them before importing inkwell
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'app.db'}"
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["MEDIA_BASE_URL"] = "http://testserver"

from datetime import datetime  # noqa: E402
from uuid import UUID  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from inkwell.core.security import create_access_token  # noqa: E402
from inkwell.db.base import Base  # noqa: E402
from inkwell.db.session import get_db  # noqa: E402
from inkwell.main import app  # noqa: E402
from inkwell.models.post import Post  # noqa: E402
from inkwell.models.user import User  # noqa: E402
from inkwell.services.storage_service import LocalStorage, get_storage  # noqa: E402


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(base_dir=tmp_path / "uploads", base_url="http://testserver")


@pytest.fixture
async def async_client(session_maker, storage):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


async def make_user(session: AsyncSession, name: str = "Author", posts: int = 0) -> User:
    user = User(
        name=name,
        email=f"{name.lower().replace(' ', '_')}@example.com",
        password_hash="not-a-real-hash",
        posts=posts,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def make_post(
    session: AsyncSession,
    storage: LocalStorage,
    creator_id: UUID,
    title: str = "Hello",
    category: str = "tech",
    created_at: datetime | None = None,
    updated_at: datetime | None = None,
) -> Post:
    """Insert a post row with a backing file, bypassing the service."""
    thumbnail = f"{title.lower().replace(' ', '-')}-{creator_id.hex[:8]}.png"
    storage.save(thumbnail, b"png-bytes")
    post = Post(
        title=title,
        category=category,
        description="A description long enough",
        thumbnail=thumbnail,
        creator_id=creator_id,
    )
    if created_at is not None:
        post.created_at = created_at
    if updated_at is not None:
        post.updated_at = updated_at
    session.add(post)
    await session.commit()
    await session.refresh(post)
    return post


async def stored_post_count(session_maker, user_id: UUID) -> int:
    """Read users.posts through a fresh session."""
    async with session_maker() as session:
        user = await session.get(User, user_id)
        return user.posts


def auth_headers(user_id: UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
