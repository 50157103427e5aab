"""Tests for post endpoints."""
from uuid import uuid4

import pytest
from httpx import AsyncClient

from conftest import auth_headers, make_post, make_user, stored_post_count
from inkwell.core.security import create_access_token
from inkwell.services import user_service


def image(name: str = "photo.png", size: int = 500_000) -> dict:
    return {"thumbnail": (name, b"\x89" * size, "image/png")}


POST_FIELDS = {"title": "Hello", "category": "tech", "description": "World"}


@pytest.mark.asyncio
async def test_create_and_get_post(async_client: AsyncClient, db_session, session_maker, storage):
    user = await make_user(db_session)

    response = await async_client.post(
        "/api/v1/posts", data=POST_FIELDS, files=image("sunset.png"), headers=auth_headers(user.id)
    )

    assert response.status_code == 201
    created = response.json()
    assert created["title"] == "Hello"
    assert created["category"] == "tech"
    assert created["description"] == "World"
    assert created["creator"] == str(user.id)
    assert created["thumbnail"].startswith("sunset_")
    assert created["thumbnail"].endswith(".png")
    assert created["thumbnail_url"] == f"http://testserver/uploads/{created['thumbnail']}"
    assert storage.exists(created["thumbnail"])
    assert await stored_post_count(session_maker, user.id) == 1

    fetched = await async_client.get(f"/api/v1/posts/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["id"] == created["id"]


@pytest.mark.asyncio
async def test_create_post_requires_token(async_client: AsyncClient, storage):
    response = await async_client.post("/api/v1/posts", data=POST_FIELDS, files=image())
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

    response = await async_client.post(
        "/api/v1/posts", data=POST_FIELDS, files=image(), headers={"Authorization": "Bearer garbage"}
    )
    assert response.status_code == 401
    assert storage.list_filenames() == []


@pytest.mark.asyncio
async def test_expired_token_is_rejected(async_client: AsyncClient):
    token = create_access_token(uuid4(), expires_minutes=-1)
    response = await async_client.delete(
        f"/api/v1/posts/{uuid4()}", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_post_missing_thumbnail(async_client: AsyncClient, db_session):
    user = await make_user(db_session)

    response = await async_client.post("/api/v1/posts", data=POST_FIELDS, headers=auth_headers(user.id))

    assert response.status_code == 422
    assert response.json() == {"detail": "Fill in all fields and choose a thumbnail"}


@pytest.mark.asyncio
async def test_create_post_missing_field(async_client: AsyncClient, db_session):
    user = await make_user(db_session)

    response = await async_client.post(
        "/api/v1/posts",
        data={"title": "Hello", "category": "tech"},
        files=image(),
        headers=auth_headers(user.id),
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_post_oversized_thumbnail(async_client: AsyncClient, db_session, session_maker, storage):
    user = await make_user(db_session)

    response = await async_client.post(
        "/api/v1/posts", data=POST_FIELDS, files=image(size=3_000_000), headers=auth_headers(user.id)
    )

    assert response.status_code == 422
    assert "Thumbnail too big" in response.json()["detail"]
    assert (await async_client.get("/api/v1/posts")).json() == []
    assert storage.list_filenames() == []
    assert await stored_post_count(session_maker, user.id) == 0


@pytest.mark.asyncio
async def test_create_post_for_deleted_user(async_client: AsyncClient):
    response = await async_client.post(
        "/api/v1/posts", data=POST_FIELDS, files=image(), headers=auth_headers(uuid4())
    )
    assert response.status_code == 201


async def rolled_back_counter(db, user_id, new_value, action) -> bool:
    await db.rollback()
    return False


@pytest.mark.asyncio
async def test_create_post_when_counter_update_fails(
    async_client: AsyncClient, db_session, session_maker, storage, monkeypatch
):
    user = await make_user(db_session)
    monkeypatch.setattr(user_service, "_adjust_post_count", rolled_back_counter)

    response = await async_client.post(
        "/api/v1/posts", data=POST_FIELDS, files=image(), headers=auth_headers(user.id)
    )

    assert response.status_code == 201
    created = response.json()
    assert created["title"] == "Hello"
    assert created["creator"] == str(user.id)
    assert storage.exists(created["thumbnail"])
    assert await stored_post_count(session_maker, user.id) == 0


@pytest.mark.asyncio
async def test_get_unknown_post(async_client: AsyncClient):
    response = await async_client.get(f"/api/v1/posts/{uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"detail": "Post Not Found."}


@pytest.mark.asyncio
async def test_list_filters(async_client: AsyncClient, db_session, storage):
    alice = await make_user(db_session, name="Alice")
    bob = await make_user(db_session, name="Bob")
    tech = await make_post(db_session, storage, alice.id, title="Tech", category="tech")
    travel = await make_post(db_session, storage, bob.id, title="Travel", category="travel")

    everything = await async_client.get("/api/v1/posts")
    assert {p["id"] for p in everything.json()} == {str(tech.id), str(travel.id)}

    by_category = await async_client.get("/api/v1/posts/categories/travel")
    assert [p["id"] for p in by_category.json()] == [str(travel.id)]

    by_user = await async_client.get(f"/api/v1/posts/users/{alice.id}")
    assert [p["id"] for p in by_user.json()] == [str(tech.id)]

    unknown = await async_client.get("/api/v1/posts/categories/nonexistent")
    assert unknown.status_code == 200
    assert unknown.json() == []


@pytest.mark.asyncio
async def test_edit_post_text_fields(async_client: AsyncClient, db_session, storage):
    user = await make_user(db_session)
    post = await make_post(db_session, storage, user.id)

    response = await async_client.patch(
        f"/api/v1/posts/{post.id}",
        data={"title": "Updated", "category": "news", "description": "A long enough description"},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Updated"
    assert body["thumbnail"] == post.thumbnail


@pytest.mark.asyncio
async def test_edit_post_short_description(async_client: AsyncClient, db_session, storage):
    user = await make_user(db_session)
    post = await make_post(db_session, storage, user.id, title="Original")

    response = await async_client.patch(
        f"/api/v1/posts/{post.id}",
        data={"title": "Updated", "category": "news", "description": "too short"},
        headers=auth_headers(user.id),
    )

    assert response.status_code == 422
    assert response.json() == {"detail": "Fill in all fields"}
    assert (await async_client.get(f"/api/v1/posts/{post.id}")).json()["title"] == "Original"


@pytest.mark.asyncio
async def test_edit_post_replaces_thumbnail(async_client: AsyncClient, db_session, storage):
    user = await make_user(db_session)
    post = await make_post(db_session, storage, user.id)

    response = await async_client.patch(
        f"/api/v1/posts/{post.id}",
        data={"title": "Updated", "category": "news", "description": "A long enough description"},
        files=image("fresh.webp", size=1000),
        headers=auth_headers(user.id),
    )

    assert response.status_code == 200
    new_thumbnail = response.json()["thumbnail"]
    assert new_thumbnail != post.thumbnail
    assert new_thumbnail.endswith(".webp")
    assert storage.list_filenames() == [new_thumbnail]


@pytest.mark.asyncio
async def test_edit_unknown_post(async_client: AsyncClient, db_session):
    user = await make_user(db_session)
    fields = {"title": "Updated", "category": "news", "description": "A long enough description"}

    without_file = await async_client.patch(f"/api/v1/posts/{uuid4()}", data=fields, headers=auth_headers(user.id))
    assert without_file.status_code == 400

    with_file = await async_client.patch(
        f"/api/v1/posts/{uuid4()}", data=fields, files=image(), headers=auth_headers(user.id)
    )
    assert with_file.status_code == 404


@pytest.mark.asyncio
async def test_edit_requires_token(async_client: AsyncClient, db_session, storage):
    user = await make_user(db_session)
    post = await make_post(db_session, storage, user.id)

    response = await async_client.patch(
        f"/api/v1/posts/{post.id}",
        data={"title": "Updated", "category": "news", "description": "A long enough description"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_delete_post_by_creator(async_client: AsyncClient, db_session, session_maker, storage):
    user = await make_user(db_session, posts=1)
    post = await make_post(db_session, storage, user.id)

    response = await async_client.delete(f"/api/v1/posts/{post.id}", headers=auth_headers(user.id))

    assert response.status_code == 200
    assert response.json() == {"message": "Post deleted successfully"}
    assert (await async_client.get(f"/api/v1/posts/{post.id}")).status_code == 404
    assert not storage.exists(post.thumbnail)
    assert await stored_post_count(session_maker, user.id) == 0


@pytest.mark.asyncio
async def test_delete_post_by_other_user(async_client: AsyncClient, db_session, session_maker, storage):
    owner = await make_user(db_session, name="Owner", posts=1)
    intruder = await make_user(db_session, name="Intruder")
    post = await make_post(db_session, storage, owner.id)

    response = await async_client.delete(f"/api/v1/posts/{post.id}", headers=auth_headers(intruder.id))

    assert response.status_code == 403
    assert response.json() == {"detail": "Not authorized to delete this post"}
    assert (await async_client.get(f"/api/v1/posts/{post.id}")).status_code == 200
    assert storage.exists(post.thumbnail)
    assert await stored_post_count(session_maker, owner.id) == 1


@pytest.mark.asyncio
async def test_delete_post_when_counter_update_fails(
    async_client: AsyncClient, db_session, session_maker, storage, monkeypatch
):
    user = await make_user(db_session, posts=1)
    post = await make_post(db_session, storage, user.id)
    monkeypatch.setattr(user_service, "_adjust_post_count", rolled_back_counter)

    response = await async_client.delete(f"/api/v1/posts/{post.id}", headers=auth_headers(user.id))

    assert response.status_code == 200
    assert response.json() == {"message": "Post deleted successfully"}
    assert (await async_client.get(f"/api/v1/posts/{post.id}")).status_code == 404
    assert await stored_post_count(session_maker, user.id) == 1


@pytest.mark.asyncio
async def test_delete_unknown_post(async_client: AsyncClient, db_session):
    user = await make_user(db_session)
    response = await async_client.delete(f"/api/v1/posts/{uuid4()}", headers=auth_headers(user.id))
    assert response.status_code == 404
