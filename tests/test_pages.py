"""End-to-end tests for the page flows and the JSON API."""
from __future__ import annotations

import os
from datetime import datetime
from io import BytesIO
from typing import Iterator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete, func, select

# Ensure the database URL and JWT secret are available before importing application modules.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_inkwell.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from inkwell.backend import AuthClient, BackendClient, BackendResponse, TableClient, get_backend  # noqa: E402
from inkwell.database import Base, SessionLocal, engine  # noqa: E402
from inkwell.main import app  # noqa: E402
from inkwell.models import Like, Post, Profile, User  # noqa: E402
from inkwell.services import feed_states  # noqa: E402

from .spies import SpyStorage  # noqa: E402


class FailingPostWrites(TableClient):
    """Table client whose post inserts fail, as if the database rejected them."""

    def insert(self, table_name, record):
        if table_name == "posts":
            return BackendResponse.failure("Database request failed", code="database_error")
        return super().insert(table_name, record)


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(Like))
        session.execute(delete(Post))
        session.execute(delete(Profile))
        session.execute(delete(User))
        session.commit()
    feed_states.clear()
    yield


@pytest.fixture
def storage() -> SpyStorage:
    return SpyStorage()


@pytest.fixture
def backend(storage: SpyStorage) -> BackendClient:
    return BackendClient(
        auth=AuthClient(SessionLocal),
        tables=TableClient(engine, Base.metadata),
        storage=storage,
    )


@pytest.fixture
def client(backend: BackendClient) -> Iterator[TestClient]:
    app.dependency_overrides[get_backend] = lambda: backend
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _sign_up(client: TestClient, *, email: str = "writer@example.test", name: str = "Writer") -> User:
    response = client.post("/auth/sign-up", data={"name": name, "email": email, "password": "secret123"})
    assert response.status_code == 200
    with SessionLocal() as session:
        return session.scalar(select(User).where(User.email == email))


def _seed_post(*, title: str = "Someone else's post", likes: int = 0) -> Post:
    with SessionLocal() as session:
        other = User(email=f"{uuid4().hex[:8]}@example.test", hashed_password="x")
        session.add(other)
        session.flush()
        session.add(Profile(id=other.id, name="Other", email=other.email))
        post = Post(title=title, content="Body text", author_id=other.id, likes=likes)
        session.add(post)
        session.commit()
        session.refresh(post)
        return post


def _stored_post(post_id) -> Post:
    with SessionLocal() as session:
        return session.get(Post, post_id)


def test_sign_up_creates_profile_and_opens_session(client: TestClient) -> None:
    user = _sign_up(client, name="Ada Lovelace")

    with SessionLocal() as session:
        profile = session.get(Profile, user.id)
    assert profile is not None
    assert profile.name == "Ada Lovelace"
    assert profile.email == "writer@example.test"
    assert client.cookies.get("inkwell_session")


def test_sign_in_with_wrong_password_shows_error(client: TestClient) -> None:
    _sign_up(client)
    client.cookies.clear()

    response = client.post("/auth/sign-in", data={"email": "writer@example.test", "password": "wrong-pass"})

    assert response.status_code == 400
    assert "Invalid login credentials" in response.text


@pytest.mark.parametrize("path", ["/create-post", "/dashboard", "/profile", f"/edit-post/{uuid4()}"])
def test_protected_pages_send_anonymous_visitors_to_auth(client: TestClient, path: str) -> None:
    response = client.get(path, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/auth"


def test_create_post_without_image(client: TestClient, storage: SpyStorage) -> None:
    user = _sign_up(client)

    response = client.post(
        "/create-post",
        data={"title": "First post", "content": "Hello world", "excerpt": ""},
    )

    assert response.status_code == 200
    assert str(response.url).endswith("/dashboard")
    assert "Your post has been created successfully!" in response.text
    assert storage.uploads == []
    with SessionLocal() as session:
        post = session.scalar(select(Post).where(Post.author_id == user.id))
    assert post.title == "First post"
    assert post.image is None
    assert post.excerpt is None
    assert post.likes == 0


def test_create_post_with_image_stores_public_url(client: TestClient, storage: SpyStorage) -> None:
    user = _sign_up(client)

    client.post(
        "/create-post",
        data={"title": "Pictured", "content": "With a cover", "excerpt": "Short"},
        files={"image": ("cover.PNG", BytesIO(b"png-bytes"), "image/png")},
    )

    key = storage.uploads[0]["key"]
    assert key.startswith(f"{user.id}/")
    assert key.endswith(".png")
    assert storage.uploads[0]["bucket"] == "images"
    with SessionLocal() as session:
        post = session.scalar(select(Post).where(Post.author_id == user.id))
    assert post.image == f"https://cdn.example.test/images/{key}"
    assert post.excerpt == "Short"


def test_failed_post_insert_removes_uploaded_image(client: TestClient, storage: SpyStorage) -> None:
    _sign_up(client)
    app.dependency_overrides[get_backend] = lambda: BackendClient(
        auth=AuthClient(SessionLocal),
        tables=FailingPostWrites(engine, Base.metadata),
        storage=storage,
    )

    response = client.post(
        "/create-post",
        data={"title": "Doomed", "content": "Never stored"},
        files={"image": ("cover.png", BytesIO(b"png-bytes"), "image/png")},
    )

    assert response.status_code == 400
    assert "Database request failed" in response.text
    assert storage.removed == [storage.uploads[0]["key"]]
    assert storage.objects == {}


def test_editing_someone_elses_post_redirects_to_dashboard(client: TestClient) -> None:
    _sign_up(client)
    post = _seed_post()

    redirect = client.get(f"/edit-post/{post.id}", follow_redirects=False)
    followed = client.get(f"/edit-post/{post.id}")

    assert redirect.status_code == 303
    assert redirect.headers["location"] == "/dashboard"
    assert "permission to edit it" in followed.text


def test_update_ignores_posts_owned_by_others(client: TestClient) -> None:
    _sign_up(client)
    post = _seed_post(title="Untouched")

    client.post(f"/edit-post/{post.id}", data={"title": "Hijacked", "content": "x"})

    assert _stored_post(post.id).title == "Untouched"


def test_author_can_edit_post_and_clear_optional_fields(client: TestClient, storage: SpyStorage) -> None:
    user = _sign_up(client)
    client.post(
        "/create-post",
        data={"title": "Draft", "content": "Body", "excerpt": "Teaser"},
        files={"image": ("cover.png", BytesIO(b"png-bytes"), "image/png")},
    )
    with SessionLocal() as session:
        post_id = session.scalar(select(Post.id).where(Post.author_id == user.id))

    page = client.get(f"/edit-post/{post_id}")
    response = client.post(
        f"/edit-post/{post_id}",
        data={"title": "Final", "content": "New body", "excerpt": "", "remove_image": "true"},
    )

    assert page.status_code == 200
    assert "Draft" in page.text
    assert "Post updated successfully" in response.text
    stored = _stored_post(post_id)
    assert stored.title == "Final"
    assert stored.excerpt is None
    assert stored.image is None


def test_profile_update_keeps_email_and_uploads_fixed_slot(client: TestClient, storage: SpyStorage) -> None:
    user = _sign_up(client)

    response = client.post(
        "/profile",
        data={"name": "Renamed", "phone": "555-0100", "bio": "Writes things", "email": "hacker@example.test"},
        files={"profile_image": ("me.png", BytesIO(b"face"), "image/png")},
    )

    assert "Profile updated successfully" in response.text
    assert storage.uploads[0]["key"] == f"{user.id}/profile.png"
    assert storage.uploads[0]["upsert"] is True
    with SessionLocal() as session:
        profile = session.get(Profile, user.id)
    assert profile.name == "Renamed"
    assert profile.phone == "555-0100"
    assert profile.email == "writer@example.test"
    assert profile.profile_image == f"https://cdn.example.test/images/{user.id}/profile.png"


def test_like_api_round_trip(client: TestClient) -> None:
    _sign_up(client)
    post = _seed_post(likes=3)

    liked = client.post(f"/api/posts/{post.id}/like").json()
    unliked = client.post(f"/api/posts/{post.id}/like").json()

    assert liked["liked"] is True and liked["likes"] == 4 and liked["applied"] is True
    assert unliked["liked"] is False and unliked["likes"] == 3
    assert unliked["like_label"] == "Likes"
    assert _stored_post(post.id).likes == 3
    with SessionLocal() as session:
        assert session.scalar(select(func.count()).select_from(Like)) == 0


def test_like_api_without_session_is_a_no_op(client: TestClient) -> None:
    post = _seed_post(likes=2)

    response = client.post(f"/api/posts/{post.id}/like")

    assert response.status_code == 200
    assert response.json()["applied"] is False
    assert _stored_post(post.id).likes == 2


def test_like_api_unknown_post_is_404(client: TestClient) -> None:
    _sign_up(client)

    assert client.post(f"/api/posts/{uuid4()}/like").status_code == 404


def test_home_feed_reflects_existing_likes(client: TestClient) -> None:
    _sign_up(client)
    post = _seed_post(likes=1)
    client.post(f"/api/posts/{post.id}/like")

    response = client.get("/home")

    assert response.status_code == 200
    assert 'aria-pressed="true"' in response.text
    assert "Likes" in response.text


def test_landing_feed_lists_posts_newest_first_with_author(client: TestClient) -> None:
    older = _seed_post(title="Older")
    newer = _seed_post(title="Newer")
    with SessionLocal() as session:
        session.get(Post, older.id).created_at = datetime(2024, 1, 1)
        session.get(Post, newer.id).created_at = datetime(2024, 6, 1)
        session.commit()

    response = client.get("/")

    assert response.status_code == 200
    assert response.text.index("Newer") < response.text.index("Older")
    assert "Other" in response.text


def test_missing_post_detail_redirects_home(client: TestClient) -> None:
    response = client.get(f"/post/{uuid4()}", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/"


def test_auth_callback_confirms_active_session(client: TestClient) -> None:
    _sign_up(client)

    response = client.get("/auth/callback")

    assert "Email confirmed!" in response.text
    assert 'http-equiv="refresh" content="3;url=/"' in response.text


def test_auth_callback_without_session_reports_failure(client: TestClient) -> None:
    response = client.get("/auth/callback")

    assert "Verification failed" in response.text


def test_unknown_route_renders_not_found_page(client: TestClient) -> None:
    response = client.get("/definitely/not/here")

    assert response.status_code == 404
    assert "Oops! Page not found" in response.text


def test_not_found_page_skips_session_lookup(client: TestClient, backend: BackendClient, monkeypatch) -> None:
    _sign_up(client)

    def _unexpected(*args, **kwargs):
        raise AssertionError("identity lookup on a 404 page")

    monkeypatch.setattr(backend.auth, "get_user", _unexpected)
    response = client.get("/definitely/not/here")

    assert response.status_code == 404
    assert "Oops! Page not found" in response.text
    assert 'href="/auth"' in response.text


def test_api_token_works_as_bearer(client: TestClient) -> None:
    created = client.post(
        "/api/auth/sign-up",
        json={"name": "Api", "email": "api@example.com", "password": "secret123"},
    )
    token = created.json()["access_token"]
    post = _seed_post(likes=0)
    client.cookies.clear()

    response = client.post(f"/api/posts/{post.id}/like", headers={"Authorization": f"Bearer {token}"})

    assert created.status_code == 201
    assert response.json()["applied"] is True
    assert _stored_post(post.id).likes == 1


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}
