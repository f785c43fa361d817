"""Tests for password sign-up, sign-in and token resolution."""
from __future__ import annotations

import os
from typing import Iterator

import pytest
from sqlalchemy import delete

# Ensure the database URL and JWT secret are available before importing application modules.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_inkwell.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from inkwell.backend import AuthClient  # noqa: E402
from inkwell.database import Base, SessionLocal, engine  # noqa: E402
from inkwell.models import Profile, User  # noqa: E402
from inkwell.security import MissingSecretError, require_secret  # noqa: E402


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(Profile))
        session.execute(delete(User))
        session.commit()
    yield


@pytest.fixture
def auth() -> AuthClient:
    return AuthClient(SessionLocal)


def test_sign_up_creates_exactly_one_profile(auth: AuthClient) -> None:
    result = auth.sign_up(email="Reader@Example.test", password="secret123", name="")

    assert result.ok
    assert result.data.user.email == "reader@example.test"
    with SessionLocal() as session:
        profiles = session.query(Profile).all()
    assert len(profiles) == 1
    assert profiles[0].id == result.data.user.id
    assert profiles[0].name == "reader"


def test_duplicate_sign_up_is_rejected(auth: AuthClient) -> None:
    auth.sign_up(email="reader@example.test", password="secret123", name="Reader")

    again = auth.sign_up(email="READER@example.test", password="other-pass", name="Copy")

    assert again.error.code == "user_already_exists"


def test_sign_in_and_resolve_token(auth: AuthClient) -> None:
    auth.sign_up(email="reader@example.test", password="secret123", name="Reader")

    session = auth.sign_in_with_password(email="reader@example.test", password="secret123").data
    resolved = auth.get_user(session.access_token)

    assert resolved.data == session.user
    assert auth.get_session(session.access_token).data.user == session.user


def test_wrong_password_and_bad_tokens(auth: AuthClient) -> None:
    auth.sign_up(email="reader@example.test", password="secret123", name="Reader")

    assert auth.sign_in_with_password(email="reader@example.test", password="nope").error.code == "invalid_credentials"
    assert auth.get_user("not-a-token").error.code == "invalid_token"
    assert auth.get_user(None).data is None
    assert auth.get_user(None).ok


def test_require_secret_rejects_template_values(monkeypatch) -> None:
    monkeypatch.setenv("SOME_KEY", "changeme")
    with pytest.raises(MissingSecretError):
        require_secret("SOME_KEY")

    monkeypatch.setenv("SOME_KEY", "short")
    with pytest.raises(MissingSecretError):
        require_secret("SOME_KEY", min_length=12)

    monkeypatch.setenv("SOME_KEY", "  a-real-value  ")
    assert require_secret("SOME_KEY") == "a-real-value"
