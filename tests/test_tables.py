"""Integration tests for the table client against SQLite."""
from __future__ import annotations

import asyncio
import os
from datetime import datetime
from typing import Iterator
from uuid import uuid4

import pytest
from sqlalchemy import delete

# Ensure the database URL and JWT secret are available before importing application modules.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_inkwell.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from inkwell.backend import BackendClient, Embed, Identity, TableClient  # noqa: E402
from inkwell.database import Base, SessionLocal, engine  # noqa: E402
from inkwell.models import Like, Post, Profile, User  # noqa: E402
from inkwell.services.feed_cache import FeedState  # noqa: E402
from inkwell.services.like_service import toggle_like  # noqa: E402


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
    yield


@pytest.fixture
def tables() -> TableClient:
    return TableClient(engine, Base.metadata)


@pytest.fixture
def author(tables: TableClient) -> dict:
    user = tables.insert("users", {"email": f"{uuid4().hex[:8]}@example.test", "hashed_password": "x"}).data
    return tables.insert("profiles", {"id": user["id"], "name": "Ada", "email": user["email"]}).data


def _post(tables: TableClient, author: dict, title: str, *, created_at: datetime, likes: int | None = 0) -> dict:
    result = tables.insert(
        "posts",
        {
            "title": title,
            "content": f"{title} body",
            "author_id": author["id"],
            "likes": likes,
            "created_at": created_at,
            "updated_at": created_at,
        },
    )
    assert result.ok, result.error
    return result.data


def test_select_orders_newest_first_and_embeds_author(tables: TableClient, author: dict) -> None:
    _post(tables, author, "older", created_at=datetime(2024, 1, 1))
    _post(tables, author, "newer", created_at=datetime(2024, 2, 1))

    result = tables.select(
        "posts",
        order_by="created_at",
        descending=True,
        embed=Embed(table="profiles", foreign_key="author_id", columns=("name", "profile_image")),
    )

    assert result.ok
    assert [row["title"] for row in result.data] == ["newer", "older"]
    assert result.data[0]["profiles"] == {"name": "Ada", "profile_image": None}


def test_embed_is_none_when_author_row_is_missing(tables: TableClient) -> None:
    orphan_author = {"id": uuid4()}
    _post(tables, orphan_author, "orphan", created_at=datetime(2024, 1, 1))

    result = tables.select(
        "posts", embed=Embed(table="profiles", foreign_key="author_id", columns=("name",))
    )

    assert result.data[0]["profiles"] is None


def test_select_accepts_string_ids_and_rejects_garbage(tables: TableClient, author: dict) -> None:
    post = _post(tables, author, "hello", created_at=datetime(2024, 1, 1))

    found = tables.select_one("posts", filters={"id": str(post["id"])})
    invalid = tables.select_one("posts", filters={"id": "not-a-uuid"})
    missing = tables.select_one("posts", filters={"id": uuid4()})

    assert found.data["title"] == "hello"
    assert invalid.error.code == "invalid_input"
    assert missing.error.code == "not_found"


def test_unknown_table_and_column_are_errors(tables: TableClient) -> None:
    assert tables.select("comments").error.code == "undefined_table"
    assert tables.select("posts", filters={"nope": 1}).error.code == "undefined_column"


def test_update_is_filtered_and_returns_rows(tables: TableClient, author: dict) -> None:
    post = _post(tables, author, "draft", created_at=datetime(2024, 1, 1))

    stranger = tables.update("posts", {"title": "hijacked"}, filters={"id": post["id"], "author_id": uuid4()})
    owner = tables.update("posts", {"title": "final"}, filters={"id": post["id"], "author_id": author["id"]})

    assert stranger.ok and stranger.data == []
    assert owner.data[0]["title"] == "final"
    assert tables.update("posts", {"title": "x"}, filters={}).error.code == "missing_filter"


def test_increment_is_floored_and_keeps_updated_at(tables: TableClient, author: dict) -> None:
    stamp = datetime(2024, 3, 1, 12, 0, 0)
    post = _post(tables, author, "counted", created_at=stamp, likes=None)

    up = tables.increment("posts", "likes", 1, filters={"id": post["id"]})
    down = tables.increment("posts", "likes", -1, filters={"id": post["id"]})
    floor = tables.increment("posts", "likes", -1, filters={"id": post["id"]})
    stored = tables.select_one("posts", filters={"id": post["id"]}).data

    assert (up.data, down.data, floor.data) == (1, 0, 0)
    assert stored["likes"] == 0
    assert stored["updated_at"].replace(tzinfo=None) == stamp
    assert tables.increment("posts", "likes", 1, filters={"id": uuid4()}).error.code == "not_found"


def test_duplicate_like_is_a_unique_violation(tables: TableClient, author: dict) -> None:
    post = _post(tables, author, "liked", created_at=datetime(2024, 1, 1))
    membership = {"user_id": author["id"], "post_id": post["id"]}

    assert tables.insert("likes", membership).ok
    duplicate = tables.insert("likes", membership)

    assert duplicate.error.code == "unique_violation"


def test_delete_reports_removed_count(tables: TableClient, author: dict) -> None:
    post = _post(tables, author, "liked", created_at=datetime(2024, 1, 1))
    membership = {"user_id": author["id"], "post_id": post["id"]}
    tables.insert("likes", membership)

    assert tables.delete("likes", filters=membership).data == 1
    assert tables.delete("likes", filters=membership).data == 0
    assert tables.delete("likes", filters={}).error.code == "missing_filter"


def test_repeated_unlike_from_stale_state_keeps_counter_in_step(tables: TableClient, author: dict) -> None:
    reader = tables.insert("users", {"email": f"{uuid4().hex[:8]}@example.test", "hashed_password": "x"}).data
    post = _post(tables, author, "popular", created_at=datetime(2024, 1, 1), likes=2)
    for user_id in (author["id"], reader["id"]):
        tables.insert("likes", {"user_id": user_id, "post_id": post["id"]})

    backend = BackendClient(auth=None, tables=tables, storage=None)
    viewer = Identity(id=author["id"], email=author["email"])
    stale = FeedState(like_counts={post["id"]: 2}, liked=frozenset({post["id"]}))

    first = asyncio.run(toggle_like(backend, viewer, stale, post["id"]))
    second = asyncio.run(toggle_like(backend, viewer, stale, post["id"]))

    rows = tables.select("likes", filters={"post_id": post["id"]}).data
    stored = tables.select_one("posts", filters={"id": post["id"]}).data
    assert first.applied and not second.applied
    assert not second.liked
    assert len(rows) == 1
    assert stored["likes"] == 1
