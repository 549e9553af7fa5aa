"""Notification listing, unread counts and receiver scoping."""
from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_socialhub.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from socialhub.database import Base, SessionLocal, engine  # noqa: E402
from socialhub.main import app  # noqa: E402
from socialhub.models import Comment, Follow, Like, Notification, NotificationType, Post, User  # noqa: E402
from socialhub.services import (  # noqa: E402
    ErrorKind,
    get_current_user,
    get_optional_user,
    list_notifications,
    mark_read,
    record_notification,
)


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(Notification))
        session.execute(delete(Like))
        session.execute(delete(Comment))
        session.execute(delete(Follow))
        session.execute(delete(Post))
        session.execute(delete(User))
        session.commit()
    yield


@pytest.fixture
def user_factory() -> Callable[[str], User]:
    def _factory(username: str) -> User:
        with SessionLocal() as session:
            user = User(username=username, email=f"{username}@example.com", hashed_password="x")
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    return _factory


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client) -> Callable[[User | None], TestClient]:
    def _login(user: User | None) -> TestClient:
        if user is None:
            app.dependency_overrides.clear()
            return client
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_optional_user] = lambda: user
        return client

    return _login


def test_record_notification_skips_self_and_does_not_commit(user_factory):
    sender = user_factory("stager")
    receiver = user_factory("stagee")

    with SessionLocal() as db:
        assert record_notification(db, type_=NotificationType.FOLLOW, sender_id=sender.id, receiver_id=sender.id) is None
        staged = record_notification(db, type_=NotificationType.FOLLOW, sender_id=sender.id, receiver_id=receiver.id)
        assert staged is not None
        db.rollback()

    with SessionLocal() as db:
        assert list_notifications(db, actor_id=receiver.id).items == []


def test_notification_flow_over_http(login_as, user_factory):
    author = user_factory("inboxowner")
    fan = user_factory("inboxfan")
    post_id = login_as(author).post("/posts", json={"content": "notify me"}).json()["data"]["id"]

    fan_client = login_as(fan)
    fan_client.post(f"/posts/{post_id}/like")
    fan_client.post(f"/posts/{post_id}/comments", json={"content": "hey"})
    fan_client.post("/users/inboxowner/follow")

    client = login_as(author)
    assert client.get("/notifications/unread-count").json() == {"unread_count": 3}

    listing = client.get("/notifications").json()
    types = [item["type"] for item in listing["items"]]
    assert types == ["FOLLOW", "COMMENT", "LIKE"]
    assert listing["items"][0]["sender"]["username"] == "inboxfan"
    assert listing["items"][1]["comment"]["content"] == "hey"
    assert listing["items"][2]["post"]["content"] == "notify me"

    first_id = listing["items"][0]["id"]
    assert client.post(f"/notifications/{first_id}/read").status_code == 200
    assert client.get("/notifications/unread-count").json()["unread_count"] == 2

    assert client.post("/notifications/mark-all-read").json()["success"] is True
    assert client.get("/notifications/unread-count").json()["unread_count"] == 0

    assert client.delete(f"/notifications/{first_id}").status_code == 200
    assert len(client.get("/notifications").json()["items"]) == 2


def test_other_receivers_notifications_are_not_found(login_as, user_factory):
    author = user_factory("privateowner")
    fan = user_factory("privatefan")
    login_as(fan).post("/users/privateowner/follow")
    notification_id = login_as(author).get("/notifications").json()["items"][0]["id"]

    client = login_as(fan)
    assert client.post(f"/notifications/{notification_id}/read").status_code == 404
    assert client.delete(f"/notifications/{notification_id}").status_code == 404
    assert client.get("/notifications").json()["items"] == []


def test_anonymous_notifications(login_as, user_factory):
    client = login_as(None)

    assert client.get("/notifications").status_code == 401
    assert client.get("/notifications/unread-count").json() == {"unread_count": 0}
    assert client.post("/notifications/mark-all-read").status_code == 401

    with SessionLocal() as db:
        result = mark_read(db, actor_id=None, notification_id=user_factory("nobody").id)
    assert result.error == ErrorKind.UNAUTHENTICATED


def test_unlike_creates_no_new_notification(login_as, user_factory):
    author = user_factory("unlikeauthor")
    fan = user_factory("unlikefan")
    post_id = login_as(author).post("/posts", json={"content": "x"}).json()["data"]["id"]

    fan_client = login_as(fan)
    fan_client.post(f"/posts/{post_id}/like")
    fan_client.post(f"/posts/{post_id}/like")
    fan_client.post(f"/posts/{post_id}/like")

    assert len(login_as(author).get("/notifications").json()["items"]) == 2


def test_notification_pages_follow_cursors(login_as, user_factory):
    receiver = user_factory("busyinbox")
    senders = [user_factory(f"pinger{index}") for index in range(5)]
    stamp = datetime(2026, 5, 1, tzinfo=timezone.utc)
    with SessionLocal() as db:
        for index, sender in enumerate(senders):
            staged = record_notification(
                db, type_=NotificationType.FOLLOW, sender_id=sender.id, receiver_id=receiver.id
            )
            # Pairs share a timestamp so the id tie-break decides their order
            staged.created_at = stamp + timedelta(minutes=index // 2)
        db.commit()

    with SessionLocal() as db:
        collected: list[str] = []
        cursor = None
        while True:
            page = list_notifications(db, actor_id=receiver.id, cursor=cursor, limit=2)
            collected.extend(str(item["id"]) for item in page.items)
            cursor = page.next_cursor
            if cursor is None:
                break
    assert len(collected) == len(set(collected)) == 5

    client = login_as(receiver)
    first = client.get("/notifications", params={"limit": 3}).json()
    second = client.get("/notifications", params={"limit": 3, "cursor": first["next_cursor"]}).json()
    over_http = [item["id"] for item in first["items"] + second["items"]]
    assert over_http == collected
    assert second["next_cursor"] is None
    assert first["items"][0]["sender"]["username"] == "pinger4"
