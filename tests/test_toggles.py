"""Like and follow membership toggles together with their notifications."""
from __future__ import annotations

import os
from typing import Callable, Iterator

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import OperationalError

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_socialhub.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from socialhub.database import Base, SessionLocal, engine  # noqa: E402
from socialhub.models import Follow, Like, Notification, NotificationType, Post, User  # noqa: E402
from socialhub.services import (  # noqa: E402
    ErrorKind,
    follow_user,
    get_follow_stats,
    like_post,
    toggle_follow,
    toggle_like,
    unfollow_user,
    unlike_post,
)
from socialhub.services import post_service, toggles  # noqa: E402
from socialhub.services.post_service import LIKE_EDGE  # noqa: E402


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
        session.execute(delete(Follow))
        session.execute(delete(Post))
        session.execute(delete(User))
        session.commit()
    yield


@pytest.fixture
def db():
    with SessionLocal() as session:
        yield session


@pytest.fixture
def user_factory(db) -> Callable[[str], User]:
    def _factory(username: str) -> User:
        user = User(username=username, email=f"{username}@example.com", hashed_password="x")
        db.add(user)
        db.commit()
        return user

    return _factory


@pytest.fixture
def post_factory(db) -> Callable[[User], Post]:
    def _factory(author: User) -> Post:
        post = Post(author_id=author.id, content="hello world")
        db.add(post)
        db.commit()
        return post

    return _factory


def _notifications(db, *, receiver: User, type_: NotificationType) -> int:
    stmt = (
        select(func.count())
        .select_from(Notification)
        .where(Notification.receiver_id == receiver.id, Notification.type == str(type_))
    )
    return int(db.scalar(stmt) or 0)


def test_like_toggle_round_trip_and_single_notification(db, user_factory, post_factory):
    author = user_factory("author")
    fan = user_factory("fan")
    post = post_factory(author)

    liked = toggle_like(db, actor_id=fan.id, post_id=post.id)
    assert liked.success is True
    assert liked.is_active is True
    assert liked.count == 1
    assert _notifications(db, receiver=author, type_=NotificationType.LIKE) == 1

    unliked = toggle_like(db, actor_id=fan.id, post_id=post.id)
    assert unliked.is_active is False
    assert unliked.count == 0
    assert _notifications(db, receiver=author, type_=NotificationType.LIKE) == 1


def test_liking_own_post_creates_no_notification(db, user_factory, post_factory):
    author = user_factory("selfliker")
    post = post_factory(author)

    result = toggle_like(db, actor_id=author.id, post_id=post.id)

    assert result.is_active is True
    assert db.scalar(select(func.count()).select_from(Notification)) == 0


def test_like_requires_actor_and_existing_post(db, user_factory, post_factory):
    author = user_factory("needsactor")
    post = post_factory(author)

    anonymous = toggle_like(db, actor_id=None, post_id=post.id)
    assert anonymous.success is False
    assert anonymous.error == ErrorKind.UNAUTHENTICATED
    assert anonymous.status_code == 401

    db.delete(post)
    db.commit()
    missing = toggle_like(db, actor_id=author.id, post_id=post.id)
    assert missing.error == ErrorKind.NOT_FOUND


def test_explicit_like_variants_are_idempotent(db, user_factory, post_factory):
    author = user_factory("idemauthor")
    fan = user_factory("idemfan")
    post = post_factory(author)

    assert like_post(db, actor_id=fan.id, post_id=post.id).count == 1
    again = like_post(db, actor_id=fan.id, post_id=post.id)
    assert again.success is True
    assert again.is_active is True
    assert again.count == 1
    assert _notifications(db, receiver=author, type_=NotificationType.LIKE) == 1

    assert unlike_post(db, actor_id=fan.id, post_id=post.id).count == 0
    still = unlike_post(db, actor_id=fan.id, post_id=post.id)
    assert still.success is True
    assert still.is_active is False


def test_concurrent_duplicate_insert_is_reported_as_active(db, user_factory, post_factory, monkeypatch):
    author = user_factory("raceauthor")
    fan = user_factory("racefan")
    post = post_factory(author)
    db.add(Like(user_id=fan.id, post_id=post.id))
    db.commit()

    real_find = toggles._find_edge
    calls = {"count": 0}

    def _stale_find(*args, **kwargs):
        calls["count"] += 1
        # The first lookup misses the row another request already inserted
        if calls["count"] == 1:
            return None
        return real_find(*args, **kwargs)

    monkeypatch.setattr(toggles, "_find_edge", _stale_find)
    created: list[object] = []

    outcome = toggles.set_membership(
        db,
        LIKE_EDGE,
        actor_id=fan.id,
        target_id=post.id,
        desired=True,
        on_created=created.append,
    )

    assert outcome.is_active is True
    assert outcome.changed is False
    assert outcome.count == 1
    assert created == []


def test_follow_a_to_b_scenario(db, user_factory):
    alice = user_factory("alice")
    bob = user_factory("bob")
    before = get_follow_stats(db, user_id=bob.id).followers_count

    first = toggle_follow(db, actor_id=alice.id, target="bob")
    assert first.success is True
    assert first.is_active is True
    assert first.count == before + 1
    assert _notifications(db, receiver=bob, type_=NotificationType.FOLLOW) == 1

    second = toggle_follow(db, actor_id=alice.id, target=bob.id)
    assert second.is_active is False
    assert second.count == before
    assert _notifications(db, receiver=bob, type_=NotificationType.FOLLOW) == 1


def test_self_follow_is_always_refused(db, user_factory):
    carol = user_factory("carol")

    by_name = toggle_follow(db, actor_id=carol.id, target="carol")
    by_id = follow_user(db, actor_id=carol.id, target=carol.id)

    assert by_name.success is False
    assert by_name.error == ErrorKind.VALIDATION
    assert by_id.success is False
    assert db.scalar(select(func.count()).select_from(Follow)) == 0


def test_follow_unknown_user_is_not_found(db, user_factory):
    dave = user_factory("dave")

    result = toggle_follow(db, actor_id=dave.id, target="nobody")

    assert result.error == ErrorKind.NOT_FOUND
    assert result.status_code == 404


def test_follow_stats_and_unfollow_variant(db, user_factory):
    erin = user_factory("erin")
    frank = user_factory("frank")

    follow_user(db, actor_id=erin.id, target="frank")
    stats = get_follow_stats(db, user_id=frank.id, viewer_id=erin.id)
    assert stats.followers_count == 1
    assert stats.is_following is True
    assert get_follow_stats(db, user_id=erin.id).following_count == 1

    unfollow_user(db, actor_id=erin.id, target="frank")
    assert unfollow_user(db, actor_id=erin.id, target="frank").is_active is False
    assert get_follow_stats(db, user_id=frank.id).followers_count == 0


def test_failed_side_effect_rolls_back_the_edge(db, user_factory, post_factory):
    author = user_factory("rollbackauthor")
    fan = user_factory("rollbackfan")
    post = post_factory(author)

    def _explode(_edge) -> None:
        raise RuntimeError("notification write failed")

    with pytest.raises(RuntimeError):
        toggles.set_membership(db, LIKE_EDGE, actor_id=fan.id, target_id=post.id, on_created=_explode)

    assert db.scalar(select(func.count()).select_from(Like)) == 0
    assert toggles.count_edges(db, LIKE_EDGE, post.id) == 0


def test_like_is_not_kept_when_notification_insert_fails(db, user_factory, post_factory, monkeypatch):
    author = user_factory("brokenauthor")
    fan = user_factory("brokenfan")
    post = post_factory(author)

    def _broken_record(*args, **kwargs):
        raise OperationalError("INSERT INTO notifications", {}, Exception("disk full"))

    monkeypatch.setattr(post_service, "record_notification", _broken_record)

    result = toggle_like(db, actor_id=fan.id, post_id=post.id)

    assert result.success is False
    assert result.error == ErrorKind.INTERNAL
    assert db.scalar(select(func.count()).select_from(Like)) == 0
    assert db.scalar(select(func.count()).select_from(Notification)) == 0
