"""Cursor pagination behaviour across the post lists."""
from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator
from uuid import uuid4

import pytest
from sqlalchemy import delete, select

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_socialhub.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from socialhub.database import Base, SessionLocal, engine  # noqa: E402
from socialhub.models import Follow, Post, User  # noqa: E402
from socialhub.services import UnauthenticatedError, list_feed, list_following_feed, list_user_posts  # noqa: E402
from socialhub.services.pagination import normalize_limit, paginate  # noqa: E402

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
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
        user = User(username=username, email=f"{username}@example.com", name=username.title(), hashed_password="x")
        db.add(user)
        db.commit()
        return user

    return _factory


def _seed_posts(db, author: User, count: int, *, tie_every: int = 1) -> list[Post]:
    """Create ``count`` posts; every ``tie_every`` consecutive posts share a timestamp."""

    posts = []
    for index in range(count):
        post = Post(
            author_id=author.id,
            content=f"post {index}",
            created_at=BASE_TIME + timedelta(minutes=index // tie_every),
        )
        posts.append(post)
    db.add_all(posts)
    db.commit()
    return posts


def _expected_order(posts: list[Post]) -> list[str]:
    ordered = sorted(posts, key=lambda post: (post.created_at, post.id), reverse=True)
    return [str(post.id) for post in ordered]


def test_exactly_limit_items_has_no_next_cursor(db, user_factory):
    author = user_factory("tenposts")
    _seed_posts(db, author, 10)

    page = list_feed(db, limit=10)

    assert len(page.items) == 10
    assert page.next_cursor is None


def test_one_more_than_limit_returns_cursor_of_last_item(db, user_factory):
    author = user_factory("elevenposts")
    posts = _seed_posts(db, author, 11)
    expected = _expected_order(posts)

    page = list_feed(db, limit=10)

    assert [str(item["id"]) for item in page.items] == expected[:10]
    assert page.next_cursor == expected[9]

    rest = list_feed(db, cursor=page.next_cursor, limit=10)
    assert [str(item["id"]) for item in rest.items] == expected[10:]
    assert rest.next_cursor is None


def test_traversal_visits_every_item_once_with_timestamp_ties(db, user_factory):
    author = user_factory("tiedposts")
    posts = _seed_posts(db, author, 17, tie_every=3)
    expected = _expected_order(posts)

    seen: list[str] = []
    cursor = None
    while True:
        page = list_feed(db, cursor=cursor, limit=4)
        seen.extend(str(item["id"]) for item in page.items)
        if page.next_cursor is None:
            break
        cursor = page.next_cursor

    assert seen == expected
    assert len(set(seen)) == len(posts)


@pytest.mark.parametrize("cursor", ["not-a-uuid", str(uuid4())])
def test_unknown_or_malformed_cursor_returns_empty_page(db, user_factory, cursor):
    author = user_factory("cursorposts")
    _seed_posts(db, author, 3)

    page = list_feed(db, cursor=cursor, limit=10)

    assert page.items == []
    assert page.next_cursor is None


def test_cursor_from_another_collection_returns_empty_page(db, user_factory):
    alice = user_factory("alicepages")
    bob = user_factory("bobpages")
    _seed_posts(db, alice, 2)
    bob_posts = _seed_posts(db, bob, 2)

    page = list_user_posts(db, username="alicepages", cursor=str(bob_posts[0].id))

    assert page.items == []


def test_limit_is_clamped():
    assert normalize_limit(500) == 50
    assert normalize_limit(0) == 1
    assert normalize_limit(None, default=20) == 20


def test_posts_carry_counts_and_author(db, user_factory):
    author = user_factory("countposts")
    _seed_posts(db, author, 1)

    item = list_feed(db, viewer_id=author.id).items[0]

    assert item["like_count"] == 0
    assert item["comment_count"] == 0
    assert item["is_liked"] is False
    assert item["author"].username == "countposts"


def test_following_feed_includes_followed_and_own_posts_only(db, user_factory):
    reader = user_factory("reader")
    followed = user_factory("followed")
    stranger = user_factory("stranger")
    db.add(Follow(follower_id=reader.id, following_id=followed.id))
    db.commit()
    own = _seed_posts(db, reader, 1)
    theirs = _seed_posts(db, followed, 2)
    _seed_posts(db, stranger, 2)

    page = list_following_feed(db, actor_id=reader.id)

    assert {str(item["id"]) for item in page.items} == {str(post.id) for post in own + theirs}


def test_following_feed_requires_actor(db):
    with pytest.raises(UnauthenticatedError):
        list_following_feed(db, actor_id=None)


def test_single_entity_select_pages_entities(db, user_factory):
    author = user_factory("edgeauthor")
    followers = [user_factory(f"edgefan{index}") for index in range(3)]
    for index, fan in enumerate(followers):
        db.add(Follow(follower_id=fan.id, following_id=author.id, created_at=BASE_TIME + timedelta(minutes=index)))
    db.commit()

    first = paginate(db, select(Follow).where(Follow.following_id == author.id), Follow, limit=2)

    assert all(isinstance(item, Follow) for item in first.items)
    assert [item.follower_id for item in first.items] == [followers[2].id, followers[1].id]
    assert first.next_cursor == str(first.items[-1].id)

    rest = paginate(
        db,
        select(Follow).where(Follow.following_id == author.id),
        Follow,
        cursor=first.next_cursor,
        limit=2,
    )
    assert [item.follower_id for item in rest.items] == [followers[0].id]
    assert rest.next_cursor is None


def test_extra_columns_page_as_rows(db, user_factory):
    author = user_factory("rowauthor")
    _seed_posts(db, author, 3)

    page = paginate(db, select(Post, User.username).join(User, Post.author_id == User.id), Post, limit=2)

    assert [row[1] for row in page.items] == ["rowauthor", "rowauthor"]
    assert page.next_cursor == str(page.items[-1][0].id)
