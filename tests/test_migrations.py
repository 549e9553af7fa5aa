"""Startup decision on whether to run Alembic upgrades."""
from __future__ import annotations

import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_socialhub.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from socialhub.config import Settings  # noqa: E402
from socialhub.services.migrations import run_migrations_if_needed, should_run_migrations  # noqa: E402


@pytest.mark.parametrize(
    ("url", "auto_migrate", "expected"),
    [
        ("sqlite+pysqlite:///./local.db", None, False),
        ("postgresql+psycopg2://app@db/socialhub", None, True),
        ("postgresql+psycopg2://app@db/socialhub", False, False),
        ("sqlite+pysqlite:///./local.db", True, True),
    ],
)
def test_should_run_migrations(url, auto_migrate, expected):
    settings = Settings(DATABASE_URL=url, AUTO_MIGRATE=auto_migrate)

    assert should_run_migrations(settings) is expected


def test_sqlite_startup_skips_alembic():
    assert run_migrations_if_needed(Settings(DATABASE_URL="sqlite+pysqlite:///./local.db")) is False
