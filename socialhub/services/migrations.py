"""Bring the schema to the latest Alembic revision on startup."""
from __future__ import annotations

import logging
from pathlib import Path

from ..config import Settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def should_run_migrations(settings: Settings) -> bool:
    # SQLite databases (tests, local runs) are built by init_db alone
    if settings.auto_migrate is not None:
        return settings.auto_migrate
    return not settings.database_url.lower().startswith("sqlite")


def run_migrations_if_needed(settings: Settings) -> bool:
    """Run ``alembic upgrade head`` when enabled; True when an upgrade ran."""

    if not should_run_migrations(settings):
        logger.info("Skipping Alembic upgrade for %s", settings.database_url.split(":", 1)[0])
        return False

    from alembic import command
    from alembic.config import Config

    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))
    command.upgrade(config, "head")
    logger.info("Database upgraded to the latest revision")
    return True


__all__ = ["should_run_migrations", "run_migrations_if_needed"]
