"""Packaged Alembic migrations for the catalog tables."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from syncstore.config import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent


def _alembic_config(database_uri: str | None = None) -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def head_revision() -> str | None:
    return ScriptDirectory.from_config(_alembic_config()).get_current_head()


def current_revision(engine: Engine) -> str | None:
    """Revision stamped in the database, or ``None`` before the first upgrade."""

    with engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the catalog schema to the newest revision.

    With ``engine`` the upgrade runs on one of its connections, which keeps in-memory
    SQLite databases intact; otherwise Alembic connects to ``database_uri`` (or the
    configured URI) itself.
    """

    if engine is None:
        command.upgrade(_alembic_config(database_uri or get_database_uri()), "head")
        return
    config = _alembic_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
