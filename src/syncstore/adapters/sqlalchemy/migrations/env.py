"""Alembic environment for the catalog schema."""

from __future__ import annotations

import logging
from logging.config import fileConfig
from pathlib import Path
from typing import TYPE_CHECKING

from alembic import context
from sqlalchemy import create_engine, pool

from syncstore.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from syncstore.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

alembic_config = context.config

if alembic_config.config_file_name is not None:
    ini_path = Path(alembic_config.config_file_name)
    if ini_path.suffix == ".ini" and ini_path.exists():
        fileConfig(alembic_config.config_file_name)

log = logging.getLogger("alembic.env")

start_mappers()

MIGRATION_OPTIONS = {
    "target_metadata": mapper_registry.metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _catalog_url() -> str:
    return alembic_config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    context.configure(url=_catalog_url(), literal_binds=True, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    shared = alembic_config.attributes.get("connection")
    if shared is not None:
        _migrate(shared)
        return

    engine = create_engine(_catalog_url(), poolclass=pool.NullPool, future=True)
    log.info("Migrating catalog database %s", engine.url.render_as_string(hide_password=True))
    try:
        with engine.connect() as connection:
            _migrate(connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
