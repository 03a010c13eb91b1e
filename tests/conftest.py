from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from syncstore.adapters.job_queue import InMemoryJobQueue
from syncstore.adapters.raw_store import FileRawBatchStore
from syncstore.adapters.registry import default_registry
from syncstore.adapters.sqlalchemy import start_mappers
from syncstore.adapters.sqlalchemy.migrations import upgrade_head
from syncstore.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    shutdown,
    startup,
)
from syncstore.domain.catalog_population import CatalogPopulator
from syncstore.domain.pricing import PricingEngine
from syncstore.domain.seo import SeoTitleGenerator

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyCatalogUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyCatalogUnitOfWork:
        return SqlAlchemyCatalogUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def raw_store(tmp_path: Path) -> FileRawBatchStore:
    return FileRawBatchStore(tmp_path / "raw-imports")


@pytest.fixture
def job_queue() -> InMemoryJobQueue:
    return InMemoryJobQueue()


@pytest.fixture
def populator(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
    raw_store: FileRawBatchStore,
    job_queue: InMemoryJobQueue,
) -> CatalogPopulator:
    return CatalogPopulator(
        unit_of_work_factory=sqlite_unit_of_work,
        raw_store=raw_store,
        registry=default_registry(),
        pricing=PricingEngine(),
        seo=SeoTitleGenerator(),
        job_queue=job_queue,
    )
