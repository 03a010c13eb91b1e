"""SQLAlchemy unit of work for the master catalog.

The catalog database is process-wide: :func:`startup` migrates it and binds a session
factory, :func:`shutdown` disposes the engine. Each :class:`SqlAlchemyCatalogUnitOfWork`
opens one session for the duration of its ``with`` block.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from syncstore.adapters.sqlalchemy.mappings import start_mappers
from syncstore.adapters.sqlalchemy.migrations import upgrade_head
from syncstore.adapters.sqlalchemy.repositories import (
    SqlAlchemyImportBatchRepository,
    SqlAlchemyMasterProductRepository,
    SqlAlchemyPlatformMappingRepository,
    SqlAlchemySyncLogRepository,
)
from syncstore.config import get_database_uri
from syncstore.domain.errors import FatalIOError, PersistenceError
from syncstore.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the catalog database is used before :func:`startup`."""


@dataclass(slots=True)
class _CatalogDatabase:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def release(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.session_factory = None

    def require_session_factory(self) -> sessionmaker[Session]:
        if self.session_factory is None:
            raise StartupError(
                "Catalog database not initialised; call startup() before opening a unit of work"
            )
        return self.session_factory


_DATABASE = _CatalogDatabase()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Connect to the catalog database and migrate it to the latest revision."""

    if _DATABASE.engine is not None and not force:
        raise StartupError("Catalog database already initialised; pass force=True to rebind")

    resolved = engine or create_engine(database_uri or get_database_uri(), future=True)
    start_mappers()
    upgrade_head(engine=resolved)
    _DATABASE.bind(resolved)
    log.info("Catalog database ready: %s", resolved.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _DATABASE.engine


def is_started() -> bool:
    return _DATABASE.engine is not None


def shutdown() -> None:
    """Dispose the engine; later units of work fail until :func:`startup` runs again."""

    _DATABASE.release()


class SqlAlchemyCatalogUnitOfWork:
    """One session with the catalog repositories bound to it."""

    def __init__(self) -> None:
        self._session_factory = _DATABASE.require_session_factory()
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> SqlAlchemyCatalogUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = self._session_factory()
        self._session = session
        self._repositories = CatalogRepositories(
            products=SqlAlchemyMasterProductRepository(session),
            mappings=SqlAlchemyPlatformMappingRepository(session),
            import_batches=SqlAlchemyImportBatchRepository(session),
            sync_log=SqlAlchemySyncLogRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self._require_session()
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with block")
        return self._repositories

    def commit(self) -> None:
        session = self._require_session()
        try:
            session.commit()
        except IntegrityError as exc:
            raise PersistenceError(f"Cannot commit catalog changes: {exc}") from exc
        except SQLAlchemyError as exc:
            raise FatalIOError(f"Catalog store unavailable: {exc}") from exc

    def rollback(self) -> None:
        self._require_session().rollback()

    def _require_session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with block")
        return self._session


if TYPE_CHECKING:
    from syncstore.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
