"""Transaction boundary around the catalog repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from syncstore.domain.ports.persistence import (
        ImportBatchRepository,
        MasterProductRepository,
        PlatformMappingRepository,
        SyncLogRepository,
    )


@dataclass(slots=True)
class CatalogRepositories:
    products: MasterProductRepository
    mappings: PlatformMappingRepository
    import_batches: ImportBatchRepository
    sync_log: SyncLogRepository


@runtime_checkable
class CatalogUnitOfWork(Protocol):
    """Used as a context manager; nothing is persisted without :meth:`commit`.

    Leaving the block because of an exception rolls back whatever was not committed.
    ``repositories`` is only valid inside the block.

    Store failures surface as catalog errors: a rejected record write as
    :class:`~syncstore.domain.errors.PersistenceError`, an unreachable store as
    :class:`~syncstore.domain.errors.FatalIOError`.
    """

    @property
    def repositories(self) -> CatalogRepositories: ...

    def __enter__(self) -> CatalogUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
