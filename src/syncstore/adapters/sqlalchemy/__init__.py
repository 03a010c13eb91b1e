"""SQLAlchemy adapter package for syncstore."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyImportBatchRepository,
    SqlAlchemyMasterProductRepository,
    SqlAlchemyPlatformMappingRepository,
    SqlAlchemySyncLogRepository,
)
from .unit_of_work import SqlAlchemyCatalogUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyImportBatchRepository",
    "SqlAlchemyMasterProductRepository",
    "SqlAlchemyPlatformMappingRepository",
    "SqlAlchemySyncLogRepository",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
