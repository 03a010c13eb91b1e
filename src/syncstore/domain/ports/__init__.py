"""Domain port definitions for adapters."""

from __future__ import annotations

from .image_probe import ImageProbe, ImageProbeResult
from .job_queue import JobQueue, QueueJob
from .persistence import (
    ImportBatchRepository,
    MasterProductRepository,
    PlatformMappingRepository,
    Repository,
    SyncLogRepository,
)
from .platform_adapter import ListingValidation, PlatformAdapter
from .raw_store import RawBatch, RawBatchStore
from .unit_of_work import CatalogRepositories, CatalogUnitOfWork

__all__ = [
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "ImageProbe",
    "ImageProbeResult",
    "ImportBatchRepository",
    "JobQueue",
    "ListingValidation",
    "MasterProductRepository",
    "PlatformAdapter",
    "PlatformMappingRepository",
    "QueueJob",
    "RawBatch",
    "RawBatchStore",
    "Repository",
    "SyncLogRepository",
]
