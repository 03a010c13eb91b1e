"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Platform(StrEnum):
    SHOPEE = "shopee"
    TIKTOKSHOP = "tiktokshop"
    TOKOPEDIA = "tokopedia"
    WEBSITE = "website"


class ProductStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"
    ARCHIVED = "archived"


class SyncStatus(StrEnum):
    SYNCED = "synced"
    PENDING = "pending"
    ERROR = "error"
    DISABLED = "disabled"


class ImportBatchStatus(StrEnum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SyncLogStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"


class JobState(StrEnum):
    """Lifecycle of a single queued job."""

    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    DELAYED = "delayed"


class BatchState(StrEnum):
    """Aggregate state of all jobs sharing a batch id."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    MIXED = "mixed"
