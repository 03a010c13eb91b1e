"""Port for the live sync job queue."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from syncstore.domain.model.enums import JobState

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, kw_only=True)
class QueueJob:
    """Snapshot of one queued per-record job."""

    job_id: str
    batch_id: str
    product_id: str
    platform: str
    state: JobState = JobState.WAITING
    enqueued_at: datetime
    processed_at: datetime | None = None
    finished_at: datetime | None = None
    attempts: int = 0
    progress: int = 0
    error_code: str | None = None
    error_message: str | None = None


@runtime_checkable
class JobQueue(Protocol):
    """Live queue of per-record jobs.

    Readers only ever see snapshots; :meth:`jobs_for_batch` must not block on
    in-flight work.
    """

    def enqueue(self, *, batch_id: str, product_id: str, platform: str) -> QueueJob: ...

    def start(self, job_id: str) -> None: ...

    def complete(self, job_id: str) -> None: ...

    def fail(self, job_id: str, *, error_code: str, error_message: str) -> None: ...

    def jobs_for_batch(self, batch_id: str) -> list[QueueJob]: ...

    def counts(self) -> Mapping[JobState, int]: ...
