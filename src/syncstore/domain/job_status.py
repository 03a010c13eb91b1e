"""On-demand progress of an import batch.

Status is derived from a snapshot of the live job queue. Once the queue has forgotten
a batch, the durable sync log answers instead; nothing here polls or caches.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from syncstore.domain.model import BatchState, JobState, SyncLogStatus, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import datetime, timedelta

    from syncstore.domain.model import SyncLogEntry
    from syncstore.domain.ports import CatalogUnitOfWork, JobQueue, QueueJob

log = getLogger(__name__)

AVERAGE_JOB_SECONDS = 2.5
MAX_WORKER_CONCURRENCY = 5
UNKNOWN_ERROR_CODE = "UNKNOWN_ERROR"

type StatusSource = Literal["queue", "log"]
type JobDetailStatus = Literal["pending", "processing", "completed", "failed"]


@dataclass(frozen=True, slots=True)
class ErrorSummary:
    total_errors: int
    error_types: dict[str, int] = field(default_factory=dict[str, int])

    @classmethod
    def from_codes(cls, codes: Iterable[str | None]) -> ErrorSummary:
        counts = Counter(code or UNKNOWN_ERROR_CODE for code in codes)
        return cls(total_errors=sum(counts.values()), error_types=dict(counts))


@dataclass(frozen=True, slots=True, kw_only=True)
class JobDetail:
    job_id: str
    product_id: str
    platform: str
    status: JobDetailStatus
    error: str | None = None
    processed_at: datetime | None = None
    finished_at: datetime | None = None
    attempts: int = 0
    progress: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class BatchJobStatus:
    batch_id: str
    total_jobs: int
    completed: int
    failed: int
    in_progress: int
    queued: int
    status: BatchState
    progress_percentage: int
    source: StatusSource
    estimated_completion_time: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration: str | None = None
    error_summary: ErrorSummary | None = None
    jobs: tuple[JobDetail, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class QueueStatistics:
    waiting: int
    active: int
    completed: int
    failed: int
    delayed: int
    timestamp: datetime

    @property
    def total(self) -> int:
        return self.waiting + self.active + self.completed + self.failed + self.delayed


def derive_batch_state(*, total: int, completed: int, failed: int, in_progress: int) -> BatchState:
    if in_progress > 0:
        return BatchState.PROCESSING
    if total and completed == total:
        return BatchState.COMPLETED
    if total and failed == total:
        return BatchState.FAILED
    if total and completed + failed == total:
        return BatchState.MIXED
    return BatchState.QUEUED


def estimate_completion_time(remaining: int, active: int) -> str:
    """Rough ETA assuming 2.5 s per job spread over at most five workers."""

    if remaining <= 0:
        return "0 minutes"
    concurrency = min(MAX_WORKER_CONCURRENCY, active + remaining)
    seconds = remaining * AVERAGE_JOB_SECONDS / concurrency
    if seconds < 60:
        return f"{math.ceil(seconds)} seconds"
    return f"{math.ceil(seconds / 60)} minutes"


def format_duration(elapsed: timedelta) -> str:
    seconds = max(0, int(elapsed.total_seconds()))
    minutes, secs = divmod(seconds, 60)
    hours, mins = divmod(minutes, 60)
    if hours:
        return f"{hours}h {mins}m {secs}s"
    if minutes:
        return f"{mins}m {secs}s"
    return f"{secs}s"


def _detail_status(job: QueueJob) -> JobDetailStatus:
    match job.state:
        case JobState.FAILED:
            return "failed"
        case JobState.COMPLETED:
            return "completed"
        case JobState.ACTIVE:
            return "processing"
        case _:
            return "pending"


def _job_detail(job: QueueJob) -> JobDetail:
    return JobDetail(
        job_id=job.job_id,
        product_id=job.product_id,
        platform=job.platform,
        status=_detail_status(job),
        error=job.error_message,
        processed_at=job.processed_at,
        finished_at=job.finished_at,
        attempts=job.attempts,
        progress=job.progress,
    )


class JobStatusService:
    def __init__(
        self,
        *,
        queue: JobQueue | None,
        unit_of_work_factory: Callable[[], CatalogUnitOfWork],
    ) -> None:
        self.queue = queue
        self.unit_of_work_factory = unit_of_work_factory

    def get_batch_status(self, batch_id: str) -> BatchJobStatus | None:
        """Status of ``batch_id``, or ``None`` when neither the queue nor the log knows it."""

        jobs = self.queue.jobs_for_batch(batch_id) if self.queue is not None else []
        if jobs:
            return self._from_queue(batch_id, jobs)
        log.debug("Batch %s not in queue; reading sync log", batch_id)
        return self._from_log(batch_id)

    def queue_statistics(self) -> QueueStatistics:
        counts = self.queue.counts() if self.queue is not None else {}
        return QueueStatistics(
            waiting=counts.get(JobState.WAITING, 0),
            active=counts.get(JobState.ACTIVE, 0),
            completed=counts.get(JobState.COMPLETED, 0),
            failed=counts.get(JobState.FAILED, 0),
            delayed=counts.get(JobState.DELAYED, 0),
            timestamp=utcnow(),
        )

    def _from_queue(self, batch_id: str, jobs: Sequence[QueueJob]) -> BatchJobStatus:
        states = Counter(job.state for job in jobs)
        total = len(jobs)
        completed = states[JobState.COMPLETED]
        failed = states[JobState.FAILED]
        in_progress = states[JobState.ACTIVE]
        queued = states[JobState.WAITING] + states[JobState.DELAYED]
        status = derive_batch_state(
            total=total, completed=completed, failed=failed, in_progress=in_progress
        )

        started_at = min(job.enqueued_at for job in jobs)
        completed_at: datetime | None = None
        duration: str | None = None
        if status in {BatchState.COMPLETED, BatchState.FAILED, BatchState.MIXED}:
            finished = [
                job.finished_at or job.processed_at
                for job in jobs
                if job.state in {JobState.COMPLETED, JobState.FAILED}
            ]
            stamps = [stamp for stamp in finished if stamp is not None]
            if stamps:
                completed_at = max(stamps)
                duration = format_duration(completed_at - started_at)

        failed_jobs = [job for job in jobs if job.state is JobState.FAILED]
        return BatchJobStatus(
            batch_id=batch_id,
            total_jobs=total,
            completed=completed,
            failed=failed,
            in_progress=in_progress,
            queued=queued,
            status=status,
            progress_percentage=round((completed + failed) / total * 100),
            source="queue",
            estimated_completion_time=estimate_completion_time(queued + in_progress, in_progress),
            started_at=started_at,
            completed_at=completed_at,
            duration=duration,
            error_summary=(
                ErrorSummary.from_codes(job.error_code for job in failed_jobs)
                if failed_jobs
                else None
            ),
            jobs=tuple(_job_detail(job) for job in jobs),
        )

    def _from_log(self, batch_id: str) -> BatchJobStatus | None:
        with self.unit_of_work_factory() as uow:
            entries = uow.repositories.sync_log.list_for_batch(batch_id)
        if not entries:
            return None

        total = len(entries)
        failed_entries = [entry for entry in entries if entry.status is SyncLogStatus.FAILED]
        failed = len(failed_entries)
        if failed == total:
            status = BatchState.FAILED
        elif failed:
            status = BatchState.MIXED
        else:
            status = BatchState.COMPLETED

        started_at = min(entry.synced_at for entry in entries)
        completed_at = max(entry.synced_at for entry in entries)
        return BatchJobStatus(
            batch_id=batch_id,
            total_jobs=total,
            completed=total - failed,
            failed=failed,
            in_progress=0,
            queued=0,
            status=status,
            progress_percentage=100,
            source="log",
            started_at=started_at,
            completed_at=completed_at,
            duration=format_duration(completed_at - started_at),
            error_summary=(
                ErrorSummary.from_codes(entry.error_code for entry in failed_entries)
                if failed_entries
                else None
            ),
            jobs=tuple(_log_detail(entry) for entry in entries),
        )


def _log_detail(entry: SyncLogEntry) -> JobDetail:
    failed = entry.status is SyncLogStatus.FAILED
    return JobDetail(
        job_id=f"log_{entry.id}",
        product_id=entry.product_id,
        platform=entry.platform,
        status="failed" if failed else "completed",
        error=entry.error_message,
        processed_at=entry.synced_at,
        finished_at=entry.synced_at,
        attempts=entry.attempts,
        progress=100,
    )
