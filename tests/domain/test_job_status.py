from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from syncstore.adapters.job_queue import InMemoryJobQueue
from syncstore.domain.job_status import (
    ErrorSummary,
    JobStatusService,
    derive_batch_state,
    estimate_completion_time,
    format_duration,
)
from syncstore.domain.model import BatchState, SyncLogEntry, SyncLogStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from syncstore.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork


def _enqueue(queue: InMemoryJobQueue, batch_id: str, count: int) -> list[str]:
    return [
        queue.enqueue(batch_id=batch_id, product_id=str(index), platform="shopee").job_id
        for index in range(count)
    ]


def test_all_completed_batch(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    queue = InMemoryJobQueue()
    for job_id in _enqueue(queue, "b1", 3):
        queue.start(job_id)
        queue.complete(job_id)
    service = JobStatusService(queue=queue, unit_of_work_factory=sqlite_unit_of_work)

    status = service.get_batch_status("b1")

    assert status is not None
    assert status.source == "queue"
    assert status.status is BatchState.COMPLETED
    assert status.progress_percentage == 100
    assert status.estimated_completion_time == "0 minutes"
    assert status.completed_at is not None
    assert status.duration is not None
    assert status.error_summary is None
    assert [job.status for job in status.jobs] == ["completed"] * 3


def test_one_failure_makes_batch_mixed(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    queue = InMemoryJobQueue()
    first, second = _enqueue(queue, "b1", 2)
    queue.complete(first)
    queue.fail(second, error_code="TRANSFORM_ERROR", error_message="bad price")
    service = JobStatusService(queue=queue, unit_of_work_factory=sqlite_unit_of_work)

    status = service.get_batch_status("b1")

    assert status is not None
    assert status.status is BatchState.MIXED
    assert status.failed == 1
    assert status.error_summary == ErrorSummary(
        total_errors=1, error_types={"TRANSFORM_ERROR": 1}
    )


def test_in_flight_batch_reports_progress_and_eta(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    queue = InMemoryJobQueue()
    job_ids = _enqueue(queue, "b1", 4)
    queue.complete(job_ids[0])
    queue.start(job_ids[1])
    queue.delay(job_ids[2])
    service = JobStatusService(queue=queue, unit_of_work_factory=sqlite_unit_of_work)

    status = service.get_batch_status("b1")

    assert status is not None
    assert status.status is BatchState.PROCESSING
    assert (status.completed, status.in_progress, status.queued) == (1, 1, 2)
    assert status.progress_percentage == 25
    assert status.estimated_completion_time == "2 seconds"
    assert status.completed_at is None


def test_evicted_batch_falls_back_to_sync_log(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    start = datetime(2024, 1, 1, 10, tzinfo=UTC)
    with sqlite_unit_of_work() as uow:
        uow.repositories.sync_log.add(
            SyncLogEntry(
                batch_id="b1",
                product_id="1",
                platform="shopee",
                status=SyncLogStatus.SUCCESS,
                synced_at=start,
            )
        )
        uow.repositories.sync_log.add(
            SyncLogEntry(
                batch_id="b1",
                product_id="2",
                platform="shopee",
                status=SyncLogStatus.FAILED,
                error_code="PERSISTENCE_ERROR",
                error_message="disk full",
                synced_at=start + timedelta(minutes=2, seconds=5),
            )
        )
        uow.commit()
    queue = InMemoryJobQueue()
    service = JobStatusService(queue=queue, unit_of_work_factory=sqlite_unit_of_work)

    status = service.get_batch_status("b1")

    assert status is not None
    assert status.source == "log"
    assert status.status is BatchState.MIXED
    assert status.progress_percentage == 100
    assert status.duration == "2m 5s"
    assert status.error_summary is not None
    assert status.error_summary.error_types == {"PERSISTENCE_ERROR": 1}
    assert status.jobs[1].error == "disk full"
    assert status.jobs[0].job_id.startswith("log_")


def test_unknown_batch_is_none(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    service = JobStatusService(queue=InMemoryJobQueue(), unit_of_work_factory=sqlite_unit_of_work)

    assert service.get_batch_status("nope") is None


def test_queue_statistics(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> None:
    queue = InMemoryJobQueue()
    first, second, _ = _enqueue(queue, "b1", 3)
    queue.start(first)
    queue.fail(second, error_code="X", error_message="x")
    service = JobStatusService(queue=queue, unit_of_work_factory=sqlite_unit_of_work)

    stats = service.queue_statistics()

    assert (stats.waiting, stats.active, stats.failed) == (1, 1, 1)
    assert stats.total == 3


@pytest.mark.parametrize(
    ("counts", "expected"),
    [
        ((3, 3, 0, 0), BatchState.COMPLETED),
        ((3, 0, 3, 0), BatchState.FAILED),
        ((3, 1, 2, 0), BatchState.MIXED),
        ((3, 1, 0, 1), BatchState.PROCESSING),
        ((3, 1, 0, 0), BatchState.QUEUED),
        ((0, 0, 0, 0), BatchState.QUEUED),
    ],
)
def test_derive_batch_state(counts: tuple[int, int, int, int], expected: BatchState) -> None:
    total, completed, failed, in_progress = counts

    state = derive_batch_state(
        total=total, completed=completed, failed=failed, in_progress=in_progress
    )

    assert state is expected


def test_estimate_completion_time() -> None:
    assert estimate_completion_time(0, 0) == "0 minutes"
    assert estimate_completion_time(1, 0) == "3 seconds"
    assert estimate_completion_time(200, 5) == "2 minutes"


def test_format_duration() -> None:
    assert format_duration(timedelta(seconds=42)) == "42s"
    assert format_duration(timedelta(minutes=3, seconds=1)) == "3m 1s"
    assert format_duration(timedelta(hours=1, minutes=2, seconds=3)) == "1h 2m 3s"
    assert format_duration(timedelta(seconds=-5)) == "0s"
