"""In-process job queue used to report per-record progress of a population run."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import replace
from itertools import count
from logging import getLogger
from typing import TYPE_CHECKING

from syncstore.domain.model import JobState, utcnow
from syncstore.domain.ports import QueueJob

if TYPE_CHECKING:
    from collections.abc import Mapping

    from syncstore.domain.ports import JobQueue

log = getLogger(__name__)

DEFAULT_RETAINED_BATCHES = 20
FINISHED_STATES = frozenset({JobState.COMPLETED, JobState.FAILED})


class UnknownJobError(KeyError):
    """Raised when a job id is not (or no longer) in the queue."""


class InMemoryJobQueue:
    """Thread-safe queue snapshot store.

    Finished batches stay readable until more than ``retain_batches`` batches are
    queued; the oldest finished ones are then dropped. Batches with unfinished jobs are
    never dropped automatically.
    """

    def __init__(self, *, retain_batches: int = DEFAULT_RETAINED_BATCHES) -> None:
        if retain_batches <= 0:
            raise ValueError("retain_batches must be greater than zero")
        self.retain_batches = retain_batches
        self._jobs: dict[str, QueueJob] = {}
        self._lock = threading.Lock()
        self._ids = count(1)

    def enqueue(self, *, batch_id: str, product_id: str, platform: str) -> QueueJob:
        with self._lock:
            new_batch = all(job.batch_id != batch_id for job in self._jobs.values())
            job = QueueJob(
                job_id=f"job_{next(self._ids)}",
                batch_id=batch_id,
                product_id=product_id,
                platform=platform,
                enqueued_at=utcnow(),
            )
            self._jobs[job.job_id] = job
            if new_batch:
                self._trim_finished_batches()
            return job

    def start(self, job_id: str) -> None:
        with self._lock:
            job = self._get(job_id)
            job.state = JobState.ACTIVE
            job.processed_at = utcnow()
            job.attempts += 1

    def delay(self, job_id: str) -> None:
        with self._lock:
            self._get(job_id).state = JobState.DELAYED

    def complete(self, job_id: str) -> None:
        with self._lock:
            job = self._get(job_id)
            job.state = JobState.COMPLETED
            job.finished_at = utcnow()
            job.progress = 100

    def fail(self, job_id: str, *, error_code: str, error_message: str) -> None:
        with self._lock:
            job = self._get(job_id)
            job.state = JobState.FAILED
            job.finished_at = utcnow()
            job.error_code = error_code
            job.error_message = error_message

    def evict_batch(self, batch_id: str) -> int:
        with self._lock:
            return self._drop_batch(batch_id)

    def jobs_for_batch(self, batch_id: str) -> list[QueueJob]:
        with self._lock:
            return [replace(job) for job in self._jobs.values() if job.batch_id == batch_id]

    def counts(self) -> Mapping[JobState, int]:
        with self._lock:
            tally = Counter(job.state for job in self._jobs.values())
        return {state: tally.get(state, 0) for state in JobState}

    def _drop_batch(self, batch_id: str) -> int:
        doomed = [job_id for job_id, job in self._jobs.items() if job.batch_id == batch_id]
        for job_id in doomed:
            del self._jobs[job_id]
        return len(doomed)

    def _trim_finished_batches(self) -> None:
        states: dict[str, set[JobState]] = {}
        for job in self._jobs.values():
            states.setdefault(job.batch_id, set()).add(job.state)
        excess = len(states) - self.retain_batches
        for batch_id, seen in states.items():
            if excess <= 0:
                break
            if seen <= FINISHED_STATES:
                dropped = self._drop_batch(batch_id)
                log.debug("Dropped finished batch %s (%s jobs) from the queue", batch_id, dropped)
                excess -= 1

    def _get(self, job_id: str) -> QueueJob:
        try:
            return self._jobs[job_id]
        except KeyError:
            raise UnknownJobError(job_id) from None


if TYPE_CHECKING:
    _check_queue: JobQueue = InMemoryJobQueue()
