"""Job dispatcher: at-least-once queue with fixed attempts and a hard timeout.

Queue state lives in SQLite next to the job records, so submitting, cancelling
and working can happen from different processes. One dispatcher runs one job
at a time; run more worker processes to scale out.
"""

import asyncio
import logging
import sqlite3
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from src.core.config import QueueConfig
from src.core.db import (
    claim_next_entry,
    enqueue_entry,
    finish_job,
    get_job,
    get_queue_entry,
    is_cancel_requested,
    list_queue_entries,
    recover_stalled_entries,
    remove_waiting_entry,
    request_entry_cancel,
    set_entry_state,
)
from src.core.schemas import JobStatus, QueueEntry

logger = logging.getLogger(__name__)


class JobRunner(Protocol):
    """Executes one attempt of a job. Exceptions count as a failed attempt."""

    def __call__(
        self,
        job_id: str,
        *,
        attempt: int,
        final_attempt: bool,
        cancel_requested: Callable[[], bool],
    ) -> Awaitable[Any]: ...


class JobDispatcher:
    """Hands queued jobs to a runner, one at a time.

    Usage::

        dispatcher = JobDispatcher(conn, settings.queue, runner)
        dispatcher.enqueue(job_id)
        await dispatcher.run_forever(stop_event)
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        config: QueueConfig,
        runner: JobRunner | None = None,
    ) -> None:
        self._conn = conn
        self._config = config
        self._runner = runner

    def enqueue(self, job_id: str) -> None:
        if enqueue_entry(self._conn, job_id, self._config.max_attempts):
            logger.info("Queued job %s", job_id)
        else:
            logger.debug("Job %s already queued", job_id)

    def remove(self, job_id: str) -> bool:
        """Take a job out of the queue.

        A waiting job is removed outright; an active one is flagged so its
        worker stops at the next checkpoint. Returns False if the job is not
        in the queue.
        """
        if remove_waiting_entry(self._conn, job_id):
            logger.info("Removed waiting job %s from the queue", job_id)
            return True
        if request_entry_cancel(self._conn, job_id):
            logger.info("Requested cancellation of running job %s", job_id)
            return True
        return False

    def is_cancel_requested(self, job_id: str) -> bool:
        return is_cancel_requested(self._conn, job_id)

    def get_entry(self, job_id: str) -> QueueEntry | None:
        return get_queue_entry(self._conn, job_id)

    def active_entries(self) -> list[QueueEntry]:
        """Waiting and active entries, oldest first."""
        return list_queue_entries(self._conn, ("waiting", "active"))

    def recover(self) -> int:
        """Re-queue jobs a previous worker left active (at-least-once delivery)."""
        count = recover_stalled_entries(self._conn)
        if count:
            logger.warning("Re-queued %d stalled job(s)", count)
        return count

    async def run_once(self) -> bool:
        """Run the next waiting job, if any. Returns False when the queue is empty."""
        entry = claim_next_entry(self._conn)
        if entry is None:
            return False
        await self._execute(entry)
        return True

    async def run_forever(self, stop: asyncio.Event) -> None:
        """Work the queue until stop is set. The current job is always finished first."""
        self.recover()
        logger.info("Worker started, waiting for jobs...")
        while not stop.is_set():
            if await self.run_once():
                continue
            try:
                await asyncio.wait_for(stop.wait(), timeout=self._config.poll_interval_s)
            except asyncio.TimeoutError:
                pass
        logger.info("Worker stopped")

    async def _execute(self, entry: QueueEntry) -> None:
        if self._runner is None:
            msg = "JobDispatcher has no runner — it can only enqueue"
            raise RuntimeError(msg)

        job_id = entry.job_id
        final_attempt = entry.attempts_made >= entry.max_attempts
        logger.info(
            "Dispatching job %s (attempt %d/%d)",
            job_id, entry.attempts_made, entry.max_attempts,
        )

        try:
            await asyncio.wait_for(
                self._runner(
                    job_id,
                    attempt=entry.attempts_made,
                    final_attempt=final_attempt,
                    cancel_requested=lambda: self.is_cancel_requested(job_id),
                ),
                timeout=self._config.job_timeout_s,
            )
        except asyncio.TimeoutError:
            reason = f"Job timed out after {int(self._config.job_timeout_s)} seconds"
            self._attempt_failed(entry, reason, final_attempt)
        except Exception as e:
            self._attempt_failed(entry, str(e) or type(e).__name__, final_attempt)
        else:
            job = get_job(self._conn, job_id)
            state = "removed" if job is not None and job.status == JobStatus.CANCELLED else "completed"
            set_entry_state(self._conn, job_id, state)
            logger.info("Job %s left the queue as %s", job_id, state)

    def _attempt_failed(self, entry: QueueEntry, reason: str, final_attempt: bool) -> None:
        if final_attempt:
            set_entry_state(self._conn, entry.job_id, "failed", failed_reason=reason)
            # No-op if the runner already recorded the failure.
            finish_job(self._conn, entry.job_id, JobStatus.FAILED, error_message=reason)
            logger.error("Job %s failed: %s", entry.job_id, reason)
        else:
            set_entry_state(self._conn, entry.job_id, "waiting", failed_reason=reason)
            logger.warning(
                "Job %s attempt %d failed (%s) — re-queued",
                entry.job_id, entry.attempts_made, reason,
            )
