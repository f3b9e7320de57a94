"""Job service: submission, status, cancellation and listing.

The store (jobs table) is the source of truth for a Job's status, progress
and counters. The queue only says whether a Job is still queued or being
worked on; merge_job_view is the one place the two are combined.
"""

import logging
import sqlite3
import uuid
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.core.config import Settings
from src.core.db import create_job, finish_job, get_job, list_recent_jobs, ping
from src.core.schemas import (
    ACTIVE_STATUSES,
    Job,
    JobStatus,
    QueueEntry,
    SearchSpecification,
)
from src.export.base import Destination, ExportSink
from src.pipeline.orchestrator import PipelineResult, export_leads, run_job
from src.platforms.base import ListingExtractor
from src.queue.dispatcher import JobDispatcher, JobRunner

logger = logging.getLogger(__name__)

ExtractorFactory = Callable[[Settings], AbstractAsyncContextManager[ListingExtractor]]


class JobNotFoundError(LookupError):
    """No Job with the given id exists."""


class CancelRejectedError(ValueError):
    """The Job is already in a terminal state."""


class SubmitResult(BaseModel):
    job_id: str
    status: JobStatus
    message: str


class JobView(BaseModel):
    """A Job as reported to callers: store record plus queue state."""

    id: str
    status: JobStatus
    progress: int = 0
    search: SearchSpecification | None = None
    total_listings_found: int = 0
    leads_generated: int = 0
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    queue_state: str | None = None
    attempts_made: int = 0


class JobBuckets(BaseModel):
    active: list[JobView] = Field(default_factory=list)
    completed: list[JobView] = Field(default_factory=list)


class HealthReport(BaseModel):
    status: str
    database: str
    jobs: int = 0
    checked_at: datetime = Field(default_factory=datetime.now)


def submit_job(
    conn: sqlite3.Connection,
    dispatcher: JobDispatcher,
    criteria: dict[str, Any] | SearchSpecification,
) -> SubmitResult:
    """Validate criteria, create a pending Job and queue it.

    Invalid criteria raise pydantic.ValidationError before anything is
    written, so no Job row exists for a rejected submission.
    """
    search = SearchSpecification.model_validate(criteria)
    job_id = uuid.uuid4().hex
    create_job(conn, job_id, search)
    dispatcher.enqueue(job_id)
    logger.info("Submitted job %s: '%s' in '%s'", job_id, search.keywords, search.location)
    return SubmitResult(
        job_id=job_id,
        status=JobStatus.PENDING,
        message="Lead generation job queued",
    )


def merge_job_view(job: Job, entry: QueueEntry | None) -> JobView:
    view = JobView(
        id=job.id,
        status=job.status,
        progress=job.progress,
        search=job.search,
        total_listings_found=job.total_listings_found,
        leads_generated=job.leads_generated,
        error_message=job.error_message,
        created_at=job.created_at,
        updated_at=job.updated_at,
        completed_at=job.completed_at,
    )
    if entry is not None:
        view.queue_state = entry.state
        view.attempts_made = entry.attempts_made
    return view


def get_job_status(
    conn: sqlite3.Connection,
    dispatcher: JobDispatcher,
    job_id: str,
) -> JobView | None:
    job = get_job(conn, job_id)
    if job is None:
        return None
    return merge_job_view(job, dispatcher.get_entry(job_id))


def cancel_job(conn: sqlite3.Connection, dispatcher: JobDispatcher, job_id: str) -> JobView:
    """Cancel a pending or running Job.

    A waiting Job leaves the queue immediately. A running Job is flagged
    and its worker stops at the next checkpoint; leads it already saved
    are kept.
    """
    job = get_job(conn, job_id)
    if job is None:
        msg = f"Job not found: {job_id}"
        raise JobNotFoundError(msg)
    if job.status.is_terminal:
        msg = f"Cannot cancel {job.status.value} job"
        raise CancelRejectedError(msg)

    dispatcher.remove(job_id)
    if not finish_job(conn, job_id, JobStatus.CANCELLED):
        # Finished between the read above and the update.
        current = get_job(conn, job_id)
        status = current.status.value if current else "unknown"
        msg = f"Cannot cancel {status} job"
        raise CancelRejectedError(msg)

    logger.info("Cancelled job %s", job_id)
    cancelled = get_job(conn, job_id)
    return merge_job_view(cancelled, dispatcher.get_entry(job_id))


def list_jobs(
    conn: sqlite3.Connection,
    dispatcher: JobDispatcher,
    limit: int = 50,
    completed_limit: int = 10,
) -> JobBuckets:
    """Split recent Jobs into active (queued or running) and finished ones."""
    entries = {entry.job_id: entry for entry in dispatcher.active_entries()}
    buckets = JobBuckets()
    seen: set[str] = set()

    for job_id, entry in entries.items():
        job = get_job(conn, job_id)
        if job is not None and not job.status.is_terminal:
            buckets.active.append(merge_job_view(job, entry))
            seen.add(job_id)

    for job in list_recent_jobs(conn, limit):
        if job.id in seen:
            continue
        if job.status in ACTIVE_STATUSES:
            buckets.active.append(merge_job_view(job, dispatcher.get_entry(job.id)))
        elif len(buckets.completed) < completed_limit:
            buckets.completed.append(merge_job_view(job, dispatcher.get_entry(job.id)))
    return buckets


async def export_job(conn: sqlite3.Connection, sink: ExportSink, job_id: str) -> Destination | None:
    """Re-run the export step for a finished Job. Returns None if it has no leads."""
    job = get_job(conn, job_id)
    if job is None:
        msg = f"Job not found: {job_id}"
        raise JobNotFoundError(msg)
    if not job.status.is_terminal:
        msg = f"Job {job_id} is still {job.status.value}"
        raise ValueError(msg)
    return await export_leads(conn, sink, job)


def check_health(conn: sqlite3.Connection) -> HealthReport:
    try:
        jobs = ping(conn)
    except sqlite3.Error as e:
        logger.error("Health check failed: %s", e)
        return HealthReport(status="error", database=f"error: {e}")
    return HealthReport(status="ok", database="connected", jobs=jobs)


def build_job_runner(
    conn: sqlite3.Connection,
    settings: Settings,
    sink: ExportSink,
    extractor_factory: ExtractorFactory,
) -> JobRunner:
    """Runner for the dispatcher: one fresh extractor (browser) per Job."""

    async def runner(
        job_id: str,
        *,
        attempt: int,
        final_attempt: bool,
        cancel_requested: Callable[[], bool],
    ) -> PipelineResult | None:
        job = get_job(conn, job_id)
        if job is None:
            logger.warning("Queued job %s has no record, skipping", job_id)
            return None
        if job.status.is_terminal:
            logger.info("Job %s is already %s, skipping", job_id, job.status.value)
            return None

        async with extractor_factory(settings) as extractor:
            return await run_job(
                conn,
                job_id,
                extractor,
                sink,
                cancel_requested=cancel_requested,
                attempt=attempt,
                final_attempt=final_attempt,
            )

    return runner
