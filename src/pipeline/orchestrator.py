"""Orchestrator: drives one job through the full lead pipeline.

Data flow:
  1. pending → running
  2. Authenticate the extractor session (failure fails the job)
  3. Discover listings page by page (a page error stops pagination)
  4. Per listing: agency / blacklist filter → enrich → score → persist
  5. Export the job's leads (only if there are any)
  6. running → completed

Cancellation is cooperative: the cancel_requested callback and the stored job
status are checked before authentication, between pages, between listings and
before export. A retry keeps the leads of earlier attempts; counters only grow.
"""

import asyncio
import logging
import sqlite3
from collections.abc import Callable
from datetime import datetime

from src.core.db import (
    count_leads_for_job,
    finish_job,
    get_company_by_name,
    get_job,
    get_or_create_company,
    insert_export_log,
    insert_lead,
    list_leads_for_job,
    mark_leads_exported,
    record_cancelled_lead_count,
    start_job,
)
from src.core.schemas import (
    Company,
    Job,
    JobStatus,
    Lead,
    Listing,
    ListingDetails,
    SearchSpecification,
)
from src.export.base import Destination, ExportError, ExportSink, build_rows
from src.pipeline.classifier import is_agency
from src.pipeline.progress import (
    AUTHENTICATED,
    PROCESSING_END,
    ProgressEvent,
    ProgressWriter,
    discovery_progress,
    processing_progress,
)
from src.pipeline.scorer import ScoreBreakdown, is_qualified, score_breakdown
from src.platforms.base import AuthenticationError, ListingExtractor

logger = logging.getLogger(__name__)


class JobCancelled(Exception):
    """Raised at a checkpoint once cancellation of the running job was requested."""


class PipelineResult:
    """Summary of a single job execution."""

    def __init__(
        self,
        job_id: str,
        status: JobStatus,
        total_listings_found: int,
        leads_generated: int,
        destination: Destination | None = None,
    ) -> None:
        self.job_id = job_id
        self.status = status
        self.total_listings_found = total_listings_found
        self.leads_generated = leads_generated
        self.destination = destination


async def run_job(
    conn: sqlite3.Connection,
    job_id: str,
    extractor: ListingExtractor,
    sink: ExportSink,
    *,
    cancel_requested: Callable[[], bool] = lambda: False,
    attempt: int = 1,
    final_attempt: bool = True,
    on_progress: Callable[[str, ProgressEvent], None] | None = None,
) -> PipelineResult | None:
    """Execute one job end-to-end and move it to its terminal state.

    Returns None when the job was already terminal (for example cancelled
    while it waited in the queue). An exception on the final attempt marks
    the job failed and is re-raised; on earlier attempts the job stays
    running so the dispatcher can retry it.
    """
    job = get_job(conn, job_id)
    if job is None:
        msg = f"Job not found: {job_id}"
        raise LookupError(msg)

    if attempt > 1:
        logger.info("Job %s attempt %d: keeping %d leads from earlier attempts",
                    job_id, attempt, count_leads_for_job(conn, job_id))

    if not start_job(conn, job_id):
        logger.info("Job %s is already %s — not running it", job_id, job.status.value)
        return None

    logger.info("Starting job %s: '%s' in '%s'", job_id, job.search.keywords, job.search.location)

    try:
        async with ProgressWriter(conn, job_id, on_event=on_progress) as progress:
            pipeline = JobPipeline(conn, job, extractor, sink, progress, cancel_requested)
            result = await pipeline.run()
    except JobCancelled:
        leads = count_leads_for_job(conn, job_id)
        if not finish_job(conn, job_id, JobStatus.CANCELLED, leads_generated=leads):
            record_cancelled_lead_count(conn, job_id, leads)
        logger.info("Job %s cancelled with %d leads persisted", job_id, leads)
        current = get_job(conn, job_id)
        found = current.total_listings_found if current else 0
        return PipelineResult(job_id, JobStatus.CANCELLED, found, leads)
    except Exception as e:
        if final_attempt:
            reason = str(e) or type(e).__name__
            finish_job(conn, job_id, JobStatus.FAILED, error_message=reason)
            logger.error("Job %s failed: %s", job_id, reason)
        else:
            logger.warning("Job %s attempt %d failed, will retry: %s", job_id, attempt, e)
        raise

    leads = count_leads_for_job(conn, job_id)
    if not finish_job(conn, job_id, JobStatus.COMPLETED, leads_generated=leads):
        logger.info("Job %s finished after it was already marked terminal", job_id)
        record_cancelled_lead_count(conn, job_id, leads)
    logger.info(
        "Job %s completed: %d listings, %d leads",
        job_id, result.total_listings_found, leads,
    )
    result.leads_generated = leads
    return result


class JobPipeline:
    """The body of one running job. Sequential; one instance per attempt."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        job: Job,
        extractor: ListingExtractor,
        sink: ExportSink,
        progress: ProgressWriter,
        cancel_requested: Callable[[], bool],
    ) -> None:
        self._conn = conn
        self._job = job
        self._extractor = extractor
        self._sink = sink
        self._progress = progress
        self._cancel_requested = cancel_requested
        self._leads_generated = count_leads_for_job(conn, job.id)

    async def run(self) -> PipelineResult:
        search = self._job.search

        self._checkpoint()
        await self._authenticate()
        self._progress.emit(progress=AUTHENTICATED)

        listings = await self._discover(search)
        logger.info("Found %d listings for job %s", len(listings), self._job.id)

        for index, listing in enumerate(listings, start=1):
            self._checkpoint()
            await self._process_listing(search, listing)
            self._progress.emit(
                progress=processing_progress(index, len(listings)),
                leads_generated=self._leads_generated,
            )

        destination = None
        if self._leads_generated > 0:
            self._checkpoint()
            self._progress.emit(progress=PROCESSING_END)
            destination = await export_leads(self._conn, self._sink, self._job)

        await self._progress.flush()
        return PipelineResult(
            self._job.id,
            JobStatus.COMPLETED,
            total_listings_found=len(listings),
            leads_generated=self._leads_generated,
            destination=destination,
        )

    async def _authenticate(self) -> None:
        try:
            ok = await self._extractor.authenticate()
        except Exception as e:
            msg = f"Failed to login to LinkedIn: {e}"
            raise AuthenticationError(msg) from e
        if not ok:
            msg = "Failed to login to LinkedIn"
            raise AuthenticationError(msg)

    async def _discover(self, search: SearchSpecification) -> list[Listing]:
        """Fetch pages in order until the site has no next page or max_pages is hit."""
        listings: list[Listing] = []
        for page in range(search.max_pages):
            self._checkpoint()
            try:
                result = await self._extractor.fetch_page(search, page)
            except Exception:
                logger.warning(
                    "Error on page %d of job %s — stopping pagination",
                    page + 1, self._job.id, exc_info=True,
                )
                break

            listings.extend(result.listings)
            self._progress.emit(
                progress=discovery_progress(page + 1, search.max_pages),
                total_listings_found=len(listings),
            )
            if not result.has_next:
                logger.info("No next page after page %d", page + 1)
                break
        return listings

    async def _process_listing(self, search: SearchSpecification, listing: Listing) -> None:
        if search.exclude_agencies and is_agency(listing.company):
            logger.debug("Skipping agency '%s'", listing.company)
            return

        company = get_company_by_name(self._conn, listing.company) if listing.company else None
        if company is not None and company.is_blacklisted:
            logger.debug("Skipping blacklisted company '%s'", listing.company)
            return

        try:
            details = await self._extractor.fetch_details(listing.url)
            listing = _enrich(listing, details)
        except Exception:
            logger.warning("Could not enrich %s — scoring partial data", listing.url, exc_info=True)

        breakdown = score_breakdown(listing)
        if not is_qualified(breakdown.score):
            logger.debug("Discarding '%s' (score %d)", listing.title, breakdown.score)
            return

        if listing.company and company is None:
            company = get_or_create_company(
                self._conn, listing.company, is_recruitment_agency=is_agency(listing.company),
            )
        insert_lead(self._conn, _to_lead(self._job.id, company, listing, breakdown))
        self._leads_generated += 1

    def _checkpoint(self) -> None:
        if self._cancel_requested():
            raise JobCancelled(self._job.id)
        current = get_job(self._conn, self._job.id)
        if current is None or current.status == JobStatus.CANCELLED:
            raise JobCancelled(self._job.id)


async def export_leads(
    conn: sqlite3.Connection,
    sink: ExportSink,
    job: Job,
) -> Destination | None:
    """Export every lead of a job to a new destination.

    Writes a header plus one row per lead into a fresh destination, marks
    the leads exported and appends an export log. Any failure appends a
    failed export log and raises ExportError. Returns None if the job has
    no leads.
    """
    leads = list_leads_for_job(conn, job.id)
    if not leads:
        return None

    title = export_title(job.search.keywords)
    destination: Destination | None = None
    try:
        destination = await asyncio.to_thread(sink.create_destination, title)
        await asyncio.to_thread(
            sink.append_rows, destination.id, build_rows(leads), clear_first=True,
        )
    except Exception as e:
        insert_export_log(
            conn,
            job.id,
            status="failed",
            leads_exported=0,
            sheet_id=destination.id if destination else "",
            sheet_url=destination.url if destination else "",
            error_message=str(e),
        )
        if isinstance(e, ExportError):
            raise
        msg = f"Failed to export leads: {e}"
        raise ExportError(msg) from e

    mark_leads_exported(conn, job.id)
    insert_export_log(
        conn,
        job.id,
        status="success",
        leads_exported=len(leads),
        sheet_id=destination.id,
        sheet_url=destination.url,
    )
    logger.info("Exported %d leads for job %s: %s", len(leads), job.id, destination.url)
    return destination


def export_title(keywords: str, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%dT%H-%M-%S")
    return f"LinkedIn Leads - {keywords} - {stamp}"


def _enrich(listing: Listing, details: ListingDetails) -> Listing:
    return listing.model_copy(update={
        "description": details.description or listing.description,
        "salary": details.salary or listing.salary,
        "contact": details.contact or listing.contact,
    })


def _to_lead(
    job_id: str,
    company: Company | None,
    listing: Listing,
    breakdown: ScoreBreakdown,
) -> Lead:
    contact = listing.contact
    first_name, last_name = contact.split_name() if contact else ("", "")
    return Lead(
        job_id=job_id,
        company_id=company.id if company else None,
        full_name=contact.name if contact else "",
        first_name=first_name,
        last_name=last_name,
        title=contact.title if contact else "",
        email=contact.email if contact else "",
        profile_url=contact.profile_url if contact else "",
        job_title=listing.title,
        job_url=listing.url,
        job_location=listing.location,
        job_description=listing.description,
        job_salary=listing.salary,
        job_posted_date=listing.posted_date,
        lead_score=breakdown.score,
        is_qualified=True,
        qualification_notes="; ".join(breakdown.reasons),
    )
