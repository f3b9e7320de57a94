"""Progress channel: one writer task persists a job's progress events in order.

Progress bands for a job:
  0-10    authentication
  10-70   listing discovery, linear in pages fetched
  70-90   enrichment and scoring, linear in listings processed
  90-100  export
"""

import asyncio
import logging
import sqlite3
from collections.abc import Callable
from types import TracebackType
from typing import NamedTuple

from src.core.db import update_job_progress

logger = logging.getLogger(__name__)

AUTHENTICATED = 10
DISCOVERY_END = 70
PROCESSING_END = 90
COMPLETE = 100


class ProgressWriteError(RuntimeError):
    """A progress event could not be persisted."""


class ProgressEvent(NamedTuple):
    progress: int | None = None
    total_listings_found: int | None = None
    leads_generated: int | None = None


def discovery_progress(pages_done: int, max_pages: int) -> int:
    span = DISCOVERY_END - AUTHENTICATED
    return round(AUTHENTICATED + span * pages_done / max_pages)


def processing_progress(processed: int, total: int) -> int:
    if total <= 0:
        return PROCESSING_END
    span = PROCESSING_END - DISCOVERY_END
    return round(DISCOVERY_END + span * processed / total)


class ProgressWriter:
    """Async context manager owning the single consumer of a job's progress events.

    Events are applied to the store sequentially in emit order. Progress
    values are clamped to 0-100 and never move backwards. A failed write is
    remembered and raised as ProgressWriteError from the next emit(),
    flush() or on exit.

    Usage::

        async with ProgressWriter(conn, job_id) as progress:
            progress.emit(progress=10)
            ...
            await progress.flush()
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        job_id: str,
        on_event: Callable[[str, ProgressEvent], None] | None = None,
    ) -> None:
        self._conn = conn
        self._job_id = job_id
        self._on_event = on_event
        self._queue: asyncio.Queue[ProgressEvent | None] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None
        self._error: BaseException | None = None
        self._last_progress = 0

    @property
    def last_progress(self) -> int:
        return self._last_progress

    async def __aenter__(self) -> "ProgressWriter":
        self._task = asyncio.create_task(self._consume())
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._task is None:
            return
        if exc_type is not None and issubclass(exc_type, asyncio.CancelledError):
            self._task.cancel()
            return
        await self._queue.put(None)
        await self._task
        if exc_type is None:
            self._raise_if_failed()

    def emit(
        self,
        *,
        progress: int | None = None,
        total_listings_found: int | None = None,
        leads_generated: int | None = None,
    ) -> None:
        """Queue an update. Returns immediately; the writer applies it in order."""
        self._raise_if_failed()
        if progress is not None:
            progress = max(self._last_progress, min(COMPLETE, max(0, progress)))
            self._last_progress = progress
        self._queue.put_nowait(
            ProgressEvent(progress, total_listings_found, leads_generated),
        )

    async def flush(self) -> None:
        """Wait until every queued event has been written."""
        await self._queue.join()
        self._raise_if_failed()

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                if event is None:
                    return
                if self._error is None:
                    self._write(event)
            finally:
                self._queue.task_done()

    def _write(self, event: ProgressEvent) -> None:
        try:
            update_job_progress(
                self._conn,
                self._job_id,
                progress=event.progress,
                total_listings_found=event.total_listings_found,
                leads_generated=event.leads_generated,
            )
        except sqlite3.Error as e:
            logger.error("Progress write failed for job %s: %s", self._job_id, e)
            self._error = e
            return
        logger.debug("Job %s progress: %s", self._job_id, event)
        if self._on_event is not None:
            try:
                self._on_event(self._job_id, event)
            except Exception:
                logger.warning("Progress listener raised for job %s", self._job_id, exc_info=True)

    def _raise_if_failed(self) -> None:
        if self._error is not None:
            msg = f"Could not record progress for job {self._job_id}: {self._error}"
            raise ProgressWriteError(msg) from self._error
