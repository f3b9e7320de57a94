"""Tests for progress bands and the single-consumer progress writer."""

import sqlite3
from unittest.mock import MagicMock, patch

import pytest

from src.core.db import create_job, get_job, init_db, start_job
from src.core.schemas import SearchSpecification
from src.pipeline.progress import (
    AUTHENTICATED,
    DISCOVERY_END,
    PROCESSING_END,
    ProgressEvent,
    ProgressWriteError,
    ProgressWriter,
    discovery_progress,
    processing_progress,
)


@pytest.fixture()
def db(tmp_path):  # type: ignore[no-untyped-def]
    conn = init_db(tmp_path / "test.db")
    create_job(conn, "job-1", SearchSpecification(keywords="python", location="London"))
    start_job(conn, "job-1")
    return conn


class TestBands:
    def test_discovery(self) -> None:
        assert discovery_progress(0, 3) == AUTHENTICATED
        assert discovery_progress(1, 3) == 30
        assert discovery_progress(3, 3) == DISCOVERY_END

    def test_processing(self) -> None:
        assert processing_progress(0, 4) == DISCOVERY_END
        assert processing_progress(2, 4) == 80
        assert processing_progress(4, 4) == PROCESSING_END

    def test_processing_no_listings(self) -> None:
        assert processing_progress(0, 0) == PROCESSING_END


class TestProgressWriter:
    async def test_events_written_in_order(self, db) -> None:  # type: ignore[no-untyped-def]
        async with ProgressWriter(db, "job-1") as progress:
            progress.emit(progress=10)
            progress.emit(progress=30, total_listings_found=25)
            progress.emit(progress=75, leads_generated=2)
            await progress.flush()
            job = get_job(db, "job-1")
            assert job.progress == 75
            assert job.total_listings_found == 25
            assert job.leads_generated == 2

    async def test_clamped_and_monotonic(self, db) -> None:  # type: ignore[no-untyped-def]
        async with ProgressWriter(db, "job-1") as progress:
            progress.emit(progress=140)
            assert progress.last_progress == 100
            progress.emit(progress=50)
            assert progress.last_progress == 100
        assert get_job(db, "job-1").progress == 100

    async def test_negative_clamped(self, db) -> None:  # type: ignore[no-untyped-def]
        async with ProgressWriter(db, "job-1") as progress:
            progress.emit(progress=-5)
            assert progress.last_progress == 0

    async def test_listener_receives_events(self, db) -> None:  # type: ignore[no-untyped-def]
        listener = MagicMock()
        async with ProgressWriter(db, "job-1", on_event=listener) as progress:
            progress.emit(progress=10)
        listener.assert_called_once_with("job-1", ProgressEvent(10, None, None))

    async def test_listener_errors_ignored(self, db) -> None:  # type: ignore[no-untyped-def]
        listener = MagicMock(side_effect=RuntimeError("ui gone"))
        async with ProgressWriter(db, "job-1", on_event=listener) as progress:
            progress.emit(progress=10)
            await progress.flush()
        assert get_job(db, "job-1").progress == 10

    async def test_write_failure_surfaces(self, db) -> None:  # type: ignore[no-untyped-def]
        with patch(
            "src.pipeline.progress.update_job_progress",
            side_effect=sqlite3.OperationalError("database is locked"),
        ):
            writer = ProgressWriter(db, "job-1")
            await writer.__aenter__()
            writer.emit(progress=10)
            with pytest.raises(ProgressWriteError, match="database is locked"):
                await writer.flush()
            with pytest.raises(ProgressWriteError):
                writer.emit(progress=20)
            # Exiting with the error already propagating does not raise again.
            await writer.__aexit__(ProgressWriteError, None, None)

    async def test_write_failure_raised_on_exit(self, db) -> None:  # type: ignore[no-untyped-def]
        with patch(
            "src.pipeline.progress.update_job_progress",
            side_effect=sqlite3.OperationalError("disk I/O error"),
        ):
            with pytest.raises(ProgressWriteError):
                async with ProgressWriter(db, "job-1") as progress:
                    progress.emit(progress=10)
