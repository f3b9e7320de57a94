"""Tests for core data models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from src.core.schemas import (
    HiringContact,
    Job,
    JobStatus,
    Listing,
    QueueEntry,
    SearchSpecification,
)


class TestSearchSpecification:
    def test_minimal(self) -> None:
        s = SearchSpecification(keywords="python developer", location="London")
        assert s.max_pages == 5
        assert s.exclude_agencies is True
        assert s.experience is None
        assert s.job_type is None

    def test_values_stripped(self) -> None:
        s = SearchSpecification(keywords="  python  ", location=" London ")
        assert s.keywords == "python"
        assert s.location == "London"

    @pytest.mark.parametrize("field", ["keywords", "location"])
    def test_blank_rejected(self, field: str) -> None:
        data = {"keywords": "python", "location": "London", field: "   "}
        with pytest.raises(ValidationError):
            SearchSpecification(**data)

    def test_missing_location_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SearchSpecification.model_validate({"keywords": "python"})

    @pytest.mark.parametrize("pages", [0, 21])
    def test_max_pages_bounds(self, pages: int) -> None:
        with pytest.raises(ValidationError):
            SearchSpecification(keywords="python", location="London", max_pages=pages)

    def test_unknown_experience_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SearchSpecification(keywords="python", location="London", experience="guru")  # type: ignore[arg-type]

    def test_frozen(self) -> None:
        s = SearchSpecification(keywords="python", location="London")
        with pytest.raises(ValidationError):
            s.keywords = "java"  # type: ignore[misc]


class TestHiringContact:
    @pytest.mark.parametrize(("name", "expected"), [
        ("Jane Doe", ("Jane", "Doe")),
        ("Jane van der Berg", ("Jane", "van der Berg")),
        ("Cher", ("Cher", "")),
        ("", ("", "")),
    ])
    def test_split_name(self, name: str, expected: tuple[str, str]) -> None:
        assert HiringContact(name=name).split_name() == expected


class TestJobStatus:
    def test_terminal(self) -> None:
        assert JobStatus.COMPLETED.is_terminal
        assert JobStatus.FAILED.is_terminal
        assert JobStatus.CANCELLED.is_terminal
        assert not JobStatus.PENDING.is_terminal
        assert not JobStatus.RUNNING.is_terminal

    def test_string_value(self) -> None:
        assert JobStatus("running") is JobStatus.RUNNING


class TestJob:
    def test_progress_bounds(self) -> None:
        now = datetime.now()
        search = SearchSpecification(keywords="python", location="London")
        with pytest.raises(ValidationError):
            Job(id="j", search=search, progress=101, created_at=now, updated_at=now)


class TestListing:
    def test_defaults(self) -> None:
        listing = Listing(title="Engineer", url="https://www.linkedin.com/jobs/view/1/")
        assert listing.company == ""
        assert listing.contact is None


class TestQueueEntry:
    def test_is_active(self) -> None:
        now = datetime.now()
        assert QueueEntry(job_id="j", state="waiting", enqueued_at=now).is_active
        assert QueueEntry(job_id="j", state="active", enqueued_at=now).is_active
        assert not QueueEntry(job_id="j", state="removed", enqueued_at=now).is_active
