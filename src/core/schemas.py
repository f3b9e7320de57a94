"""Core data models for the lead generator."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED})
ACTIVE_STATUSES = frozenset({JobStatus.PENDING, JobStatus.RUNNING})


class SearchSpecification(BaseModel):
    """What to search for. Frozen once a Job has been created from it."""

    model_config = ConfigDict(frozen=True)

    keywords: str
    location: str
    experience: Literal["entry", "mid", "senior"] | None = None
    job_type: Literal[
        "full-time", "part-time", "contract", "temporary", "internship", "volunteer",
    ] | None = None
    industry: str | None = None
    company_size: str | None = None
    exclude_agencies: bool = True
    max_pages: int = Field(default=5, ge=1, le=20)

    @field_validator("keywords", "location")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "must not be empty"
            raise ValueError(msg)
        return v.strip()


class HiringContact(BaseModel):
    """Hiring-team member shown on a job posting. Every field is optional."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    title: str = ""
    profile_url: str = ""
    email: str = ""

    def split_name(self) -> tuple[str, str]:
        """Return (first, last) split on the first run of whitespace."""
        parts = self.name.split(None, 1)
        if not parts:
            return ("", "")
        if len(parts) == 1:
            return (parts[0], "")
        return (parts[0], parts[1])


class Listing(BaseModel):
    """A job posting discovered by an extractor.

    Frozen — enrichment produces a copy via model_copy(update=...).
    """

    model_config = ConfigDict(frozen=True)

    title: str
    company: str = ""
    location: str = ""
    url: str
    external_id: str = ""
    description: str = ""
    salary: str = ""
    posted_date: str = ""
    contact: HiringContact | None = None


class ListingPage(BaseModel):
    """One page of search results and whether the site offers another."""

    listings: list[Listing] = Field(default_factory=list)
    has_next: bool = False


class ListingDetails(BaseModel):
    """Fields fetched from a posting's detail page."""

    description: str = ""
    salary: str = ""
    contact: HiringContact | None = None


class Job(BaseModel):
    """A stored scraping job."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: JobStatus = JobStatus.PENDING
    search: SearchSpecification
    total_listings_found: int = 0
    leads_generated: int = 0
    progress: int = Field(default=0, ge=0, le=100)
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None


class Company(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    is_recruitment_agency: bool = False
    is_blacklisted: bool = False
    linkedin_url: str = ""
    domain: str = ""
    industry: str = ""
    size: str = ""
    location: str = ""
    created_at: datetime | None = None


class Lead(BaseModel):
    """A persisted, qualifying listing. lead_score never changes after insert."""

    id: int | None = None
    job_id: str
    company_id: int | None = None
    company_name: str = ""

    full_name: str = ""
    first_name: str = ""
    last_name: str = ""
    title: str = ""
    email: str = ""
    profile_url: str = ""

    job_title: str
    job_url: str
    job_location: str = ""
    job_description: str = ""
    job_salary: str = ""
    job_posted_date: str = ""

    lead_score: int = Field(default=0, ge=0, le=100)
    is_qualified: bool = True
    qualification_notes: str = ""

    exported_to_sheets: bool = False
    exported_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.now)


class ExportLog(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    job_id: str
    sheet_id: str = ""
    sheet_url: str = ""
    leads_exported: int
    status: Literal["success", "failed"]
    error_message: str | None = None
    created_at: datetime


class SearchPreset(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str = ""
    criteria: SearchSpecification
    is_default: bool = False
    created_at: datetime
    updated_at: datetime


class QueueEntry(BaseModel):
    """Dispatcher bookkeeping for one job."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    state: Literal["waiting", "active", "completed", "failed", "removed"]
    attempts_made: int = 0
    max_attempts: int = 1
    cancel_requested: bool = False
    failed_reason: str | None = None
    enqueued_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.state in ("waiting", "active")
