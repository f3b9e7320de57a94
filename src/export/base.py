"""Export sink interface and the lead row layout shared by every sink."""

from abc import ABC, abstractmethod
from datetime import date
from typing import NamedTuple

from src.core.schemas import Lead

LEAD_HEADERS: tuple[str, ...] = (
    "Full Name",
    "First Name",
    "Last Name",
    "Title",
    "Email",
    "LinkedIn URL",
    "Company",
    "Job Title",
    "Job URL",
    "Job Location",
    "Job Salary",
    "Lead Score",
    "Qualification Notes",
    "Date Added",
)


class ExportError(RuntimeError):
    """Raised when leads could not be written to the destination."""


class Destination(NamedTuple):
    id: str
    url: str


class ExportSink(ABC):
    """A place leads are appended to, one destination per job.

    append_rows is not idempotent: calling it twice without clear_first
    duplicates the rows.
    """

    @abstractmethod
    def create_destination(self, title: str) -> Destination:
        """Create a new, empty destination and return its identity."""

    @abstractmethod
    def append_rows(
        self,
        destination_id: str,
        rows: list[list[str]],
        *,
        clear_first: bool = False,
    ) -> None:
        """Append rows, optionally wiping existing content first."""


def lead_to_row(lead: Lead, added_on: date | None = None) -> list[str]:
    """Flatten a lead into the LEAD_HEADERS column order."""
    return [
        lead.full_name,
        lead.first_name,
        lead.last_name,
        lead.title,
        lead.email,
        lead.profile_url,
        lead.company_name,
        lead.job_title,
        lead.job_url,
        lead.job_location,
        lead.job_salary,
        str(lead.lead_score),
        lead.qualification_notes,
        (added_on or date.today()).isoformat(),
    ]


def build_rows(leads: list[Lead], added_on: date | None = None) -> list[list[str]]:
    """Header row followed by one row per lead."""
    return [list(LEAD_HEADERS), *(lead_to_row(lead, added_on) for lead in leads)]
