"""Abstract base class for listing extractors."""

from abc import ABC, abstractmethod

from src.core.schemas import ListingDetails, ListingPage, SearchSpecification


class AuthenticationError(RuntimeError):
    """The extractor could not establish an authenticated session."""


class ListingExtractor(ABC):
    """Everything the pipeline needs from a job site.

    One instance is owned by one job for its whole run; pages are fetched in
    increasing order and never revisited.
    """

    @property
    @abstractmethod
    def platform_id(self) -> str:
        """Unique identifier for this platform (e.g. 'linkedin')."""

    @abstractmethod
    async def authenticate(self) -> bool:
        """Make sure the session is logged in. Returns False on failure."""

    @abstractmethod
    async def fetch_page(self, search: SearchSpecification, page: int) -> ListingPage:
        """Fetch one zero-based page of raw listings."""

    @abstractmethod
    async def fetch_details(self, url: str) -> ListingDetails:
        """Fetch description, salary and hiring contact for one posting."""
