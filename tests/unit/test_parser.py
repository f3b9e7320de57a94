"""Tests for the LinkedIn DOM parser."""

from unittest.mock import AsyncMock

import pytest

from src.platforms.linkedin.parser import LinkedInParser


def _el(text: str | None = None, attrs: dict[str, str] | None = None) -> AsyncMock:
    el = AsyncMock()
    el.text_content.return_value = text
    el.get_attribute = AsyncMock(side_effect=lambda name: (attrs or {}).get(name))
    return el


def _routed(routes: dict[str, AsyncMock]) -> AsyncMock:
    """Mock element/page whose query_selector matches on selector substrings."""
    parent = AsyncMock()

    async def _query_selector(selector: str) -> AsyncMock | None:
        for key, el in routes.items():
            if key in selector:
                return el
        return None

    parent.query_selector = AsyncMock(side_effect=_query_selector)
    return parent


def _make_mock_card(
    *,
    job_id: str | None = "111111",
    title: str = "Senior Python Engineer",
    href: str | None = "https://www.linkedin.com/jobs/view/111111/?trackingId=abc",
    company: str = "Acme Corp",
    location: str = "London, England, United Kingdom",
    posted: str | None = "2026-02-20",
) -> AsyncMock:
    title_link = _el(title, {"href": href} if href else {})
    card = _routed({
        "/jobs/view/": title_link,
        "primary-description": _el(company),
        "metadata-item": _el(location),
        "time": _el("3 days ago", {"datetime": posted} if posted else {}),
    })
    card.get_attribute = AsyncMock(
        side_effect=lambda name: job_id if name == "data-occludable-job-id" else None,
    )
    return card


@pytest.fixture
def parser() -> LinkedInParser:
    return LinkedInParser()


class TestParseCard:
    async def test_full_card(self, parser: LinkedInParser) -> None:
        listing = await parser.parse_card(_make_mock_card())
        assert listing is not None
        assert listing.external_id == "111111"
        assert listing.title == "Senior Python Engineer"
        assert listing.company == "Acme Corp"
        assert listing.location == "London, England, United Kingdom"
        assert listing.url == "https://www.linkedin.com/jobs/view/111111/"
        assert listing.posted_date == "2026-02-20"

    async def test_title_first_line_only(self, parser: LinkedInParser) -> None:
        listing = await parser.parse_card(_make_mock_card(title="Backend Developer\nBackend Developer"))
        assert listing is not None
        assert listing.title == "Backend Developer"

    async def test_url_falls_back_to_job_id(self, parser: LinkedInParser) -> None:
        listing = await parser.parse_card(_make_mock_card(href=None, job_id="42"))
        assert listing is not None
        assert listing.url == "https://www.linkedin.com/jobs/view/42/"

    async def test_no_url_and_no_id_skipped(self, parser: LinkedInParser) -> None:
        assert await parser.parse_card(_make_mock_card(href=None, job_id=None)) is None

    async def test_posted_text_when_no_datetime(self, parser: LinkedInParser) -> None:
        listing = await parser.parse_card(_make_mock_card(posted=None))
        assert listing is not None
        assert listing.posted_date == "3 days ago"


class TestParseDetails:
    async def test_full_detail_page(self, parser: LinkedInParser) -> None:
        hiring = _routed({
            "hiring-team__name": _el("  Jane   Doe "),
            "hiring-team__title": _el("Engineering Manager"),
            "/in/": _el(None, {"href": "/in/janedoe/?miniProfile=1"}),
            "mailto:": _el(None, {"href": "mailto:jane@acme.com?subject=Hi"}),
        })
        page = _routed({
            "jobs-description__content": _el("We are\n hiring   engineers."),
            "SALARY": _el("£70,000/yr - £90,000/yr"),
            "hiring-team": hiring,
        })
        details = await parser.parse_details(page)
        assert details.description == "We are hiring engineers."
        assert details.salary == "£70,000/yr - £90,000/yr"
        assert details.contact is not None
        assert details.contact.name == "Jane Doe"
        assert details.contact.title == "Engineering Manager"
        assert details.contact.profile_url == "https://www.linkedin.com/in/janedoe/"
        assert details.contact.email == "jane@acme.com"

    async def test_email_from_description(self, parser: LinkedInParser) -> None:
        page = _routed({"jobs-description__content": _el("Apply to careers@initech.io today")})
        details = await parser.parse_details(page)
        assert details.contact is not None
        assert details.contact.email == "careers@initech.io"
        assert details.contact.name == ""

    async def test_empty_page(self, parser: LinkedInParser) -> None:
        details = await parser.parse_details(_routed({}))
        assert details.description == ""
        assert details.salary == ""
        assert details.contact is None


class TestCleanUrl:
    def test_strips_query(self) -> None:
        url = LinkedInParser._clean_url("https://www.linkedin.com/jobs/view/1/?refId=x")
        assert url == "https://www.linkedin.com/jobs/view/1/"

    def test_relative(self) -> None:
        assert LinkedInParser._clean_url("/jobs/view/2/") == "https://www.linkedin.com/jobs/view/2/"
