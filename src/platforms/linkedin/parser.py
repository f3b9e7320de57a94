"""LinkedIn DOM parser — converts cards and detail pages into listings.

Design rules:
  - Every selector lookup uses a fallback tuple.
  - Titles are split on '\\n' and the first line taken.
  - Missing optional fields return "" (never crash).
"""

import logging
import re
from typing import Protocol, runtime_checkable
from urllib.parse import urlparse, urlunparse

from src.core.schemas import HiringContact, Listing, ListingDetails
from src.platforms.linkedin.searcher import build_job_url
from src.platforms.linkedin.selectors import (
    COMPANY_SELECTORS,
    DESCRIPTION_SELECTORS,
    HIRING_NAME_SELECTORS,
    HIRING_TEAM_SELECTORS,
    HIRING_TITLE_SELECTORS,
    JOB_ID_ATTR,
    JOB_ID_ATTR_FALLBACK,
    LOCATION_SELECTORS,
    MAILTO_SELECTORS,
    POSTED_TIME_SELECTORS,
    PROFILE_LINK_SELECTORS,
    SALARY_SELECTORS,
    TITLE_LINK_SELECTORS,
)

logger = logging.getLogger(__name__)

LINKEDIN_BASE = "https://www.linkedin.com"

_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


@runtime_checkable
class ElementLike(Protocol):
    """Minimal element interface so tests can use AsyncMock instead of patchright."""

    async def query_selector(self, selector: str) -> "ElementLike | None": ...
    async def get_attribute(self, name: str) -> str | None: ...
    async def text_content(self) -> str | None: ...


@runtime_checkable
class PageLike(Protocol):
    """The part of a patchright Page the detail parser reads from."""

    async def query_selector(self, selector: str) -> ElementLike | None: ...


class LinkedInParser:
    """Parses LinkedIn search-result cards and job detail pages."""

    async def parse_card(self, card: ElementLike) -> Listing | None:
        """Parse a single card element into a Listing.

        Returns None when neither a title nor a job URL can be recovered.
        """
        external_id = await self._parse_external_id(card)
        title_link = await self._find_first(card, TITLE_LINK_SELECTORS)
        title = await self._parse_title(card, title_link)
        url = await self._parse_url(title_link, external_id)

        if not title or not url:
            logger.debug("Card missing title or url — skipping")
            return None

        return Listing(
            title=title,
            company=await self._parse_text_fallback(card, COMPANY_SELECTORS),
            location=await self._parse_text_fallback(card, LOCATION_SELECTORS),
            url=url,
            external_id=external_id or "",
            posted_date=await self._parse_posted_time(card),
        )

    async def parse_details(self, page: PageLike) -> ListingDetails:
        """Read description, salary and the hiring team from a job detail page."""
        description = _normalize(await self._parse_text_fallback(page, DESCRIPTION_SELECTORS))
        salary = _normalize(await self._parse_text_fallback(page, SALARY_SELECTORS))
        contact = await self._parse_contact(page, description)
        return ListingDetails(description=description, salary=salary, contact=contact)

    # --- Private helpers ---

    async def _parse_contact(self, page: PageLike, description: str) -> HiringContact | None:
        """Extract the first hiring-team member, if the posting shows one.

        The email comes from a mailto link in the hiring section, or failing
        that the first address mentioned in the description.
        """
        section = await self._find_first(page, HIRING_TEAM_SELECTORS)
        name = title = profile_url = email = ""

        if section is not None:
            name = _normalize(await self._parse_text_fallback(section, HIRING_NAME_SELECTORS))
            title = _normalize(await self._parse_text_fallback(section, HIRING_TITLE_SELECTORS))
            profile_url = await self._parse_href(section, PROFILE_LINK_SELECTORS)
            if profile_url:
                profile_url = self._clean_url(profile_url)
            mailto = await self._parse_href(section, MAILTO_SELECTORS)
            if mailto:
                email = mailto.removeprefix("mailto:").split("?")[0].strip()

        if not email:
            match = _EMAIL_RE.search(description)
            if match:
                email = match.group(0)

        if not (name or title or profile_url or email):
            return None
        return HiringContact(name=name, title=title, profile_url=profile_url, email=email)

    async def _parse_external_id(self, card: ElementLike) -> str | None:
        """Extract job ID from card attributes (primary then fallback)."""
        try:
            job_id = await card.get_attribute(JOB_ID_ATTR)
            if job_id and job_id.strip():
                return job_id.strip()
            job_id = await card.get_attribute(JOB_ID_ATTR_FALLBACK)
            if job_id and job_id.strip():
                return job_id.strip()
        except Exception:
            logger.debug("Error extracting external_id", exc_info=True)
        return None

    async def _parse_title(
        self, card: ElementLike, title_link: ElementLike | None,
    ) -> str:
        """Extract title text from <strong> inside title link, or aria-label.

        The <a>'s full text_content has leading \\n and duplicated text,
        so <strong> text or aria-label are preferred.
        """
        try:
            strong = await card.query_selector("a span strong")
            if strong is not None:
                text = await strong.text_content()
                if text and text.strip():
                    return text.strip()

            if title_link is not None:
                aria = await title_link.get_attribute("aria-label")
                if aria and aria.strip():
                    return aria.strip().removesuffix(" with verification")

                raw = await title_link.text_content()
                if raw:
                    return raw.strip().split("\n")[0].strip()

            return ""
        except Exception:
            logger.debug("Error parsing title", exc_info=True)
            return ""

    async def _parse_url(self, title_link: ElementLike | None, job_id: str | None) -> str:
        """Clean URL from the title link, else the canonical URL from job_id."""
        fallback = build_job_url(job_id) if job_id else ""
        try:
            if title_link is None:
                return fallback
            href = await title_link.get_attribute("href")
            if not href:
                return fallback
            return self._clean_url(href)
        except Exception:
            logger.debug("Error parsing URL", exc_info=True)
            return fallback

    async def _parse_href(self, parent: ElementLike | PageLike, selectors: tuple[str, ...]) -> str:
        try:
            el = await self._find_first(parent, selectors)
            if el is None:
                return ""
            href = await el.get_attribute("href")
            return href.strip() if href else ""
        except Exception:
            logger.debug("Error reading href", exc_info=True)
            return ""

    async def _parse_text_fallback(
        self, parent: ElementLike | PageLike, selectors: tuple[str, ...],
    ) -> str:
        """Try selectors in order, return first non-empty text or ""."""
        try:
            el = await self._find_first(parent, selectors)
            if el is None:
                return ""
            text = await el.text_content()
            return text.strip() if text else ""
        except Exception:
            logger.debug("Error parsing text with fallback selectors", exc_info=True)
            return ""

    async def _parse_posted_time(self, card: ElementLike) -> str:
        """Extract posted time, preferring datetime attribute on <time> elements."""
        try:
            el = await self._find_first(card, POSTED_TIME_SELECTORS)
            if el is None:
                return ""
            dt_attr = await el.get_attribute("datetime")
            if dt_attr and dt_attr.strip():
                return dt_attr.strip()
            text = await el.text_content()
            return text.strip() if text else ""
        except Exception:
            logger.debug("Error parsing posted_time", exc_info=True)
            return ""

    async def _find_first(
        self, parent: ElementLike | PageLike, selectors: tuple[str, ...],
    ) -> ElementLike | None:
        """Return the first element matching any selector in order."""
        for selector in selectors:
            try:
                el = await parent.query_selector(selector)
                if el is not None:
                    return el
            except Exception:
                logger.debug("Selector '%s' raised, trying next", selector, exc_info=True)
        return None

    @staticmethod
    def _clean_url(href: str) -> str:
        """Strip tracking params and prepend domain if relative."""
        if href.startswith("/"):
            href = f"{LINKEDIN_BASE}{href}"
        parsed = urlparse(href)
        return urlunparse((parsed.scheme, parsed.netloc, parsed.path, "", "", ""))


def _normalize(text: str) -> str:
    """Collapse runs of whitespace."""
    return " ".join(text.split())
