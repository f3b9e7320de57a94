"""LinkedIn listing extractor — wires URL builder, parser, and browser page."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from src.browser.actions import any_present, query_all_first, random_sleep, scroll_until_stable
from src.browser.session import BrowserSession
from src.core.config import LinkedInConfig, PipelineConfig, Settings
from src.core.schemas import Listing, ListingDetails, ListingPage, SearchSpecification
from src.platforms.base import ListingExtractor
from src.platforms.linkedin.parser import LinkedInParser
from src.platforms.linkedin.searcher import FEED_URL, LOGIN_URL, build_url
from src.platforms.linkedin.selectors import (
    CARD_SELECTORS,
    LOGGED_IN_SELECTORS,
    LOGIN_PASSWORD_SELECTOR,
    LOGIN_SUBMIT_SELECTOR,
    LOGIN_USERNAME_SELECTOR,
    NEXT_PAGE_SELECTORS,
)

logger = logging.getLogger(__name__)


class LinkedInExtractor(ListingExtractor):
    """LinkedIn job search extractor.

    Requires a browser page object (patchright Page) injected via constructor.
    The page belongs to one job; nothing here is shared across jobs. on_login
    runs after a successful credential login (the session uses it to save cookies).
    """

    def __init__(
        self,
        page: Any,
        credentials: LinkedInConfig | None = None,
        delays: PipelineConfig | None = None,
        on_login: Callable[[], Awaitable[Any]] | None = None,
    ) -> None:
        self._page = page
        self._on_login = on_login
        self._credentials = credentials or LinkedInConfig(email="", password="")
        self._delays = delays or PipelineConfig()
        self._parser = LinkedInParser()

    @property
    def platform_id(self) -> str:
        return "linkedin"

    async def authenticate(self) -> bool:
        """Reuse the cookie session if it is live, otherwise log in with credentials."""
        try:
            await self._page.goto(FEED_URL)
            if await any_present(self._page, LOGGED_IN_SELECTORS):
                logger.info("Cookie session is authenticated")
                return True

            if not self._credentials.has_credentials:
                logger.warning("Session not authenticated and no LinkedIn credentials configured")
                return False

            logger.info("Logging in to LinkedIn as %s", self._credentials.email)
            await self._page.goto(LOGIN_URL)
            await self._page.fill(LOGIN_USERNAME_SELECTOR, self._credentials.email)
            await self._page.fill(LOGIN_PASSWORD_SELECTOR, self._credentials.password)
            await self._page.click(LOGIN_SUBMIT_SELECTOR)
            await self._page.wait_for_load_state("domcontentloaded")
            logged_in = await any_present(self._page, LOGGED_IN_SELECTORS)
            if not logged_in:
                logger.warning("Login did not reach an authenticated page")
                return False
        except Exception:
            logger.warning("Login failed", exc_info=True)
            return False

        if self._on_login is not None:
            await self._on_login()
        return True

    async def fetch_page(self, search: SearchSpecification, page: int) -> ListingPage:
        """Load one results page. Navigation errors propagate to the caller."""
        url = build_url(search, page)
        logger.info("Navigating to page %d: %s", page, url)

        await self._page.goto(url)
        await scroll_until_stable(self._page, card_selectors=CARD_SELECTORS)

        cards = await query_all_first(self._page, CARD_SELECTORS)
        listings = await self._parse_with_scroll(cards)
        has_next = bool(cards) and await any_present(self._page, NEXT_PAGE_SELECTORS)

        logger.info(
            "Page %d: found %d cards, parsed %d listings, next page: %s",
            page, len(cards), len(listings), has_next,
        )

        if has_next:
            await random_sleep(self._delays.page_delay_min, self._delays.page_delay_max)

        return ListingPage(listings=listings, has_next=has_next)

    async def fetch_details(self, url: str) -> ListingDetails:
        """Open a posting and read its detail fields. Navigation errors propagate."""
        await self._page.goto(url)
        details = await self._parser.parse_details(self._page)
        await random_sleep(self._delays.detail_delay_min, self._delays.detail_delay_max)
        return details

    async def _parse_with_scroll(self, cards: list[Any]) -> list[Listing]:
        """Scroll each card into view before parsing to defeat occlusion.

        LinkedIn strips inner HTML from off-screen cards (virtual DOM).
        scrollIntoView restores the content so the parser can extract fields.
        """
        results: list[Listing] = []
        for card in cards:
            try:
                await card.scroll_into_view_if_needed()
                await self._page.wait_for_timeout(150)
                listing = await self._parser.parse_card(card)
                if listing is not None:
                    results.append(listing)
            except Exception:
                logger.debug("Failed to scroll/parse card, skipping", exc_info=True)
        return results


@asynccontextmanager
async def open_linkedin_extractor(settings: Settings) -> AsyncIterator[LinkedInExtractor]:
    """Launch a fresh browser session for one job and tear it down afterwards."""
    async with BrowserSession(settings.browser) as session:
        yield LinkedInExtractor(
            session.page, settings.linkedin, settings.pipeline, on_login=session.save_cookies,
        )
