"""Tests for the LinkedIn extractor with a mocked browser page."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.core.config import LinkedInConfig, PipelineConfig
from src.core.schemas import Listing, ListingDetails, SearchSpecification
from src.platforms.linkedin.adapter import LinkedInExtractor
from src.platforms.linkedin.searcher import FEED_URL, LOGIN_URL
from src.platforms.linkedin.selectors import LOGGED_IN_SELECTORS

SEARCH = SearchSpecification(keywords="python developer", location="London", max_pages=3)
DELAYS = PipelineConfig(page_delay_min=2.0, page_delay_max=4.0,
                        detail_delay_min=1.0, detail_delay_max=3.0)


def _listing(n: int) -> Listing:
    return Listing(title=f"Engineer {n}", company="Acme", url=f"https://www.linkedin.com/jobs/view/{n}/")


@pytest.fixture()
def page() -> AsyncMock:
    page = AsyncMock()
    page.query_selector = AsyncMock(return_value=None)
    page.query_selector_all = AsyncMock(return_value=[])
    return page


@pytest.fixture(autouse=True)
def _no_delays():  # type: ignore[no-untyped-def]
    with patch("src.platforms.linkedin.adapter.random_sleep", new_callable=AsyncMock) as mock_sleep, \
         patch("src.platforms.linkedin.adapter.scroll_until_stable", new_callable=AsyncMock):
        yield mock_sleep


class TestAuthenticate:
    async def test_cookie_session(self, page: AsyncMock) -> None:
        page.query_selector.return_value = object()
        extractor = LinkedInExtractor(page)
        assert await extractor.authenticate() is True
        page.goto.assert_awaited_once_with(FEED_URL)
        page.fill.assert_not_awaited()

    async def test_no_session_no_credentials(self, page: AsyncMock) -> None:
        extractor = LinkedInExtractor(page, LinkedInConfig(email="", password=""))
        assert await extractor.authenticate() is False
        page.fill.assert_not_awaited()

    async def test_credential_login(self, page: AsyncMock) -> None:
        page.query_selector.side_effect = [None] * len(LOGGED_IN_SELECTORS) + [object()]
        creds = LinkedInConfig(email="me@example.com", password="secret")
        extractor = LinkedInExtractor(page, creds)
        assert await extractor.authenticate() is True
        page.goto.assert_any_await(LOGIN_URL)
        page.fill.assert_any_await("#username", "me@example.com")
        page.fill.assert_any_await("#password", "secret")
        page.click.assert_awaited_once()

    async def test_credential_login_saves_session(self, page: AsyncMock) -> None:
        page.query_selector.side_effect = [None] * len(LOGGED_IN_SELECTORS) + [object()]
        on_login = AsyncMock()
        creds = LinkedInConfig(email="me@example.com", password="secret")
        assert await LinkedInExtractor(page, creds, on_login=on_login).authenticate() is True
        on_login.assert_awaited_once()

    async def test_cookie_session_does_not_resave(self, page: AsyncMock) -> None:
        page.query_selector.return_value = object()
        on_login = AsyncMock()
        assert await LinkedInExtractor(page, on_login=on_login).authenticate() is True
        on_login.assert_not_awaited()

    async def test_failed_login_does_not_save(self, page: AsyncMock) -> None:
        on_login = AsyncMock()
        creds = LinkedInConfig(email="me@example.com", password="wrong")
        assert await LinkedInExtractor(page, creds, on_login=on_login).authenticate() is False
        on_login.assert_not_awaited()

    async def test_failed_login(self, page: AsyncMock) -> None:
        creds = LinkedInConfig(email="me@example.com", password="wrong")
        assert await LinkedInExtractor(page, creds).authenticate() is False

    async def test_navigation_error_is_false(self, page: AsyncMock) -> None:
        page.goto.side_effect = TimeoutError("net::ERR_TIMED_OUT")
        assert await LinkedInExtractor(page).authenticate() is False


class TestFetchPage:
    async def test_page_with_next(self, page: AsyncMock, _no_delays: AsyncMock) -> None:
        cards = [AsyncMock(), AsyncMock()]
        page.query_selector_all.return_value = cards
        page.query_selector.return_value = object()
        extractor = LinkedInExtractor(page, delays=DELAYS)
        extractor._parser = MagicMock()
        extractor._parser.parse_card = AsyncMock(side_effect=[_listing(1), None])

        result = await extractor.fetch_page(SEARCH, 1)

        assert [listing.title for listing in result.listings] == ["Engineer 1"]
        assert result.has_next is True
        assert "start=25" in page.goto.await_args.args[0]
        _no_delays.assert_awaited_once_with(2.0, 4.0)

    async def test_last_page(self, page: AsyncMock, _no_delays: AsyncMock) -> None:
        page.query_selector_all.return_value = [AsyncMock()]
        extractor = LinkedInExtractor(page, delays=DELAYS)
        extractor._parser = MagicMock()
        extractor._parser.parse_card = AsyncMock(return_value=_listing(1))

        result = await extractor.fetch_page(SEARCH, 0)

        assert result.has_next is False
        _no_delays.assert_not_awaited()

    async def test_no_cards_means_no_next(self, page: AsyncMock) -> None:
        page.query_selector.return_value = object()
        result = await LinkedInExtractor(page).fetch_page(SEARCH, 0)
        assert result.listings == []
        assert result.has_next is False

    async def test_card_errors_skipped(self, page: AsyncMock) -> None:
        bad = AsyncMock()
        bad.scroll_into_view_if_needed.side_effect = RuntimeError("detached")
        page.query_selector_all.return_value = [bad]
        extractor = LinkedInExtractor(page)
        result = await extractor.fetch_page(SEARCH, 0)
        assert result.listings == []

    async def test_navigation_error_propagates(self, page: AsyncMock) -> None:
        page.goto.side_effect = TimeoutError("navigation timeout")
        with pytest.raises(TimeoutError):
            await LinkedInExtractor(page).fetch_page(SEARCH, 0)


class TestFetchDetails:
    async def test_details_and_delay(self, page: AsyncMock, _no_delays: AsyncMock) -> None:
        extractor = LinkedInExtractor(page, delays=DELAYS)
        extractor._parser = MagicMock()
        extractor._parser.parse_details = AsyncMock(return_value=ListingDetails(salary="£80k"))

        details = await extractor.fetch_details("https://www.linkedin.com/jobs/view/1/")

        assert details.salary == "£80k"
        page.goto.assert_awaited_once_with("https://www.linkedin.com/jobs/view/1/")
        _no_delays.assert_awaited_once_with(1.0, 3.0)

    def test_platform_id(self, page: AsyncMock) -> None:
        assert LinkedInExtractor(page).platform_id == "linkedin"
