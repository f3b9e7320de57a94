"""Per-job LinkedIn browser session on patchright.

Each job gets its own browser, context and page, closed when the job ends.
The LinkedIn session is carried between jobs through a cookie file: usable
cookies are loaded on entry, and save_cookies() writes the current ones back
after a credential login so the next job can skip the login form.
"""

import json
import logging
import time
from pathlib import Path
from types import TracebackType
from typing import Any

from patchright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from src.core.config import BrowserConfig

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1366, "height": 768}
COOKIE_DOMAIN = "linkedin.com"


class BrowserSession:
    """Async context manager owning the browser, context and page of one job.

    Usage::

        async with BrowserSession(config) as session:
            extractor = LinkedInExtractor(session.page, on_login=session.save_cookies)
    """

    def __init__(self, config: BrowserConfig) -> None:
        self._config = config
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def page(self) -> Page:
        if self._page is None:
            msg = "BrowserSession not entered, use 'async with'"
            raise RuntimeError(msg)
        return self._page

    async def __aenter__(self) -> "BrowserSession":
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self._config.headless)
        self._context = await self._browser.new_context(viewport=VIEWPORT)
        self._context.set_default_timeout(self._config.timeout_ms)

        cookies = load_linkedin_cookies(self._config.cookies_path)
        if cookies:
            await self._context.add_cookies(cookies)
            logger.info("Restored LinkedIn session from %d cookies", len(cookies))
        else:
            logger.info("No saved LinkedIn session, login will need credentials")

        self._page = await self._context.new_page()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
            self._page = None
            self._context = None
            self._browser = None
            self._playwright = None
            logger.debug("Browser session closed")

    async def save_cookies(self) -> int:
        """Write the context's LinkedIn cookies to the cookie file.

        Returns the number saved. A write failure is logged and returns 0;
        the job keeps its live session either way.
        """
        if self._context is None:
            msg = "BrowserSession not entered, use 'async with'"
            raise RuntimeError(msg)
        cookies = [c for c in await self._context.cookies() if _is_linkedin(c)]
        path = Path(self._config.cookies_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(cookies, indent=2))
        except OSError as e:
            logger.warning("Could not save LinkedIn cookies to %s: %s", path, e)
            return 0
        logger.info("Saved %d LinkedIn cookies to %s", len(cookies), path)
        return len(cookies)


def load_linkedin_cookies(path: str, now: float | None = None) -> list[dict[str, Any]]:
    """LinkedIn cookies from a JSON file, minus expired ones.

    A missing or malformed file yields an empty list.
    """
    cookie_path = Path(path)
    if not cookie_path.exists():
        logger.debug("Cookie file not found: %s", path)
        return []
    try:
        data = json.loads(cookie_path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load cookies from %s: %s", path, e)
        return []
    if not isinstance(data, list):
        logger.warning("Cookie file is not a JSON array: %s", path)
        return []

    now = time.time() if now is None else now
    usable = [c for c in data if isinstance(c, dict) and _is_linkedin(c) and not _expired(c, now)]
    dropped = len(data) - len(usable)
    if dropped:
        logger.debug("Ignored %d foreign or expired cookies in %s", dropped, path)
    return usable


def _is_linkedin(cookie: dict[str, Any]) -> bool:
    return COOKIE_DOMAIN in cookie.get("domain", "")


def _expired(cookie: dict[str, Any], now: float) -> bool:
    # -1 (or no expiry) marks a session cookie.
    expires = cookie.get("expires", -1)
    return isinstance(expires, int | float) and 0 <= expires < now
