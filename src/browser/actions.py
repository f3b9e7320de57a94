"""Reusable browser actions: randomized sleep, scrolling and selector lookup.

All delays go through random_sleep() so none of them are fixed; scrolling
is incremental rather than one jump to the bottom.
"""

import asyncio
import logging
import random
from typing import Any

logger = logging.getLogger(__name__)

MAX_SCROLL_ATTEMPTS = 5

# Code enforces this regardless of caller args.
SCROLL_DELAY_FLOOR = 1.5


async def random_sleep(min_s: float, max_s: float) -> float:
    """Sleep for a random duration between min_s and max_s seconds.

    Negative minimums are treated as zero; if max_s < min_s, max_s is raised
    to min_s. Returns the actual sleep duration.
    """
    floor = max(min_s, 0.0)
    ceiling = max(max_s, floor)
    duration = random.uniform(floor, ceiling)
    await asyncio.sleep(duration)
    return duration


async def query_all_first(page: Any, selectors: tuple[str, ...]) -> list[Any]:
    """Return the elements of the first selector that matches anything."""
    for selector in selectors:
        elements = await page.query_selector_all(selector)
        if elements:
            logger.debug("Found %d elements with selector '%s'", len(elements), selector)
            return list(elements)
    return []


async def any_present(page: Any, selectors: tuple[str, ...]) -> bool:
    """True if any selector resolves to an element on the page."""
    for selector in selectors:
        if await page.query_selector(selector) is not None:
            return True
    return False


async def scroll_until_stable(
    page: Any,
    *,
    card_selectors: tuple[str, ...],
    max_attempts: int = MAX_SCROLL_ATTEMPTS,
    scroll_delay_min: float = 1.5,
    scroll_delay_max: float = 3.0,
) -> int:
    """Scroll incrementally until the number of result cards stops growing.

    Returns the final card count found on the page.
    """
    scroll_delay_min = max(scroll_delay_min, SCROLL_DELAY_FLOOR)
    scroll_delay_max = max(scroll_delay_max, scroll_delay_min)

    previous_count = 0

    for attempt in range(max_attempts):
        current_count = len(await query_all_first(page, card_selectors))
        logger.debug(
            "Scroll attempt %d/%d: %d cards (prev: %d)",
            attempt + 1, max_attempts, current_count, previous_count,
        )

        if current_count == previous_count and attempt > 0:
            break

        previous_count = current_count
        await page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
        await random_sleep(scroll_delay_min, scroll_delay_max)

    return previous_count
