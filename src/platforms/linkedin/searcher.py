"""LinkedIn URL builder.

Pure functions — zero browser dependency.
"""

import logging
from urllib.parse import quote_plus, urlencode

from src.core.schemas import SearchSpecification

logger = logging.getLogger(__name__)

SEARCH_BASE = "https://www.linkedin.com/jobs/search/"
LOGIN_URL = "https://www.linkedin.com/login"
FEED_URL = "https://www.linkedin.com/feed/"

RESULTS_PER_PAGE = 25

# Only postings from the past week.
POSTED_WITHIN = "r604800"

# --- Mapping dicts (URL concern) ---

EXPERIENCE_LEVEL_MAP: dict[str, str] = {
    "entry": "2",
    "mid": "3",
    "senior": "4",
}

JOB_TYPE_MAP: dict[str, str] = {
    "full-time": "F",
    "part-time": "P",
    "contract": "C",
    "temporary": "T",
    "internship": "I",
    "volunteer": "V",
}


def build_url(search: SearchSpecification, page: int = 0) -> str:
    """Build a LinkedIn jobs search URL for one zero-based results page.

    industry and company_size have no stable URL filter and are not sent.
    """
    params: dict[str, str] = {
        "keywords": search.keywords,
        "location": search.location,
        "f_TPR": POSTED_WITHIN,
    }

    if search.job_type is not None:
        code = _map_value(search.job_type, JOB_TYPE_MAP, "job_type")
        if code:
            params["f_JT"] = code

    if search.experience is not None:
        code = _map_value(search.experience, EXPERIENCE_LEVEL_MAP, "experience")
        if code:
            params["f_E"] = code

    if page > 0:
        params["start"] = str(page * RESULTS_PER_PAGE)

    return f"{SEARCH_BASE}?{urlencode(params, quote_via=quote_plus)}"


def build_job_url(job_id: str) -> str:
    """Build a canonical LinkedIn job detail URL."""
    return f"https://www.linkedin.com/jobs/view/{job_id}/"


def _map_value(value: str, mapping: dict[str, str], field_name: str) -> str | None:
    """Map a user-facing filter value to its LinkedIn URL code.

    Unknown values are logged and skipped (never crash).
    """
    code = mapping.get(value.lower().strip())
    if code is None:
        logger.warning("Unknown %s value '%s' — skipping", field_name, value)
    return code
