"""Recruitment-agency detection by keyword substring match.

Plain substring search with no word boundaries: "Staffingworks Analytics"
contains "staffing" and is classified as an agency. Accepted false positive.
"""

RECRUITMENT_AGENCY_KEYWORDS: tuple[str, ...] = (
    "recruitment",
    "recruiter",
    "talent",
    "staffing",
    "headhunter",
    "executive search",
    "consulting",
    "temp agency",
    "placement",
    "resource solutions",
    "people solutions",
    "workforce",
    # Known agency brands
    "reed",
    "adecco",
    "randstad",
    "hays",
    "michael page",
    "robert half",
    "kelly services",
    "manpower",
    "allegis",
)


def is_agency(company_name: str) -> bool:
    """Return True if the company name contains any agency keyword (any case)."""
    name = company_name.lower()
    return any(keyword in name for keyword in RECRUITMENT_AGENCY_KEYWORDS)
