"""Rule-based lead scoring for enriched listings.

Score range: 0-100 (clamped). Base 50, then fixed additive bonuses and
penalties. Listings scoring at or below QUALIFICATION_THRESHOLD are dropped
before persistence.
"""

from typing import NamedTuple

from src.core.schemas import Listing
from src.pipeline.classifier import is_agency

BASE_SCORE = 50
DIRECT_COMPANY_BONUS = 30
AGENCY_PENALTY = 20
CONTACT_NAME_BONUS = 15
CONTACT_EMAIL_BONUS = 20
SALARY_BONUS = 10
DESCRIPTION_BONUS = 5
SENIORITY_BONUS = 10

DESCRIPTION_MIN_CHARS = 200
QUALIFICATION_THRESHOLD = 40

SENIORITY_KEYWORDS = ("senior", "lead", "manager", "director", "head of")


class ScoreBreakdown(NamedTuple):
    score: int
    reasons: list[str]


def score_breakdown(listing: Listing) -> ScoreBreakdown:
    """Score a listing and keep the reasons behind each adjustment."""
    score = BASE_SCORE
    reasons: list[str] = []

    if is_agency(listing.company):
        score -= AGENCY_PENALTY
        reasons.append("recruitment agency")
    else:
        score += DIRECT_COMPANY_BONUS
        reasons.append("direct employer")

    contact = listing.contact
    if contact is not None and contact.name:
        score += CONTACT_NAME_BONUS
        reasons.append("hiring contact name")
    if contact is not None and contact.email:
        score += CONTACT_EMAIL_BONUS
        reasons.append("hiring contact email")

    if listing.salary:
        score += SALARY_BONUS
        reasons.append("salary listed")

    if len(listing.description) > DESCRIPTION_MIN_CHARS:
        score += DESCRIPTION_BONUS
        reasons.append("detailed description")

    title_lower = listing.title.lower()
    if any(kw in title_lower for kw in SENIORITY_KEYWORDS):
        score += SENIORITY_BONUS
        reasons.append("senior title")

    return ScoreBreakdown(max(0, min(100, score)), reasons)


def score_listing(listing: Listing) -> int:
    """Return the lead score of a listing, 0-100."""
    return score_breakdown(listing).score


def is_qualified(score: int) -> bool:
    """Qualified leads score strictly above the threshold."""
    return score > QUALIFICATION_THRESHOLD
