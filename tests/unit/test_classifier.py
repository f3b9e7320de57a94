"""Tests for recruitment-agency detection."""

import pytest

from src.pipeline.classifier import RECRUITMENT_AGENCY_KEYWORDS, is_agency


class TestIsAgency:
    @pytest.mark.parametrize("name", [
        "ABC Recruitment Ltd",
        "Hays Specialist Recruitment",
        "Michael Page International",
        "Robert Half",
        "Global Staffing Partners",
        "Northwind Talent Group",
        "Acme Executive Search",
    ])
    def test_agencies_detected(self, name: str) -> None:
        assert is_agency(name) is True

    @pytest.mark.parametrize("name", ["Acme Corp", "Initech", "Globex Software", ""])
    def test_direct_employers(self, name: str) -> None:
        assert is_agency(name) is False

    def test_case_insensitive(self) -> None:
        assert is_agency("RANDSTAD") is True
        assert is_agency("randstad") is True

    def test_substring_without_word_boundary(self) -> None:
        """Known false positive: keyword inside a longer word still matches."""
        assert is_agency("Staffingworks Analytics") is True

    def test_keywords_are_lowercase(self) -> None:
        assert all(kw == kw.lower() for kw in RECRUITMENT_AGENCY_KEYWORDS)
