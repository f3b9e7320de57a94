"""Tests for the LinkedIn search URL builder."""

from urllib.parse import parse_qs, urlparse

import pytest

from src.core.schemas import SearchSpecification
from src.platforms.linkedin.searcher import (
    POSTED_WITHIN,
    RESULTS_PER_PAGE,
    SEARCH_BASE,
    _map_value,
    build_job_url,
    build_url,
)


def _params(url: str) -> dict[str, list[str]]:
    return parse_qs(urlparse(url).query)


def _search(**kw: object) -> SearchSpecification:
    defaults: dict[str, object] = {"keywords": "python developer", "location": "London"}
    defaults.update(kw)
    return SearchSpecification(**defaults)  # type: ignore[arg-type]


class TestBuildUrl:
    def test_minimal(self) -> None:
        url = build_url(_search())
        assert url.startswith(SEARCH_BASE)
        params = _params(url)
        assert params["keywords"] == ["python developer"]
        assert params["location"] == ["London"]
        assert params["f_TPR"] == [POSTED_WITHIN]
        assert "start" not in params
        assert "f_JT" not in params
        assert "f_E" not in params

    def test_pagination_offset(self) -> None:
        assert _params(build_url(_search(), page=2))["start"] == [str(2 * RESULTS_PER_PAGE)]

    @pytest.mark.parametrize(("job_type", "code"), [
        ("full-time", "F"), ("part-time", "P"), ("contract", "C"),
        ("temporary", "T"), ("internship", "I"), ("volunteer", "V"),
    ])
    def test_job_type(self, job_type: str, code: str) -> None:
        assert _params(build_url(_search(job_type=job_type)))["f_JT"] == [code]

    @pytest.mark.parametrize(("level", "code"), [("entry", "2"), ("mid", "3"), ("senior", "4")])
    def test_experience(self, level: str, code: str) -> None:
        assert _params(build_url(_search(experience=level)))["f_E"] == [code]

    def test_industry_and_size_not_sent(self) -> None:
        params = _params(build_url(_search(industry="Software", company_size="51-200")))
        assert set(params) == {"keywords", "location", "f_TPR"}

    def test_special_characters_encoded(self) -> None:
        url = build_url(_search(keywords="C++ & Go"))
        assert _params(url)["keywords"] == ["C++ & Go"]


class TestHelpers:
    def test_job_url(self) -> None:
        assert build_job_url("123") == "https://www.linkedin.com/jobs/view/123/"

    def test_unknown_value_skipped(self) -> None:
        assert _map_value("weekly", {"daily": "d"}, "schedule") is None
