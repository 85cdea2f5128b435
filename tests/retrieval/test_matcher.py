"""Tests for the entity matcher."""

from app.models.records import Candidate, CandidateMetadata
from app.retrieval.matcher import matches, passes_filters
from app.retrieval.query_parser import parse_query


def _candidate(title="", content="", tags=None, uploader="", case_ref=""):
    return Candidate(
        title=title,
        content=content,
        metadata=CandidateMetadata(tags=tags or [], uploader=uploader, case_ref=case_ref),
    )


class TestTermMatching:
    """Free-text term matching."""

    def test_all_terms_required(self):
        candidate = _candidate(title="Annual Report 2024")

        assert matches(candidate, parse_query("annual 2024"))
        assert not matches(candidate, parse_query("annual 2025"))

    def test_terms_may_match_title_or_content(self):
        candidate = _candidate(title="Annual Report", content="Filed for FY 2024")

        assert matches(candidate, parse_query("annual 2024"))

    def test_exact_requires_phrase(self):
        candidate = _candidate(title="Reply to show cause notice")

        assert matches(candidate, parse_query('"show cause"'))
        assert not matches(candidate, parse_query('"cause show"'))

    def test_normalized_comparison(self):
        candidate = _candidate(title="Show_Cause-Notice")

        assert matches(candidate, parse_query("SHOW cause"))


class TestStructuredFilters:
    """Structured operators are hard gates."""

    def test_failing_uploader_rejects_despite_terms(self):
        candidate = _candidate(title="Refund order", uploader="Rahul Mehta")

        assert not matches(candidate, parse_query("uploader:priya refund"))
        assert matches(candidate, parse_query("uploader:rahul refund"))

    def test_filters_are_conjunctive(self):
        candidate = _candidate(title="notice.pdf", tags=["urgent"], uploader="Priya")

        assert matches(candidate, parse_query("tag:urgent uploader:priya"))
        assert not matches(candidate, parse_query("tag:urgent uploader:rahul"))

    def test_case_filter_is_normalized(self):
        candidate = _candidate(title="Order", case_ref="case-1 CASE-100")

        assert matches(candidate, parse_query("case:CASE-100"))
        assert not matches(candidate, parse_query("case:CASE-200"))

    def test_filename_filter_targets_title(self):
        candidate = _candidate(title="refund_order.pdf", content="notice")

        assert passes_filters(candidate, parse_query("filename:refund"))
        assert not passes_filters(candidate, parse_query("filename:notice"))

    def test_structured_only_query_matches_by_default(self):
        candidate = _candidate(title="Anything", tags=["urgent"])

        assert matches(candidate, parse_query("tag:urgent"))

    def test_empty_query_matches(self):
        assert matches(_candidate(title="x"), parse_query(""))
