"""Tests for query normalization and parsing."""

import pytest
from hypothesis import given, settings, strategies as st

from app.models.query import ParsedQuery
from app.retrieval.query_parser import is_bare_filename, normalize, parse_query


class TestNormalizeProperties:
    """Property-based tests for normalize."""

    @settings(max_examples=300)
    @given(text=st.text())
    def test_normalize_is_idempotent(self, text):
        """Normalizing twice equals normalizing once."""
        once = normalize(text)
        assert normalize(once) == once

    @given(text=st.text())
    def test_normalize_output_is_canonical(self, text):
        """Output is lower-case, trimmed and single-spaced."""
        result = normalize(text)
        assert result == result.strip()
        assert "  " not in result
        assert "_" not in result
        assert "-" not in result


class TestNormalizeUnit:
    """Unit tests for normalize."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Annual Report 2024", "annual report 2024"),
            ("show_cause-notice", "show cause notice"),
            ("  GST   Notice!! ", "gst notice"),
            ("notice.pdf", "noticepdf"),
            ("", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize(raw) == expected


class TestParseQuery:
    """Unit tests for parse_query."""

    def test_quoted_query_is_exact(self):
        """Quotes short-circuit parsing into one literal term."""
        assert parse_query('"foo bar"') == ParsedQuery(terms=["foo bar"], exact=True)

    def test_quoted_query_ignores_operators(self):
        parsed = parse_query('"tag:urgent case:CASE-1"')

        assert parsed.exact is True
        assert parsed.tag is None
        assert parsed.case_ref is None
        assert parsed.terms == ["tagurgent casecase 1"]

    def test_operator_extraction(self):
        parsed = parse_query("tag:urgent case:CASE-100 hello world")

        assert parsed.terms == ["hello", "world"]
        assert parsed.tag == "urgent"
        assert parsed.case_ref == "CASE-100"
        assert parsed.exact is False
        assert parsed.filename is None
        assert parsed.uploader is None

    def test_operators_are_case_insensitive(self):
        parsed = parse_query("FileName:order.pdf UPLOADER:priya refund")

        assert parsed.filename == "order.pdf"
        assert parsed.uploader == "priya"
        assert parsed.terms == ["refund"]

    def test_operator_only_query_has_no_terms(self):
        parsed = parse_query("uploader:rahul")

        assert parsed.terms == []
        assert parsed.uploader == "rahul"
        assert parsed.has_filters

    def test_bare_filename_is_exact(self):
        parsed = parse_query("refund_order.pdf")

        assert parsed.exact is True
        assert parsed.terms == ["refund orderpdf"]

    def test_unknown_extension_is_not_a_filename(self):
        parsed = parse_query("version.final")

        assert parsed.exact is False
        assert parsed.terms == ["versionfinal"]

    def test_terms_are_normalized(self):
        assert parse_query("Input-Tax   CREDIT").terms == ["input", "tax", "credit"]

    def test_blank_query(self):
        parsed = parse_query("   ")

        assert parsed.terms == []
        assert not parsed.exact
        assert not parsed.has_filters


@pytest.mark.parametrize(
    "text, expected",
    [
        ("notice.pdf", True),
        ("Reply.DOCX", True),
        ("scan.jpeg", True),
        ("two words.pdf", False),
        ("notice", False),
        ("archive.tar", False),
    ],
)
def test_is_bare_filename(text, expected):
    assert is_bare_filename(text) is expected
