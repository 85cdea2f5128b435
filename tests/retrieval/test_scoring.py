"""Tests for demo-mode relevance scoring."""

import pytest

from app.models.records import DocumentRecord
from app.retrieval.builders import EntityCollections, build_document_results
from app.retrieval.query_parser import parse_query
from app.retrieval.scoring import calculate_demo_score, filename_boost, strip_extension


class TestCalculateDemoScore:
    """Unit tests for the additive base score."""

    def test_title_equal_to_query(self):
        # +100 equal, +50 terms in title, +10 short title, +15 per whole word
        assert calculate_demo_score("Annual Report", "", parse_query("annual report")) == 190

    def test_content_only_match(self):
        # +25 terms in content, +10 short title
        assert calculate_demo_score("Memo", "annual report", parse_query("annual")) == 35

    def test_whole_word_beats_substring(self):
        parsed = parse_query("notice")

        assert calculate_demo_score("Noticeboard", "", parsed) == 60
        assert calculate_demo_score("Notice board", "", parsed) == 75

    def test_exact_query_bonus(self):
        # +100 equal, +50 in title, +10 short title, +20 exact
        assert calculate_demo_score("GST Notice", "", parse_query('"gst notice"')) == 180

    def test_operator_bonuses(self):
        parsed = parse_query("filename:a tag:b uploader:c case:d")
        long_title = "x" * 60

        assert calculate_demo_score(long_title, "", parsed) == 15 + 10 + 10 + 10

    def test_score_floor(self):
        assert calculate_demo_score("y" * 60, "", parse_query("zzz")) == 1

    def test_long_title_gets_no_length_bonus(self):
        title = "Annual report " + "z" * 40
        assert calculate_demo_score(title, "", parse_query("annual")) == 50 + 15


class TestFilenameBoost:
    """Document-specific filename boost."""

    @pytest.mark.parametrize(
        "title, query, expected",
        [
            ("refund_order.pdf", "refund_order.pdf", 100),
            ("refund_order.pdf", "refund order", 100),
            ("refund_order.pdf", "filename:refund_order.pdf", 100),
            ("refund_order.pdf", "refund", 50),
            ("refund_order.pdf", "orders", 50),
            ("appeal memo.docx", "order", 0),
            ("refund_order.pdf", "tag:urgent", 0),
        ],
    )
    def test_filename_boost(self, title, query, expected):
        assert filename_boost(title, parse_query(query)) == expected

    def test_strip_extension(self):
        assert strip_extension("notice.PDF") == "notice"
        assert strip_extension("notice") == "notice"


def test_exact_filename_outranks_content_match():
    """An exact filename hit ranks first by a wide margin."""
    data = EntityCollections(
        documents=[
            DocumentRecord(id="memo", name="Reply memo", content="see gst_notice.pdf attached"),
            DocumentRecord(id="notice", name="gst_notice.pdf"),
        ]
    )

    results = build_document_results(data, parse_query("gst_notice.pdf"))
    results.sort(key=lambda r: r.score, reverse=True)

    assert [r.id for r in results] == ["notice", "memo"]
    assert results[0].score - results[1].score >= 50
