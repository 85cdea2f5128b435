"""Additive relevance scoring for demo-mode results.

The point values are relied on by the result ordering in the UI; change them
only together with the product owners.
"""

import re

from app.models.query import ParsedQuery
from app.retrieval.query_parser import normalize

TITLE_EQUALS_QUERY = 100
ALL_TERMS_IN_TITLE = 50
ALL_TERMS_IN_CONTENT = 25
SHORT_TITLE = 10
SHORT_TITLE_LENGTH = 50
WHOLE_WORD_IN_TITLE = 15
FILENAME_OPERATOR = 15
TAG_OPERATOR = 10
UPLOADER_OPERATOR = 10
CASE_OPERATOR = 10
EXACT_QUERY = 20

EXACT_FILENAME_BOOST = 100
PARTIAL_FILENAME_BOOST = 50

MIN_SCORE = 1

_EXTENSION = re.compile(r"\.[A-Za-z0-9]{1,5}$")


def calculate_demo_score(title: str, content: str, parsed: ParsedQuery) -> int:
    """Score one matched candidate.

    Args:
        title: Raw candidate title
        content: Raw candidate content
        parsed: Parsed query

    Returns:
        Score, never below 1
    """
    norm_title = normalize(title)
    norm_content = normalize(content)
    terms = parsed.terms
    score = 0

    if terms:
        if norm_title == parsed.joined_terms:
            score += TITLE_EQUALS_QUERY
        if all(term in norm_title for term in terms):
            score += ALL_TERMS_IN_TITLE
        if all(term in norm_content for term in terms):
            score += ALL_TERMS_IN_CONTENT

    if len(title) < SHORT_TITLE_LENGTH:
        score += SHORT_TITLE

    title_words = set(norm_title.split())
    score += WHOLE_WORD_IN_TITLE * sum(1 for term in terms if term in title_words)

    if parsed.filename is not None:
        score += FILENAME_OPERATOR
    if parsed.tag is not None:
        score += TAG_OPERATOR
    if parsed.uploader is not None:
        score += UPLOADER_OPERATOR
    if parsed.case_ref is not None:
        score += CASE_OPERATOR
    if parsed.exact:
        score += EXACT_QUERY

    return max(score, MIN_SCORE)


def strip_extension(name: str) -> str:
    return _EXTENSION.sub("", name.strip())


def _variants(name: str) -> set[str]:
    return {v for v in (normalize(name), normalize(strip_extension(name))) if v}


def filename_boost(title: str, parsed: ParsedQuery) -> int:
    """Extra score for documents whose name matches the query.

    The ``filename:`` operator value is compared when present, otherwise the
    joined free-text terms.
    """
    if parsed.filename is not None:
        queries = _variants(parsed.filename)
    else:
        queries = {parsed.joined_terms} if parsed.terms else set()

    titles = _variants(title)
    if not queries or not titles:
        return 0

    if queries & titles:
        return EXACT_FILENAME_BOOST

    for query in queries:
        for name in titles:
            if query in name or name in query:
                return PARTIAL_FILENAME_BOOST
            for query_word in query.split():
                for title_word in name.split():
                    if query_word in title_word or title_word in query_word:
                        return PARTIAL_FILENAME_BOOST

    return 0
