"""Decide whether a candidate record satisfies a parsed query."""

from app.models.query import ParsedQuery
from app.models.records import Candidate
from app.retrieval.query_parser import normalize


def _contains(needle: str | None, haystack: str) -> bool:
    if needle is None:
        return True
    return normalize(needle) in normalize(haystack)


def passes_filters(candidate: Candidate, parsed: ParsedQuery) -> bool:
    """Every present structured operator must match its field."""
    metadata = candidate.metadata
    return (
        _contains(parsed.filename, candidate.title)
        and _contains(parsed.tag, " ".join(metadata.tags))
        and _contains(parsed.uploader, metadata.uploader)
        and _contains(parsed.case_ref, metadata.case_ref)
    )


def matches(candidate: Candidate, parsed: ParsedQuery) -> bool:
    """Return True when ``candidate`` satisfies ``parsed``.

    Structured filters are ANDed and independent of the free text. Each term
    must appear in the title or the content; an exact query must appear as
    one literal string. A query with no terms matches whatever passed the
    filters.
    """
    if not passes_filters(candidate, parsed):
        return False

    if not parsed.terms:
        return True

    title = normalize(candidate.title)
    content = normalize(candidate.content)

    if parsed.exact:
        phrase = parsed.joined_terms
        return phrase in title or phrase in content

    return all(term in title or term in content for term in parsed.terms)
