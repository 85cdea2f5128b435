"""Query normalization and parsing."""

import re

from app.models.query import ParsedQuery

# Extensions recognised when a bare filename is typed as the whole query
DOCUMENT_EXTENSIONS = (
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt", "csv",
    "rtf", "odt", "jpg", "jpeg", "png", "gif", "zip", "eml", "msg",
)

_FILENAME_PATTERN = re.compile(
    r"^[^\s\"]+\.(?:" + "|".join(DOCUMENT_EXTENSIONS) + r")$",
    re.IGNORECASE,
)
_OPERATOR_PATTERN = re.compile(r"\b(filename|tag|uploader|case):(\S+)", re.IGNORECASE)

_SEPARATORS = re.compile(r"[_-]+")
_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")

# Operator keyword → ParsedQuery attribute
_OPERATOR_FIELDS = {
    "filename": "filename",
    "tag": "tag",
    "uploader": "uploader",
    "case": "case_ref",
}


def normalize(text: str) -> str:
    """Canonical lower-case, whitespace-collapsed form of ``text``.

    Used identically for indexed values and query values, so comparisons are
    always normalized against normalized. Idempotent.
    """
    text = text.lower()
    text = _SEPARATORS.sub(" ", text)
    text = _PUNCTUATION.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def is_bare_filename(text: str) -> bool:
    return bool(_FILENAME_PATTERN.match(text))


def parse_query(query: str) -> ParsedQuery:
    """Turn a free-text query into structured filters.

    Quoted queries and bare filenames are matched literally and skip operator
    extraction. Otherwise ``filename:``, ``tag:``, ``uploader:`` and ``case:``
    tokens are pulled out and the remaining text is split into terms.

    Args:
        query: Raw query string

    Returns:
        ParsedQuery
    """
    stripped = query.strip()

    if len(stripped) >= 2 and stripped.startswith('"') and stripped.endswith('"'):
        inner = normalize(stripped[1:-1])
        return ParsedQuery(terms=[inner] if inner else [], exact=True)

    if is_bare_filename(stripped):
        return ParsedQuery(terms=[normalize(stripped)], exact=True)

    parsed = ParsedQuery()
    for match in _OPERATOR_PATTERN.finditer(stripped):
        setattr(parsed, _OPERATOR_FIELDS[match.group(1).lower()], match.group(2))

    remaining = _OPERATOR_PATTERN.sub(" ", stripped)
    parsed.terms = normalize(remaining).split()
    return parsed
