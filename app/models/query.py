"""Structured form of a raw search query."""

from dataclasses import dataclass, field


@dataclass
class ParsedQuery:
    """Filters extracted from one query string.

    Attributes:
        terms: Normalized free-text terms, in input order
        exact: Match the joined terms as one literal string
        filename: Value of a ``filename:`` operator
        tag: Value of a ``tag:`` operator
        uploader: Value of an ``uploader:`` operator
        case_ref: Value of a ``case:`` operator
    """

    terms: list[str] = field(default_factory=list)
    exact: bool = False
    filename: str | None = None
    tag: str | None = None
    uploader: str | None = None
    case_ref: str | None = None

    @property
    def joined_terms(self) -> str:
        return " ".join(self.terms)

    @property
    def has_filters(self) -> bool:
        """Whether any structured operator was present."""
        return any(
            value is not None
            for value in (self.filename, self.tag, self.uploader, self.case_ref)
        )
