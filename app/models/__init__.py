"""Pydantic models and canonical records for the search service."""

from app.models.error import ErrorResponse
from app.models.query import ParsedQuery
from app.models.records import (
    Candidate,
    CandidateMetadata,
    CaseRecord,
    ClientRecord,
    DocumentRecord,
    HearingRecord,
    TaskRecord,
)
from app.models.search import (
    EntityType,
    IndexStats,
    QueryHistoryItem,
    RecentSearch,
    SearchProvider,
    SearchResponse,
    SearchResult,
    SearchScope,
    SearchSuggestion,
)

__all__ = [
    # Search models
    "EntityType",
    "IndexStats",
    "QueryHistoryItem",
    "RecentSearch",
    "SearchProvider",
    "SearchResponse",
    "SearchResult",
    "SearchScope",
    "SearchSuggestion",
    # Query models
    "ParsedQuery",
    # Canonical records
    "Candidate",
    "CandidateMetadata",
    "CaseRecord",
    "ClientRecord",
    "DocumentRecord",
    "HearingRecord",
    "TaskRecord",
    # Error models
    "ErrorResponse",
]
