"""Search request and response models shared by the service and the API."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class SearchScope(str, Enum):
    """Subset of entity kinds a search call considers."""

    ALL = "all"
    CASES = "cases"
    CLIENTS = "clients"
    TASKS = "tasks"
    DOCUMENTS = "documents"
    HEARINGS = "hearings"


class EntityType(str, Enum):
    """Kind of record a search result points at."""

    CASE = "case"
    CLIENT = "client"
    TASK = "task"
    DOCUMENT = "document"
    HEARING = "hearing"


class SearchProvider(str, Enum):
    """Backend answering search calls for the rest of the session."""

    API = "API"
    DEMO = "DEMO"


# Scope → entity kinds, in fan-out order
SCOPE_ENTITY_TYPES: dict[SearchScope, tuple[EntityType, ...]] = {
    SearchScope.ALL: (
        EntityType.CASE,
        EntityType.CLIENT,
        EntityType.TASK,
        EntityType.DOCUMENT,
        EntityType.HEARING,
    ),
    SearchScope.CASES: (EntityType.CASE,),
    SearchScope.CLIENTS: (EntityType.CLIENT,),
    SearchScope.TASKS: (EntityType.TASK,),
    SearchScope.DOCUMENTS: (EntityType.DOCUMENT,),
    SearchScope.HEARINGS: (EntityType.HEARING,),
}


class SearchResult(BaseModel):
    """One ranked hit returned by a search."""

    type: EntityType
    id: str
    title: str
    subtitle: str = ""
    url: str
    score: float = Field(ge=0.0, description="Relevance score (higher is better)")
    highlights: list[str] = Field(default_factory=list)
    badges: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """One page of search results."""

    results: list[SearchResult] = Field(default_factory=list)
    total: int = Field(default=0, ge=0, description="Unpaginated result count")
    next_cursor: str | None = Field(
        default=None, description="Offset of the next page, absent on the last page"
    )
    message: str | None = Field(
        default=None, description="Human-readable note, e.g. when the backend is down"
    )


class SearchSuggestion(BaseModel):
    """Type-ahead suggestion."""

    text: str
    type: str | None = None
    count: int | None = None


class RecentSearch(BaseModel):
    """Entry of the persisted recent-search list."""

    query: str
    timestamp: float


class QueryHistoryItem(BaseModel):
    """Diagnostic record of one executed search."""

    query: str
    provider: SearchProvider
    scope: SearchScope
    duration: float = Field(ge=0.0, description="Duration in milliseconds")
    result_count: int = Field(ge=0)
    timestamp: float


class IndexStats(BaseModel):
    """Size and freshness of the searchable document set."""

    documents_count: int = Field(ge=0)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
