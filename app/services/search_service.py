"""Global search over cases, clients, tasks, documents and hearings."""

import asyncio
import logging
import random
import time
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from app.clients.search_api_client import SearchAPIClient, SearchAPIError
from app.config import Settings, get_settings
from app.models.search import (
    SCOPE_ENTITY_TYPES,
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
from app.retrieval.adapters import (
    adapt_case,
    adapt_client,
    adapt_document,
    adapt_hearing,
    adapt_task,
)
from app.retrieval.builders import (
    RESULT_BUILDERS,
    EntityCollections,
    case_candidate,
    client_candidate,
    document_candidate,
)
from app.retrieval.matcher import matches
from app.retrieval.query_parser import parse_query
from app.services.provider import ProviderCallback, ProviderSelector
from app.storage.kv_store import KeyValueStore
from app.storage.record_store import COLLECTIONS, RecordStore, merge_records

logger = logging.getLogger(__name__)

RECENT_SEARCHES_KEY = "recent_searches"
UNAVAILABLE_MESSAGE = "Search is temporarily unavailable. Please try again later."

ADAPTERS: dict[EntityType, Callable[[Any], Any]] = {
    EntityType.CASE: adapt_case,
    EntityType.CLIENT: adapt_client,
    EntityType.TASK: adapt_task,
    EntityType.DOCUMENT: adapt_document,
    EntityType.HEARING: adapt_hearing,
}

# Kinds whose records are needed to build subtitles for a kind
JOIN_DEPENDENCIES: dict[EntityType, tuple[EntityType, ...]] = {
    EntityType.CASE: (EntityType.CLIENT,),
    EntityType.CLIENT: (),
    EntityType.TASK: (EntityType.CASE, EntityType.CLIENT),
    EntityType.DOCUMENT: (),
    EntityType.HEARING: (EntityType.CASE, EntityType.CLIENT),
}

# Suggestion scan order: fixed priority, not score order
SUGGESTION_ORDER = (EntityType.DOCUMENT, EntityType.CASE, EntityType.CLIENT)

CacheKey = tuple[str, str, int, str]

# Session used when the caller does not identify its search bar
DEFAULT_SESSION = "default"


class SearchCancelledError(Exception):
    """Raised to the caller of a search superseded by a newer one."""

    def __init__(self, query: str):
        super().__init__(f"Search for '{query}' was superseded by a newer search")
        self.query = query


def parse_cursor(cursor: str | None) -> int:
    """Offset encoded in a pagination cursor.

    Raises:
        ValueError: If the cursor is not an integer
    """
    if cursor is None or cursor == "":
        return 0
    try:
        offset = int(cursor)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid cursor: {cursor!r}") from None
    return max(offset, 0)


def paginate(results: list[SearchResult], limit: int, cursor: str | None) -> SearchResponse:
    """Slice ``results`` at the cursor offset.

    ``next_cursor`` is the end of the slice while more results remain. An
    offset past the end yields an empty page.
    """
    offset = parse_cursor(cursor)
    end = offset + limit
    return SearchResponse(
        results=results[offset:end],
        total=len(results),
        next_cursor=str(end) if end < len(results) else None,
    )


class SearchService:
    """Search facade used by the API and the search bar.

    Serves queries from the remote search API or, in demo mode, by scanning
    the structured and flat record stores. Keeps a response cache, the
    persisted recent-search list and a short diagnostic query history.

    Only the most recent ``search()`` of each session is live: starting a new
    one cancels that session's in-flight call, whose caller receives
    ``SearchCancelledError`` and whose result never reaches the cache. Searches
    of different sessions never cancel each other. All state is owned by the
    event loop the service runs on.
    """

    def __init__(
        self,
        structured_store: RecordStore,
        flat_store: RecordStore,
        local_store: KeyValueStore,
        session_store: KeyValueStore,
        api_client: SearchAPIClient | None = None,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize search service.

        Args:
            structured_store: Richer record store, preferred on id collisions
            flat_store: Flat key-value record store
            local_store: Persistent store for recent searches
            session_store: Session-scoped store for the provider choice
            api_client: Remote search API client, None in pure demo setups
            settings: Settings override (defaults to global settings)
            clock: Monotonic clock used for cache expiry
        """
        self.settings = settings or get_settings()
        self.structured_store = structured_store
        self.flat_store = flat_store
        self.local_store = local_store
        self.api_client = api_client
        self.provider_selector = ProviderSelector(session_store, api_client)
        self.clock = clock

        self.cache: dict[CacheKey, tuple[SearchResponse, float]] = {}
        self.suggest_cache: dict[tuple[str, int], tuple[list[SearchSuggestion], float]] = {}
        self.recent_searches: list[RecentSearch] = []
        self.query_history: deque[QueryHistoryItem] = deque(
            maxlen=self.settings.max_query_history
        )

        self._recent_loaded = False
        self._inflight: dict[str, asyncio.Task] = {}
        self._superseded: set[asyncio.Task] = set()
        self._index_updated_at: datetime | None = None

    async def initialize(self) -> SearchProvider:
        """Load recent searches and resolve the provider.

        Every public operation awaits this, so callers never race the
        provider decision.
        """
        if not self._recent_loaded:
            self._recent_loaded = True
            await self._load_recent_searches()
        return await self.provider_selector.ensure_initialized()

    # Search

    async def search(
        self,
        query: str,
        scope: SearchScope | str = SearchScope.ALL,
        limit: int | None = None,
        cursor: str | None = None,
        session_id: str = DEFAULT_SESSION,
    ) -> SearchResponse:
        """Search every entity kind enabled by ``scope``.

        Args:
            query: Raw query string (operators and quotes allowed)
            scope: ``all`` or a single entity collection
            limit: Page size
            cursor: Offset returned as ``next_cursor`` by the previous page
            session_id: Search bar the call comes from; a new search only
                supersedes in-flight searches of the same session

        Returns:
            SearchResponse with one page of results ordered by score

        Raises:
            ValueError: If scope, limit or cursor is invalid
            SearchCancelledError: If a newer search superseded this one
        """
        # Validate parameters before any work
        scope = SearchScope(scope)
        limit = self._validate_limit(limit)
        parse_cursor(cursor)

        if not query.strip():
            return SearchResponse()

        await self.initialize()

        # Only the newest search of a session stays live
        previous = self._inflight.get(session_id)
        if previous is not None and not previous.done():
            self._superseded.add(previous)
            previous.cancel()

        # Check cache first
        key: CacheKey = (query, scope.value, limit, cursor or "")
        cached = self._get_cached(key)
        if cached is not None:
            logger.debug(f"Search cache hit: {key}")
            return cached

        task = asyncio.create_task(self._execute(query, scope, limit, cursor, key))
        self._inflight[session_id] = task
        try:
            return await task
        except asyncio.CancelledError:
            if task in self._superseded:
                logger.debug(f"Search for '{query}' superseded in session {session_id}")
                raise SearchCancelledError(query) from None
            raise
        finally:
            self._superseded.discard(task)
            if self._inflight.get(session_id) is task:
                del self._inflight[session_id]

    def _validate_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.settings.default_search_limit
        if limit < 1 or limit > self.settings.max_search_limit:
            raise ValueError(
                f"limit must be between 1 and {self.settings.max_search_limit}, got {limit}"
            )
        return limit

    async def _execute(
        self,
        query: str,
        scope: SearchScope,
        limit: int,
        cursor: str | None,
        key: CacheKey,
    ) -> SearchResponse:
        provider = self.provider_selector.provider or SearchProvider.DEMO
        started = time.perf_counter()

        # Step 1: Run the search on the selected provider
        if provider is SearchProvider.API:
            response = await self._search_api(query, scope, limit, cursor)
        else:
            response = await self._search_demo(query, scope, limit, cursor)

        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Search '{query}' scope={scope.value} provider={provider.value}: "
            f"{response.total} results in {duration_ms:.1f}ms"
        )

        # Step 2: Record the query
        await self._add_recent_search(query)
        self.query_history.appendleft(
            QueryHistoryItem(
                query=query,
                provider=provider,
                scope=scope,
                duration=duration_ms,
                result_count=response.total,
                timestamp=time.time(),
            )
        )

        # Step 3: Cache; no await past this point, so a superseded call never reaches it
        if response.message is None:
            self.cache[key] = (response, self.clock())
        return response

    async def _search_api(
        self,
        query: str,
        scope: SearchScope,
        limit: int,
        cursor: str | None,
    ) -> SearchResponse:
        try:
            return await self.api_client.search(query, scope.value, limit, cursor)
        except SearchAPIError as e:
            logger.error(f"Search API failed for '{query}': {e}")
            return SearchResponse(message=UNAVAILABLE_MESSAGE)

    async def _search_demo(
        self,
        query: str,
        scope: SearchScope,
        limit: int,
        cursor: str | None,
    ) -> SearchResponse:
        # Simulate realistic response time
        await asyncio.sleep(
            random.uniform(
                self.settings.demo_search_delay_min,
                self.settings.demo_search_delay_max,
            )
        )

        # Read both stores for the scoped kinds and their joins
        parsed = parse_query(query)
        kinds = SCOPE_ENTITY_TYPES[scope]
        data = await self._load_collections(kinds)

        # Match, build and score each kind
        results: list[SearchResult] = []
        for kind in kinds:
            results.extend(RESULT_BUILDERS[kind](data, parsed))

        # Stable: equal scores keep the per-kind fan-out order
        results.sort(key=lambda result: result.score, reverse=True)
        return paginate(results, limit, cursor)

    async def _load_collections(self, kinds: tuple[EntityType, ...]) -> EntityCollections:
        needed: list[EntityType] = []
        for kind in kinds:
            for dependency in (kind, *JOIN_DEPENDENCIES[kind]):
                if dependency not in needed:
                    needed.append(dependency)

        collections = EntityCollections()
        for kind in needed:
            records = await self._load_records(kind)
            adapt = ADAPTERS[kind]
            setattr(collections, COLLECTIONS[kind], [adapt(record) for record in records])
        return collections

    async def _load_records(self, kind: EntityType) -> list[Any]:
        structured = await self._read_store(self.structured_store, kind)
        flat = await self._read_store(self.flat_store, kind)
        return merge_records(structured, flat)

    async def _read_store(self, store: RecordStore, kind: EntityType) -> list[Any]:
        try:
            return await store.get_all(kind)
        except Exception as e:
            logger.warning(
                f"Record store '{store.name}' unavailable for {kind.value}: {e}"
            )
            return []

    # Suggestions

    async def suggest(self, query: str, limit: int | None = None) -> list[SearchSuggestion]:
        """Type-ahead suggestions for a partial query.

        Never raises for environmental problems: any failure yields an
        empty list.
        """
        if limit is None:
            limit = self.settings.default_suggest_limit
        if not query.strip() or limit < 1:
            return []

        key = (query, limit)
        cached = self.suggest_cache.get(key)
        if cached is not None and self.clock() - cached[1] < self.settings.cache_ttl:
            return cached[0]

        try:
            provider = await self.initialize()
            if provider is SearchProvider.API:
                suggestions = await self.api_client.suggest(query, limit)
            else:
                suggestions = await self._suggest_demo(query, limit)
        except Exception as e:
            logger.error(f"Suggestions failed for '{query}': {e}")
            return []

        self.suggest_cache[key] = (suggestions, self.clock())
        return suggestions

    async def _suggest_demo(self, query: str, limit: int) -> list[SearchSuggestion]:
        await asyncio.sleep(self.settings.demo_suggest_delay)

        parsed = parse_query(query)
        data = await self._load_collections(SUGGESTION_ORDER)

        suggestions: list[SearchSuggestion] = []
        seen: set[str] = set()
        for entity_type, candidates in self._suggestion_candidates(data):
            for candidate in candidates:
                if len(suggestions) >= limit:
                    return suggestions
                text = candidate.title.strip()
                if not text or text.lower() in seen:
                    continue
                if matches(candidate, parsed):
                    seen.add(text.lower())
                    suggestions.append(
                        SearchSuggestion(text=text, type=entity_type.value, count=1)
                    )
        return suggestions

    def _suggestion_candidates(self, data: EntityCollections):
        yield EntityType.DOCUMENT, (document_candidate(doc) for doc in data.documents)
        yield EntityType.CASE, (
            case_candidate(case, data.client_for(case.client_id)) for case in data.cases
        )
        yield EntityType.CLIENT, (client_candidate(client) for client in data.clients)

    # Provider

    def get_provider(self) -> SearchProvider | None:
        """Current provider, or None when not yet determined."""
        return self.provider_selector.provider

    def subscribe_provider(self, callback: ProviderCallback) -> Callable[[], None]:
        """Subscribe to provider changes; returns the unsubscribe handle."""
        return self.provider_selector.subscribe(callback)

    async def refresh_search_data(self) -> None:
        """Drop cached responses and force a provider re-probe on next use."""
        self._clear_response_caches()
        await self.provider_selector.refresh()

    # Index maintenance

    async def rebuild_index(self, scope: str = "documents") -> None:
        """Rebuild the search index.

        Demo mode re-scans the live stores on every query, so there is no
        index to rebuild; only the cache is cleared.
        """
        provider = await self.initialize()
        if provider is SearchProvider.API:
            try:
                await self.api_client.rebuild_index(scope)
                logger.info(f"Requested remote index rebuild for '{scope}'")
            except SearchAPIError as e:
                logger.error(f"Index rebuild for '{scope}' failed: {e}")
        else:
            logger.info(f"Demo mode: index rebuild for '{scope}' is a no-op")

        self._clear_response_caches()
        self._index_updated_at = datetime.now(UTC)

    async def reindex_document(self, doc_id: str) -> None:
        """Reindex one document. Failures are logged, never raised."""
        try:
            provider = await self.initialize()
            if provider is SearchProvider.API:
                await self.api_client.reindex_document(doc_id)
                logger.info(f"Requested remote reindex of document {doc_id}")
            else:
                logger.info(f"Demo mode: reindex of document {doc_id} is a no-op")
        except Exception as e:
            logger.error(f"Reindex of document {doc_id} failed: {e}")
            return

        self._clear_response_caches()
        self._index_updated_at = datetime.now(UTC)

    async def remove_from_index(self, doc_id: str) -> None:
        """Drop a document from the demo index (no-op for the remote API)."""
        provider = await self.initialize()
        if provider is not SearchProvider.DEMO:
            logger.debug(f"Remove from index ignored for provider {provider.value}")
            return

        logger.info(f"Demo mode: removed document {doc_id} from index")
        self._clear_response_caches()
        self._index_updated_at = datetime.now(UTC)

    async def get_index_stats(self) -> IndexStats:
        """Count of searchable documents and the last index maintenance time."""
        documents = await self._load_records(EntityType.DOCUMENT)
        return IndexStats(
            documents_count=len(documents),
            updated_at=self._index_updated_at or datetime.now(UTC),
        )

    # History, recent searches and cache

    def get_query_history(self) -> list[QueryHistoryItem]:
        """Executed queries, most recent first."""
        return list(self.query_history)

    def get_recent_searches(self) -> list[str]:
        return [entry.query for entry in self.recent_searches]

    def get_recent_search_suggestions(self, limit: int | None = None) -> list[SearchSuggestion]:
        """Recent searches shaped as suggestions for an empty search box."""
        if limit is None:
            limit = self.settings.default_suggest_limit
        return [
            SearchSuggestion(text=entry.query, type="recent")
            for entry in self.recent_searches[:limit]
        ]

    async def clear_cache(self) -> None:
        """Clear cached responses, recent searches and query history."""
        self._clear_response_caches()
        self.recent_searches = []
        self.query_history.clear()
        try:
            await self.local_store.delete(RECENT_SEARCHES_KEY)
        except Exception as e:
            logger.warning(f"Failed to clear recent searches: {e}")
        logger.info("Search cache, recent searches and history cleared")

    def _get_cached(self, key: CacheKey) -> SearchResponse | None:
        cached = self.cache.get(key)
        if cached is None:
            return None
        response, stored_at = cached
        if self.clock() - stored_at < self.settings.cache_ttl:
            return response
        del self.cache[key]
        return None

    def _clear_response_caches(self) -> None:
        self.cache.clear()
        self.suggest_cache.clear()

    async def _load_recent_searches(self) -> None:
        try:
            stored = await self.local_store.get(RECENT_SEARCHES_KEY)
        except Exception as e:
            logger.warning(f"Failed to load recent searches: {e}")
            return

        if not isinstance(stored, list):
            return

        entries = []
        for item in stored:
            if isinstance(item, str):
                entries.append(RecentSearch(query=item, timestamp=0.0))
            elif isinstance(item, dict):
                try:
                    entries.append(RecentSearch.model_validate(item))
                except ValueError:
                    logger.debug(f"Skipping malformed recent search: {item!r}")
        self.recent_searches = entries[: self.settings.max_recent_searches]

    async def _add_recent_search(self, query: str) -> None:
        trimmed = query.strip()
        entries = [entry for entry in self.recent_searches if entry.query != trimmed]
        entries.insert(0, RecentSearch(query=trimmed, timestamp=time.time()))
        self.recent_searches = entries[: self.settings.max_recent_searches]

        try:
            await self.local_store.set(
                RECENT_SEARCHES_KEY,
                [entry.model_dump() for entry in self.recent_searches],
            )
        except Exception as e:
            logger.warning(f"Failed to save recent searches: {e}")

    async def close(self) -> None:
        """Cancel any in-flight search and close the API client."""
        for task in self._inflight.values():
            if not task.done():
                task.cancel()
        if self.api_client is not None:
            await self.api_client.close()
