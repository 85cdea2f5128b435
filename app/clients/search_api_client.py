"""HTTP client for the remote search API."""

import asyncio
import logging
from typing import Any

import httpx

from app.models.search import SearchResponse, SearchSuggestion

logger = logging.getLogger(__name__)

# Reachability probes, tried in order
PROBE_REQUESTS: tuple[tuple[str, dict[str, Any]], ...] = (
    ("/search/ping", {}),
    ("/health", {}),
    ("/search", {"q": "ping", "limit": 1}),
)


class SearchAPIError(Exception):
    """Raised when the remote search API fails or returns an error status."""
    pass


class SearchAPIClient:
    """Async client for the remote search API.

    Wraps ``GET /search``, ``GET /search/suggest``,
    ``POST /search/index/rebuild`` and ``POST /search/index/doc/{id}`` and
    converts every transport or status failure into ``SearchAPIError``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        probe_timeout: float = 1.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API base URL, e.g. ``https://api.example.com``
            timeout: Timeout for regular calls in seconds
            probe_timeout: Timeout for each reachability probe in seconds
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SearchAPIError(
                f"{method} {path} returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise SearchAPIError(f"{method} {path} failed: {type(e).__name__}: {e}") from e
        return response

    async def probe(self) -> bool:
        """Check reachability using the ordered probe chain.

        Each attempt is cancelled after ``probe_timeout`` seconds. Failures
        are logged and never raised.

        Returns:
            True when any probe returned a successful status
        """
        for path, params in PROBE_REQUESTS:
            try:
                response = await asyncio.wait_for(
                    self.client.get(path, params=params),
                    timeout=self.probe_timeout,
                )
            except asyncio.TimeoutError:
                logger.info(f"Probe {path} timed out after {self.probe_timeout}s")
                continue
            except httpx.HTTPError as e:
                logger.info(f"Probe {path} failed: {type(e).__name__}: {e}")
                continue

            if response.is_success:
                logger.info(f"Probe {path} succeeded ({response.status_code})")
                return True
            logger.info(f"Probe {path} returned {response.status_code}")

        return False

    async def search(
        self,
        query: str,
        scope: str,
        limit: int,
        cursor: str | None = None,
    ) -> SearchResponse:
        """Run a search on the remote API.

        Raises:
            SearchAPIError: If the call fails or the payload is malformed
        """
        params: dict[str, Any] = {"q": query, "scope": scope, "limit": limit}
        if cursor:
            params["cursor"] = cursor

        response = await self._request("GET", "/search", params=params)
        try:
            payload = response.json()
            if isinstance(payload, dict) and "total" not in payload:
                payload = {**payload, "total": len(payload.get("results") or [])}
            return SearchResponse.model_validate(payload)
        except ValueError as e:
            raise SearchAPIError(f"Malformed search response: {e}") from e

    async def suggest(self, query: str, limit: int) -> list[SearchSuggestion]:
        """Fetch type-ahead suggestions.

        Raises:
            SearchAPIError: If the call fails or the payload is malformed
        """
        response = await self._request(
            "GET", "/search/suggest", params={"q": query, "limit": limit}
        )
        try:
            payload = response.json()
            return [SearchSuggestion.model_validate(item) for item in payload]
        except (TypeError, ValueError) as e:
            raise SearchAPIError(f"Malformed suggest response: {e}") from e

    async def rebuild_index(self, scope: str) -> None:
        await self._request("POST", "/search/index/rebuild", params={"scope": scope})

    async def reindex_document(self, doc_id: str) -> None:
        await self._request("POST", f"/search/index/doc/{doc_id}")

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
