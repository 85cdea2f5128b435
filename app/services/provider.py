"""Session-wide choice between the remote search API and demo mode."""

import asyncio
import logging
from collections.abc import Callable

from app.clients.search_api_client import SearchAPIClient
from app.models.search import SearchProvider
from app.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

PROVIDER_KEY = "search_provider"

ProviderCallback = Callable[[SearchProvider], None]


class ProviderChannel:
    """Publish/subscribe channel for provider changes."""

    def __init__(self):
        self._subscribers: dict[int, ProviderCallback] = {}
        self._next_token = 0

    def subscribe(self, callback: ProviderCallback) -> Callable[[], None]:
        """Register ``callback``.

        Returns:
            Handle that removes the subscription; calling it twice is harmless
        """
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def publish(self, provider: SearchProvider) -> None:
        for callback in list(self._subscribers.values()):
            try:
                callback(provider)
            except Exception as e:
                logger.error(f"Provider subscriber failed: {e}", exc_info=True)

    def __len__(self) -> int:
        return len(self._subscribers)


class ProviderSelector:
    """Decides once per session which provider serves search calls.

    A provider recorded in the session store is reused without probing.
    Otherwise the remote API is probed (when configured) and the outcome is
    stored for the rest of the session. Only ``refresh()`` forces a new probe.
    """

    def __init__(
        self,
        session_store: KeyValueStore,
        api_client: SearchAPIClient | None = None,
    ):
        """Initialize selector.

        Args:
            session_store: Session-scoped key-value store
            api_client: Remote API client, None when no API is configured
        """
        self.session_store = session_store
        self.api_client = api_client
        self.channel = ProviderChannel()
        self._provider: SearchProvider | None = None
        self._lock = asyncio.Lock()

    @property
    def provider(self) -> SearchProvider | None:
        """Current provider, None until initialization completes."""
        return self._provider

    async def ensure_initialized(self) -> SearchProvider:
        """Resolve the provider, probing at most once per session.

        Concurrent callers wait for the same decision.
        """
        if self._provider is not None:
            return self._provider

        async with self._lock:
            if self._provider is not None:
                return self._provider

            provider = await self._load_stored()
            if provider is None:
                provider = await self._probe()
                await self.session_store.set(PROVIDER_KEY, provider.value)

            self._provider = provider
            logger.info(f"Search provider selected: {provider.value}")

        self.channel.publish(provider)
        return provider

    async def _load_stored(self) -> SearchProvider | None:
        stored = await self.session_store.get(PROVIDER_KEY)
        if stored is None:
            return None
        try:
            provider = SearchProvider(stored)
        except ValueError:
            logger.warning(f"Ignoring invalid stored search provider: {stored!r}")
            return None
        if provider is SearchProvider.API and self.api_client is None:
            # Recorded while an API was configured; it no longer is
            logger.warning("Ignoring stored API provider, no search API is configured")
            return None
        logger.info(f"Using search provider from session: {provider.value}")
        return provider

    async def _probe(self) -> SearchProvider:
        if self.api_client is None:
            logger.info("No search API configured, using demo mode")
            return SearchProvider.DEMO

        if await self.api_client.probe():
            return SearchProvider.API

        logger.warning(
            f"Search API at {self.api_client.base_url} unreachable, using demo mode"
        )
        return SearchProvider.DEMO

    def subscribe(self, callback: ProviderCallback) -> Callable[[], None]:
        """Subscribe to provider changes; fires immediately if already known."""
        unsubscribe = self.channel.subscribe(callback)
        if self._provider is not None:
            callback(self._provider)
        return unsubscribe

    async def refresh(self) -> None:
        """Forget the current choice so the next call probes again."""
        async with self._lock:
            self._provider = None
            await self.session_store.delete(PROVIDER_KEY)
        logger.info("Search provider reset, will re-probe on next use")
