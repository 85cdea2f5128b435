"""Service layer for business logic."""

from app.services.provider import ProviderChannel, ProviderSelector
from app.services.search_service import SearchCancelledError, SearchService

__all__ = [
    "ProviderChannel",
    "ProviderSelector",
    "SearchCancelledError",
    "SearchService",
]
