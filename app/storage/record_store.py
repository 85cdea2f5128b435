"""Entity record stores consumed by demo-mode search."""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from app.models.search import EntityType

logger = logging.getLogger(__name__)

# Collection name of each entity kind in the stored payloads
COLLECTIONS = {
    EntityType.CASE: "cases",
    EntityType.CLIENT: "clients",
    EntityType.TASK: "tasks",
    EntityType.DOCUMENT: "documents",
    EntityType.HEARING: "hearings",
}


class RecordStoreError(Exception):
    """Raised when a record store cannot be read."""
    pass


class RecordStore(ABC):
    """Read-only access to raw entity records."""

    name = "records"

    @abstractmethod
    async def get_all(self, kind: EntityType) -> list[Any]:
        """Return every raw record of ``kind``.

        Raises:
            RecordStoreError: If the store cannot be read
        """


def _as_records(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else []


class InMemoryRecordStore(RecordStore):
    """Records held in memory, keyed by collection name."""

    def __init__(self, records: Mapping[str, Iterable[Any]] | None = None, name: str = "memory"):
        self.name = name
        self._records: dict[str, list[Any]] = {
            key: list(value) for key, value in (records or {}).items()
        }

    def put(self, kind: EntityType, records: Iterable[Any]) -> None:
        self._records[COLLECTIONS[kind]] = list(records)

    async def get_all(self, kind: EntityType) -> list[Any]:
        return _as_records(self._records.get(COLLECTIONS[kind]))


class JsonFileRecordStore(RecordStore):
    """Records read from a JSON export ``{"cases": [...], "clients": [...]}``.

    A missing file is an empty store. The file is re-read on every call so
    searches always see the live data.
    """

    def __init__(self, path: Path, name: str | None = None):
        self.path = Path(path)
        self.name = name or self.path.stem

    async def get_all(self, kind: EntityType) -> list[Any]:
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise RecordStoreError(f"Cannot read record store {self.path}: {e}") from e
        if not isinstance(payload, dict):
            raise RecordStoreError(f"Record store {self.path} must hold a JSON object")
        return _as_records(payload.get(COLLECTIONS[kind]))


def _record_key(record: Any) -> str | None:
    if not isinstance(record, Mapping):
        return None
    value = record.get("id")
    if isinstance(value, (str, int)) and not isinstance(value, bool) and str(value):
        return str(value)
    return None


def merge_records(preferred: list[Any], fallback: list[Any]) -> list[Any]:
    """Merge two record lists by id, keeping the preferred copy.

    Preferred records come first in their original order, followed by
    fallback records whose id is unseen. Fallback records without an id
    cannot collide and are kept.
    """
    merged = list(preferred)
    seen = {key for key in map(_record_key, preferred) if key is not None}
    for record in fallback:
        key = _record_key(record)
        if key is not None and key in seen:
            continue
        if key is not None:
            seen.add(key)
        merged.append(record)
    return merged
