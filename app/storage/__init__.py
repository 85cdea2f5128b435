"""Record stores and key-value persistence."""

from app.storage.kv_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from app.storage.record_store import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStore,
    RecordStoreError,
    merge_records,
)

__all__ = [
    "InMemoryKeyValueStore",
    "InMemoryRecordStore",
    "JsonFileKeyValueStore",
    "JsonFileRecordStore",
    "KeyValueStore",
    "RecordStore",
    "RecordStoreError",
    "merge_records",
]
