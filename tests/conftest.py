"""Pytest configuration and shared fixtures."""

import pytest

from app.config import Settings
from app.models.search import EntityType
from app.services.search_service import SearchService
from app.storage.kv_store import InMemoryKeyValueStore
from app.storage.record_store import InMemoryRecordStore


class CountingRecordStore(InMemoryRecordStore):
    """In-memory store that counts reads, to observe the fan-out."""

    def __init__(self, records=None, name="counting"):
        super().__init__(records, name=name)
        self.calls: list[EntityType] = []

    async def get_all(self, kind):
        self.calls.append(kind)
        return await super().get_all(kind)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# Relational (newer) schema rows
STRUCTURED_RECORDS = {
    "clients": [
        {
            "id": "cl-1",
            "display_name": "Acme Textiles Pvt Ltd",
            "gstin": "27AAACA1234F1Z5",
            "address_json": {"city": "Mumbai", "state": "Maharashtra"},
            "status": "active",
        },
    ],
    "cases": [
        {
            "id": "case-1",
            "case_number": "CASE-100",
            "title": "Input Tax Credit Dispute",
            "client_id": "cl-1",
            "stage_code": "Adjudication",
            "status": "open",
            "priority": "high",
        },
    ],
    "documents": [
        {
            "id": "doc-1",
            "name": "show_cause_notice.pdf",
            "mime": "application/pdf",
            "case_id": "case-1",
            "uploaded_by_name": "Priya Sharma",
            "metadata_json": {"tags": ["urgent", "notice"]},
            "content": "Show cause notice issued under section 73",
        },
    ],
    "tasks": [
        {
            "id": "task-1",
            "title": "Draft reply to notice",
            "case_id": "case-1",
            "status": "pending",
            "priority": "high",
            "due_date": "2024-07-01",
        },
    ],
    "hearings": [
        {
            "id": "hr-1",
            "case_id": "case-1",
            "hearing_date": "2024-08-15",
            "location": "GST Appellate Tribunal, Mumbai",
            "notes": "Personal hearing on ITC reversal",
            "status": "scheduled",
        },
    ],
}

# Legacy flat application-state objects
FLAT_RECORDS = {
    "clients": [
        {"id": "cl-1", "name": "Stale Acme Name"},
        {"id": "cl-2", "name": "Bharat Steel Traders", "gstin": "24AABCB9999K1Z2"},
    ],
    "cases": [
        {
            "id": "case-2",
            "caseNumber": "CASE-200",
            "title": "Refund Claim Rejection",
            "clientId": "cl-2",
            "currentStage": "Appeal",
            "status": "open",
        },
    ],
    "documents": [
        {
            "id": "doc-2",
            "fileName": "refund_order.pdf",
            "caseId": "case-2",
            "uploadedBy": "Rahul Mehta",
            "tags": "refund, order",
        },
    ],
    "tasks": [],
    "hearings": [
        {"id": "hr-2", "caseId": "case-2", "date": "2024-09-10", "court": "Appellate Authority"},
    ],
}


@pytest.fixture
def test_settings(tmp_path):
    """Settings with demo latency disabled."""
    return Settings(
        demo_search_delay_min=0.0,
        demo_search_delay_max=0.0,
        demo_suggest_delay=0.0,
        data_dir=tmp_path,
        search_api_base_url=None,
    )


@pytest.fixture
def structured_store():
    return CountingRecordStore(STRUCTURED_RECORDS, name="structured")


@pytest.fixture
def flat_store():
    return CountingRecordStore(FLAT_RECORDS, name="flat")


@pytest.fixture
def local_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def session_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def search_service(structured_store, flat_store, local_store, session_store, test_settings, clock):
    """Demo-mode search service over the sample records."""
    return SearchService(
        structured_store=structured_store,
        flat_store=flat_store,
        local_store=local_store,
        session_store=session_store,
        settings=test_settings,
        clock=clock,
    )
