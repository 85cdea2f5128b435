"""Map raw entity records onto canonical records.

Every entity exists in two historical shapes: the newer relational rows
(snake_case, e.g. ``case_number``, ``display_name``) and the legacy flat
application-state objects (camelCase, e.g. ``caseNumber``, ``name``). Each
adapter reads both and prefers the newer field when both are present.

Records are not schema-guaranteed. A missing, ``None`` or wrongly typed value
degrades to an empty string and a non-mapping record to an empty canonical
record; adapters never raise.
"""

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from app.models.records import (
    CaseRecord,
    ClientRecord,
    DocumentRecord,
    HearingRecord,
    TaskRecord,
)


def as_text(value: Any) -> str:
    """Coerce a scalar to text, anything else to ``""``."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return ""


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def first_text(record: Any, *keys: str) -> str:
    """First non-blank text value among ``keys``, newest schema first.

    Dotted keys read one level of nesting, e.g. ``"address_json.city"``.
    """
    record = _as_mapping(record)
    for key in keys:
        if "." in key:
            outer, inner = key.split(".", 1)
            value = _as_mapping(record.get(outer)).get(inner)
        else:
            value = record.get(key)
        text = as_text(value).strip()
        if text:
            return text
    return ""


def as_tags(value: Any) -> list[str]:
    """Tags given as a list or a comma-separated string."""
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [
            as_text(item) or first_text(item, "name", "label")
            for item in value
        ]
    else:
        return []
    return [item.strip() for item in items if item and item.strip()]


def record_id(record: Any) -> str:
    return first_text(record, "id")


def adapt_client(record: Any) -> ClientRecord:
    return ClientRecord(
        id=record_id(record),
        name=first_text(record, "display_name", "name", "legal_name", "legalName"),
        gstin=first_text(record, "gstin", "gstNumber"),
        pan=first_text(record, "pan", "panNumber"),
        city=first_text(record, "city", "address_json.city", "address.city"),
        state=first_text(record, "state", "address_json.state", "address.state"),
        email=first_text(record, "email", "contact_json.email", "contact.email"),
        status=first_text(record, "status"),
    )


def adapt_case(record: Any) -> CaseRecord:
    return CaseRecord(
        id=record_id(record),
        title=first_text(record, "title", "caseTitle"),
        case_number=first_text(record, "case_number", "caseNumber"),
        client_id=first_text(record, "client_id", "clientId"),
        status=first_text(record, "status"),
        stage=first_text(record, "stage_code", "currentStage", "stage"),
        priority=first_text(record, "priority"),
        description=first_text(record, "description"),
    )


def adapt_document(record: Any) -> DocumentRecord:
    mapping = _as_mapping(record)
    metadata = _as_mapping(mapping.get("metadata_json"))
    tags = as_tags(metadata.get("tags")) or as_tags(mapping.get("tags"))
    return DocumentRecord(
        id=record_id(record),
        name=first_text(record, "name", "file_name", "fileName", "title"),
        description=first_text(record, "description", "metadata_json.description"),
        content=first_text(record, "content"),
        tags=tags,
        uploader=first_text(
            record, "uploaded_by_name", "uploadedByName", "uploadedBy", "uploaded_by_id"
        ),
        case_id=first_text(record, "case_id", "caseId"),
        client_id=first_text(record, "client_id", "clientId"),
        mime=first_text(record, "mime", "file_type", "fileType", "type"),
        status=first_text(record, "status"),
    )


def adapt_task(record: Any) -> TaskRecord:
    return TaskRecord(
        id=record_id(record),
        title=first_text(record, "title"),
        description=first_text(record, "description"),
        case_id=first_text(record, "case_id", "caseId"),
        status=first_text(record, "status"),
        priority=first_text(record, "priority"),
        assignee=first_text(
            record, "assigned_to_name", "assignedToName", "assigned_to", "assignedTo"
        ),
        due_date=first_text(record, "due_date", "dueDate"),
    )


def adapt_hearing(record: Any) -> HearingRecord:
    return HearingRecord(
        id=record_id(record),
        case_id=first_text(record, "case_id", "caseId"),
        date=first_text(record, "hearing_date", "date"),
        time=first_text(record, "hearing_time", "time"),
        court=first_text(record, "location", "court_name", "courtName", "court"),
        judge=first_text(record, "judge_name", "judgeName", "judge"),
        purpose=first_text(record, "purpose", "agenda", "type"),
        notes=first_text(record, "notes"),
        status=first_text(record, "status", "outcome_code"),
    )
