#!/usr/bin/env python3
"""Script to write demo records for the demo search provider.

Writes the structured store (newer relational schema) and the flat store
(legacy application-state schema) into the configured data directory. A few
ids appear in both files so the merge behaviour can be observed.
"""

import json
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import get_settings


STRUCTURED_RECORDS = {
    "clients": [
        {
            "id": "cl-1",
            "display_name": "Acme Textiles Pvt Ltd",
            "gstin": "27AAACA1234F1Z5",
            "pan": "AAACA1234F",
            "address_json": {"city": "Mumbai", "state": "Maharashtra"},
            "contact_json": {"email": "accounts@acmetextiles.in"},
            "status": "active",
        },
        {
            "id": "cl-3",
            "display_name": "Deccan Pharma Distributors",
            "gstin": "36AAFCD5678M1Z9",
            "address_json": {"city": "Hyderabad", "state": "Telangana"},
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
            "description": "ITC denied on purchases from a cancelled supplier",
        },
        {
            "id": "case-3",
            "case_number": "CASE-300",
            "title": "E-way Bill Penalty Appeal",
            "client_id": "cl-3",
            "stage_code": "First Appeal",
            "status": "open",
            "priority": "medium",
        },
    ],
    "documents": [
        {
            "id": "doc-1",
            "name": "show_cause_notice.pdf",
            "mime": "application/pdf",
            "case_id": "case-1",
            "client_id": "cl-1",
            "uploaded_by_name": "Priya Sharma",
            "metadata_json": {"tags": ["urgent", "notice"], "description": "SCN under section 73"},
            "content": "Show cause notice issued under section 73 for excess ITC claimed",
        },
        {
            "id": "doc-3",
            "name": "penalty_order.pdf",
            "mime": "application/pdf",
            "case_id": "case-3",
            "uploaded_by_name": "Arjun Rao",
            "metadata_json": {"tags": ["order", "penalty"]},
        },
    ],
    "tasks": [
        {
            "id": "task-1",
            "title": "Draft reply to notice",
            "case_id": "case-1",
            "status": "pending",
            "priority": "high",
            "assigned_to_name": "Priya Sharma",
            "due_date": "2024-07-01",
        },
        {
            "id": "task-3",
            "title": "File appeal memo",
            "case_id": "case-3",
            "status": "in_progress",
            "priority": "medium",
            "due_date": "2024-07-20",
        },
    ],
    "hearings": [
        {
            "id": "hr-1",
            "case_id": "case-1",
            "hearing_date": "2024-08-15",
            "hearing_time": "11:00",
            "location": "GST Appellate Tribunal, Mumbai",
            "purpose": "Personal Hearing",
            "notes": "Carry reconciliation of ITC ledger",
            "status": "scheduled",
        },
    ],
}

FLAT_RECORDS = {
    "clients": [
        {"id": "cl-1", "name": "Acme Textiles (old name)"},
        {"id": "cl-2", "name": "Bharat Steel Traders", "gstNumber": "24AABCB9999K1Z2",
         "address": {"city": "Surat", "state": "Gujarat"}},
    ],
    "cases": [
        {
            "id": "case-2",
            "caseNumber": "CASE-200",
            "title": "Refund Claim Rejection",
            "clientId": "cl-2",
            "currentStage": "Appeal",
            "status": "open",
            "priority": "low",
        },
    ],
    "documents": [
        {
            "id": "doc-2",
            "fileName": "refund_order.pdf",
            "fileType": "application/pdf",
            "caseId": "case-2",
            "uploadedBy": "Rahul Mehta",
            "tags": "refund, order",
        },
    ],
    "tasks": [
        {
            "id": "task-2",
            "title": "Collect export invoices",
            "caseId": "case-2",
            "status": "pending",
            "assignedTo": "Rahul Mehta",
            "dueDate": "2024-07-10",
        },
    ],
    "hearings": [
        {
            "id": "hr-2",
            "caseId": "case-2",
            "date": "2024-09-10",
            "time": "15:30",
            "court": "Appellate Authority",
            "judge": "Joint Commissioner",
        },
    ],
}


def write_json(path: Path, payload: dict):
    """Write a payload as pretty-printed JSON.

    Args:
        path: Destination file
        payload: JSON-serialisable object
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    counts = ", ".join(f"{len(records)} {name}" for name, records in payload.items())
    print(f"  ✓ {path} ({counts})")


def main():
    """Main function to seed demo data."""
    settings = get_settings()

    if "--help" in sys.argv:
        print("Usage: python seed_demo_data.py [--force]")
        print()
        print(f"Writes demo records into {settings.data_dir}")
        print("  --force  Overwrite existing record files")
        sys.exit(0)

    force = "--force" in sys.argv
    targets = [
        (settings.structured_store_path, STRUCTURED_RECORDS),
        (settings.flat_store_path, FLAT_RECORDS),
    ]

    existing = [path for path, _ in targets if path.exists()]
    if existing and not force:
        print("Error: record files already exist:")
        for path in existing:
            print(f"  {path}")
        print("Re-run with --force to overwrite them")
        sys.exit(1)

    print(f"Seeding demo records into {settings.data_dir}")
    for path, payload in targets:
        write_json(path, payload)

    print()
    print("Done. Start the API and try:")
    print("  python scripts/search_records.py --sample")


if __name__ == "__main__":
    main()
