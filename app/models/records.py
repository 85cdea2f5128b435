"""Canonical entity records and the matcher's candidate projection.

Raw records arrive in two historical shapes (legacy flat camelCase fields and
newer relational snake_case fields). ``app.retrieval.adapters`` maps both onto
the dataclasses below so nothing downstream needs to know about either schema.
"""

from dataclasses import dataclass, field


@dataclass
class ClientRecord:
    id: str
    name: str = ""
    gstin: str = ""
    pan: str = ""
    city: str = ""
    state: str = ""
    email: str = ""
    status: str = ""


@dataclass
class CaseRecord:
    id: str
    title: str = ""
    case_number: str = ""
    client_id: str = ""
    status: str = ""
    stage: str = ""
    priority: str = ""
    description: str = ""


@dataclass
class DocumentRecord:
    id: str
    name: str = ""
    description: str = ""
    content: str = ""
    tags: list[str] = field(default_factory=list)
    uploader: str = ""
    case_id: str = ""
    client_id: str = ""
    mime: str = ""
    status: str = ""


@dataclass
class TaskRecord:
    id: str
    title: str = ""
    description: str = ""
    case_id: str = ""
    status: str = ""
    priority: str = ""
    assignee: str = ""
    due_date: str = ""


@dataclass
class HearingRecord:
    id: str
    case_id: str = ""
    date: str = ""
    time: str = ""
    court: str = ""
    judge: str = ""
    purpose: str = ""
    notes: str = ""
    status: str = ""


@dataclass
class CandidateMetadata:
    """Fields targeted by the structured query operators."""

    tags: list[str] = field(default_factory=list)
    uploader: str = ""
    case_ref: str = ""


@dataclass
class Candidate:
    """Matcher-ready projection of one record."""

    title: str
    content: str = ""
    metadata: CandidateMetadata = field(default_factory=CandidateMetadata)
