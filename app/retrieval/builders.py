"""Build scored search results for each entity kind."""

from dataclasses import dataclass, field
from functools import cached_property

from app.models.query import ParsedQuery
from app.models.records import (
    Candidate,
    CandidateMetadata,
    CaseRecord,
    ClientRecord,
    DocumentRecord,
    HearingRecord,
    TaskRecord,
)
from app.models.search import EntityType, SearchResult
from app.retrieval.matcher import matches
from app.retrieval.query_parser import normalize
from app.retrieval.scoring import calculate_demo_score, filename_boost

SUBTITLE_SEPARATOR = " • "


@dataclass
class EntityCollections:
    """Canonical records of every kind, with id lookups for joins."""

    cases: list[CaseRecord] = field(default_factory=list)
    clients: list[ClientRecord] = field(default_factory=list)
    tasks: list[TaskRecord] = field(default_factory=list)
    documents: list[DocumentRecord] = field(default_factory=list)
    hearings: list[HearingRecord] = field(default_factory=list)

    @cached_property
    def cases_by_id(self) -> dict[str, CaseRecord]:
        return {case.id: case for case in self.cases if case.id}

    @cached_property
    def clients_by_id(self) -> dict[str, ClientRecord]:
        return {client.id: client for client in self.clients if client.id}

    def case_for(self, case_id: str) -> CaseRecord | None:
        return self.cases_by_id.get(case_id) if case_id else None

    def client_for(self, client_id: str) -> ClientRecord | None:
        return self.clients_by_id.get(client_id) if client_id else None


def _join(*parts: str) -> str:
    return SUBTITLE_SEPARATOR.join(part for part in parts if part)


def _content(*parts: str) -> str:
    return " ".join(part for part in parts if part)


def _badges(*parts: str) -> list[str]:
    return [part for part in parts if part]


def _highlights(candidate: Candidate, parsed: ParsedQuery) -> list[str]:
    """Query terms that literally occur in the title or content."""
    haystack = f"{normalize(candidate.title)} {normalize(candidate.content)}"
    return [term for term in parsed.terms if term in haystack]


def case_label(case: CaseRecord | None) -> str:
    if case is None:
        return ""
    return case.case_number or case.title


def _result(
    entity_type: EntityType,
    entity_id: str,
    candidate: Candidate,
    parsed: ParsedQuery,
    subtitle: str,
    url: str,
    badges: list[str],
    boost: int = 0,
) -> SearchResult:
    score = calculate_demo_score(candidate.title, candidate.content, parsed) + boost
    return SearchResult(
        type=entity_type,
        id=entity_id,
        title=candidate.title,
        subtitle=subtitle,
        url=url,
        score=score,
        highlights=_highlights(candidate, parsed),
        badges=badges,
    )


def case_candidate(case: CaseRecord, client: ClientRecord | None) -> Candidate:
    client_name = client.name if client else ""
    return Candidate(
        title=case.title or case.case_number,
        content=_content(case.case_number, case.description, client_name, case.stage, case.status),
        metadata=CandidateMetadata(case_ref=_content(case.id, case.case_number)),
    )


def client_candidate(client: ClientRecord) -> Candidate:
    return Candidate(
        title=client.name,
        content=_content(client.gstin, client.pan, client.city, client.state, client.email),
    )


def document_candidate(document: DocumentRecord) -> Candidate:
    return Candidate(
        title=document.name,
        content=_content(document.description, " ".join(document.tags), document.content),
        metadata=CandidateMetadata(
            tags=document.tags,
            uploader=document.uploader,
            case_ref=document.case_id,
        ),
    )


def task_candidate(
    task: TaskRecord, case: CaseRecord | None, client: ClientRecord | None
) -> Candidate:
    return Candidate(
        title=task.title,
        content=_content(
            task.description,
            case_label(case),
            case.title if case else "",
            client.name if client else "",
            task.assignee,
        ),
        metadata=CandidateMetadata(case_ref=_content(task.case_id, case_label(case))),
    )


def hearing_title(hearing: HearingRecord, case: CaseRecord | None) -> str:
    label = case_label(case)
    heading = hearing.purpose or "Hearing"
    return f"{heading} - {label}" if label else heading


def hearing_candidate(
    hearing: HearingRecord, case: CaseRecord | None, client: ClientRecord | None
) -> Candidate:
    return Candidate(
        title=hearing_title(hearing, case),
        content=_content(
            hearing.court,
            hearing.judge,
            hearing.notes,
            hearing.date,
            case.title if case else "",
            client.name if client else "",
        ),
        metadata=CandidateMetadata(case_ref=_content(hearing.case_id, case_label(case))),
    )


def build_case_results(data: EntityCollections, parsed: ParsedQuery) -> list[SearchResult]:
    results = []
    for case in data.cases:
        client = data.client_for(case.client_id)
        candidate = case_candidate(case, client)
        if not matches(candidate, parsed):
            continue
        results.append(
            _result(
                EntityType.CASE,
                case.id,
                candidate,
                parsed,
                subtitle=_join(case.case_number, client.name if client else "", case.stage),
                url=f"/cases?caseId={case.id}",
                badges=_badges(case.status, case.priority),
            )
        )
    return results


def build_client_results(data: EntityCollections, parsed: ParsedQuery) -> list[SearchResult]:
    results = []
    for client in data.clients:
        candidate = client_candidate(client)
        if not matches(candidate, parsed):
            continue
        location = ", ".join(part for part in (client.city, client.state) if part)
        results.append(
            _result(
                EntityType.CLIENT,
                client.id,
                candidate,
                parsed,
                subtitle=_join(f"GSTIN: {client.gstin}" if client.gstin else "", location),
                url=f"/clients?clientId={client.id}",
                badges=_badges(client.status),
            )
        )
    return results


def build_task_results(data: EntityCollections, parsed: ParsedQuery) -> list[SearchResult]:
    results = []
    for task in data.tasks:
        case = data.case_for(task.case_id)
        client = data.client_for(case.client_id) if case else None
        candidate = task_candidate(task, case, client)
        if not matches(candidate, parsed):
            continue
        results.append(
            _result(
                EntityType.TASK,
                task.id,
                candidate,
                parsed,
                subtitle=_join(
                    case_label(case),
                    client.name if client else "",
                    f"Due {task.due_date}" if task.due_date else "",
                ),
                url=f"/tasks/{task.id}",
                badges=_badges(task.status, task.priority),
            )
        )
    return results


def build_document_results(data: EntityCollections, parsed: ParsedQuery) -> list[SearchResult]:
    results = []
    for document in data.documents:
        candidate = document_candidate(document)
        if not matches(candidate, parsed):
            continue
        results.append(
            _result(
                EntityType.DOCUMENT,
                document.id,
                candidate,
                parsed,
                subtitle=_join(
                    document.mime,
                    f"Uploaded by {document.uploader}" if document.uploader else "",
                ),
                url=f"/documents?docId={document.id}",
                badges=_badges(*document.tags[:3]),
                boost=filename_boost(document.name, parsed),
            )
        )
    return results


def build_hearing_results(data: EntityCollections, parsed: ParsedQuery) -> list[SearchResult]:
    results = []
    for hearing in data.hearings:
        case = data.case_for(hearing.case_id)
        client = data.client_for(case.client_id) if case else None
        candidate = hearing_candidate(hearing, case, client)
        if not matches(candidate, parsed):
            continue
        results.append(
            _result(
                EntityType.HEARING,
                hearing.id,
                candidate,
                parsed,
                subtitle=_join(
                    " ".join(part for part in (hearing.date, hearing.time) if part),
                    hearing.court,
                    client.name if client else "",
                ),
                url=f"/hearings?hearingId={hearing.id}",
                badges=_badges(hearing.status),
            )
        )
    return results


RESULT_BUILDERS = {
    EntityType.CASE: build_case_results,
    EntityType.CLIENT: build_client_results,
    EntityType.TASK: build_task_results,
    EntityType.DOCUMENT: build_document_results,
    EntityType.HEARING: build_hearing_results,
}
