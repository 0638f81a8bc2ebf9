"""
Change-Event Generator

Turns diff output into append-only ChangeEvent facts for the audit graph.
Pure: no I/O.

Each change becomes one event resource:

    <{audit_graph}/event/{uuid}> a pf:ChangeEvent ;
        pf:entity <entity> ;
        pf:property <property> ;
        pf:previousValue "..."^^xsd:string ;   # UPDATE / DELETE only
        pf:newValue "..."^^xsd:string ;        # INSERT / UPDATE only
        pf:changeType "UPDATE"^^xsd:string ;
        pf:changedAt "2024-05-01T12:00:00.000Z"^^xsd:dateTime ;
        pf:sourceDocument <document> .

All events of one batch share a single changedAt so a commit's changes
sort together.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from uuid import UUID, uuid4

from ledger_kg.namespaces import (
    PF_CHANGE_EVENT,
    PF_CHANGE_TYPE,
    PF_CHANGED_AT,
    PF_ENTITY,
    PF_NEW_VALUE,
    PF_PREVIOUS_VALUE,
    PF_PROPERTY,
    PF_SOURCE_DOCUMENT,
    RDF_TYPE,
    XSD_DATETIME,
    XSD_STRING,
)
from ledger_kg.types import Change, ChangeType, Literal, Triple, UriRef


def format_timestamp(moment: datetime | None = None) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def event_uri(audit_graph_iri: str, event_id: UUID | str) -> str:
    return f"{audit_graph_iri}/event/{event_id}"


def generate_change_events(
    changes: Iterable[Change],
    audit_graph_iri: str,
    source_document_uri: str,
    changed_at: datetime | None = None,
    id_factory: Callable[[], UUID | str] = uuid4,
) -> list[Triple]:
    """
    Build audit triples for a batch of changes.

    Args:
        changes: Diff output, in the order events should be emitted
        audit_graph_iri: Namespace for minted event URIs
        source_document_uri: Document that triggered the changes
        changed_at: Batch timestamp (defaults to now, UTC)
        id_factory: Event id source (uuid4 unless overridden)

    Returns:
        Triples grouped per event, events in input order
    """
    timestamp = Literal(value=format_timestamp(changed_at), datatype=XSD_DATETIME)
    triples: list[Triple] = []

    for change in changes:
        uri = event_uri(audit_graph_iri, id_factory())

        triples.append(Triple(subject=uri, predicate=RDF_TYPE, object=UriRef(value=PF_CHANGE_EVENT)))
        triples.append(Triple(subject=uri, predicate=PF_ENTITY, object=UriRef(value=change.entity_uri)))
        triples.append(Triple(subject=uri, predicate=PF_PROPERTY, object=UriRef(value=change.property)))

        if change.change_type in (ChangeType.UPDATE, ChangeType.DELETE):
            triples.append(Triple(
                subject=uri,
                predicate=PF_PREVIOUS_VALUE,
                object=Literal(value=change.previous_value, datatype=XSD_STRING),
            ))
        if change.change_type in (ChangeType.INSERT, ChangeType.UPDATE):
            triples.append(Triple(
                subject=uri,
                predicate=PF_NEW_VALUE,
                object=Literal(value=change.new_value, datatype=XSD_STRING),
            ))

        triples.append(Triple(
            subject=uri,
            predicate=PF_CHANGE_TYPE,
            object=Literal(value=change.change_type.value, datatype=XSD_STRING),
        ))
        triples.append(Triple(subject=uri, predicate=PF_CHANGED_AT, object=timestamp))
        triples.append(Triple(
            subject=uri,
            predicate=PF_SOURCE_DOCUMENT,
            object=UriRef(value=source_document_uri),
        ))

    return triples
