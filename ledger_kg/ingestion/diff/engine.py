"""
Diff Engine

Compares the facts already stored for a set of entities with the facts
about to be committed, per entity and per predicate.

Classification (predicates in SKIP_PREDICATES are ignored):
    only incoming          -> INSERT  (previous "", new = incoming value)
    both, objects differ   -> UPDATE  (previous/new from each side)
    both, objects equal    -> no change
    only existing          -> DELETE  (previous = existing value, new "")

Stale-data scoping:
    An entity with existing facts is scheduled for deletion only when no
    source-document filter is given, or when its stored sourceDocument
    equals the filter. An entity last written by a different document is
    left in place.

Comparison:
    By default objects are compared in serialized form, so semantically
    equal but differently formatted literals report an UPDATE. With
    normalize=True literals compare on (trimmed value, datatype) with
    datatype IRIs lower-cased and xsd:string treated as untyped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from ledger_kg.namespaces import (
    PF_SOURCE_DOCUMENT,
    RDF_TYPE,
    SCHEMA_RESOURCE_TYPES,
    SKIP_PREDICATES,
    XSD_STRING,
)
from ledger_kg.types import Change, ChangeType, DiffResult, Literal, Triple

logger = logging.getLogger(__name__)

TriplesByEntity = Mapping[str, Sequence[Triple]]


def group_triples_by_entity(triples: Iterable[Triple]) -> dict[str, list[Triple]]:
    """Group triples by subject, preserving first-seen subject order."""
    grouped: dict[str, list[Triple]] = {}
    for triple in triples:
        grouped.setdefault(triple.subject, []).append(triple)
    return grouped


def extract_entity_uris(triples: Iterable[Triple]) -> list[str]:
    """
    Candidate entity subjects of a triple batch.

    Subjects declared (rdf:type) as a document wrapper or an OWL class/property
    are schema-level resources and are excluded.
    """
    subjects: dict[str, None] = {}
    excluded: set[str] = set()

    for triple in triples:
        subjects.setdefault(triple.subject, None)
        if (
            triple.predicate == RDF_TYPE
            and triple.is_uri
            and triple.object_value in SCHEMA_RESOURCE_TYPES
        ):
            excluded.add(triple.subject)

    return [uri for uri in subjects if uri not in excluded]


def _comparable(triple: Triple, normalize: bool) -> object:
    if not normalize:
        return triple.n3_object
    term = triple.object
    if isinstance(term, Literal):
        datatype = (term.datatype or "").lower()
        if datatype == XSD_STRING.lower():
            datatype = ""
        return ("literal", term.value.strip(), datatype)
    return ("uri", term.value)


def _by_predicate(triples: Sequence[Triple]) -> dict[str, Triple]:
    # Last fact wins when a predicate repeats
    mapped: dict[str, Triple] = {}
    for triple in triples:
        if triple.predicate not in SKIP_PREDICATES:
            mapped[triple.predicate] = triple
    return mapped


def _stored_source_document(triples: Sequence[Triple]) -> str | None:
    for triple in triples:
        if triple.predicate == PF_SOURCE_DOCUMENT:
            return triple.object_value
    return None


def compute_diff(
    existing_by_entity: TriplesByEntity | None,
    incoming_by_entity: TriplesByEntity | None,
    source_document_filter: str | None = None,
    *,
    normalize: bool = False,
) -> DiffResult:
    """
    Compute per-entity/per-predicate changes.

    Args:
        existing_by_entity: Stored facts grouped by entity
        incoming_by_entity: Incoming facts grouped by entity
        source_document_filter: Only schedule deletion for entities whose
            stored sourceDocument matches this URI
        normalize: Compare normalized literals instead of serialized forms

    Returns:
        DiffResult with ordered changes and entity_uris_to_delete
    """
    existing_by_entity = existing_by_entity or {}
    incoming_by_entity = incoming_by_entity or {}

    changes: list[Change] = []
    entity_uris_to_delete: list[str] = []

    candidates = list(dict.fromkeys([*existing_by_entity, *incoming_by_entity]))

    for entity_uri in candidates:
        old_triples = existing_by_entity.get(entity_uri) or []
        new_triples = incoming_by_entity.get(entity_uri) or []

        if old_triples:
            stored_source = _stored_source_document(old_triples)
            if not source_document_filter or stored_source == source_document_filter:
                entity_uris_to_delete.append(entity_uri)

        old_by_predicate = _by_predicate(old_triples)
        new_by_predicate = _by_predicate(new_triples)

        for predicate, new_triple in new_by_predicate.items():
            old_triple = old_by_predicate.get(predicate)
            if old_triple is None:
                changes.append(Change(
                    entity_uri=entity_uri,
                    property=predicate,
                    previous_value="",
                    new_value=new_triple.object_value,
                    change_type=ChangeType.INSERT,
                ))
            elif _comparable(old_triple, normalize) != _comparable(new_triple, normalize):
                changes.append(Change(
                    entity_uri=entity_uri,
                    property=predicate,
                    previous_value=old_triple.object_value,
                    new_value=new_triple.object_value,
                    change_type=ChangeType.UPDATE,
                ))

        for predicate, old_triple in old_by_predicate.items():
            if predicate not in new_by_predicate:
                changes.append(Change(
                    entity_uri=entity_uri,
                    property=predicate,
                    previous_value=old_triple.object_value,
                    new_value="",
                    change_type=ChangeType.DELETE,
                ))

    logger.debug(
        f"Diff over {len(candidates)} entities: {len(changes)} changes, "
        f"{len(entity_uris_to_delete)} entities to delete"
    )
    return DiffResult(changes=changes, entity_uris_to_delete=entity_uris_to_delete)
