"""Tests for the diff engine."""

from ledger_kg.ingestion.codec import uri_triple
from ledger_kg.ingestion.diff import compute_diff, extract_entity_uris, group_triples_by_entity
from ledger_kg.namespaces import (
    OWL,
    PF_DOCUMENT,
    PF_SOURCE_DOCUMENT,
    RDF_TYPE,
    RDFS_LABEL,
    XSD_STRING,
)
from ledger_kg.types import ChangeType, Literal, Triple

E1 = "entity://ws/person/e1"
E2 = "entity://ws/person/e2"
NAME = "http://ex.org/name"
AGE = "http://ex.org/age"
DOC_A = "urn:doc:a"
DOC_B = "urn:doc:b"


def lit(subject, predicate, value, datatype=None):
    return Triple(subject=subject, predicate=predicate, object=Literal(value=value, datatype=datatype))


class TestGrouping:
    """Test grouping and candidate extraction."""

    def test_group_by_subject_in_order(self):
        """Triples group by subject in first-seen order."""
        triples = [lit(E2, NAME, "Bob"), lit(E1, NAME, "Alice"), lit(E2, AGE, "40")]
        grouped = group_triples_by_entity(triples)

        assert list(grouped) == [E2, E1]
        assert len(grouped[E2]) == 2

    def test_schema_subjects_excluded(self):
        """Document wrappers and OWL declarations are not candidate entities."""
        triples = [
            uri_triple("urn:doc:a", RDF_TYPE, PF_DOCUMENT),
            uri_triple("http://ex.org/Person", RDF_TYPE, f"{OWL}Class"),
            uri_triple("http://ex.org/name", RDF_TYPE, f"{OWL}DatatypeProperty"),
            uri_triple(E1, RDF_TYPE, "http://ex.org/Person"),
            lit(E1, NAME, "Alice"),
        ]
        assert extract_entity_uris(triples) == [E1]


class TestComputeDiff:
    """Test change classification."""

    def test_identical_input_no_changes(self):
        """Diffing a set against itself yields no changes."""
        facts = {E1: [lit(E1, NAME, "Alice"), lit(E1, AGE, "30")]}
        result = compute_diff(facts, facts)

        assert result.changes == []
        assert result.entity_uris_to_delete == [E1]

    def test_predicate_added(self):
        """A new predicate is one INSERT."""
        existing = {E1: [lit(E1, NAME, "Alice")]}
        incoming = {E1: [lit(E1, NAME, "Alice"), lit(E1, AGE, "30")]}
        result = compute_diff(existing, incoming)

        assert len(result.changes) == 1
        change = result.changes[0]
        assert change.entity_uri == E1
        assert change.property == AGE
        assert change.previous_value == ""
        assert change.new_value == "30"
        assert change.change_type == ChangeType.INSERT

    def test_predicate_changed(self):
        """A changed object is one UPDATE."""
        result = compute_diff({E1: [lit(E1, AGE, "30")]}, {E1: [lit(E1, AGE, "31")]})

        assert len(result.changes) == 1
        change = result.changes[0]
        assert change.change_type == ChangeType.UPDATE
        assert (change.previous_value, change.new_value) == ("30", "31")

    def test_predicate_removed(self):
        """A predicate missing from incoming is one DELETE."""
        result = compute_diff({E1: [lit(E1, AGE, "30")]}, {E1: []})

        assert len(result.changes) == 1
        change = result.changes[0]
        assert change.change_type == ChangeType.DELETE
        assert (change.previous_value, change.new_value) == ("30", "")

    def test_new_entity_all_inserts(self):
        """An entity without stored facts only produces INSERTs and is not deleted."""
        result = compute_diff({}, {E2: [lit(E2, NAME, "Bob")]})

        assert [c.change_type for c in result.changes] == [ChangeType.INSERT]
        assert result.entity_uris_to_delete == []

    def test_skip_predicates_ignored(self):
        """System-maintained predicates never produce changes."""
        existing = {E1: [uri_triple(E1, PF_SOURCE_DOCUMENT, DOC_A), lit(E1, RDFS_LABEL, "old")]}
        incoming = {E1: [uri_triple(E1, PF_SOURCE_DOCUMENT, DOC_B), lit(E1, RDFS_LABEL, "new")]}

        assert compute_diff(existing, incoming).changes == []

    def test_last_value_wins_for_repeated_predicate(self):
        """A repeated predicate compares on its last value."""
        existing = {E1: [lit(E1, NAME, "Al"), lit(E1, NAME, "Alice")]}
        incoming = {E1: [lit(E1, NAME, "Alice")]}

        assert compute_diff(existing, incoming).changes == []

    def test_ordering(self):
        """Inserts/updates follow incoming order, deletes come last."""
        existing = {E1: [lit(E1, AGE, "30"), lit(E1, "http://ex.org/gone", "x")]}
        incoming = {E1: [lit(E1, NAME, "Alice"), lit(E1, AGE, "31")]}
        result = compute_diff(existing, incoming)

        assert [c.change_type for c in result.changes] == [
            ChangeType.INSERT,
            ChangeType.UPDATE,
            ChangeType.DELETE,
        ]

    def test_empty_inputs(self):
        """None or empty groupings give an empty result."""
        result = compute_diff(None, None)
        assert result.changes == []
        assert result.entity_uris_to_delete == []


class TestScopedDeletion:
    """Test source-document scoping of stale-data deletion."""

    def test_other_document_not_deleted(self):
        """Entities last written by another document are kept."""
        existing = {E1: [uri_triple(E1, PF_SOURCE_DOCUMENT, DOC_A), lit(E1, NAME, "Alice")]}
        incoming = {E1: [lit(E1, NAME, "Alice")]}

        result = compute_diff(existing, incoming, source_document_filter=DOC_B)
        assert E1 not in result.entity_uris_to_delete

    def test_same_document_deleted(self):
        """Entities from the same document are replaced."""
        existing = {E1: [uri_triple(E1, PF_SOURCE_DOCUMENT, DOC_A), lit(E1, NAME, "Alice")]}
        incoming = {E1: [lit(E1, NAME, "Alice")]}

        result = compute_diff(existing, incoming, source_document_filter=DOC_A)
        assert result.entity_uris_to_delete == [E1]

    def test_no_filter_deletes_all_existing(self):
        """Without a filter every entity with stored facts is replaced."""
        existing = {
            E1: [uri_triple(E1, PF_SOURCE_DOCUMENT, DOC_A)],
            E2: [lit(E2, NAME, "Bob")],
        }
        result = compute_diff(existing, {})
        assert result.entity_uris_to_delete == [E1, E2]


class TestNormalizedComparison:
    """Test optional literal normalization."""

    def test_whitespace_is_update_by_default(self):
        """Serialized comparison reports formatting differences."""
        result = compute_diff({E1: [lit(E1, NAME, "Alice ")]}, {E1: [lit(E1, NAME, "Alice")]})
        assert len(result.changes) == 1

    def test_normalize_ignores_whitespace_and_string_type(self):
        """Normalized comparison treats xsd:string as untyped and trims values."""
        existing = {E1: [lit(E1, NAME, "Alice ")]}
        incoming = {E1: [lit(E1, NAME, "Alice", XSD_STRING.upper())]}

        assert compute_diff(existing, incoming, normalize=True).changes == []
