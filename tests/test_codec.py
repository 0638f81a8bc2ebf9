"""Tests for fact line parsing and Turtle serialization."""

import logging

import pytest

from ledger_kg.errors import MalformedFactError
from ledger_kg.ingestion.codec import (
    coerce_triples,
    detect_xsd_type,
    literal_triple,
    parse_lines,
    parse_triple,
    prefix_header,
    serialize_batch,
    serialize_triple,
    triple_from_binding,
    uri_triple,
)
from ledger_kg.namespaces import XSD_BOOLEAN, XSD_DATE, XSD_DATETIME, XSD_DECIMAL, XSD_INTEGER, XSD_STRING
from ledger_kg.types import Literal, Triple, UriRef

S = "http://ex.org/e1"
P = "http://ex.org/name"


class TestParseTriple:
    """Test parse_triple shapes and rejection."""

    def test_uri_object(self):
        """URI objects parse to UriRef."""
        triple = parse_triple(f"<{S}> <{P}> <http://ex.org/e2> .")
        assert triple == Triple(subject=S, predicate=P, object=UriRef(value="http://ex.org/e2"))

    def test_typed_literal(self):
        """Typed literals keep their datatype."""
        triple = parse_triple(f'<{S}> <{P}> "30"^^<{XSD_INTEGER}> .')
        assert triple.object == Literal(value="30", datatype=XSD_INTEGER)

    def test_plain_literal(self):
        """Plain literals have no datatype."""
        triple = parse_triple(f'<{S}> <{P}> "Alice" .')
        assert triple.object == Literal(value="Alice")
        assert not triple.is_uri

    def test_trailing_dot_optional(self):
        """The terminating dot may be omitted."""
        assert parse_triple(f'<{S}> <{P}> "Alice"') is not None

    def test_escaped_content_unescaped(self):
        """Escape sequences in literals are decoded."""
        triple = parse_triple(f'<{S}> <{P}> "say \\"hi\\"\\nbye" .')
        assert triple.object_value == 'say "hi"\nbye'

    def test_directives_and_comments_ignored(self):
        """Prefixes, comments and blank lines yield None quietly."""
        assert parse_triple("@prefix pf: <http://purplefabric.ai/ontology#> .") is None
        assert parse_triple("# comment") is None
        assert parse_triple("   ") is None
        assert parse_triple(None) is None

    def test_malformed_logged_and_skipped(self, caplog):
        """Unparseable lines are logged and return None."""
        with caplog.at_level(logging.WARNING):
            assert parse_triple("not a triple") is None
        assert "Skipping unparseable triple line" in caplog.text

    def test_strict_raises(self):
        """Strict mode raises MalformedFactError."""
        with pytest.raises(MalformedFactError) as exc:
            parse_triple("not a triple", strict=True)
        assert exc.value.line == "not a triple"

    def test_parse_lines_skips_bad_lines(self):
        """One malformed line does not block the rest."""
        triples = parse_lines([
            f'<{S}> <{P}> "Alice" .',
            "garbage",
            f"<{S}> <http://ex.org/knows> <http://ex.org/e2> .",
        ])
        assert len(triples) == 2


class TestSerialization:
    """Test serialization and round trips."""

    def test_serialize_triple_escapes(self):
        """Literal content is escaped on output."""
        triple = Triple(subject=S, predicate=P, object=Literal(value='a "b"\tc\\'))
        assert serialize_triple(triple) == f'<{S}> <{P}> "a \\"b\\"\\tc\\\\" .'

    def test_round_trip(self):
        """parse(serialize(t)) == t for escapable content."""
        originals = [
            Triple(subject=S, predicate=P, object=Literal(value='line1\nline2 "q" \\ \r\t')),
            Triple(subject=S, predicate=P, object=Literal(value="42", datatype=XSD_INTEGER)),
            Triple(subject=S, predicate=P, object=UriRef(value="http://ex.org/e2")),
        ]
        for triple in originals:
            assert parse_triple(serialize_triple(triple)) == triple

    def test_prefix_header(self):
        """The header declares rdf, rdfs, xsd and pf."""
        header = prefix_header()
        for prefix in ("rdf", "rdfs", "xsd", "pf"):
            assert f"@prefix {prefix}: <" in header

    def test_serialize_batch(self):
        """Batches are header, blank line, one triple per line."""
        triples = [uri_triple(S, P, "http://ex.org/a"), uri_triple(S, P, "http://ex.org/b")]
        body = serialize_batch(triples)

        assert body.startswith(prefix_header() + "\n")
        assert body.splitlines()[-2:] == [t.n3() for t in triples]


class TestBuilders:
    """Test datatype detection and triple builders."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-01-15T10:00:00Z", XSD_DATETIME),
            ("2024-01-15", XSD_DATE),
            ("-12", XSD_INTEGER),
            ("3.14", XSD_DECIMAL),
            ("true", XSD_BOOLEAN),
            (True, XSD_BOOLEAN),
            ("hello", XSD_STRING),
        ],
    )
    def test_detect_xsd_type(self, value, expected):
        """Raw values map to XSD datatypes."""
        assert detect_xsd_type(value) == expected

    def test_empty_values_have_no_type(self):
        """Empty values produce no datatype and no triple."""
        assert detect_xsd_type(None) is None
        assert detect_xsd_type("  ") is None
        assert literal_triple(S, P, "") is None

    def test_literal_triple_bool(self):
        """Booleans serialize lowercase."""
        triple = literal_triple(S, P, False)
        assert triple.object == Literal(value="false", datatype=XSD_BOOLEAN)

    def test_triple_from_binding(self):
        """SPARQL JSON bindings become structured triples."""
        uri = triple_from_binding({"value": S}, {"value": P}, {"type": "uri", "value": "http://ex.org/x"})
        lit = triple_from_binding(
            {"value": S}, {"value": P}, {"type": "literal", "value": "5", "datatype": XSD_INTEGER}
        )
        assert uri.object == UriRef(value="http://ex.org/x")
        assert lit.object == Literal(value="5", datatype=XSD_INTEGER)

    def test_coerce_mixed_input(self):
        """Triple objects and lines may be mixed."""
        triple = uri_triple(S, P, "http://ex.org/x")
        result = coerce_triples([triple, f'<{S}> <{P}> "Alice" .', "bad line"])
        assert result == [triple, Triple(subject=S, predicate=P, object=Literal(value="Alice"))]
