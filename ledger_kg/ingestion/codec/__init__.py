"""
Fact Codec

Parses and serializes the line-oriented fact representation used for
store batches and fact files.

Modules:
    turtle: parse_triple / serialize_triple, escaping, XSD type detection,
        batch prefix header, SPARQL binding conversion
"""

from ledger_kg.ingestion.codec.turtle import (
    coerce_triples,
    detect_xsd_type,
    literal_triple,
    parse_lines,
    parse_triple,
    prefix_header,
    serialize_batch,
    serialize_literal,
    serialize_object,
    serialize_triple,
    triple_from_binding,
    uri_triple,
)
from ledger_kg.utils.text import escape_literal, unescape_literal

__all__ = [
    "parse_triple",
    "parse_lines",
    "coerce_triples",
    "serialize_literal",
    "serialize_object",
    "serialize_triple",
    "serialize_batch",
    "prefix_header",
    "detect_xsd_type",
    "literal_triple",
    "uri_triple",
    "triple_from_binding",
    "escape_literal",
    "unescape_literal",
]
