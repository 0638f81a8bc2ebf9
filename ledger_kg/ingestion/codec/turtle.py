"""
Fact Codec - Line-Oriented Triple Parsing and Serialization

Handles the one-triple-per-line subset of Turtle/N-Triples used for fact
batches:

    <s> <p> <o> .                  URI reference
    <s> <p> "value"^^<datatype> .  Typed literal
    <s> <p> "value" .              Plain literal

Shapes are tried in that order. Comments, prefix declarations and blank
lines yield None quietly; any other unrecognized line is logged and skipped
(or raises MalformedFactError in strict mode). A single malformed line never
blocks an ingestion.

Escaping (literal content):
    backslash -> \\\\, quote -> \\", newline -> \\n, CR -> \\r, tab -> \\t
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from ledger_kg.errors import MalformedFactError
from ledger_kg.namespaces import (
    PREFIXES,
    XSD_BOOLEAN,
    XSD_DATE,
    XSD_DATETIME,
    XSD_DECIMAL,
    XSD_INTEGER,
    XSD_STRING,
)
from ledger_kg.types import Literal, Triple, UriRef
from ledger_kg.utils.text import escape_literal, unescape_literal

logger = logging.getLogger(__name__)

_URI_TRIPLE = re.compile(r"^<([^>]+)>\s+<([^>]+)>\s+<([^>]+)>\s*\.?\s*$")
_TYPED_LITERAL_TRIPLE = re.compile(
    r'^<([^>]+)>\s+<([^>]+)>\s+"((?:[^"\\]|\\.)*)"\^\^<([^>]+)>\s*\.?\s*$'
)
_PLAIN_LITERAL_TRIPLE = re.compile(
    r'^<([^>]+)>\s+<([^>]+)>\s+"((?:[^"\\]|\\.)*)"\s*\.?\s*$'
)

_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")
_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INTEGER = re.compile(r"^-?\d+$")
_DECIMAL = re.compile(r"^-?\d+\.\d+$")

_DIRECTIVES = ("@prefix", "@base", "PREFIX ", "BASE ")


def _is_ignorable(line: str) -> bool:
    return line == "" or line.startswith("#") or line.startswith(_DIRECTIVES)


def parse_triple(line: str | None, *, strict: bool = False) -> Triple | None:
    """
    Parse one fact line.

    Args:
        line: A single triple line
        strict: Raise MalformedFactError instead of logging and returning None

    Returns:
        Triple, or None for directives, comments, blank and malformed lines
    """
    if not line or not isinstance(line, str):
        return None

    text = line.strip()
    if _is_ignorable(text):
        return None

    if match := _URI_TRIPLE.match(text):
        subject, predicate, obj = match.groups()
        return Triple(subject=subject, predicate=predicate, object=UriRef(value=obj))

    if match := _TYPED_LITERAL_TRIPLE.match(text):
        subject, predicate, raw, datatype = match.groups()
        return Triple(
            subject=subject,
            predicate=predicate,
            object=Literal(value=unescape_literal(raw), datatype=datatype),
        )

    if match := _PLAIN_LITERAL_TRIPLE.match(text):
        subject, predicate, raw = match.groups()
        return Triple(
            subject=subject,
            predicate=predicate,
            object=Literal(value=unescape_literal(raw)),
        )

    if strict:
        raise MalformedFactError(text)
    logger.warning(f"Skipping unparseable triple line: {text}")
    return None


def parse_lines(lines: Iterable[str]) -> list[Triple]:
    """Parse many lines, dropping anything parse_triple rejects."""
    triples = []
    for line in lines:
        triple = parse_triple(line)
        if triple is not None:
            triples.append(triple)
    return triples


def coerce_triples(items: Iterable[Triple | str]) -> list[Triple]:
    """Accept Triple objects or raw fact lines; lines go through parse_triple."""
    triples = []
    for item in items:
        if isinstance(item, Triple):
            triples.append(item)
        else:
            parsed = parse_triple(item)
            if parsed is not None:
                triples.append(parsed)
    return triples


# -----------------------------------------------------------------------------
# Serialization
# -----------------------------------------------------------------------------


def serialize_literal(value: Any) -> str:
    """Escape a value for the inside of a double-quoted literal."""
    return escape_literal(value)


def serialize_object(term: UriRef | Literal) -> str:
    return term.n3()


def serialize_triple(triple: Triple) -> str:
    """One line, terminated by " ."."""
    return triple.n3()


def prefix_header() -> str:
    """Shared @prefix header prepended to every serialized batch."""
    lines = [f"@prefix {prefix}: <{iri}> ." for prefix, iri in PREFIXES.items()]
    return "\n".join(lines) + "\n"


def serialize_batch(triples: Iterable[Triple]) -> str:
    """Prefix header, a blank line, then one triple per line."""
    return prefix_header() + "\n" + "\n".join(t.n3() for t in triples)


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------


def detect_xsd_type(value: Any) -> str | None:
    """
    Infer an XSD datatype from a raw cell value.

    Returns None for empty values (no triple should be produced).
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return XSD_BOOLEAN
    text = str(value).strip()
    if text == "":
        return None
    if text in ("true", "false"):
        return XSD_BOOLEAN
    if _DATETIME.match(text):
        return XSD_DATETIME
    if _DATE.match(text):
        return XSD_DATE
    if _INTEGER.match(text):
        return XSD_INTEGER
    if _DECIMAL.match(text):
        return XSD_DECIMAL
    return XSD_STRING


def literal_triple(subject: str, predicate: str, value: Any) -> Triple | None:
    """Typed literal triple with an inferred datatype; None for empty values."""
    datatype = detect_xsd_type(value)
    if datatype is None:
        return None
    text = str(value).lower() if isinstance(value, bool) else str(value)
    return Triple(
        subject=subject,
        predicate=predicate,
        object=Literal(value=text, datatype=datatype),
    )


def uri_triple(subject: str, predicate: str, obj: str) -> Triple:
    return Triple(subject=subject, predicate=predicate, object=UriRef(value=obj))


def triple_from_binding(
    subject: Mapping[str, Any],
    predicate: Mapping[str, Any],
    obj: Mapping[str, Any],
) -> Triple:
    """
    Build a Triple from SPARQL JSON result bindings.

    Each binding is {"value": ..., "type": "uri"|"literal"|..., "datatype"?: ...}.
    Anything that is not a URI is read as a literal.
    """
    if obj.get("type") == "uri":
        term: UriRef | Literal = UriRef(value=obj["value"])
    else:
        term = Literal(value=obj["value"], datatype=obj.get("datatype"))
    return Triple(subject=subject["value"], predicate=predicate["value"], object=term)
