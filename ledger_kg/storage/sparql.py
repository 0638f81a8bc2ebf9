"""
SPARQL Builders

Query and update text for the audit pipeline. Every statement names its
graph explicitly, so the same text works against any SPARQL 1.1 store.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from ledger_kg.namespaces import PF, XSD_DATETIME
from ledger_kg.utils.text import escape_literal

_INVALID_IRI = re.compile(r'[\s<>"{}|^`\\]')


def iri(value: str) -> str:
    """Wrap an IRI in angle brackets, rejecting characters that would break out."""
    if not value or _INVALID_IRI.search(value):
        raise ValueError(f"Invalid IRI: {value!r}")
    return f"<{value}>"


def values_clause(uris: Sequence[str]) -> str:
    return " ".join(iri(uri) for uri in uris)


def select_entity_triples(graph_iri: str, entity_uris: Sequence[str]) -> str:
    """All stored facts of a batch of entities."""
    return (
        "SELECT ?s ?p ?o WHERE {\n"
        f"  VALUES ?s {{ {values_clause(entity_uris)} }}\n"
        f"  GRAPH {iri(graph_iri)} {{ ?s ?p ?o . }}\n"
        "}"
    )


def delete_entity_triples(graph_iri: str, entity_uris: Sequence[str]) -> str:
    """Remove every fact whose subject is in the batch."""
    graph = iri(graph_iri)
    return (
        f"DELETE {{\n  GRAPH {graph} {{ ?s ?p ?o . }}\n}}\n"
        "WHERE {\n"
        f"  VALUES ?s {{ {values_clause(entity_uris)} }}\n"
        f"  GRAPH {graph} {{ ?s ?p ?o . }}\n"
        "}"
    )


_EVENT_PATTERN = """    ?event a pf:ChangeEvent .
    ?event pf:entity {entity} .
    ?event pf:property ?property .
    ?event pf:changeType ?changeType .
    ?event pf:changedAt ?changedAt .
    ?event pf:sourceDocument ?sourceDocument .
    OPTIONAL {{ ?event pf:previousValue ?previousValue }}
    OPTIONAL {{ ?event pf:newValue ?newValue }}"""


def entity_history(audit_graph_iri: str, entity_uri: str) -> str:
    """Change events for one entity, newest first."""
    pattern = _EVENT_PATTERN.format(entity=iri(entity_uri))
    return (
        f"PREFIX pf: <{PF}>\n"
        "SELECT ?event ?property ?previousValue ?newValue ?changeType ?changedAt ?sourceDocument WHERE {\n"
        f"  GRAPH {iri(audit_graph_iri)} {{\n{pattern}\n  }}\n"
        "}\n"
        "ORDER BY DESC(?changedAt)"
    )


def _audit_filters(
    change_type: str | None,
    date_from: str | None,
    date_to: str | None,
) -> str:
    filters = []
    if change_type:
        filters.append(f'FILTER(STR(?changeType) = "{escape_literal(change_type)}")')
    if date_from:
        filters.append(f'FILTER(?changedAt >= "{escape_literal(date_from)}"^^<{XSD_DATETIME}>)')
    if date_to:
        filters.append(f'FILTER(?changedAt <= "{escape_literal(date_to)}"^^<{XSD_DATETIME}>)')
    return "".join(f"\n    {f}" for f in filters)


def audit_log_count(
    audit_graph_iri: str,
    change_type: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
) -> str:
    filters = _audit_filters(change_type, date_from, date_to)
    return (
        f"PREFIX pf: <{PF}>\n"
        "SELECT (COUNT(?event) AS ?total) WHERE {\n"
        f"  GRAPH {iri(audit_graph_iri)} {{\n"
        "    ?event a pf:ChangeEvent .\n"
        "    ?event pf:changeType ?changeType .\n"
        f"    ?event pf:changedAt ?changedAt .{filters}\n"
        "  }\n"
        "}"
    )


def audit_log_page(
    audit_graph_iri: str,
    limit: int,
    offset: int,
    change_type: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
) -> str:
    pattern = _EVENT_PATTERN.format(entity="?entity")
    filters = _audit_filters(change_type, date_from, date_to)
    return (
        f"PREFIX pf: <{PF}>\n"
        "SELECT ?event ?entity ?property ?previousValue ?newValue ?changeType ?changedAt ?sourceDocument WHERE {\n"
        f"  GRAPH {iri(audit_graph_iri)} {{\n{pattern}{filters}\n  }}\n"
        "}\n"
        "ORDER BY DESC(?changedAt)\n"
        f"LIMIT {int(limit)}\n"
        f"OFFSET {int(offset)}"
    )
