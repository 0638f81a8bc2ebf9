"""
Triple Types

Facts are (subject, predicate, object) statements. The object is a tagged
variant: either a URI reference or a literal with an optional datatype.

Storage Models:
    - UriRef: URI reference object
    - Literal: Literal object (unescaped value + optional datatype IRI)
    - Triple: Immutable fact; equality is structural

Scope:
    - Scope: Tenant/workspace pair that addresses the data and audit graphs
"""

from __future__ import annotations

import typing as t

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ledger_kg.namespaces import DEFAULT_GRAPH_BASE_IRI
from ledger_kg.utils.text import escape_literal


class UriRef(BaseModel):
    """A URI reference object, serialized as ``<value>``."""

    model_config = ConfigDict(frozen=True)

    kind: t.Literal["uri"] = "uri"
    value: str

    def n3(self) -> str:
        return f"<{self.value}>"


class Literal(BaseModel):
    """
    A literal object.

    Attributes:
        value: Unescaped lexical form (used for audit values and comparison)
        datatype: Optional datatype IRI (e.g. xsd:string)
    """

    model_config = ConfigDict(frozen=True)

    kind: t.Literal["literal"] = "literal"
    value: str
    datatype: str | None = None

    def n3(self) -> str:
        quoted = f'"{escape_literal(self.value)}"'
        if self.datatype:
            return f"{quoted}^^<{self.datatype}>"
        return quoted


ObjectTerm = t.Annotated[t.Union[UriRef, Literal], Field(discriminator="kind")]


class Triple(BaseModel):
    """
    A single fact.

    Attributes:
        subject: Subject URI (the entity this fact belongs to)
        predicate: Predicate URI
        object: UriRef or Literal
    """

    model_config = ConfigDict(frozen=True)

    subject: str
    predicate: str
    object: ObjectTerm

    @property
    def is_uri(self) -> bool:
        return isinstance(self.object, UriRef)

    @property
    def object_value(self) -> str:
        """Unescaped object value (URI text for references)."""
        return self.object.value

    @property
    def n3_object(self) -> str:
        """Serialized object form; this is what the diff compares."""
        return self.object.n3()

    def n3(self) -> str:
        """One-line serialized form terminated by `` .``."""
        return f"<{self.subject}> <{self.predicate}> {self.n3_object} ."

    def __str__(self) -> str:
        return self.n3()


class Scope(BaseModel):
    """
    Tenant/workspace scope for a commit.

    The primary data and the audit trail live in two separate named graphs
    derived from the same scope.
    """

    model_config = ConfigDict(frozen=True)

    tenant_id: str
    workspace_id: str
    graph_base_iri: str = DEFAULT_GRAPH_BASE_IRI

    @field_validator("tenant_id", "workspace_id")
    @classmethod
    def _require_id(cls, value: str, info: t.Any) -> str:
        if not value or not value.strip() or value == "undefined":
            raise ValueError(f"{info.field_name} is required for graph IRIs")
        return value

    @property
    def _prefix(self) -> str:
        base = self.graph_base_iri.rstrip("/")
        return f"{base}/tenant/{self.tenant_id}/workspace/{self.workspace_id}"

    @property
    def data_graph_iri(self) -> str:
        return f"{self._prefix}/data"

    @property
    def audit_graph_iri(self) -> str:
        return f"{self._prefix}/audit"
