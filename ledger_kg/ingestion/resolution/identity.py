"""
Identity Resolution - Deterministic Entity Identifiers

Maps (label, type, scope, identity-key values) to the same identifier every
time, in every process. No randomness, no clock, no I/O.

Identifier format:
    entity://{workspace_id}/{normalized_type}/{identity}

Identity strategy:
    1. If identity-key values are supplied and at least one is non-empty
       after normalization, the identity is those values joined with "_"
       in the identity keys' declared order.
    2. Otherwise fall back to the normalized label.

Two "John Smith" records with different emails are different entities
when email is an identity key for Person.

Example:
    >>> resolve_identity("Acme Corp", "Organization", "ws-1", {"taxId": "123"})
    'entity://ws-1/organization/123'
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Mapping, Sequence
from typing import Any

from ledger_kg.types import Scope
from ledger_kg.utils.text import slugify, strip_diacritics, to_uri_safe

ENTITY_URI_SCHEME = "entity://"
GLOBAL_SCOPE = "global"

IdentityKeyValues = Mapping[str, Any] | Sequence[Any]

_ID_SUFFIX = re.compile(r"_id$", re.IGNORECASE)
_CAMEL_ID_SUFFIX = re.compile(r"[a-z]Id$")
_KEY_SUFFIX = re.compile(r"_(pk|key|code|ref|number|num)$", re.IGNORECASE)
_SHEET_COLUMN = "__sheet"


# -----------------------------------------------------------------------------
# Normalization
# -----------------------------------------------------------------------------


def normalize_label(label: Any) -> str:
    """
    Canonical slug used for every identity comparison.

    Lowercase, strip diacritics, collapse non-alphanumeric runs to "_",
    trim separators. Empty results map to "unknown".
    """
    if label is None:
        return "unknown"
    return slugify(str(label)) or "unknown"


def normalize_type(entity_type: Any) -> str:
    """Normalize an entity type for the identifier path ("entity" if empty)."""
    if not entity_type:
        return "entity"
    return slugify(str(entity_type), fold_diacritics=False) or "entity"


def normalize_for_matching(label: Any) -> str:
    """
    Aggressive normalization for fuzzy label matching.

    Removes all non-alphanumerics and one trailing plural/verb suffix.
    Not used for identifiers.
    """
    if not label:
        return ""
    text = strip_diacritics(str(label).strip().lower())
    text = re.sub(r"[^a-z0-9]", "", text)
    for suffix in ("s", "ing", "ed"):
        text = re.sub(f"{suffix}$", "", text)
    return text


def _scope_id(scope: Scope | str | None) -> str:
    if isinstance(scope, Scope):
        return scope.workspace_id
    return scope or GLOBAL_SCOPE


def _ordered_values(
    identity_key_values: IdentityKeyValues,
    identity_keys: Sequence[str] | None,
) -> list[Any]:
    if isinstance(identity_key_values, Mapping):
        keys = list(identity_keys) if identity_keys else sorted(identity_key_values)
        return [identity_key_values.get(key) for key in keys]
    return list(identity_key_values)


# -----------------------------------------------------------------------------
# Identity
# -----------------------------------------------------------------------------


def identity_hash(
    label: Any,
    identity_key_values: IdentityKeyValues | None = None,
    identity_keys: Sequence[str] | None = None,
) -> str:
    """
    Identity component of the entity identifier.

    Args:
        label: Entity label (fallback identity)
        identity_key_values: Mapping of identity key -> value, or values in
            declared order
        identity_keys: Declared key order for mapping input; sorted keys
            are used when absent

    Returns:
        Normalized identity-key values joined with "_", or the normalized label
        when no identity-key value survives normalization
    """
    if identity_key_values:
        normalized = [
            slugify(str(value))
            for value in _ordered_values(identity_key_values, identity_keys)
            if value is not None and str(value) != ""
        ]
        normalized = [value for value in normalized if value]
        if normalized:
            return "_".join(normalized)
    return normalize_label(label)


def resolve_identity(
    label: Any,
    entity_type: Any,
    scope: Scope | str | None = None,
    identity_key_values: IdentityKeyValues | None = None,
    identity_keys: Sequence[str] | None = None,
) -> str:
    """
    Resolve an entity to its deterministic identifier.

    Args:
        label: Entity label/name
        entity_type: Entity type (Person, Organization, ...)
        scope: Scope (workspace id is used) or workspace id string;
            None means "global"
        identity_key_values: Optional identity-key values
        identity_keys: Optional declared identity-key order

    Returns:
        entity://{workspace}/{type}/{identity}
    """
    identity = identity_hash(label, identity_key_values, identity_keys)
    return f"{ENTITY_URI_SCHEME}{_scope_id(scope)}/{normalize_type(entity_type)}/{identity}"


def composite_identity(
    label: Any,
    entity_type: Any,
    scope: Scope | str | None = None,
    identity_key_values: IdentityKeyValues | None = None,
    identity_keys: Sequence[str] | None = None,
) -> str:
    """Composite key "{workspace}:{type}:{identity}" for MERGE-style upserts."""
    identity = identity_hash(label, identity_key_values, identity_keys)
    return f"{_scope_id(scope)}:{normalize_type(entity_type)}:{identity}"


def concept_id(
    label: Any,
    entity_type: Any,
    scope: Scope | str | None = None,
    identity_key_values: IdentityKeyValues | None = None,
    identity_keys: Sequence[str] | None = None,
) -> str:
    """Stable 16-hex-character digest of the composite identity."""
    composite = composite_identity(label, entity_type, scope, identity_key_values, identity_keys)
    return hashlib.sha256(composite.encode("utf-8")).hexdigest()[:16]


def parse_entity_uri(uri: str) -> tuple[str, str, str] | None:
    """
    Split an entity identifier into (workspace_id, type, identity).

    Returns None for anything that is not an entity:// identifier with all
    three components. Identities containing "/" are kept intact.
    """
    if not uri or not uri.startswith(ENTITY_URI_SCHEME):
        return None
    parts = uri[len(ENTITY_URI_SCHEME):].split("/")
    if len(parts) < 3:
        return None
    return parts[0], parts[1], "/".join(parts[2:])


def is_same_entity(
    first: Mapping[str, Any],
    second: Mapping[str, Any],
    identity_keys: Sequence[str] | None = None,
) -> bool:
    """
    Decide whether two entity records describe the same entity.

    Records are mappings with "label" and optional "properties". Any shared
    identity key with equal normalized values is a match; otherwise the
    labels are compared with normalize_for_matching.
    """
    first_props = first.get("properties") or {}
    second_props = second.get("properties") or {}
    for key in identity_keys or ():
        a, b = first_props.get(key), second_props.get(key)
        if a and b and normalize_label(a) == normalize_label(b):
            return True
    return normalize_for_matching(first.get("label")) == normalize_for_matching(
        second.get("label")
    )


def identity_keys_for_type(
    entity_types: Sequence[Any] | None,
    type_name: str | None,
) -> list[str]:
    """
    Look up identity keys for an entity type in ontology type definitions.

    A definition may declare ``identity_keys`` directly, or flag individual
    properties/attributes with ``is_identity``. Matching is case-insensitive
    on name/label/type.
    """
    if not entity_types or not type_name:
        return []

    wanted = type_name.lower()
    for definition in entity_types:
        if isinstance(definition, str):
            continue
        name = (
            definition.get("name")
            or definition.get("label")
            or definition.get("type")
            or definition.get("userLabel")
        )
        if not name or str(name).lower() != wanted:
            continue

        keys = definition.get("identity_keys")
        if isinstance(keys, list):
            return list(keys)

        attributes = definition.get("properties") or definition.get("attributes") or []
        return [
            attr.get("name") or attr.get("label")
            for attr in attributes
            if attr.get("is_identity") is True
        ]
    return []


# -----------------------------------------------------------------------------
# Tabular natural keys
# -----------------------------------------------------------------------------


def detect_primary_key_column(
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]],
) -> str | None:
    """
    Pick the column whose values identify a row entity.

    Priority:
        1. A column named exactly "id" (any case)
        2. A column ending in _id / xId / _pk / _key / _code / _ref / _number / _num
        3. The first column whose non-empty values are all distinct

    Returns None when no column qualifies.
    """
    for header in headers:
        if header.lower() == "id":
            return header

    for header in headers:
        if _ID_SUFFIX.search(header) or _CAMEL_ID_SUFFIX.search(header) or _KEY_SUFFIX.search(header):
            return header

    for header in headers:
        if header == _SHEET_COLUMN:
            continue
        values = [str(row.get(header)) for row in rows if row.get(header) not in (None, "")]
        if values and len(values) == len(set(values)):
            return header

    return None


def build_entity_uri(data_graph_iri: str, class_name: str, key_value: Any) -> str:
    """Natural-key URI: the same key in the same class maps to the same URI across files."""
    return f"{data_graph_iri}/entity/{to_uri_safe(class_name)}/{to_uri_safe(key_value)}"


# -----------------------------------------------------------------------------
# Per-document context
# -----------------------------------------------------------------------------


class IdentityContext:
    """
    Per-document identity registry.

    Caches label/type -> identifier resolutions for one document so that
    repeated mentions reuse the identifier without any process-wide state.
    Create one per document and pass it through the pipeline.

    Usage:
        ctx = IdentityContext(scope, identity_keys={"Person": ["email"]})
        uri = ctx.resolve("Jane Doe", "Person", {"email": "jane@example.com"})
    """

    def __init__(
        self,
        scope: Scope | str | None = None,
        identity_keys: Mapping[str, Sequence[str]] | None = None,
    ):
        self.scope = scope
        self.identity_keys = {k.lower(): list(v) for k, v in (identity_keys or {}).items()}
        self._resolved: dict[tuple[str, str], str] = {}

    def resolve(
        self,
        label: Any,
        entity_type: Any,
        properties: Mapping[str, Any] | None = None,
    ) -> str:
        """Resolve (and remember) the identifier for one mention."""
        keys = self.identity_keys.get(str(entity_type or "").lower())
        values: Mapping[str, Any] | None = None
        if keys and properties:
            values = {key: properties.get(key) for key in keys}

        uri = resolve_identity(label, entity_type, self.scope, values, keys)
        self._resolved.setdefault((normalize_type(entity_type), normalize_label(label)), uri)
        return uri

    def lookup(self, label: Any, entity_type: Any) -> str | None:
        """Identifier previously resolved for this label/type in this document."""
        return self._resolved.get((normalize_type(entity_type), normalize_label(label)))

    def __len__(self) -> int:
        return len(self._resolved)
