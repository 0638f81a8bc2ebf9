"""Tests for deterministic identity resolution."""

from ledger_kg.ingestion.resolution import (
    IdentityContext,
    build_entity_uri,
    composite_identity,
    concept_id,
    detect_primary_key_column,
    identity_hash,
    identity_keys_for_type,
    is_same_entity,
    normalize_for_matching,
    normalize_label,
    normalize_type,
    parse_entity_uri,
    resolve_identity,
)
from ledger_kg.types import Scope


class TestNormalization:
    """Test label and type normalization."""

    def test_label_lowercased_and_collapsed(self):
        """Non-alphanumeric runs collapse to a single underscore."""
        assert normalize_label("  Acme  Corp., Inc. ") == "acme_corp_inc"

    def test_label_diacritics_folded(self):
        """Accented characters fold to ASCII."""
        assert normalize_label("Société Générale") == "societe_generale"

    def test_empty_label_is_unknown(self):
        """Empty or symbol-only labels map to 'unknown'."""
        assert normalize_label("") == "unknown"
        assert normalize_label(None) == "unknown"
        assert normalize_label("---") == "unknown"

    def test_empty_type_is_entity(self):
        """Missing type falls back to 'entity'."""
        assert normalize_type(None) == "entity"
        assert normalize_type("") == "entity"

    def test_type_normalized(self):
        """Types are lowercased slugs."""
        assert normalize_type("Legal Entity") == "legal_entity"

    def test_matching_normalization_drops_plural(self):
        """Fuzzy matching ignores separators and a trailing plural."""
        assert normalize_for_matching("Widget-Makers") == normalize_for_matching("widgetmaker")


class TestResolveIdentity:
    """Test resolve_identity."""

    def test_identity_keys_take_precedence(self):
        """Identity-key values replace the label."""
        uri = resolve_identity("Acme Corp", "Organization", "ws-1", {"taxId": "123"})
        assert uri == "entity://ws-1/organization/123"

    def test_deterministic(self):
        """Same inputs always give the same identifier."""
        first = resolve_identity("Acme Corp", "Organization", "ws-1", {"taxId": "123"})
        second = resolve_identity("Acme Corp", "Organization", "ws-1", {"taxId": "123"})
        assert first == second

    def test_label_fallback(self):
        """Without identity keys the normalized label is used."""
        assert resolve_identity("Jane Doe", "Person", "ws-1") == "entity://ws-1/person/jane_doe"

    def test_empty_key_values_fall_back_to_label(self):
        """Identity keys that are all empty fall back to the label."""
        uri = resolve_identity("Jane Doe", "Person", "ws-1", {"email": "", "phone": None})
        assert uri == "entity://ws-1/person/jane_doe"

    def test_global_scope_default(self):
        """No scope means the global namespace."""
        assert resolve_identity("Jane", "Person") == "entity://global/person/jane"

    def test_scope_object_uses_workspace(self):
        """A Scope contributes its workspace id."""
        scope = Scope(tenant_id="t1", workspace_id="ws-9")
        assert resolve_identity("Jane", "Person", scope) == "entity://ws-9/person/jane"

    def test_same_label_different_keys_are_distinct(self):
        """Two John Smiths with different emails are different entities."""
        a = resolve_identity("John Smith", "Person", "ws", {"email": "a@x.com"})
        b = resolve_identity("John Smith", "Person", "ws", {"email": "b@x.com"})
        assert a != b

    def test_declared_key_order(self):
        """Values join in the declared identity-key order."""
        values = {"last": "Doe", "first": "Jane"}
        assert identity_hash("x", values, ["first", "last"]) == "jane_doe"
        assert identity_hash("x", values) == "jane_doe"
        assert identity_hash("x", values, ["last", "first"]) == "doe_jane"

    def test_sorted_keys_without_declared_order(self):
        """Mapping input without a declared order uses sorted keys."""
        assert identity_hash("x", {"b": "2", "a": "1"}) == "1_2"

    def test_sequence_values(self):
        """Values may be passed as an ordered sequence."""
        assert identity_hash("x", ["Acme", "US"]) == "acme_us"


class TestCompositeIdentity:
    """Test composite keys and digests."""

    def test_composite_identity(self):
        """Composite key is workspace:type:identity."""
        assert composite_identity("Acme", "Company", "ws") == "ws:company:acme"

    def test_concept_id_stable_and_short(self):
        """Concept ids are 16 hex characters and stable."""
        cid = concept_id("Acme", "Company", "ws")
        assert len(cid) == 16
        assert cid == concept_id("Acme", "Company", "ws")
        assert cid != concept_id("Acme", "Company", "other")


class TestParseEntityUri:
    """Test parse_entity_uri."""

    def test_round_trip(self):
        """Resolved identifiers parse back into their parts."""
        uri = resolve_identity("Acme Corp", "Organization", "ws-1")
        assert parse_entity_uri(uri) == ("ws-1", "organization", "acme_corp")

    def test_rejects_other_schemes(self):
        """Non-entity URIs return None."""
        assert parse_entity_uri("http://example.org/x") is None
        assert parse_entity_uri("entity://ws/person") is None
        assert parse_entity_uri("") is None


class TestSameEntity:
    """Test is_same_entity."""

    def test_matching_identity_key(self):
        """A shared identity key with equal values matches despite labels."""
        a = {"label": "J. Smith", "properties": {"email": "JS@x.com"}}
        b = {"label": "John Smith", "properties": {"email": "js@x.com"}}
        assert is_same_entity(a, b, ["email"])

    def test_label_fallback(self):
        """Without identity keys labels are fuzzily compared."""
        assert is_same_entity({"label": "Widgets"}, {"label": "widget"})
        assert not is_same_entity({"label": "Acme"}, {"label": "Apex"})


class TestIdentityKeysForType:
    """Test ontology identity-key lookup."""

    def test_explicit_identity_keys(self):
        """identity_keys lists are returned as-is."""
        types = [{"name": "Person", "identity_keys": ["email"]}]
        assert identity_keys_for_type(types, "person") == ["email"]

    def test_flagged_properties(self):
        """Properties flagged is_identity are collected."""
        types = [{
            "label": "Company",
            "properties": [
                {"name": "taxId", "is_identity": True},
                {"name": "name"},
            ],
        }]
        assert identity_keys_for_type(types, "Company") == ["taxId"]

    def test_unknown_type(self):
        """Unknown types have no identity keys."""
        assert identity_keys_for_type([{"name": "Person"}], "Place") == []
        assert identity_keys_for_type(None, "Person") == []


class TestPrimaryKeyDetection:
    """Test natural-key column detection for tabular sources."""

    def test_exact_id_column(self):
        """A column named id wins."""
        assert detect_primary_key_column(["name", "ID"], []) == "ID"

    def test_suffix_column(self):
        """Key-like suffixes are recognized."""
        assert detect_primary_key_column(["name", "customer_id"], []) == "customer_id"
        assert detect_primary_key_column(["name", "orderId"], []) == "orderId"
        assert detect_primary_key_column(["name", "sku_code"], []) == "sku_code"

    def test_unique_values_fallback(self):
        """Otherwise the first all-distinct column is used."""
        rows = [{"city": "Paris", "name": "A"}, {"city": "Paris", "name": "B"}]
        assert detect_primary_key_column(["city", "name"], rows) == "name"

    def test_no_candidate(self):
        """No qualifying column returns None."""
        rows = [{"city": "Paris"}, {"city": "Paris"}]
        assert detect_primary_key_column(["city"], rows) is None

    def test_build_entity_uri(self):
        """Natural-key URIs are percent-encoded path segments."""
        uri = build_entity_uri("http://g/data", "Sales Order", "SO 1/2")
        assert uri == "http://g/data/entity/Sales_Order/SO_1%2F2"


class TestIdentityContext:
    """Test the per-document identity registry."""

    def test_resolve_and_lookup(self):
        """Resolved identifiers are remembered per label/type."""
        ctx = IdentityContext("ws", identity_keys={"Person": ["email"]})
        uri = ctx.resolve("Jane Doe", "Person", {"email": "jane@x.com"})

        assert uri == "entity://ws/person/jane_x_com"
        assert ctx.lookup("jane doe", "person") == uri
        assert len(ctx) == 1

    def test_contexts_are_isolated(self):
        """Separate contexts share no state."""
        first = IdentityContext("ws")
        second = IdentityContext("ws")
        first.resolve("Acme", "Company")

        assert second.lookup("Acme", "Company") is None
        assert len(second) == 0
