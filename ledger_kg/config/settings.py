"""
KGConfig - Configuration Management

Sensible defaults with full override capability.

Example:
    >>> # Use defaults (reads from environment)
    >>> ledger = KnowledgeLedger()

    >>> # Explicit configuration
    >>> config = KGConfig(
    ...     store_url="http://graphdb:7200",
    ...     store_repository="kg",
    ... )
    >>> ledger = KnowledgeLedger(config=config)

    >>> # From config file
    >>> config = KGConfig.from_file("./ledger.toml")

Environment Variables:
    LEDGER_STORE_BACKEND - Store backend: "graphdb" or "local"
    LEDGER_STORE_URL - GraphDB base URL
    LEDGER_STORE_REPOSITORY - GraphDB repository id
    LEDGER_STORE_USERNAME - Basic-auth user
    LEDGER_STORE_PASSWORD - Basic-auth password
    LEDGER_STORE_MAX_CONCURRENCY - Max in-flight store requests
    LEDGER_STORE_TIMEOUT_SECONDS - Total request timeout (unset = none)
    LEDGER_LOCAL_STORE_PATH - TriG file for the local store
    LEDGER_GRAPH_BASE_IRI - Base IRI for data/audit named graphs
    LEDGER_DIFF_NORMALIZE_LITERALS - "true" to normalize literals before diffing
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

from ledger_kg.namespaces import DEFAULT_GRAPH_BASE_IRI

# TOML support: tomllib is built-in for Python 3.11+, use tomli for 3.10
try:
    import tomllib

    def _load_toml(path: Path) -> dict[str, Any]:
        with open(path, "rb") as f:
            return cast(dict[str, Any], tomllib.load(f))

except ImportError:
    import tomli

    def _load_toml(path: Path) -> dict[str, Any]:
        with open(path, "rb") as f:
            return cast(dict[str, Any], tomli.load(f))


_TRUE_VALUES = {"1", "true", "yes", "on"}

_BATCH_OPTIONS = (
    "entity_batch_size",
    "delete_batch_size",
    "insert_batch_size",
    "audit_batch_size",
)


class KGConfig:
    """Configuration for ledger_kg."""

    # === Store Configuration ===

    store_backend: str = "graphdb"
    """Store backend: "graphdb" (HTTP SPARQL protocol) or "local" (embedded rdflib)"""

    store_url: str = "http://localhost:7200"
    """GraphDB base URL"""

    store_repository: str = "knowledge-graph"
    """GraphDB repository id"""

    store_username: str | None = None
    store_password: str | None = None

    store_max_concurrency: int = 10
    """Max concurrent in-flight store requests"""

    store_timeout_seconds: float | None = None
    """Total per-request timeout; None disables it (errors propagate, no retry)"""

    local_store_path: str | None = None
    """TriG file backing the local store; None keeps it in memory"""

    graph_base_iri: str = DEFAULT_GRAPH_BASE_IRI
    """Base IRI of the per-workspace data and audit graphs"""

    # === Batch Sizes (store request limits) ===

    entity_batch_size: int = 100
    """Entity URIs per VALUES query when reading existing facts"""

    delete_batch_size: int = 100
    """Entity URIs per stale-data DELETE request"""

    insert_batch_size: int = 10000
    """Triples per insert request"""

    audit_batch_size: int = 10000
    """Audit triples per audit-graph insert request"""

    # === Diff Configuration ===

    diff_normalize_literals: bool = False
    """Compare normalized literals (trimmed value, lower-cased datatype, xsd:string as untyped)"""

    # === Audit Queries ===

    audit_log_default_limit: int = 50
    """Default page size for workspace audit log queries"""

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize configuration.

        Args:
            **kwargs: Override any configuration option
        """
        # Load from environment first
        self._load_from_env()

        # Apply explicit overrides
        for key, value in kwargs.items():
            if hasattr(self, key) and not key.startswith("_"):
                setattr(self, key, value)
            else:
                raise ValueError(f"Unknown configuration option: {key}")

        self._validate()

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        import os

        self.store_username = os.getenv("LEDGER_STORE_USERNAME")
        self.store_password = os.getenv("LEDGER_STORE_PASSWORD")

        if backend := os.getenv("LEDGER_STORE_BACKEND"):
            self.store_backend = backend
        if url := os.getenv("LEDGER_STORE_URL"):
            self.store_url = url
        if repository := os.getenv("LEDGER_STORE_REPOSITORY"):
            self.store_repository = repository
        if concurrency := os.getenv("LEDGER_STORE_MAX_CONCURRENCY"):
            self.store_max_concurrency = int(concurrency)
        if timeout := os.getenv("LEDGER_STORE_TIMEOUT_SECONDS"):
            self.store_timeout_seconds = float(timeout)
        if path := os.getenv("LEDGER_LOCAL_STORE_PATH"):
            self.local_store_path = path
        if base := os.getenv("LEDGER_GRAPH_BASE_IRI"):
            self.graph_base_iri = base
        if normalize := os.getenv("LEDGER_DIFF_NORMALIZE_LITERALS"):
            self.diff_normalize_literals = normalize.strip().lower() in _TRUE_VALUES

    def _validate(self) -> None:
        for key in _BATCH_OPTIONS:
            if int(getattr(self, key)) <= 0:
                raise ValueError(f"{key} must be positive, got {getattr(self, key)}")
        if self.store_backend not in ("graphdb", "local"):
            raise ValueError(f"Unknown store backend: {self.store_backend}")

    @classmethod
    def from_file(cls, path: str | Path) -> "KGConfig":
        """
        Load configuration from TOML file.

        Nested sections are flattened with a section prefix.

        Example TOML:
            [store]
            backend = "graphdb"
            url = "http://graphdb:7200"
            repository = "kg"

            [batch]
            insert = 5000

            [diff]
            normalize_literals = true

        Args:
            path: Path to TOML configuration file

        Returns:
            KGConfig instance with values from file

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        data = _load_toml(path)

        flat_config: dict[str, Any] = {}

        # Map section names to config key prefixes
        section_mapping = {
            "store": "store_",
            "local": "local_store_",
            "graphs": "graph_",
            "diff": "diff_",
            "audit": "audit_log_",
        }

        for section, prefix in section_mapping.items():
            if section in data:
                for key, value in data[section].items():
                    flat_config[f"{prefix}{key}"] = value

        # batch.insert -> insert_batch_size
        for key, value in data.get("batch", {}).items():
            flat_config[f"{key}_batch_size"] = value

        # Also support flat top-level keys
        for key, value in data.items():
            if key not in section_mapping and key != "batch" and not isinstance(value, dict):
                flat_config[key] = value

        return cls(**flat_config)

    @classmethod
    def from_env(cls) -> "KGConfig":
        """Load configuration from environment variables only."""
        return cls()

    def to_file(self, path: str | Path) -> None:
        """
        Save configuration to TOML file.

        Credentials are excluded.

        Args:
            path: Path to write TOML configuration file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        sections: dict[str, dict[str, str | int | float | bool | None]] = {
            "store": {
                "backend": self.store_backend,
                "url": self.store_url,
                "repository": self.store_repository,
                "max_concurrency": self.store_max_concurrency,
                "timeout_seconds": self.store_timeout_seconds,
            },
            "local": {
                "path": self.local_store_path,
            },
            "graphs": {
                "base_iri": self.graph_base_iri,
            },
            "batch": {
                "entity": self.entity_batch_size,
                "delete": self.delete_batch_size,
                "insert": self.insert_batch_size,
                "audit": self.audit_batch_size,
            },
            "diff": {
                "normalize_literals": self.diff_normalize_literals,
            },
            "audit": {
                "default_limit": self.audit_log_default_limit,
            },
        }

        # Build TOML string manually (avoids extra dependency)
        lines = ["# ledger_kg Configuration", ""]

        for section_name, section_values in sections.items():
            lines.append(f"[{section_name}]")
            for key, value in section_values.items():
                if isinstance(value, str):
                    lines.append(f'{key} = "{value}"')
                elif isinstance(value, bool):
                    lines.append(f"{key} = {str(value).lower()}")
                elif isinstance(value, (int, float)):
                    lines.append(f"{key} = {value}")
            lines.append("")

        lines.extend([
            "# Store credentials should be set via environment variables:",
            "# LEDGER_STORE_USERNAME, LEDGER_STORE_PASSWORD",
            "",
        ])

        path.write_text("\n".join(lines))

    def with_overrides(self, **kwargs: Any) -> "KGConfig":
        """Return new config with specified overrides."""
        new_config = KGConfig.__new__(KGConfig)
        for key in dir(self):
            if not key.startswith("_") and not callable(getattr(self, key)):
                setattr(new_config, key, getattr(self, key))
        for key, value in kwargs.items():
            setattr(new_config, key, value)
        new_config._validate()
        return new_config
