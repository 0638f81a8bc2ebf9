"""
Namespace IRIs and system-managed predicate sets.
"""

XSD = "http://www.w3.org/2001/XMLSchema#"
RDF = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RDFS = "http://www.w3.org/2000/01/rdf-schema#"
OWL = "http://www.w3.org/2002/07/owl#"
PF = "http://purplefabric.ai/ontology#"

DEFAULT_GRAPH_BASE_IRI = "http://purplefabric.ai/graphs"

RDF_TYPE = f"{RDF}type"
RDFS_LABEL = f"{RDFS}label"

PF_DOCUMENT = f"{PF}Document"
PF_SOURCE_DOCUMENT = f"{PF}sourceDocument"
PF_ROW_INDEX = f"{PF}rowIndex"
PF_LAST_UPDATED_BY = f"{PF}lastUpdatedBy"
PF_UPDATED_AT = f"{PF}updatedAt"

# ChangeEvent vocabulary (audit graph)
PF_CHANGE_EVENT = f"{PF}ChangeEvent"
PF_ENTITY = f"{PF}entity"
PF_PROPERTY = f"{PF}property"
PF_PREVIOUS_VALUE = f"{PF}previousValue"
PF_NEW_VALUE = f"{PF}newValue"
PF_CHANGE_TYPE = f"{PF}changeType"
PF_CHANGED_AT = f"{PF}changedAt"

XSD_STRING = f"{XSD}string"
XSD_DATETIME = f"{XSD}dateTime"
XSD_DATE = f"{XSD}date"
XSD_INTEGER = f"{XSD}integer"
XSD_DECIMAL = f"{XSD}decimal"
XSD_BOOLEAN = f"{XSD}boolean"

# Predicates excluded from diffing: written by the system on every ingestion
SKIP_PREDICATES: frozenset[str] = frozenset({
    RDF_TYPE,
    PF_SOURCE_DOCUMENT,
    PF_ROW_INDEX,
    PF_LAST_UPDATED_BY,
    PF_UPDATED_AT,
    RDFS_LABEL,
})

# Subjects typed with one of these are schema-level resources, not instance entities
SCHEMA_RESOURCE_TYPES: frozenset[str] = frozenset({
    PF_DOCUMENT,
    f"{OWL}Class",
    f"{OWL}ObjectProperty",
    f"{OWL}DatatypeProperty",
})

PREFIXES: dict[str, str] = {
    "rdf": RDF,
    "rdfs": RDFS,
    "xsd": XSD,
    "pf": PF,
}
