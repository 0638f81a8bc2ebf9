"""
Change Types

Field-level changes detected between two ingestions of the same entity.

Models:
    - ChangeType: INSERT / UPDATE / DELETE
    - Change: One (entity, predicate) transition produced by the diff engine
    - ChangeEvent: A persisted audit record read back from the audit graph
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ChangeType(str, Enum):
    """Classification of a per-predicate transition."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Change(BaseModel):
    """
    One predicate's value transition for one entity.

    Attributes:
        entity_uri: Subject whose fact changed
        property: Predicate URI
        previous_value: Prior value ("" for INSERT)
        new_value: Incoming value ("" for DELETE)
        change_type: INSERT, UPDATE or DELETE
    """

    model_config = ConfigDict(frozen=True)

    entity_uri: str
    property: str
    previous_value: str = ""
    new_value: str = ""
    change_type: ChangeType


class ChangeEvent(BaseModel):
    """
    An append-only audit record as stored in the audit graph.

    previous_value is populated only for UPDATE/DELETE, new_value only for
    INSERT/UPDATE; absent values read back as "".
    """

    uri: str
    entity_uri: str
    property: str
    previous_value: str = ""
    new_value: str = ""
    change_type: ChangeType
    changed_at: str
    source_document: str
