"""Reference entities and the immutable per-class snapshots that hold them."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class EntityClass(str, Enum):
    UNIT = "unit"
    ACTION = "action"                                   # Read-only vocabulary on most backends
    RESOURCE_SPECIFICATION = "resource_specification"   # References two unit keys
    PROCESS_SPECIFICATION = "process_specification"
    AGENT = "agent"                                     # Collaborator class, never reconciled
    ECONOMIC_RESOURCE = "economic_resource"             # Collaborator class, never reconciled


REFERENCE_CLASSES: Tuple[EntityClass, ...] = (
    EntityClass.UNIT,
    EntityClass.ACTION,
    EntityClass.RESOURCE_SPECIFICATION,
    EntityClass.PROCESS_SPECIFICATION,
)

# Classes the validation gate checks against but nothing provisions.
COLLABORATOR_CLASSES: Tuple[EntityClass, ...] = (
    EntityClass.AGENT,
    EntityClass.ECONOMIC_RESOURCE,
)

# Units must land before resource specifications, which embed unit ids.
RECONCILE_ORDER: Tuple[EntityClass, ...] = REFERENCE_CLASSES


class ReferenceEntity(BaseModel):
    """An entity as the backend knows it. Identity is the stable key."""

    model_config = ConfigDict(frozen=True)

    stable_key: str                         # Human-meaningful name, e.g. "kilogram"
    remote_id: str                          # Backend-assigned, opaque
    payload: Dict[str, Any] = {}


class Snapshot(BaseModel):
    """
    Fully populated view of one entity class at fetch time.

    Snapshots are never patched; a refresh builds a new one and swaps it in.
    """

    model_config = ConfigDict(frozen=True)

    entity_class: EntityClass
    entities: Tuple[ReferenceEntity, ...] = ()
    fetched_at: Optional[datetime] = None

    def keys(self) -> FrozenSet[str]:
        return frozenset(e.stable_key for e in self.entities)

    def get(self, stable_key: str) -> Optional[ReferenceEntity]:
        return next((e for e in self.entities if e.stable_key == stable_key), None)

    def __len__(self) -> int:
        return len(self.entities)

