"""Required Baseline — the reference data the application cannot run without."""

from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict

from vf_foundation.models.entities import EntityClass


class EntityReference(BaseModel):
    """Points at another baseline entity by stable key."""

    model_config = ConfigDict(frozen=True)

    entity_class: EntityClass
    stable_key: str


class BaselineItem(BaseModel):
    """One entity to provision. Only required items gate readiness."""

    model_config = ConfigDict(frozen=True)

    stable_key: str
    payload: Dict[str, Any] = {}
    references: Dict[str, EntityReference] = {}   # payload field -> referenced entity
    required: bool = True


class RequiredBaseline(BaseModel):
    """Ordered, process-wide baseline table per entity class."""

    model_config = ConfigDict(frozen=True)

    classes: Dict[EntityClass, Tuple[BaselineItem, ...]] = {}

    def items(self, entity_class: EntityClass) -> Tuple[BaselineItem, ...]:
        return self.classes.get(entity_class, ())

    def keys(self, entity_class: EntityClass) -> List[str]:
        return [i.stable_key for i in self.items(entity_class)]

    def required_keys(self, entity_class: EntityClass) -> List[str]:
        return [i.stable_key for i in self.items(entity_class) if i.required]
