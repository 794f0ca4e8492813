"""Schema capabilities — what the backend lets us write, determined at runtime."""

from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from vf_foundation.models.entities import EntityClass


class SchemaType(str, Enum):
    FULL = "full"               # Reads work and at least one class is writable
    READ_ONLY = "read_only"     # Reads work, nothing is writable
    UNKNOWN = "unknown"         # Not enough evidence either way


class SchemaCapabilities(BaseModel):
    """Computed once per initialization run and held for its duration."""

    model_config = ConfigDict(frozen=True)

    class_support: Dict[EntityClass, bool] = {}
    readable_classes: Tuple[EntityClass, ...] = ()
    schema_type: SchemaType = SchemaType.UNKNOWN
    probed_at: Optional[datetime] = None

    def supports_writes(self, entity_class: EntityClass) -> bool:
        return self.class_support.get(entity_class, False)

    @classmethod
    def unknown(cls) -> "SchemaCapabilities":
        return cls(schema_type=SchemaType.UNKNOWN)
