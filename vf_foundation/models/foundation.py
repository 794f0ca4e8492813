"""Foundation service configuration."""

from typing import List

from pydantic import BaseModel, Field

from vf_foundation.models.entities import REFERENCE_CLASSES, EntityClass


class FoundationConfig(BaseModel):
    """Tunables for probing, reconciliation and validation."""

    # Actions are ready once this core vocabulary exists, whatever else is missing.
    core_actions: List[str] = ["produce", "consume", "use", "transfer"]
    min_readable_classes: int = Field(ge=0, default=3)
    probe_write_classes: List[EntityClass] = list(REFERENCE_CLASSES)
    sentinel_prefix: str = "schema-probe"
    require_ready_for_validation: bool = False
