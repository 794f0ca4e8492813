"""Initialization progress, reconciliation outcomes and readiness reports."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel

from vf_foundation.models.capabilities import SchemaCapabilities, SchemaType
from vf_foundation.models.entities import EntityClass


class InitializationStep(str, Enum):
    NOT_STARTED = "not_started"
    PROBING = "probing"
    RECONCILING_UNITS = "reconciling_units"
    RECONCILING_ACTIONS = "reconciling_actions"
    RECONCILING_RESOURCE_SPECIFICATIONS = "reconciling_resource_specifications"
    RECONCILING_PROCESS_SPECIFICATIONS = "reconciling_process_specifications"
    VERIFYING = "verifying"
    READY = "ready"
    DEGRADED = "degraded"
    FAILED = "failed"


TERMINAL_STEPS = (
    InitializationStep.READY,
    InitializationStep.DEGRADED,
    InitializationStep.FAILED,
)

RECONCILING_STEPS: Dict[EntityClass, InitializationStep] = {
    EntityClass.UNIT: InitializationStep.RECONCILING_UNITS,
    EntityClass.ACTION: InitializationStep.RECONCILING_ACTIONS,
    EntityClass.RESOURCE_SPECIFICATION: InitializationStep.RECONCILING_RESOURCE_SPECIFICATIONS,
    EntityClass.PROCESS_SPECIFICATION: InitializationStep.RECONCILING_PROCESS_SPECIFICATIONS,
}


class FoundationStatus(BaseModel):
    """Latest step and outcome of the initialization state machine."""

    step: InitializationStep = InitializationStep.NOT_STARTED
    completed_count: int = 0
    total_steps: int = 6                    # probe + four classes + verify
    current_operation: str = ""
    error: Optional[str] = None


class FailedItem(BaseModel):
    stable_key: str
    reason: str


class ReconcileResult(BaseModel):
    """Outcome of reconciling one entity class against the baseline."""

    entity_class: EntityClass
    created: List[str] = []
    skipped: List[str] = []
    failed: List[FailedItem] = []


class ClassReadiness(BaseModel):
    entity_class: EntityClass
    ready: bool
    required_keys: List[str] = []
    missing: List[str] = []
    error: Optional[str] = None             # Set when the class could not be fetched


class ReadinessReport(BaseModel):
    """
    Per-class readiness plus the overall verdict.

    `ready` applies the read-only acceptance policy: a read-only backend is
    ready with whatever subset exists. `baseline_complete` never does.
    """

    classes: Dict[EntityClass, ClassReadiness]
    baseline_complete: bool
    ready: bool
    schema_type: SchemaType
    checked_at: datetime

    @property
    def unmet(self) -> List[EntityClass]:
        return [c for c, r in self.classes.items() if not r.ready]

    @property
    def missing(self) -> Dict[EntityClass, List[str]]:
        return {c: r.missing for c, r in self.classes.items() if r.missing}

    @property
    def blocking(self) -> Dict[EntityClass, List[str]]:
        """Missing keys of unmet classes only."""
        return {c: r.missing for c, r in self.classes.items() if not r.ready}


class ClassOutcome(BaseModel):
    """What happened to one class during an initialization run."""

    entity_class: EntityClass
    result: Optional[ReconcileResult] = None
    accepted_as_is: bool = False            # Structural gap tolerated
    error: Optional[str] = None


class InitializationReport(BaseModel):
    """Record of a single initialization run."""

    capabilities: SchemaCapabilities
    outcomes: List[ClassOutcome] = []
    readiness: Optional[ReadinessReport] = None
    final_step: InitializationStep = InitializationStep.NOT_STARTED
    started_at: datetime
    finished_at: Optional[datetime] = None
