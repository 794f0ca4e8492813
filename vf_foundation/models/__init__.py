"""Foundation data models."""

from vf_foundation.models.baseline import BaselineItem, EntityReference, RequiredBaseline
from vf_foundation.models.capabilities import SchemaCapabilities, SchemaType
from vf_foundation.models.entities import (
    COLLABORATOR_CLASSES,
    RECONCILE_ORDER,
    REFERENCE_CLASSES,
    EntityClass,
    ReferenceEntity,
    Snapshot,
)
from vf_foundation.models.foundation import FoundationConfig
from vf_foundation.models.readiness import (
    ClassOutcome,
    ClassReadiness,
    FailedItem,
    FoundationStatus,
    InitializationReport,
    InitializationStep,
    ReadinessReport,
    ReconcileResult,
)
from vf_foundation.models.validation import (
    Quantity,
    ValidationViolation,
    ViolationCode,
    WriteIntent,
    WriteIntentKind,
)

__all__ = [
    "BaselineItem",
    "ClassOutcome",
    "ClassReadiness",
    "COLLABORATOR_CLASSES",
    "EntityClass",
    "EntityReference",
    "FailedItem",
    "FoundationConfig",
    "FoundationStatus",
    "InitializationReport",
    "InitializationStep",
    "Quantity",
    "RECONCILE_ORDER",
    "REFERENCE_CLASSES",
    "ReadinessReport",
    "ReconcileResult",
    "ReferenceEntity",
    "RequiredBaseline",
    "SchemaCapabilities",
    "SchemaType",
    "Snapshot",
    "ValidationViolation",
    "ViolationCode",
    "WriteIntent",
    "WriteIntentKind",
]
