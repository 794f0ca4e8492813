"""
Foundation Service — the initialization state machine.

  NOT_STARTED → PROBING → RECONCILING(unit) → RECONCILING(action)
    → RECONCILING(resource_specification) → RECONCILING(process_specification)
    → VERIFYING → READY | DEGRADED | FAILED

Behavioral Contract:
- Probing always runs first. It cannot fail the run; at worst the schema is UNKNOWN.
- Classes reconcile strictly one after another in dependency order.
- A structural rejection is tolerated on a read-only (or unknown) backend and
  fatal on a full one, for classes the probe found writable.
- Every other per-class failure is absorbed and recorded in the run report.
- Verifying also refreshes the collaborator classes the gate reads; a failure
  there is logged and never fails the run.
- initialize() is single-flight: concurrent callers share one run.
- Retrying after FAILED requires reset().
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from vf_foundation.cache.store import EntityCache
from vf_foundation.data.defaults import default_baseline
from vf_foundation.models.baseline import RequiredBaseline
from vf_foundation.models.capabilities import SchemaCapabilities, SchemaType
from vf_foundation.models.entities import (
    COLLABORATOR_CLASSES,
    RECONCILE_ORDER,
    REFERENCE_CLASSES,
    EntityClass,
    Snapshot,
)
from vf_foundation.models.foundation import FoundationConfig
from vf_foundation.models.readiness import (
    RECONCILING_STEPS,
    ClassOutcome,
    ClassReadiness,
    FoundationStatus,
    InitializationReport,
    InitializationStep,
    ReadinessReport,
)
from vf_foundation.models.validation import ValidationViolation, ViolationCode, WriteIntent
from vf_foundation.probe.prober import CapabilityProber
from vf_foundation.reconciler.baseline import BaselineReconciler, ClassFetchError
from vf_foundation.repository.base import EntityRepository, StructuralUnsupportedError
from vf_foundation.validation.gate import ReferentialValidationGate

logger = logging.getLogger(__name__)


class InitializationIncompleteError(Exception):
    """A full-capability backend still lacks required entities after a full pass."""

    def __init__(self, missing: Dict[EntityClass, List[str]]):
        self.missing = missing
        detail = "; ".join(
            f"{cls.value}: {', '.join(keys)}" for cls, keys in missing.items()
        )
        super().__init__(f"Foundation initialization incomplete after setup ({detail})")


class FoundationService:
    """
    Guarantees the reference baseline exists before domain features run,
    and gatekeeps writes against what is known to exist.

    One instance per process, passed by reference to whoever needs it.
    """

    def __init__(
        self,
        repositories: Dict[EntityClass, EntityRepository],
        baseline: Optional[RequiredBaseline] = None,
        config: Optional[FoundationConfig] = None,
        agent_cache: Optional[EntityCache] = None,
    ):
        self.config = config or FoundationConfig()
        self.baseline = baseline or default_baseline()
        self._cache = EntityCache(repositories)
        self.prober = CapabilityProber(repositories, self.config)
        self.reconciler = BaselineReconciler(
            self._cache, repositories, self.baseline, self.config
        )
        self.gate = ReferentialValidationGate(self._cache, agent_cache=agent_cache)

        self._status = FoundationStatus()
        self._capabilities: Optional[SchemaCapabilities] = None
        self._report: Optional[InitializationReport] = None
        self._error: Optional[Exception] = None
        self._inflight: Optional[asyncio.Future] = None

    @property
    def cache(self) -> EntityCache:
        return self._cache

    @property
    def capabilities(self) -> Optional[SchemaCapabilities]:
        """Capabilities of the current run, None before probing or after reset()."""
        return self._capabilities

    @property
    def last_report(self) -> Optional[InitializationReport]:
        return self._report

    @property
    def is_running(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def get_status(self) -> FoundationStatus:
        return self._status.model_copy()

    async def initialize(self) -> None:
        """
        Run the state machine to a terminal step.

        No-op once READY or DEGRADED. Re-raises the stored error once FAILED.
        """
        step = self._status.step
        if step in (InitializationStep.READY, InitializationStep.DEGRADED):
            return
        if step == InitializationStep.FAILED and self._error is not None:
            raise self._error

        # No suspension between the check above and claiming the run
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._run())
            self._inflight.add_done_callback(_consume_result)

        # Cancelling one waiting caller must not cancel the shared run
        await asyncio.shield(self._inflight)

    def reset(self) -> None:
        """Return to NOT_STARTED, discarding capabilities and readiness."""
        if self.is_running:
            raise RuntimeError("Cannot reset while initialization is in progress")
        self._status = FoundationStatus()
        self._capabilities = None
        self._report = None
        self._error = None
        self._inflight = None
        logger.info("Foundation service reset")

    def cache_for(self, entity_class: EntityClass) -> EntityCache:
        """The cache the gate reads a class from; agents may live in a collaborator cache."""
        if entity_class == EntityClass.AGENT:
            return self.gate.agent_cache
        return self._cache

    async def refresh_class(self, entity_class: EntityClass) -> Snapshot:
        return await self.cache_for(entity_class).refresh(entity_class)

    async def refresh_collaborators(self) -> List[EntityClass]:
        """Re-fetch every registered collaborator class. Fetch errors propagate."""
        refreshed = []
        for entity_class in COLLABORATOR_CLASSES:
            if self.cache_for(entity_class).has_class(entity_class):
                await self.refresh_class(entity_class)
                refreshed.append(entity_class)
        return refreshed

    async def check_readiness(self) -> ReadinessReport:
        """Re-fetch every reference class and report per-class readiness."""
        capabilities = self._capabilities or SchemaCapabilities.unknown()
        return await self._build_readiness(capabilities)

    def validate(
        self,
        intent: Union[WriteIntent, Mapping[str, Any]],
        now: Optional[datetime] = None,
    ) -> List[ValidationViolation]:
        """Check a proposed write against the cached baseline. Never touches the network."""
        if self.config.require_ready_for_validation and self._status.step not in (
            InitializationStep.READY,
            InitializationStep.DEGRADED,
        ):
            return [
                ValidationViolation(
                    code=ViolationCode.FOUNDATION_NOT_READY,
                    field="foundation",
                    message="Foundation components not ready. Initialize the foundation first.",
                )
            ]
        return self.gate.validate(intent, now=now)

    # --- State machine ---

    async def _run(self) -> None:
        report = InitializationReport(
            capabilities=SchemaCapabilities.unknown(),
            started_at=datetime.now(timezone.utc),
        )
        self._report = report
        self._error = None

        try:
            self._set_step(InitializationStep.PROBING, 0, "Probing backend schema capabilities")
            capabilities = await self.prober.probe()
            self._capabilities = capabilities
            report.capabilities = capabilities

            for index, entity_class in enumerate(RECONCILE_ORDER, start=1):
                self._set_step(
                    RECONCILING_STEPS[entity_class],
                    index,
                    f"Reconciling {entity_class.value} baseline",
                )
                outcome = await self._reconcile_class(entity_class, capabilities)
                report.outcomes.append(outcome)

            self._set_step(InitializationStep.VERIFYING, 5, "Verifying foundation")
            try:
                await self.refresh_collaborators()
            except Exception as e:
                logger.warning("Could not refresh collaborator classes: %s", e)
            readiness = await self._build_readiness(capabilities)
            report.readiness = readiness

            if readiness.baseline_complete:
                final = InitializationStep.READY
                logger.info("Foundation initialization completed")
            elif readiness.ready:
                final = InitializationStep.READY
                logger.warning(
                    "Read-only backend: accepting partial foundation, unmet classes %s",
                    [c.value for c in readiness.unmet],
                )
            elif capabilities.schema_type == SchemaType.FULL:
                raise InitializationIncompleteError(readiness.blocking)
            else:
                final = InitializationStep.DEGRADED
                logger.warning(
                    "Foundation degraded, missing %s",
                    {c.value: keys for c, keys in readiness.missing.items()},
                )

            report.final_step = final
            self._set_step(final, 6, _final_operation(final))
        except Exception as e:
            logger.error("Foundation initialization failed: %s", e)
            self._error = e
            report.final_step = InitializationStep.FAILED
            self._status = self._status.model_copy(
                update={
                    "step": InitializationStep.FAILED,
                    "current_operation": "Initialization failed",
                    "error": f"Foundation initialization failed: {e}",
                }
            )
            raise
        finally:
            report.finished_at = datetime.now(timezone.utc)

    async def _reconcile_class(
        self, entity_class: EntityClass, capabilities: SchemaCapabilities
    ) -> ClassOutcome:
        try:
            result = await self.reconciler.reconcile(entity_class)
        except ClassFetchError as e:
            logger.warning("Skipping %s: %s", entity_class.value, e)
            return ClassOutcome(entity_class=entity_class, error=str(e))
        except StructuralUnsupportedError as e:
            if (
                capabilities.schema_type == SchemaType.FULL
                and capabilities.supports_writes(entity_class)
            ):
                logger.error(
                    "%s creation rejected by a full-capability schema", entity_class.value
                )
                raise
            logger.warning(
                "%s cannot be created on this backend (%s schema); proceeding with what exists",
                entity_class.value, capabilities.schema_type.value,
            )
            return ClassOutcome(entity_class=entity_class, accepted_as_is=True, error=str(e))
        except Exception as e:
            logger.warning("Reconciling %s failed: %s", entity_class.value, e)
            return ClassOutcome(entity_class=entity_class, error=str(e))
        return ClassOutcome(entity_class=entity_class, result=result)

    async def _build_readiness(self, capabilities: SchemaCapabilities) -> ReadinessReport:
        classes: Dict[EntityClass, ClassReadiness] = {}
        for entity_class in REFERENCE_CLASSES:
            try:
                await self._cache.refresh(entity_class)
            except Exception as e:
                logger.warning("Could not fetch %s for verification: %s", entity_class.value, e)
                required = self.baseline.required_keys(entity_class)
                classes[entity_class] = ClassReadiness(
                    entity_class=entity_class,
                    ready=False,
                    required_keys=required,
                    missing=required,
                    error=str(e),
                )
                continue
            classes[entity_class] = self.reconciler.readiness(entity_class)

        complete = all(r.ready for r in classes.values())
        return ReadinessReport(
            classes=classes,
            baseline_complete=complete,
            ready=complete or capabilities.schema_type == SchemaType.READ_ONLY,
            schema_type=capabilities.schema_type,
            checked_at=datetime.now(timezone.utc),
        )

    def _set_step(self, step: InitializationStep, completed: int, operation: str) -> None:
        logger.info("Foundation step %s: %s", step.value, operation)
        self._status = FoundationStatus(
            step=step,
            completed_count=completed,
            current_operation=operation,
        )


def _final_operation(step: InitializationStep) -> str:
    if step == InitializationStep.READY:
        return "Foundation service ready"
    return "Foundation service running with missing components"


def _consume_result(future: asyncio.Future) -> None:
    """Retrieve the run's exception so an abandoned run never logs it as unhandled."""
    if not future.cancelled():
        future.exception()
