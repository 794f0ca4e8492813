"""
Baseline Reconciler — provisions whatever the required baseline is missing.

For one entity class:
  refresh cache → diff baseline keys against existing keys → create the rest

Per-item failures are recorded and iteration continues. A structural
rejection is different: the backend cannot take this class at all, so it is
raised and the caller decides what that means for the run.

Running reconcile() twice against an unchanged backend performs no writes
the second time.
"""

import logging
from typing import Any, Dict, Optional

from vf_foundation.cache.store import EntityCache
from vf_foundation.models.baseline import BaselineItem, RequiredBaseline
from vf_foundation.models.entities import EntityClass, Snapshot
from vf_foundation.models.foundation import FoundationConfig
from vf_foundation.models.readiness import ClassReadiness, FailedItem, ReconcileResult
from vf_foundation.repository.base import EntityRepository, StructuralUnsupportedError

logger = logging.getLogger(__name__)


class UnresolvedReferenceError(Exception):
    """A baseline item points at an entity the cache does not hold."""
    pass


class ClassFetchError(Exception):
    """The existing entities of a class could not be fetched before reconciling."""

    def __init__(self, entity_class: EntityClass, cause: Exception):
        self.entity_class = entity_class
        super().__init__(f"Could not fetch {entity_class.value}: {cause}")


def class_readiness(
    entity_class: EntityClass,
    required_keys: list,
    existing_keys: frozenset,
    core_actions: Optional[list] = None,
) -> ClassReadiness:
    """
    Readiness of one class: every required key must exist.

    Actions are the exception. Backends usually ship the action vocabulary
    as fixed, so the class is ready once the core actions exist, even if
    other required actions are missing.
    """
    missing = [k for k in required_keys if k not in existing_keys]
    if entity_class == EntityClass.ACTION and core_actions is not None:
        ready = all(a in existing_keys for a in core_actions)
    else:
        ready = not missing
    return ClassReadiness(
        entity_class=entity_class,
        ready=ready,
        required_keys=list(required_keys),
        missing=missing,
    )


class BaselineReconciler:
    """Diffs the required baseline against the cache and creates the difference."""

    def __init__(
        self,
        cache: EntityCache,
        repositories: Dict[EntityClass, EntityRepository],
        baseline: RequiredBaseline,
        config: Optional[FoundationConfig] = None,
    ):
        self.cache = cache
        self.repositories = repositories
        self.baseline = baseline
        self.config = config or FoundationConfig()

    async def reconcile(self, entity_class: EntityClass) -> ReconcileResult:
        """
        Bring one class up to the baseline.

        Raises StructuralUnsupportedError only if the backend rejects creation
        of this class outright. A failed fetch raises ClassFetchError, whatever
        its cause: without the existing keys, creating blindly would duplicate
        entities.
        """
        repository = self.repositories.get(entity_class)
        if repository is None:
            raise KeyError(f"No repository registered for {entity_class.value}")

        snapshot = await self._refresh(entity_class)
        existing_keys = snapshot.keys()
        result = ReconcileResult(entity_class=entity_class)

        for item in self.baseline.items(entity_class):
            if item.stable_key in existing_keys:
                logger.debug("%s '%s' already exists, skipping", entity_class.value, item.stable_key)
                result.skipped.append(item.stable_key)
                continue

            try:
                payload = self._resolve_payload(item)
            except UnresolvedReferenceError as e:
                logger.warning("Cannot create %s '%s': %s", entity_class.value, item.stable_key, e)
                result.failed.append(FailedItem(stable_key=item.stable_key, reason=str(e)))
                continue

            try:
                await repository.create_one(item.stable_key, payload)
            except StructuralUnsupportedError:
                logger.warning(
                    "Backend schema does not support creating %s", entity_class.value
                )
                raise
            except Exception as e:
                logger.warning(
                    "Failed to create %s '%s': %s", entity_class.value, item.stable_key, e
                )
                result.failed.append(FailedItem(stable_key=item.stable_key, reason=str(e)))
                continue

            logger.info("Created %s '%s'", entity_class.value, item.stable_key)
            result.created.append(item.stable_key)

        if result.created:
            await self._refresh(entity_class)

        logger.info(
            "Reconciled %s: %d created, %d skipped, %d failed",
            entity_class.value, len(result.created), len(result.skipped), len(result.failed),
        )
        return result

    def readiness(self, entity_class: EntityClass) -> ClassReadiness:
        """Readiness of a class judged against the current cache snapshot."""
        core = self.config.core_actions if entity_class == EntityClass.ACTION else None
        return class_readiness(
            entity_class,
            self.baseline.required_keys(entity_class),
            self.cache.keys(entity_class),
            core_actions=core,
        )

    async def _refresh(self, entity_class: EntityClass) -> Snapshot:
        try:
            return await self.cache.refresh(entity_class)
        except Exception as e:
            raise ClassFetchError(entity_class, e) from e

    def _resolve_payload(self, item: BaselineItem) -> Dict[str, Any]:
        """Replace stable-key references with the referenced entities' remote ids."""
        payload = dict(item.payload)
        for field, ref in item.references.items():
            entity = self.cache.get_by_id(ref.entity_class, ref.stable_key)
            if entity is None:
                raise UnresolvedReferenceError(
                    f"{ref.entity_class.value} '{ref.stable_key}' referenced by "
                    f"'{field}' does not exist"
                )
            payload[field] = entity.remote_id
        return payload
