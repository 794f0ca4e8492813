"""
Entity Cache — in-memory mirror of what the backend knows, per entity class.

Updated by: Baseline Reconciler (refresh after fetch / create)
Queried by: Baseline Reconciler + Referential Validation Gate

Each class is held as an immutable Snapshot. A refresh fetches first and only
then swaps the new snapshot in, so a reader sees either the old snapshot or
the new one, never a mix.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional

from vf_foundation.models.entities import EntityClass, ReferenceEntity, Snapshot
from vf_foundation.repository.base import EntityRepository

logger = logging.getLogger(__name__)


class EntityCache:
    """Snapshot-per-class cache over a set of backend repositories."""

    def __init__(self, repositories: Optional[Dict[EntityClass, EntityRepository]] = None):
        self._repositories: Dict[EntityClass, EntityRepository] = dict(repositories or {})
        self._snapshots: Dict[EntityClass, Snapshot] = {}

    def register(self, entity_class: EntityClass, repository: EntityRepository) -> None:
        """Attach a repository for an entity class (e.g. a collaborator's agents)."""
        self._repositories[entity_class] = repository

    def has_class(self, entity_class: EntityClass) -> bool:
        return entity_class in self._repositories

    def snapshot(self, entity_class: EntityClass) -> Snapshot:
        """Current snapshot; empty and unfetched if the class was never refreshed."""
        snap = self._snapshots.get(entity_class)
        if snap is None:
            return Snapshot(entity_class=entity_class)
        return snap

    def list(self, entity_class: EntityClass) -> List[ReferenceEntity]:
        return list(self.snapshot(entity_class).entities)

    def keys(self, entity_class: EntityClass) -> FrozenSet[str]:
        return self.snapshot(entity_class).keys()

    def get_by_id(self, entity_class: EntityClass, stable_key: str) -> Optional[ReferenceEntity]:
        """Look up an entity by its stable key."""
        return self.snapshot(entity_class).get(stable_key)

    async def refresh(self, entity_class: EntityClass) -> Snapshot:
        """
        Re-fetch a class and atomically replace its snapshot.

        On fetch failure the previous snapshot stays and the error propagates.
        """
        repository = self._repositories.get(entity_class)
        if repository is None:
            raise KeyError(f"No repository registered for {entity_class.value}")

        entities = await repository.fetch_all()
        snap = Snapshot(
            entity_class=entity_class,
            entities=tuple(entities),
            fetched_at=datetime.now(timezone.utc),
        )
        # Swap the whole mapping, never mutate it
        self._snapshots = {**self._snapshots, entity_class: snap}
        logger.debug("Refreshed %s: %d entities", entity_class.value, len(snap))
        return snap

    async def refresh_all(self, entity_classes: Iterable[EntityClass]) -> Dict[EntityClass, Snapshot]:
        """Refresh several classes one after another."""
        return {c: await self.refresh(c) for c in entity_classes}
