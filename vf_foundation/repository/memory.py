"""
In-memory backend repository.

Behaves like one entity class of a remote ledger: every call suspends once,
the backend assigns its own ids, duplicate keys conflict, and reads or
writes can be switched off to imitate partial schemas. Used as the default
backend of the operator API and throughout the test-suite.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from vf_foundation.models.entities import EntityClass, ReferenceEntity
from vf_foundation.repository.base import (
    StructuralUnsupportedError,
    TransientOperationError,
)


class InMemoryRepository:
    """A single entity class held in process memory."""

    def __init__(
        self,
        entity_class: EntityClass,
        entities: Optional[Iterable[ReferenceEntity]] = None,
        readable: bool = True,
        writable: bool = True,
        deletable: bool = True,
    ):
        self.entity_class = entity_class
        self.readable = readable
        self.writable = writable
        self.deletable = deletable
        self._entities: Dict[str, ReferenceEntity] = {}
        self._create_failures: Dict[str, Exception] = {}
        self._fetch_failure: Optional[Exception] = None

        self.fetch_calls = 0
        self.create_calls: List[str] = []
        self.delete_calls: List[str] = []

        for entity in entities or []:
            self._entities[entity.remote_id] = entity

    @classmethod
    def seeded(
        cls, entity_class: EntityClass, keys: Iterable[str], **kwargs
    ) -> "InMemoryRepository":
        """Build a repository already holding entities with the given keys."""
        entities = [
            ReferenceEntity(
                stable_key=key,
                remote_id=f"{entity_class.value}_{uuid4().hex[:12]}",
                payload={},
            )
            for key in keys
        ]
        return cls(entity_class, entities, **kwargs)

    # --- Failure injection ---

    def fail_create(self, stable_key: str, error: Optional[Exception] = None) -> None:
        """Make creation of one key fail (transiently unless told otherwise)."""
        self._create_failures[stable_key] = error or TransientOperationError(
            f"Validation rejected {self.entity_class.value} '{stable_key}'"
        )

    def fail_fetch(self, error: Optional[Exception] = None) -> None:
        self._fetch_failure = error or TransientOperationError(
            f"Fetching {self.entity_class.value} failed"
        )

    def clear_failures(self) -> None:
        self._create_failures.clear()
        self._fetch_failure = None

    # --- Repository contract ---

    @property
    def keys(self) -> List[str]:
        return [e.stable_key for e in self._entities.values()]

    async def fetch_all(self) -> List[ReferenceEntity]:
        await asyncio.sleep(0)
        self.fetch_calls += 1
        if not self.readable:
            raise StructuralUnsupportedError(
                f"Cannot query field \"{self.entity_class.value}s\""
            )
        if self._fetch_failure is not None:
            raise self._fetch_failure
        return list(self._entities.values())

    async def create_one(
        self, stable_key: str, payload: Dict[str, Any]
    ) -> ReferenceEntity:
        await asyncio.sleep(0)
        self.create_calls.append(stable_key)
        if not self.writable:
            raise StructuralUnsupportedError(
                f"{self.entity_class.value} mutation not supported"
            )
        failure = self._create_failures.get(stable_key)
        if failure is not None:
            raise failure
        if stable_key in self.keys:
            raise TransientOperationError(
                f"Conflict: {self.entity_class.value} '{stable_key}' already exists"
            )

        entity = ReferenceEntity(
            stable_key=stable_key,
            remote_id=f"{self.entity_class.value}_{uuid4().hex[:12]}",
            payload=dict(payload),
        )
        self._entities[entity.remote_id] = entity
        return entity

    async def delete_one(self, remote_id: str) -> None:
        await asyncio.sleep(0)
        self.delete_calls.append(remote_id)
        if not self.deletable:
            raise TransientOperationError("Permission denied: delete")
        if self._entities.pop(remote_id, None) is None:
            raise TransientOperationError(f"No entity with id {remote_id}")
