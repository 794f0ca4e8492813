"""
Capability Prober — finds out at runtime what the backend lets us write.

Reads every reference class, then attempts one disposable sentinel write per
class. The outcome of the write decides the class's capability:

  success                      → supported (sentinel deleted, best effort)
  StructuralUnsupportedError   → unsupported
  any other failure            → supported; the write path exists, this
                                 attempt failed for item-specific reasons

probe() never raises.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from vf_foundation.models.capabilities import SchemaCapabilities, SchemaType
from vf_foundation.models.entities import REFERENCE_CLASSES, EntityClass
from vf_foundation.models.foundation import FoundationConfig
from vf_foundation.repository.base import EntityRepository, StructuralUnsupportedError

logger = logging.getLogger(__name__)


def determine_schema_type(
    readable: List[EntityClass],
    class_support: Dict[EntityClass, bool],
    min_readable_classes: int,
) -> SchemaType:
    """Classify the backend from read and write evidence."""
    if len(readable) >= min_readable_classes:
        if any(class_support.values()):
            return SchemaType.FULL
        return SchemaType.READ_ONLY
    return SchemaType.UNKNOWN


class CapabilityProber:
    """Runs read and speculative-write probes against the backend repositories."""

    def __init__(
        self,
        repositories: Dict[EntityClass, EntityRepository],
        config: Optional[FoundationConfig] = None,
    ):
        self.repositories = repositories
        self.config = config or FoundationConfig()

    async def probe(self) -> SchemaCapabilities:
        try:
            return await self._probe()
        except Exception:
            logger.exception("Capability probe failed; assuming unknown schema")
            return SchemaCapabilities.unknown()

    async def _probe(self) -> SchemaCapabilities:
        logger.info("Probing backend schema capabilities")

        readable: List[EntityClass] = []
        for entity_class in REFERENCE_CLASSES:
            if await self._probe_read(entity_class):
                readable.append(entity_class)

        class_support: Dict[EntityClass, bool] = {}
        for entity_class in self.config.probe_write_classes:
            class_support[entity_class] = await self._probe_write(entity_class)

        schema_type = determine_schema_type(
            readable, class_support, self.config.min_readable_classes
        )
        capabilities = SchemaCapabilities(
            class_support=class_support,
            readable_classes=tuple(readable),
            schema_type=schema_type,
            probed_at=datetime.now(timezone.utc),
        )
        logger.info(
            "Schema type %s (readable=%s, writable=%s)",
            schema_type.value,
            [c.value for c in readable],
            [c.value for c, ok in class_support.items() if ok],
        )
        return capabilities

    async def _probe_read(self, entity_class: EntityClass) -> bool:
        repository = self.repositories.get(entity_class)
        if repository is None:
            return False
        try:
            await repository.fetch_all()
        except Exception as e:
            logger.info("Read of %s not supported: %s", entity_class.value, e)
            return False
        return True

    async def _probe_write(self, entity_class: EntityClass) -> bool:
        repository = self.repositories.get(entity_class)
        if repository is None:
            return False

        sentinel_key = f"{self.config.sentinel_prefix}-{entity_class.value}-{uuid4().hex[:8]}"
        try:
            sentinel = await repository.create_one(
                sentinel_key,
                {
                    "label": "Schema capability probe",
                    "note": "Disposable item created to test write support",
                },
            )
        except StructuralUnsupportedError as e:
            logger.info("Writes to %s not supported by schema: %s", entity_class.value, e)
            return False
        except Exception as e:
            logger.info(
                "Probe write to %s failed for other reasons, treating as supported: %s",
                entity_class.value, e,
            )
            return True

        try:
            await repository.delete_one(sentinel.remote_id)
        except Exception as e:
            logger.debug("Could not delete probe sentinel %s: %s", sentinel_key, e)
        return True
