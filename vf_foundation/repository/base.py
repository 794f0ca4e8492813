"""
Backend Entity Repository contract.

A repository wraps one entity class of the remote ledger. It is the layer
that knows the transport, so it is also the layer that classifies transport
failures: a schema-level rejection becomes StructuralUnsupportedError, any
item-specific failure becomes TransientOperationError. The foundation core
only ever branches on these types.
"""

from typing import Any, Dict, List, Protocol, Sequence

from vf_foundation.models.entities import ReferenceEntity


class BackendError(Exception):
    """Base class for classified backend failures."""
    pass


class StructuralUnsupportedError(BackendError):
    """The backend's type system rejects the operation shape entirely."""
    pass


class TransientOperationError(BackendError):
    """Item-specific failure: conflict, validation rejection, permission."""
    pass


# Error text that GraphQL-style backends emit when an operation is not in the schema.
STRUCTURAL_SIGNATURES: Sequence[str] = (
    "Cannot query field",
    "Unknown argument",
    "Unknown type",
    "mutation not supported",
)


def classify_error_message(
    message: str,
    signatures: Sequence[str] = STRUCTURAL_SIGNATURES,
) -> BackendError:
    """Map raw backend error text onto the structured error taxonomy."""
    lowered = message.lower()
    if any(sig.lower() in lowered for sig in signatures):
        return StructuralUnsupportedError(message)
    return TransientOperationError(message)


class EntityRepository(Protocol):
    """Asynchronous access to one entity class. Any call may fail."""

    async def fetch_all(self) -> List[ReferenceEntity]:
        ...

    async def create_one(
        self, stable_key: str, payload: Dict[str, Any]
    ) -> ReferenceEntity:
        ...

    async def delete_one(self, remote_id: str) -> None:
        ...
