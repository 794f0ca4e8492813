"""
Referential Validation Gate.

Checks that a proposed write (economic event, commitment, intent or process)
only references entities the cache knows to exist, and that its timestamps make
sense. Pure and synchronous: no network calls, nothing submitted or rolled
back. An empty list means the write may proceed; callers must refuse to
submit otherwise. Keeping the cache fresh is the caller's job.
"""

from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Union

from vf_foundation.cache.store import EntityCache
from vf_foundation.models.entities import EntityClass
from vf_foundation.models.validation import (
    Quantity,
    ValidationViolation,
    ViolationCode,
    WriteIntent,
    WriteIntentKind,
)

# Quantity fields whose unit must exist, with the wording used in messages.
QUANTITY_FIELDS = (
    ("resource_quantity", "resource quantity"),
    ("effort_quantity", "effort quantity"),
    ("available_quantity", "available quantity"),
)


def _as_utc(value: datetime) -> datetime:
    """Naive timestamps are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ReferentialValidationGate:
    """
    Runs every registered check against a write intent.

    The agent cache is an external collaborator with the same contract as
    the reference cache; when none is given, agents are looked up in the
    reference cache.
    """

    def __init__(self, cache: EntityCache, agent_cache: Optional[EntityCache] = None):
        self.cache = cache
        self.agent_cache = agent_cache or cache
        self._checks: List[Callable[[WriteIntent, datetime], List[ValidationViolation]]] = []
        self._register_default_checks()

    def _register_default_checks(self) -> None:
        self._checks.append(self._check_action)
        self._checks.append(self._check_name)
        self._checks.append(self._check_agents)
        self._checks.append(self._check_resources)
        self._checks.append(self._check_units)
        self._checks.append(self._check_time_window)
        self._checks.append(self._check_due)

    def validate(
        self,
        intent: Union[WriteIntent, Mapping[str, Any]],
        now: Optional[datetime] = None,
    ) -> List[ValidationViolation]:
        if not isinstance(intent, WriteIntent):
            intent = WriteIntent.model_validate(intent)
        now = _as_utc(now or datetime.now(timezone.utc))

        violations: List[ValidationViolation] = []
        for check in self._checks:
            violations.extend(check(intent, now))
        return violations

    def _check_action(self, intent: WriteIntent, now: datetime) -> List[ValidationViolation]:
        if intent.kind == WriteIntentKind.PROCESS:
            return []
        if not intent.action:
            return [
                ValidationViolation(
                    code=ViolationCode.ACTION_REQUIRED,
                    field="action",
                    message="An action is required",
                )
            ]
        if self.cache.get_by_id(EntityClass.ACTION, intent.action) is None:
            available = ", ".join(sorted(self.cache.keys(EntityClass.ACTION)))
            return [
                ValidationViolation(
                    code=ViolationCode.UNKNOWN_ACTION,
                    field="action",
                    key=intent.action,
                    message=f'Action "{intent.action}" not found. Available actions: {available}',
                )
            ]
        return []

    def _check_name(self, intent: WriteIntent, now: datetime) -> List[ValidationViolation]:
        if intent.kind != WriteIntentKind.PROCESS:
            return []
        if not (intent.name or "").strip():
            return [
                ValidationViolation(
                    code=ViolationCode.NAME_REQUIRED,
                    field="name",
                    message="Process name is required",
                )
            ]
        return []

    def _check_agents(self, intent: WriteIntent, now: datetime) -> List[ValidationViolation]:
        violations = []
        for field, code, role in (
            ("provider", ViolationCode.UNKNOWN_PROVIDER, "Provider agent"),
            ("receiver", ViolationCode.UNKNOWN_RECEIVER, "Receiver agent"),
            ("in_scope_of", ViolationCode.UNKNOWN_SCOPE_AGENT, "Scope agent"),
        ):
            key = getattr(intent, field)
            if key and self.agent_cache.get_by_id(EntityClass.AGENT, key) is None:
                violations.append(
                    ValidationViolation(
                        code=code, field=field, key=key, message=f'{role} "{key}" not found'
                    )
                )
        return violations

    def _check_resources(self, intent: WriteIntent, now: datetime) -> List[ValidationViolation]:
        violations = []
        spec = intent.resource_conforms_to
        if spec and self.cache.get_by_id(EntityClass.RESOURCE_SPECIFICATION, spec) is None:
            violations.append(
                ValidationViolation(
                    code=ViolationCode.UNKNOWN_RESOURCE_SPECIFICATION,
                    field="resource_conforms_to",
                    key=spec,
                    message=f'Resource specification "{spec}" not found',
                )
            )
        resource = intent.resource_inventoried_as
        if resource and self.cache.get_by_id(EntityClass.ECONOMIC_RESOURCE, resource) is None:
            violations.append(
                ValidationViolation(
                    code=ViolationCode.UNKNOWN_RESOURCE,
                    field="resource_inventoried_as",
                    key=resource,
                    message=f'Resource "{resource}" not found',
                )
            )
        return violations

    def _check_units(self, intent: WriteIntent, now: datetime) -> List[ValidationViolation]:
        violations = []
        for field, label in QUANTITY_FIELDS:
            quantity: Optional[Quantity] = getattr(intent, field)
            if quantity is None or not quantity.has_unit:
                continue
            if self.cache.get_by_id(EntityClass.UNIT, quantity.has_unit) is None:
                violations.append(
                    ValidationViolation(
                        code=ViolationCode.UNKNOWN_UNIT,
                        field=f"{field}.has_unit",
                        key=quantity.has_unit,
                        message=f'Unit "{quantity.has_unit}" not found for {label}',
                    )
                )
        return violations

    def _check_time_window(self, intent: WriteIntent, now: datetime) -> List[ValidationViolation]:
        if intent.has_beginning is None or intent.has_end is None:
            return []
        if _as_utc(intent.has_beginning) >= _as_utc(intent.has_end):
            return [
                ValidationViolation(
                    code=ViolationCode.BEGIN_NOT_BEFORE_END,
                    field="has_beginning",
                    message="Beginning time must be before end time",
                )
            ]
        return []

    def _check_due(self, intent: WriteIntent, now: datetime) -> List[ValidationViolation]:
        if intent.due is not None and _as_utc(intent.due) < now:
            return [
                ValidationViolation(
                    code=ViolationCode.DUE_IN_PAST,
                    field="due",
                    message="Due date cannot be in the past",
                )
            ]
        return []
