"""Tests for the Referential Validation Gate."""

import asyncio
from datetime import datetime, timedelta, timezone

from vf_foundation.cache.store import EntityCache
from vf_foundation.models.entities import EntityClass
from vf_foundation.models.validation import Quantity, ViolationCode, WriteIntent, WriteIntentKind
from vf_foundation.repository.memory import InMemoryRepository
from vf_foundation.validation.gate import ReferentialValidationGate


def _make_cache() -> EntityCache:
    cache = EntityCache({
        EntityClass.UNIT: InMemoryRepository.seeded(EntityClass.UNIT, ["hour", "kilogram"]),
        EntityClass.ACTION: InMemoryRepository.seeded(EntityClass.ACTION, ["produce"]),
        EntityClass.RESOURCE_SPECIFICATION: InMemoryRepository.seeded(
            EntityClass.RESOURCE_SPECIFICATION, ["Material"]
        ),
        EntityClass.ECONOMIC_RESOURCE: InMemoryRepository.seeded(
            EntityClass.ECONOMIC_RESOURCE, ["steel-lot-7"]
        ),
        EntityClass.AGENT: InMemoryRepository.seeded(EntityClass.AGENT, ["alice", "bob"]),
    })
    asyncio.run(cache.refresh_all([
        EntityClass.UNIT,
        EntityClass.ACTION,
        EntityClass.RESOURCE_SPECIFICATION,
        EntityClass.ECONOMIC_RESOURCE,
        EntityClass.AGENT,
    ]))
    return cache


class TestReferentialValidationGate:
    def setup_method(self):
        self.gate = ReferentialValidationGate(_make_cache())

    def test_valid_intent(self):
        violations = self.gate.validate({
            "kind": "economic_event",
            "action": "produce",
            "provider": "alice",
            "receiver": "bob",
            "inScopeOf": "alice",
            "resourceConformsTo": "Material",
            "resourceInventoriedAs": "steel-lot-7",
            "resourceQuantity": {"hasNumericalValue": 5, "hasUnit": "kilogram"},
            "effortQuantity": {"hasNumericalValue": 2, "hasUnit": "hour"},
        })
        assert violations == []

    def test_unknown_unit_is_the_only_violation(self):
        violations = self.gate.validate({
            "action": "produce",
            "resourceQuantity": {"hasUnit": "meter"},
        })
        assert len(violations) == 1
        assert violations[0].code == ViolationCode.UNKNOWN_UNIT
        assert violations[0].key == "meter"
        assert "meter" in violations[0].message

    def test_unknown_action(self):
        violations = self.gate.validate({
            "action": "transfer",
            "resourceQuantity": {"hasUnit": "kilogram"},
        })
        assert [v.code for v in violations] == [ViolationCode.UNKNOWN_ACTION]
        assert violations[0].key == "transfer"
        assert "Available actions: produce" in violations[0].message

    def test_action_required(self):
        violations = self.gate.validate({})
        assert [v.code for v in violations] == [ViolationCode.ACTION_REQUIRED]

    def test_unknown_agents(self):
        violations = self.gate.validate({
            "action": "produce",
            "provider": "mallory",
            "receiver": "trent",
            "inScopeOf": "eve",
        })
        codes = {v.code: v.key for v in violations}
        assert codes == {
            ViolationCode.UNKNOWN_PROVIDER: "mallory",
            ViolationCode.UNKNOWN_RECEIVER: "trent",
            ViolationCode.UNKNOWN_SCOPE_AGENT: "eve",
        }

    def test_unknown_resource_and_specification(self):
        violations = self.gate.validate({
            "action": "produce",
            "resourceConformsTo": "Software",
            "resourceInventoriedAs": "laptop-1",
        })
        codes = [v.code for v in violations]
        assert codes == [
            ViolationCode.UNKNOWN_RESOURCE_SPECIFICATION,
            ViolationCode.UNKNOWN_RESOURCE,
        ]

    def test_every_quantity_unit_is_checked(self):
        intent = WriteIntent(
            action="produce",
            resource_quantity=Quantity(has_unit="liter"),
            effort_quantity=Quantity(has_unit="minute"),
            available_quantity=Quantity(has_unit="gram"),
        )
        violations = self.gate.validate(intent)
        assert [v.key for v in violations] == ["liter", "minute", "gram"]
        assert violations[1].field == "effort_quantity.has_unit"

    def test_quantity_without_unit(self):
        violations = self.gate.validate({"action": "produce", "resourceQuantity": {"hasNumericalValue": 1}})
        assert violations == []

    def test_begin_after_end(self):
        t0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        t1 = t0 + timedelta(hours=2)
        violations = self.gate.validate({"action": "produce", "hasBeginning": t1, "hasEnd": t0})
        assert [v.code for v in violations] == [ViolationCode.BEGIN_NOT_BEFORE_END]

    def test_begin_equal_to_end(self):
        t0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        violations = self.gate.validate({"action": "produce", "hasBeginning": t0, "hasEnd": t0})
        assert [v.code for v in violations] == [ViolationCode.BEGIN_NOT_BEFORE_END]

    def test_begin_before_end(self):
        t0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        violations = self.gate.validate({
            "action": "produce",
            "hasBeginning": t0,
            "hasEnd": t0 + timedelta(minutes=1),
        })
        assert violations == []

    def test_past_due(self):
        past = datetime.now(timezone.utc) - timedelta(days=1)
        violations = self.gate.validate({"action": "produce", "due": past.isoformat()})
        assert [v.code for v in violations] == [ViolationCode.DUE_IN_PAST]

    def test_due_against_explicit_now(self):
        now = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
        intent = {"kind": WriteIntentKind.COMMITMENT, "action": "produce", "due": now}
        assert self.gate.validate(intent, now=now) == []
        assert self.gate.validate(intent, now=now + timedelta(seconds=1))[0].code == (
            ViolationCode.DUE_IN_PAST
        )

    def test_naive_timestamps_read_as_utc(self):
        now = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
        violations = self.gate.validate(
            {"action": "produce", "due": datetime(2026, 6, 1, 11, 0)}, now=now
        )
        assert [v.code for v in violations] == [ViolationCode.DUE_IN_PAST]

    def test_separate_agent_cache(self):
        agents = EntityCache({
            EntityClass.AGENT: InMemoryRepository.seeded(EntityClass.AGENT, ["carol"]),
        })
        asyncio.run(agents.refresh(EntityClass.AGENT))
        gate = ReferentialValidationGate(_make_cache(), agent_cache=agents)

        assert gate.validate({"action": "produce", "provider": "carol"}) == []
        violations = gate.validate({"action": "produce", "provider": "alice"})
        assert [v.code for v in violations] == [ViolationCode.UNKNOWN_PROVIDER]

    def test_gate_has_no_side_effects(self):
        cache = _make_cache()
        gate = ReferentialValidationGate(cache)
        before = cache.snapshot(EntityClass.UNIT)
        gate.validate({"action": "produce", "resourceQuantity": {"hasUnit": "meter"}})
        assert cache.snapshot(EntityClass.UNIT) is before


class TestProcessValidation:
    def setup_method(self):
        self.gate = ReferentialValidationGate(_make_cache())

    def test_valid_process(self):
        t0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        violations = self.gate.validate({
            "kind": "process",
            "name": "Assemble chassis",
            "inScopeOf": "alice",
            "hasBeginning": t0,
            "hasEnd": t0 + timedelta(days=1),
        })
        assert violations == []

    def test_name_required_instead_of_action(self):
        violations = self.gate.validate({"kind": "process", "name": "   "})
        assert [v.code for v in violations] == [ViolationCode.NAME_REQUIRED]
        assert violations[0].field == "name"

    def test_process_checks_scope_agent_and_window(self):
        t0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        violations = self.gate.validate(WriteIntent(
            kind=WriteIntentKind.PROCESS,
            name="Review",
            in_scope_of="eve",
            has_beginning=t0,
            has_end=t0,
        ))
        assert [v.code for v in violations] == [
            ViolationCode.UNKNOWN_SCOPE_AGENT,
            ViolationCode.BEGIN_NOT_BEFORE_END,
        ]

    def test_name_not_required_for_events(self):
        assert self.gate.validate({"kind": "economic_event", "action": "produce"}) == []
