"""Tests for StepLedger ordering and in-place updates."""

import pytest

from opledger.core.errors import OperationNotFoundError
from opledger.operations.statuses import OperationStatus
from opledger.operations.steps import StepLedger


class TestStepLedger:
    def test_record_unopened_operation_raises(self, make_step):
        ledger = StepLedger()
        with pytest.raises(OperationNotFoundError):
            ledger.record_step("op-1", make_step("a", "deploying"))

    def test_appends_in_arrival_order(self, make_step):
        ledger = StepLedger()
        ledger.open("op-1")
        ledger.record_step("op-1", make_step("b", "deploying"))
        steps = ledger.record_step("op-1", make_step("a", "deploying"))
        assert [s.step_id for s in steps] == ["b", "a"]

    def test_update_keeps_position(self, make_step):
        ledger = StepLedger()
        ledger.open("op-1")
        for step_id in ("a", "b", "c"):
            ledger.record_step("op-1", make_step(step_id, "deploying"))
        steps = ledger.record_step("op-1", make_step("a", "deployed", "done"))
        assert [s.step_id for s in steps] == ["a", "b", "c"]
        assert steps[0].status is OperationStatus.DEPLOYED
        assert steps[0].message == "done"

    def test_update_keeps_descriptive_fields(self, make_step):
        ledger = StepLedger()
        ledger.open("op-1")
        ledger.record_step("op-1", make_step("a", "deploying", step_title="Deploy VM", resource_id="vm-1"))
        steps = ledger.record_step(
            "op-1", make_step("a", "deployed", step_title="", resource_id="", updated_when=99.0)
        )
        assert steps[0].step_title == "Deploy VM"
        assert steps[0].resource_id == "vm-1"
        assert steps[0].updated_when == 99.0

    def test_open_seeds_and_is_idempotent(self, make_step):
        ledger = StepLedger()
        ledger.open("op-1", [make_step("a", "deploying")])
        ledger.open("op-1", [make_step("z", "deploying")])
        assert [s.step_id for s in ledger.steps("op-1")] == ["a"]
        assert ledger.has_steps("op-1")

    def test_ledgers_are_independent(self, make_step):
        ledger = StepLedger()
        ledger.open("op-1")
        ledger.open("op-2")
        ledger.record_step("op-1", make_step("a", "deploying"))
        assert not ledger.has_steps("op-2")

    def test_discard(self, make_step):
        ledger = StepLedger()
        ledger.open("op-1")
        ledger.discard("op-1")
        assert not ledger.is_open("op-1")
        ledger.discard("op-1")  # no error
