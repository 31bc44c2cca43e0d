"""Tests for step aggregation precedence."""

import pytest

from opledger.operations.aggregator import aggregate, remaining_message
from opledger.operations.statuses import OperationStatus


class TestFailurePrecedence:
    def test_any_failure_fails_the_operation(self, make_step):
        steps = [
            make_step("a", "deployed"),
            make_step("b", "deploying"),
            make_step("c", "deployment_failed", "quota exceeded"),
        ]
        result = aggregate("deploy", steps)
        assert result.status is OperationStatus.DEPLOYMENT_FAILED
        assert result.message == "quota exceeded"

    def test_first_failure_wins(self, make_step):
        steps = [
            make_step("a", "deleting_failed", "first"),
            make_step("b", "deleting_failed", "second"),
        ]
        assert aggregate("delete", steps).message == "first"

    @pytest.mark.parametrize("position", [0, 1, 2, 3])
    def test_failure_position_irrelevant(self, make_step, position):
        steps = [make_step(str(i), "updated") for i in range(4)]
        steps[position] = make_step(str(position), "failed", "boom")
        assert aggregate("update", steps).status is OperationStatus.UPDATING_FAILED

    def test_failed_step_uses_operation_action_kind(self, make_step):
        # A generic step failure maps onto the parent's failed status
        result = aggregate("action", [make_step("a", "failed", "nope")])
        assert result.status is OperationStatus.ACTION_FAILED


class TestInProgress:
    def test_remaining_count_message(self, make_step):
        steps = [
            make_step("a", "deployed"),
            make_step("b", "deploying"),
            make_step("c", "awaiting_deployment"),
        ]
        result = aggregate("deploy", steps)
        assert result.status is OperationStatus.DEPLOYING
        assert result.message == "2 of 3 steps remaining"

    def test_zero_steps_is_in_progress(self):
        result = aggregate("deploy", [])
        assert result.status is OperationStatus.DEPLOYING
        assert result.message == ""

    def test_remaining_message(self):
        assert remaining_message(1, 4) == "1 of 4 steps remaining"
        assert remaining_message(0, 0) == ""


class TestSuccess:
    def test_all_succeeded(self, make_step):
        steps = [make_step("a", "deployed", "ok"), make_step("b", "updated")]
        result = aggregate("deploy", steps)
        assert result.status is OperationStatus.DEPLOYED
        assert result.message == ""

    def test_recompute_is_idempotent(self, make_step):
        steps = [make_step("a", "deleted"), make_step("b", "deleted")]
        assert aggregate("delete", steps) == aggregate("delete", steps)
