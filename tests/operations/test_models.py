"""Tests for Operation and OperationStep records and their wire format."""

import dataclasses

import pytest

from opledger.core.errors import UnknownActionKindError, UnknownStatusError
from opledger.operations.models import Operation, OperationStep
from opledger.operations.statuses import ActionKind, OperationStatus


class TestOperationStep:
    def test_status_coerced_from_string(self):
        step = OperationStep("vm", "deploying")
        assert step.status is OperationStatus.DEPLOYING

    def test_unknown_status_rejected(self):
        with pytest.raises(UnknownStatusError):
            OperationStep("vm", "warming_up")

    def test_frozen(self):
        step = OperationStep("vm", "deploying")
        with pytest.raises(dataclasses.FrozenInstanceError):
            step.status = OperationStatus.DEPLOYED

    def test_to_dict_camel_case(self):
        step = OperationStep(
            step_id="vm",
            status="deployed",
            step_title="Deploy VM",
            resource_id="res-1",
            resource_template_name="tre-vm",
            resource_type="user_resource",
            resource_action="install",
            message="ok",
            updated_when=100.0,
        )
        assert step.to_dict() == {
            "stepId": "vm",
            "stepTitle": "Deploy VM",
            "resourceId": "res-1",
            "resourceTemplateName": "tre-vm",
            "resourceType": "user_resource",
            "resourceAction": "install",
            "status": "deployed",
            "message": "ok",
            "updatedWhen": 100.0,
        }

    def test_from_dict_defaults(self):
        step = OperationStep.from_dict({"stepId": "vm", "status": "deploying"})
        assert step.step_title == ""
        assert step.resource_type is None
        assert step.updated_when > 0

    def test_dict_round_trip(self):
        step = OperationStep("vm", "deleting", step_title="Delete", updated_when=5.0)
        assert OperationStep.from_dict(step.to_dict()) == step


class TestOperation:
    def test_create_sets_awaiting_status(self):
        op = Operation.create("ws-1", "/workspaces/ws-1", 2, "update", now=10.0)
        assert op.status is OperationStatus.AWAITING_UPDATE
        assert op.action == "update"
        assert op.kind is ActionKind.UPDATE
        assert op.created_when == op.updated_when == 10.0
        assert op.message == ""
        assert op.steps is None
        assert not op.is_terminal

    def test_create_with_steps_expected(self):
        op = Operation.create("ws-1", "/workspaces/ws-1", 1, "deploy", steps_expected=True)
        assert op.steps == ()
        assert not op.has_steps

    def test_create_allocates_unique_ids(self):
        a = Operation.create("ws-1", "/ws", 1, "deploy")
        b = Operation.create("ws-1", "/ws", 1, "deploy")
        assert a.id != b.id

    def test_create_custom_action(self):
        op = Operation.create("ws-1", "/ws", 1, "restart_vm")
        assert op.action == "restart_vm"
        assert op.kind is ActionKind.ACTION
        assert op.status is OperationStatus.INVOKING_ACTION

    def test_create_empty_action(self):
        with pytest.raises(UnknownActionKindError):
            Operation.create("ws-1", "/ws", 1, "")

    def test_create_accepts_action_kind_member(self):
        op = Operation.create("ws-1", "/ws", 1, ActionKind.DELETE)
        assert op.to_dict()["action"] == "delete"

    @pytest.mark.parametrize("identifier", ["invoke_action", "restart_vm"])
    def test_action_identifier_serialized_unchanged(self, identifier):
        op = Operation.create("ws-1", "/ws", 1, identifier, now=1.0)
        data = op.to_dict()
        assert data["action"] == identifier
        restored = Operation.from_dict(data)
        assert restored.action == identifier
        assert restored.kind is ActionKind.ACTION

    def test_to_dict_omits_absent_steps(self):
        op = Operation.create("ws-1", "/ws", 1, "delete", user={"id": "u-1"}, now=1.0)
        data = op.to_dict()
        assert "steps" not in data
        assert data["resourceId"] == "ws-1"
        assert data["resourcePath"] == "/ws"
        assert data["resourceVersion"] == 1
        assert data["status"] == "awaiting_deletion"
        assert data["action"] == "delete"
        assert data["createdWhen"] == 1.0
        assert data["updatedWhen"] == 1.0
        assert data["user"] == {"id": "u-1"}

    def test_to_dict_includes_empty_steps(self):
        op = Operation.create("ws-1", "/ws", 1, "deploy", steps_expected=True)
        assert op.to_dict()["steps"] == []

    def test_from_dict_round_trip_with_steps(self):
        op = Operation.create("ws-1", "/ws", 1, "deploy", now=1.0)
        op = dataclasses.replace(op, steps=(OperationStep("a", "deploying", updated_when=2.0),))
        assert Operation.from_dict(op.to_dict()) == op

    def test_classification(self):
        op = Operation.create("ws-1", "/ws", 1, "action")
        assert op.status is OperationStatus.INVOKING_ACTION
        assert op.classification.phase.value == "in_progress"
