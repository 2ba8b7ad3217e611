"""测试：WorkflowNode 实体与 NodeResult 序列化"""

import pytest

from src.domain.entities.node_result import NodeError, NodeResult
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import DomainValidationError, UnsupportedNodeTypeError
from src.domain.value_objects.node_type import NodeKind


class TestWorkflowNode:
    def test_from_dict_should_accept_builder_shape(self):
        node = WorkflowNode.from_dict(
            {
                "id": "n1",
                "name": "HTTP Request",
                "type": "action",
                "nodeType": "http",
                "config": {"uri": "https://x", "method": "post", "flowInstanceId": "keep-me"},
            }
        ).validated()

        assert node.kind == NodeKind.HTTP
        assert node.config["method"] == "POST"
        # 构建器写入的额外字段原样保留
        assert node.config["flowInstanceId"] == "keep-me"

    def test_trigger_without_trigger_type_defaults_to_manual(self):
        node = WorkflowNode.from_dict({"id": "t", "name": "Trigger", "type": "trigger"})

        assert node.kind == NodeKind.MANUAL_TRIGGER
        assert node.is_trigger

    def test_unknown_category_should_raise(self):
        with pytest.raises(DomainValidationError):
            WorkflowNode.from_dict({"id": "x", "name": "X", "type": "loop"})

    def test_unknown_action_type_should_raise(self):
        node = WorkflowNode.from_dict({"id": "x", "name": "X", "type": "action", "nodeType": "python"})

        with pytest.raises(UnsupportedNodeTypeError):
            _ = node.kind

    def test_invalid_http_method_should_fail_validation(self):
        node = WorkflowNode.from_dict(
            {"id": "x", "name": "X", "type": "action", "nodeType": "http", "config": {"method": "FETCH"}}
        )

        with pytest.raises(DomainValidationError):
            node.validated()

    def test_create_requires_name(self):
        with pytest.raises(DomainValidationError):
            WorkflowNode.create(name=" ", type="action", node_type="http")

    def test_to_dict_round_trips_output_schema(self):
        node = WorkflowNode.create(
            node_id="a", name="AI", type="action", node_type="ai", config={"prompt": "hi"}
        ).with_output_schema({"type": "object", "properties": {}})

        restored = WorkflowNode.from_dict(node.to_dict())

        assert restored == node


class TestNodeResult:
    def test_failed_result_serializes_error(self):
        result = NodeResult.failed(
            node_id="n1",
            node_name="Gate",
            error=NodeError(message="not met", code="GATE_CONDITION_FAILED"),
        )

        data = result.to_dict()

        assert data["success"] is False
        assert data["message"] == "not met"
        assert data["input"] == {}
        assert data["error"] == {"message": "not met", "code": "GATE_CONDITION_FAILED"}
        assert NodeResult.from_dict(data) == result

    def test_succeeded_message_uses_node_name(self):
        result = NodeResult.succeeded(node_id="n1", node_name="Fetch", input={}, output=1)

        assert result.message == "Fetch completed successfully"
