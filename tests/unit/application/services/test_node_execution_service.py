"""测试：NodeExecutionService 执行边界"""

import pytest

from src.application.services.node_execution_service import NodeExecutionService
from src.domain.entities.node_result import NodeResult
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.ports.node_executor import NodeExecutionContext, NodeExecutor, NodeExecutorRegistry
from src.domain.value_objects.node_type import NodeKind


class EchoExecutor(NodeExecutor):
    def __init__(self):
        self.contexts: list[NodeExecutionContext] = []

    async def execute(self, node: WorkflowNode, context: NodeExecutionContext) -> NodeResult:
        self.contexts.append(context)
        return NodeResult.succeeded(
            node_id=node.id, node_name=None, input=context.inputs, output=context.inputs
        )


class ExplodingExecutor(NodeExecutor):
    async def execute(self, node: WorkflowNode, context: NodeExecutionContext) -> NodeResult:
        raise KeyError("missing")


def _node(node_type: str, config: dict | None = None) -> WorkflowNode:
    return WorkflowNode.create(
        node_id="n1", name="Step", type="action", node_type=node_type, config=config
    )


@pytest.mark.asyncio
async def test_input_mapping_is_resolved_before_dispatch():
    executor = EchoExecutor()
    registry = NodeExecutorRegistry()
    registry.register(NodeKind.HTTP, executor)
    service = NodeExecutionService(registry=registry)
    previous = [NodeResult.succeeded(node_id="t", node_name="Trigger", input={}, output={"id": 7})]

    result = await service.execute_workflow_node(
        _node("http", {"inputMapping": {"uri": {"$var": "$.Trigger.id"}, "q": {"$var": "$.input.q"}}}),
        previous,
        "token-1",
        {"q": "search"},
    )

    assert result.success
    assert result.output == {"uri": 7, "q": "search"}
    # 结果中的节点名以节点为准
    assert result.node_name == "Step"
    assert executor.contexts[0].access_token == "token-1"


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_failed_result():
    registry = NodeExecutorRegistry()
    registry.register(NodeKind.GATE, ExplodingExecutor())
    service = NodeExecutionService(registry=registry)

    result = await service.execute_workflow_node(_node("gate"), [], "token")

    assert result.success is False
    assert result.error.code == "NODE_EXECUTION_ERROR"
    assert result.error.details["type"] == "KeyError"


@pytest.mark.asyncio
async def test_unregistered_kind_becomes_failed_result():
    service = NodeExecutionService(registry=NodeExecutorRegistry())

    result = await service.execute_workflow_node(_node("ai", {"prompt": "x"}), [], "token")

    assert result.success is False
    assert "ai" in result.message


@pytest.mark.asyncio
async def test_unresolvable_variable_becomes_failed_result():
    registry = NodeExecutorRegistry()
    registry.register(NodeKind.HTTP, EchoExecutor())
    service = NodeExecutionService(registry=registry)

    result = await service.execute_workflow_node(
        _node("http", {"inputMapping": {"uri": {"$var": "$.Nope.x"}}}), [], "token"
    )

    assert result.success is False
    assert "Node not found" in result.message
