"""Trigger Executor（触发器执行器）

触发器节点不产生外部副作用：把触发载荷展开进输出，供后续节点通过
$.<触发器名>.<字段> 或 $.input.<字段> 引用。
"""

from datetime import UTC, datetime

from src.domain.entities.node_result import NodeResult
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.ports.node_executor import NodeExecutionContext, NodeExecutor
from src.domain.value_objects.node_type import NodeKind

DEFAULT_EVENTS = {
    NodeKind.MANUAL_TRIGGER: "manual.trigger",
    NodeKind.EVENT_TRIGGER: "workflow.triggered",
}


class TriggerExecutor(NodeExecutor):
    """手动触发与事件触发共用的执行器"""

    async def execute(self, node: WorkflowNode, context: NodeExecutionContext) -> NodeResult:
        kind = node.kind
        trigger_type = kind.value.split(":", 1)[1]
        output = {
            "triggerType": trigger_type,
            "timestamp": datetime.now(UTC).isoformat(),
            "event": context.inputs.get("event") or DEFAULT_EVENTS[kind],
            **context.trigger_input,
        }
        return NodeResult.succeeded(
            node_id=node.id,
            node_name=node.name,
            input={**context.inputs, **context.trigger_input},
            output=output,
        )
