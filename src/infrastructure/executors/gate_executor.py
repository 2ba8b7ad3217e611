"""Gate Executor（条件门执行器）

评估 condition {field, operator, value}：
- field 为 {"$var": "$..."} 引用或路径字符串；不以 "$." 开头的路径从最近一个节点的输出读取
- 比较使用规范化字符串形式：布尔为 true/false，空值为 null，整数值的浮点数按整数
- 条件不满足返回 success=False（GATE_CONDITION_FAILED），这是提前结束运行的正常方式
"""

import json
from typing import Any

from pydantic import ValidationError

from src.domain.entities.node_result import NodeError, NodeResult
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import NodeExecutionError
from src.domain.ports.node_executor import NodeExecutionContext, NodeExecutor
from src.domain.services.variable_resolver import (
    PATH_PREFIX,
    VariableResolutionError,
    read_path,
    resolve_variable_path,
)
from src.domain.value_objects.node_config import GateNodeConfig, VariableRef

GATE_CONDITION_FAILED = "GATE_CONDITION_FAILED"
GATE_EXECUTION_ERROR = "GATE_EXECUTION_ERROR"


def canonical(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, int | float):
        return str(value)
    if isinstance(value, dict | list):
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    return str(value)


class GateExecutor(NodeExecutor):
    async def execute(self, node: WorkflowNode, context: NodeExecutionContext) -> NodeResult:
        try:
            config = GateNodeConfig.model_validate(node.config)
        except ValidationError as e:
            raise NodeExecutionError(
                f"Gate node configuration is invalid: {e.errors()}", code=GATE_EXECUTION_ERROR
            ) from e

        condition = config.condition
        if condition is None:
            raise NodeExecutionError(
                "Gate node requires condition configuration", code=GATE_EXECUTION_ERROR
            )
        if not condition.field or not condition.operator or "value" not in condition.model_fields_set:
            raise NodeExecutionError(
                "Gate node requires field, operator, and value in condition",
                code=GATE_EXECUTION_ERROR,
            )

        path = condition.field.path if isinstance(condition.field, VariableRef) else condition.field
        try:
            field_value = self._resolve_field(path, context)
        except VariableResolutionError as e:
            raise NodeExecutionError(str(e), code=GATE_EXECUTION_ERROR) from e

        expected_value = condition.value
        operator = condition.operator
        equal = canonical(field_value) == canonical(expected_value)
        condition_met = equal if operator == "equals" else not equal

        summary = {
            "fieldValue": field_value,
            "expectedValue": expected_value,
            "operator": operator,
        }
        output = {"conditionMet": condition_met, **summary}

        if condition_met:
            return NodeResult.succeeded(
                node_id=node.id, node_name=node.name, input=summary, output=output
            )

        symbol = "!==" if operator == "equals" else "==="
        return NodeResult.failed(
            node_id=node.id,
            node_name=node.name,
            input=summary,
            output=output,
            error=NodeError(
                message=(
                    f"Gate condition not met: {canonical(field_value)} {symbol} "
                    f"{canonical(expected_value)}"
                ),
                code=GATE_CONDITION_FAILED,
            ),
        )

    def _resolve_field(self, path: str, context: NodeExecutionContext) -> Any:
        if path.startswith(PATH_PREFIX):
            return resolve_variable_path(path, context.previous_results, context.trigger_input)
        if not context.previous_results:
            raise VariableResolutionError(f"No previous output to read {path} from")
        latest = context.previous_results[-1].output
        return read_path(latest, [part for part in path.split(".") if part])
