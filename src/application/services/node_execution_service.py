"""NodeExecutionService - 单节点执行边界

职责：
1. 解析 config.inputMapping 中的 $var 引用（前序节点输出、触发载荷）
2. 按 NodeKind 分派到已注册的 NodeExecutor
3. 把执行器抛出的任何异常转换为失败的 NodeResult，调用方永远拿不到原始异常

对运行记录无副作用（不落库），外部副作用全部发生在执行器内。
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from src.domain.entities.node_result import NODE_EXECUTION_ERROR, NodeError, NodeResult
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import NodeExecutionError
from src.domain.ports.node_executor import NodeExecutionContext, NodeExecutorRegistry
from src.domain.services.variable_resolver import resolve_variables

logger = logging.getLogger(__name__)


def describe_exception(exc: BaseException) -> dict[str, Any]:
    """异常的可序列化描述（写入 NodeResult.error.details）"""
    return {"type": type(exc).__name__, "message": str(exc)}


class NodeExecutionService:
    def __init__(self, *, registry: NodeExecutorRegistry) -> None:
        self._registry = registry

    async def execute_workflow_node(
        self,
        node: WorkflowNode,
        previous_results: list[NodeResult],
        access_token: str,
        trigger_input: dict[str, Any] | None = None,
    ) -> NodeResult:
        """执行一个节点，始终返回 NodeResult"""
        trigger_input = dict(trigger_input or {})
        inputs: dict[str, Any] = {}

        try:
            executor = self._registry.get(node.kind)
            input_mapping = node.config.get("inputMapping") or {}
            if input_mapping:
                inputs = resolve_variables(input_mapping, previous_results, trigger_input)

            context = NodeExecutionContext(
                previous_results=list(previous_results),
                trigger_input=trigger_input,
                access_token=access_token,
                inputs=inputs,
            )
            result = await executor.execute(node, context)
        except NodeExecutionError as exc:
            logger.info(
                "node_execution_failed",
                extra={"node_id": node.id, "node_name": node.name, "code": exc.code, "error": str(exc)},
            )
            result = NodeResult.failed(
                node_id=node.id,
                node_name=node.name,
                input=inputs,
                error=NodeError(message=str(exc), code=exc.code, details=exc.details),
            )
        except Exception as exc:  # noqa: BLE001 - node execution boundary
            logger.exception(
                "node_execution_error",
                extra={"node_id": node.id, "node_name": node.name},
            )
            result = NodeResult.failed(
                node_id=node.id,
                node_name=node.name,
                input=inputs,
                error=NodeError(
                    message=str(exc) or type(exc).__name__,
                    code=NODE_EXECUTION_ERROR,
                    details=describe_exception(exc),
                ),
            )

        if result.node_name != node.name:
            result = replace(result, node_name=node.name)
        return result
