"""NodeExecutor Port（节点执行器端口）

Domain 层端口：定义节点执行器接口与按 NodeKind 分派的注册表。
节点执行需要外部依赖（HTTP 客户端、集成平台、LLM），具体实现位于 Infrastructure 层。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from src.domain.entities.node_result import NodeResult
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import UnsupportedNodeTypeError
from src.domain.value_objects.node_type import NodeKind


@dataclass(frozen=True)
class NodeExecutionContext:
    """单个节点执行时可见的上下文

    属性说明：
    - previous_results: 本次运行中已完成节点的结果（按节点顺序）
    - trigger_input: 触发载荷
    - access_token: 集成平台访问令牌
    - inputs: 已解析 $var 引用的 inputMapping
    """

    previous_results: list[NodeResult] = field(default_factory=list)
    trigger_input: dict[str, Any] = field(default_factory=dict)
    access_token: str = ""
    inputs: dict[str, Any] = field(default_factory=dict)


class NodeExecutor(ABC):
    """节点执行器接口

    每种节点类型都有对应的执行器实现。
    业务性失败（条件门未满足）返回 success=False 的 NodeResult；
    其余失败抛出 NodeExecutionError，由执行边界统一转换。
    """

    @abstractmethod
    async def execute(self, node: WorkflowNode, context: NodeExecutionContext) -> NodeResult:
        """执行节点

        参数：
            node: 节点实体
            context: 执行上下文

        返回：
            NodeResult

        异常：
            NodeExecutionError: 执行失败
        """
        pass


class NodeExecutorRegistry:
    """节点执行器注册表

    管理所有节点类型的执行器
    """

    def __init__(self):
        self._executors: dict[NodeKind, NodeExecutor] = {}

    def register(self, kind: NodeKind, executor: NodeExecutor) -> None:
        self._executors[kind] = executor

    def get(self, kind: NodeKind) -> NodeExecutor:
        """获取执行器

        抛出：
            UnsupportedNodeTypeError: 未注册的节点类型
        """
        executor = self._executors.get(kind)
        if executor is None:
            raise UnsupportedNodeTypeError(kind.value)
        return executor

    def has(self, kind: NodeKind) -> bool:
        return kind in self._executors
