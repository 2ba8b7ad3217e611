"""Executors（执行器）

Infrastructure 层：节点执行器实现

导出所有执行器和注册表工厂函数
"""

from src.domain.ports.integration_client import IntegrationClientFactory
from src.domain.ports.llm_port import LLMPort
from src.domain.ports.node_executor import NodeExecutorRegistry
from src.domain.value_objects.node_type import NodeKind
from src.infrastructure.executors.ai_executor import AiExecutor
from src.infrastructure.executors.gate_executor import GateExecutor
from src.infrastructure.executors.http_executor import HttpExecutor
from src.infrastructure.executors.integration_action_executor import IntegrationActionExecutor
from src.infrastructure.executors.trigger_executor import TriggerExecutor

__all__ = [
    "AiExecutor",
    "GateExecutor",
    "HttpExecutor",
    "IntegrationActionExecutor",
    "TriggerExecutor",
    "create_executor_registry",
]


def create_executor_registry(
    *,
    client_factory: IntegrationClientFactory,
    llm: LLMPort | None = None,
    http_timeout: float = 30.0,
) -> NodeExecutorRegistry:
    """创建执行器注册表

    参数：
        client_factory: 按访问令牌创建集成平台客户端
        llm: AI 节点使用的 LLM（未配置时 AI 节点执行失败）
        http_timeout: HTTP 节点超时（秒）

    返回：
        覆盖全部节点类型的执行器注册表
    """
    registry = NodeExecutorRegistry()

    trigger = TriggerExecutor()
    registry.register(NodeKind.MANUAL_TRIGGER, trigger)
    registry.register(NodeKind.EVENT_TRIGGER, trigger)
    registry.register(NodeKind.HTTP, HttpExecutor(timeout=http_timeout))
    registry.register(NodeKind.ACTION, IntegrationActionExecutor(client_factory))
    registry.register(NodeKind.AI, AiExecutor(llm))
    registry.register(NodeKind.GATE, GateExecutor())

    return registry
