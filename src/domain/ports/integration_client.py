"""IntegrationClient Port - 集成平台客户端抽象接口

职责：
- 以访问令牌为作用域调用集成平台：读取集成/动作/数据集合元数据、执行动作、
  读取连接器事件 Schema、创建 Agent 会话、管理事件来源 Flow 实例
- 隔离 httpx 等具体实现

所有方法失败时抛出 IntegrationError。
"""

from collections.abc import Callable
from typing import Any, Protocol


class IntegrationClient(Protocol):
    """集成平台客户端（单个访问令牌作用域）"""

    async def get_integration(self, integration_key: str) -> dict[str, Any]:
        """读取集成（包含 id、connectorId、connection）"""
        ...

    async def get_connector_event(self, connector_id: str, event_key: str) -> dict[str, Any]:
        """读取连接器事件定义（包含 schema）"""
        ...

    async def get_data_collection(
        self, integration_key: str, collection_key: str
    ) -> dict[str, Any]:
        """通过连接读取数据集合（包含 fieldsSchema）"""
        ...

    async def get_action(self, action_id: str) -> dict[str, Any]:
        """读取动作定义（包含 outputSchema）"""
        ...

    async def run_action(
        self,
        action_id: str,
        input: dict[str, Any],
        *,
        connection_id: str | None = None,
    ) -> Any:
        """执行集成动作并返回其输出"""
        ...

    async def create_agent_session(self, prompt: str | None = None) -> dict[str, Any]:
        """创建 Agent 会话（返回 id 或 sessionId）"""
        ...

    async def create_flow_instance(self, payload: dict[str, Any]) -> dict[str, Any]:
        ...

    async def patch_flow_instance(self, flow_instance_id: str, payload: dict[str, Any]) -> None:
        ...

    async def delete_flow_instance(self, flow_instance_id: str) -> None:
        ...


# 根据访问令牌创建客户端
IntegrationClientFactory = Callable[[str], IntegrationClient]
