"""OutputSchemaCalculator - 静态推导节点输出的数据形状

原则：
- 只读取配置和集成平台元数据，不执行节点的真实副作用
- 不修改持久化状态
- 任何失败都记录日志并退化为空对象 Schema（与编排器不吞异常的策略不同）
- 批量计算按数组顺序逐节点独立进行，不把前一个节点的 Schema 传给后一个节点
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any

from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import IntegrationError
from src.domain.ports.integration_client import IntegrationClient, IntegrationClientFactory
from src.domain.value_objects.node_config import (
    EMPTY_OBJECT_SCHEMA,
    ActionNodeConfig,
    AiNodeConfig,
    EventTriggerConfig,
    HttpNodeConfig,
    ManualTriggerConfig,
)
from src.domain.value_objects.node_type import NodeKind

logger = logging.getLogger(__name__)

FALLBACK_TRIGGER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "FALLBACK": {"type": "object", "properties": {}},
    },
}

AI_TEXT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "text": {"type": "string", "description": "Generated text from AI"},
    },
}


def empty_object_schema() -> dict[str, Any]:
    return copy.deepcopy(EMPTY_OBJECT_SCHEMA)


def http_response_schema(body_schema: dict[str, Any] | None) -> dict[str, Any]:
    """把用户声明的 body Schema 包进固定的 HTTP 响应信封"""
    return {
        "type": "object",
        "properties": {
            "statusCode": {"type": "number", "description": "HTTP status code"},
            "headers": {
                "type": "object",
                "description": "HTTP response headers",
                "properties": {},
            },
            "body": copy.deepcopy(body_schema) if body_schema else empty_object_schema(),
        },
    }


@dataclass(frozen=True)
class NodeOutputSchema:
    node_id: str
    output_schema: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"nodeId": self.node_id, "outputSchema": self.output_schema}


class OutputSchemaCalculator:
    def __init__(self, *, client_factory: IntegrationClientFactory) -> None:
        self._client_factory = client_factory

    async def calculate_node_output_schema(
        self, node: WorkflowNode, access_token: str
    ) -> dict[str, Any]:
        try:
            schema = await self._calculate(node, access_token)
        except Exception as exc:  # noqa: BLE001 - log-and-degrade policy
            logger.warning(
                "output_schema_calculation_failed",
                extra={"node_id": node.id, "node_name": node.name, "error": str(exc)},
            )
            return empty_object_schema()
        return schema if isinstance(schema, dict) else empty_object_schema()

    async def calculate_workflow_output_schemas(
        self, nodes: list[WorkflowNode], access_token: str
    ) -> list[NodeOutputSchema]:
        results: list[NodeOutputSchema] = []
        for node in nodes:
            schema = await self.calculate_node_output_schema(node, access_token)
            results.append(NodeOutputSchema(node_id=node.id, output_schema=schema))
        return results

    async def update_nodes_with_output_schemas(
        self, nodes: list[WorkflowNode], access_token: str
    ) -> list[WorkflowNode]:
        schemas = await self.calculate_workflow_output_schemas(nodes, access_token)
        by_id = {item.node_id: item.output_schema for item in schemas}
        return [node.with_output_schema(by_id.get(node.id) or empty_object_schema()) for node in nodes]

    # ==================== 按节点类型分派 ====================

    async def _calculate(self, node: WorkflowNode, access_token: str) -> dict[str, Any] | None:
        kind = node.kind

        if kind == NodeKind.MANUAL_TRIGGER:
            config = ManualTriggerConfig.model_validate(node.config)
            return copy.deepcopy(config.input_schema) if config.input_schema else empty_object_schema()

        if kind == NodeKind.EVENT_TRIGGER:
            config = EventTriggerConfig.model_validate(node.config)
            return await self._event_trigger_schema(config, access_token)

        if kind == NodeKind.HTTP:
            config = HttpNodeConfig.model_validate(node.config)
            return http_response_schema(config.output_schema)

        if kind == NodeKind.AI:
            config = AiNodeConfig.model_validate(node.config)
            if config.structured_output:
                return copy.deepcopy(config.output_schema) if config.output_schema else empty_object_schema()
            return copy.deepcopy(AI_TEXT_SCHEMA)

        if kind == NodeKind.ACTION:
            config = ActionNodeConfig.model_validate(node.config)
            if not config.action_id:
                return empty_object_schema()
            action = await self._client(access_token).get_action(config.action_id)
            return action.get("outputSchema")

        return empty_object_schema()

    async def _event_trigger_schema(
        self, config: EventTriggerConfig, access_token: str
    ) -> dict[str, Any] | None:
        is_connector_event = config.event_source == "connector"

        if is_connector_event and config.integration_key and config.connector_event_key:
            client = self._client(access_token)
            integration = await client.get_integration(config.integration_key)
            connector_id = integration.get("connectorId")
            if not connector_id:
                raise IntegrationError(
                    f"Integration {config.integration_key} does not have a connectorId"
                )
            event = await client.get_connector_event(connector_id, config.connector_event_key)
            return event.get("schema") or empty_object_schema()

        if not is_connector_event and config.integration_key and config.data_collection:
            collection = await self._client(access_token).get_data_collection(
                config.integration_key, config.data_collection
            )
            return collection.get("fieldsSchema")

        return copy.deepcopy(FALLBACK_TRIGGER_SCHEMA)

    def _client(self, access_token: str) -> IntegrationClient:
        return self._client_factory(access_token)
