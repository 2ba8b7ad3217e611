"""EventSourceProvisioner - 为事件触发器在集成平台上开通事件来源

事件触发的工作流需要集成平台把事件转发到本服务的接入地址：
平台上的 Flow 实例由两个节点组成，
触发节点（连接器事件或数据记录事件）→ 调用本服务 ingest-event 的 API 请求节点。

只处理工作流的第一个节点，其他位置的事件触发器不开通事件来源。
"""

from __future__ import annotations

import logging
import time
from typing import Any

from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import IntegrationError
from src.domain.ports.integration_client import IntegrationClient, IntegrationClientFactory
from src.domain.services.workflow_event_verification import (
    build_event_headers,
    build_event_ingest_url,
)
from src.domain.value_objects.node_config import EventTriggerConfig
from src.domain.value_objects.node_type import NodeKind

logger = logging.getLogger(__name__)

TRIGGER_NODE_KEY = "event-trigger-node"
TRIGGER_NODE_NAME = "Event Trigger Node"
FORWARD_NODE_KEY = "send-update-to-my-app"
FORWARD_NODE_TYPE = "api-request-to-your-app"
CONNECTOR_EVENT_TRIGGER = "connector-event-trigger"

# 变化后需要同步 Flow 实例的配置字段
TRACKED_FIELDS = (
    "eventSource",
    "integrationKey",
    "eventType",
    "dataCollection",
    "connectorEventKey",
)


def has_required_event_trigger_fields(node: WorkflowNode) -> bool:
    if node.kind != NodeKind.EVENT_TRIGGER:
        return False
    config = EventTriggerConfig.model_validate(node.config)
    if config.event_source == "connector":
        return bool(config.integration_key and config.connector_event_key and config.event_type)
    return bool(config.integration_key and config.data_collection and config.event_type)


def has_event_trigger_config_changed(old_node: WorkflowNode, new_node: WorkflowNode) -> bool:
    return any(old_node.config.get(key) != new_node.config.get(key) for key in TRACKED_FIELDS)


def _with_flow_instance(node: WorkflowNode, flow_id: str | None) -> WorkflowNode:
    config = {**node.config, "flowInstanceId": flow_id}
    return WorkflowNode.from_dict({**node.to_dict(), "config": config})


def build_flow_instance_nodes(
    *,
    event_type: str,
    data_collection: str,
    connector_event_key: str | None,
    workflow_id: str,
    host_name: str,
    secret: str,
) -> dict[str, Any]:
    """构建 Flow 实例节点（创建和更新共用）"""
    if event_type == CONNECTOR_EVENT_TRIGGER:
        trigger_config: dict[str, Any] = {"eventKey": connector_event_key}
    else:
        trigger_config = {"dataSource": {"collectionKey": data_collection}}

    return {
        TRIGGER_NODE_KEY: {
            "name": TRIGGER_NODE_NAME,
            "type": event_type,
            "config": trigger_config,
            "links": [{"key": FORWARD_NODE_KEY}],
        },
        FORWARD_NODE_KEY: {
            "type": FORWARD_NODE_TYPE,
            "name": "Create Data Record in my App",
            "config": {
                "request": {
                    "body": {
                        "data": {"$var": f"$.input.{TRIGGER_NODE_KEY}"},
                        "headers": build_event_headers(workflow_id, secret),
                    },
                    "method": "POST",
                    "uri": build_event_ingest_url(host_name, workflow_id),
                },
            },
            "links": [],
            "isCustomized": True,
        },
    }


class EventSourceProvisioner:
    def __init__(
        self,
        *,
        client_factory: IntegrationClientFactory,
        host_name: str,
        verification_secret: str,
    ) -> None:
        self._client_factory = client_factory
        self._host_name = host_name
        self._secret = verification_secret

    async def sync_first_node(
        self,
        workflow_id: str,
        existing_nodes: list[WorkflowNode],
        new_nodes: list[WorkflowNode],
        access_token: str,
    ) -> tuple[list[WorkflowNode], bool]:
        """同步第一个节点的事件来源

        返回：
            (要保存的节点列表, 是否创建或更新了 Flow 实例)

        抛出：
            IntegrationError: 集成平台调用失败
        """
        if not new_nodes or not has_required_event_trigger_fields(new_nodes[0]):
            return new_nodes, False

        first = new_nodes[0]
        existing_first = existing_nodes[0] if existing_nodes else None
        existing_flow_id = existing_first.config.get("flowInstanceId") if existing_first else None
        client = self._client_factory(access_token)

        if not existing_flow_id:
            flow_id = await self._create(client, workflow_id, first)
        elif existing_first is not None and has_event_trigger_config_changed(existing_first, first):
            flow_id = await self._update(client, workflow_id, existing_first, first, existing_flow_id)
        else:
            # 构建器未回传 flowInstanceId 时沿用已有实例
            if first.config.get("flowInstanceId"):
                return new_nodes, False
            return [_with_flow_instance(first, existing_flow_id), *new_nodes[1:]], False

        return [_with_flow_instance(first, flow_id), *new_nodes[1:]], True

    async def _create(
        self, client: IntegrationClient, workflow_id: str, node: WorkflowNode
    ) -> str | None:
        config = EventTriggerConfig.model_validate(node.config)
        integration = await client.get_integration(config.integration_key or "")
        connection = integration.get("connection") or {}
        if not integration.get("id") or not connection.get("id"):
            logger.info(
                "flow_instance_skipped_no_connection",
                extra={"workflow_id": workflow_id, "integration_key": config.integration_key},
            )
            return None

        payload = {
            "name": f"Event for workflowId: {workflow_id}",
            "connectionId": connection["id"],
            "integrationId": integration["id"],
            "instanceKey": f"event-for-workflowId-{workflow_id}-{int(time.time() * 1000)}",
            "nodes": self._nodes_for(workflow_id, config),
        }
        flow_instance = await client.create_flow_instance(payload)
        flow_id = flow_instance.get("id") or None
        logger.info(
            "flow_instance_created",
            extra={"workflow_id": workflow_id, "flow_instance_id": flow_id},
        )
        return flow_id

    async def _update(
        self,
        client: IntegrationClient,
        workflow_id: str,
        old_node: WorkflowNode,
        new_node: WorkflowNode,
        flow_instance_id: str,
    ) -> str | None:
        # 集成变化时 Flow 实例挂在不同连接上，只能删除重建
        if old_node.config.get("integrationKey") != new_node.config.get("integrationKey"):
            try:
                await client.delete_flow_instance(flow_instance_id)
                logger.info("flow_instance_deleted", extra={"flow_instance_id": flow_instance_id})
            except IntegrationError as exc:
                logger.warning(
                    "flow_instance_delete_failed",
                    extra={"flow_instance_id": flow_instance_id, "error": str(exc)},
                )
            return await self._create(client, workflow_id, new_node)

        config = EventTriggerConfig.model_validate(new_node.config)
        await client.patch_flow_instance(
            flow_instance_id, {"nodes": self._nodes_for(workflow_id, config)}
        )
        logger.info(
            "flow_instance_patched",
            extra={"workflow_id": workflow_id, "flow_instance_id": flow_instance_id},
        )
        return flow_instance_id

    def _nodes_for(self, workflow_id: str, config: EventTriggerConfig) -> dict[str, Any]:
        return build_flow_instance_nodes(
            event_type=config.event_type or "",
            data_collection=config.data_collection or "",
            connector_event_key=config.connector_event_key,
            workflow_id=workflow_id,
            host_name=self._host_name,
            secret=self._secret,
        )
