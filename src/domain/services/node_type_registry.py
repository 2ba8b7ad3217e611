"""节点类型注册表 (Node Type Registry)

业务定义：
- 静态目录：NodeKind → {名称、描述、分类、是否触发器、配置 Schema}
- 无运行时状态，不做版本管理
- 新增节点类型 = 新增一个注册表条目 + 节点执行器一个分支 + 输出 Schema 计算器一个分支
- 未知类型是硬错误（UnsupportedNodeTypeError），不是静默空操作

使用示例：
    definition = get_node_type(NodeKind.HTTP)
    definition.configuration_schema["required"]  # ["uri", "method"]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.domain.exceptions import UnsupportedNodeTypeError
from src.domain.value_objects.node_type import NodeKind


@dataclass(frozen=True)
class NodeTypeDefinition:
    kind: NodeKind
    name: str
    description: str
    category: str
    is_trigger: bool
    configuration_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "isTrigger": self.is_trigger,
            "configurationSchema": self.configuration_schema,
        }


_HTTP_CONFIGURATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "uri": {"type": "string", "description": "The URL to make the request to"},
        "method": {
            "type": "string",
            "enum": ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
            "description": "HTTP method to use for the request",
        },
        "headers": {
            "type": "object",
            "additionalProperties": {"type": "string"},
            "description": "HTTP headers to include in the request",
        },
        "queryParameters": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"key": {"type": "string"}, "value": {"type": "string"}},
            },
            "description": "Query parameters to append to the URL",
        },
        "body": {"type": "object", "description": "Body to include in the request"},
        "failOnErrorStatus": {
            "type": "boolean",
            "description": "Treat 4xx/5xx responses as a node failure",
        },
    },
    "required": ["uri", "method"],
}

_NODE_TYPES: tuple[NodeTypeDefinition, ...] = (
    NodeTypeDefinition(
        kind=NodeKind.MANUAL_TRIGGER,
        name="Manual Trigger",
        description="Start the workflow manually",
        category="trigger",
        is_trigger=True,
        configuration_schema={
            "type": "object",
            "properties": {
                "hasInput": {"type": "boolean"},
                "inputSchema": {"type": "object", "description": "Schema of the manual input"},
            },
        },
    ),
    NodeTypeDefinition(
        kind=NodeKind.EVENT_TRIGGER,
        name="Event Trigger",
        description="Trigger the workflow based on events",
        category="trigger",
        is_trigger=True,
        configuration_schema={
            "type": "object",
            "properties": {
                "eventSource": {"type": "string", "enum": ["connector", "data-record"]},
                "integrationKey": {"type": "string"},
                "connectorEventKey": {"type": "string"},
                "dataCollection": {"type": "string"},
                "eventType": {"type": "string"},
            },
            "required": ["integrationKey", "eventType"],
        },
    ),
    NodeTypeDefinition(
        kind=NodeKind.HTTP,
        name="HTTP Request",
        description="Make HTTP requests to external APIs or webhooks",
        category="integration",
        is_trigger=False,
        configuration_schema=_HTTP_CONFIGURATION_SCHEMA,
    ),
    NodeTypeDefinition(
        kind=NodeKind.ACTION,
        name="Action",
        description="Perform action",
        category="action",
        is_trigger=False,
        configuration_schema={
            "type": "object",
            "properties": {
                "actionId": {"type": "string"},
                "connectionId": {"type": "string"},
            },
            "required": ["actionId"],
        },
    ),
    NodeTypeDefinition(
        kind=NodeKind.AI,
        name="AI",
        description="Use AI to process data with custom instructions",
        category="ai",
        is_trigger=False,
        configuration_schema={
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "format": "textarea",
                    "description": "Instructions for the AI on what to do with the input data",
                },
                "structuredOutput": {"type": "boolean", "default": True},
            },
            "required": ["prompt"],
        },
    ),
    NodeTypeDefinition(
        kind=NodeKind.GATE,
        name="Gate",
        description="Control workflow flow based on conditions",
        category="logic",
        is_trigger=False,
        configuration_schema={
            "type": "object",
            "properties": {
                "field": {"type": "string", "description": "Field path from previous step output"},
                "operator": {
                    "type": "string",
                    "enum": ["equals", "not_equals"],
                    "description": "Comparison operator",
                },
                "value": {"type": "string", "description": "Value to compare against"},
            },
            "required": ["field", "operator", "value"],
        },
    ),
)

NODE_TYPE_REGISTRY: dict[NodeKind, NodeTypeDefinition] = {
    definition.kind: definition for definition in _NODE_TYPES
}


def get_node_type(kind: NodeKind | str) -> NodeTypeDefinition:
    """按类型键查找注册表条目

    抛出：
        UnsupportedNodeTypeError: 未注册的类型
    """
    try:
        key = NodeKind(kind)
    except ValueError as exc:
        raise UnsupportedNodeTypeError(str(kind)) from exc
    return NODE_TYPE_REGISTRY[key]


def list_node_types() -> list[NodeTypeDefinition]:
    return list(_NODE_TYPES)
