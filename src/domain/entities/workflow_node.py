"""WorkflowNode 实体 - 工作流中的一个步骤

业务定义：
- 节点是工作流有序序列中的一步：触发器、HTTP 调用、集成动作、AI 调用或条件门
- id 在工作流内唯一，name 同时作为持久化步骤的键和变量引用的名字
- config 按节点类型校验（见 node_config.py），outputSchema 是最近一次计算的缓存

序列化：
- to_dict()/from_dict() 使用 camelCase 字段，与构建器 UI、运行快照保持一致
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainValidationError
from src.domain.value_objects.node_config import NodeConfig, parse_node_config
from src.domain.value_objects.node_type import NodeCategory, NodeKind


@dataclass(frozen=True)
class WorkflowNode:
    """WorkflowNode 实体

    属性说明：
    - id: 节点唯一标识（工作流内）
    - name: 节点名称（持久化步骤键、$var 引用名）
    - type: trigger / action
    - node_type: 动作节点细分类型（http/action/ai/gate）
    - trigger_type: 触发器细分类型（manual/event）
    - parameters_schema: 参数 Schema（构建器使用）
    - output_schema: 计算得到的输出 Schema
    - config: 节点配置（camelCase 字典）
    - ready: 配置是否完整到可以执行
    """

    id: str
    name: str
    type: NodeCategory
    node_type: str | None = None
    trigger_type: str | None = None
    parameters_schema: dict[str, Any] | None = None
    output_schema: dict[str, Any] | None = None
    config: dict[str, Any] = field(default_factory=dict)
    ready: bool = False

    @classmethod
    def create(
        cls,
        *,
        name: str,
        type: NodeCategory | str,
        node_type: str | None = None,
        trigger_type: str | None = None,
        config: dict[str, Any] | None = None,
        node_id: str | None = None,
        ready: bool = False,
    ) -> WorkflowNode:
        """创建节点（校验名称与配置）"""
        if not name or not name.strip():
            raise DomainValidationError("节点 name 不能为空")
        try:
            category = NodeCategory(type)
        except ValueError as exc:
            raise DomainValidationError(f"节点 type 必须是 trigger 或 action: {type}") from exc

        node = cls(
            id=node_id or f"node_{uuid4().hex[:8]}",
            name=name.strip(),
            type=category,
            node_type=node_type,
            trigger_type=trigger_type,
            config=dict(config or {}),
            ready=ready,
        )
        return node.validated()

    @property
    def kind(self) -> NodeKind:
        """注册表键；未知组合抛出 UnsupportedNodeTypeError"""
        return NodeKind.resolve(
            self.type.value,
            trigger_type=self.trigger_type,
            action_node_type=self.node_type,
        )

    @property
    def is_trigger(self) -> bool:
        return self.type == NodeCategory.TRIGGER

    def typed_config(self) -> NodeConfig:
        return parse_node_config(self.kind, self.config)

    def validated(self) -> WorkflowNode:
        """按节点类型校验配置，返回规范化配置后的副本"""
        typed = self.typed_config()
        return replace(self, config=typed.model_dump(by_alias=True, exclude_unset=True))

    def with_output_schema(self, schema: dict[str, Any]) -> WorkflowNode:
        return replace(self, output_schema=schema)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "config": self.config,
            "ready": self.ready,
        }
        if self.node_type is not None:
            data["nodeType"] = self.node_type
        if self.trigger_type is not None:
            data["triggerType"] = self.trigger_type
        if self.parameters_schema is not None:
            data["parametersSchema"] = self.parameters_schema
        if self.output_schema is not None:
            data["outputSchema"] = self.output_schema
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowNode:
        try:
            category = NodeCategory(data.get("type"))
        except ValueError as exc:
            raise DomainValidationError(f"节点 type 必须是 trigger 或 action: {data.get('type')}") from exc

        return cls(
            id=str(data.get("id") or f"node_{uuid4().hex[:8]}"),
            name=str(data.get("name") or ""),
            type=category,
            node_type=data.get("nodeType"),
            trigger_type=data.get("triggerType"),
            parameters_schema=data.get("parametersSchema"),
            output_schema=data.get("outputSchema"),
            config=dict(data.get("config") or {}),
            ready=bool(data.get("ready", False)),
        )
