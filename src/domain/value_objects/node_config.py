"""节点配置 Pydantic Schema（按 NodeKind 区分的标签联合）

每种节点类型一个配置模型，保存节点时在 API 边界校验：
- 字段使用 camelCase 别名，与前端构建器保存的 JSON 保持一致
- 允许额外字段（构建器会写入 flowInstanceId 等辅助字段），原样保留
- 编辑过程中配置可以不完整，必填项在执行时由对应执行器检查

用法：
    config = parse_node_config(NodeKind.HTTP, {"uri": "https://x", "method": "get"})
    config.method  # "GET"
    config.model_dump(by_alias=True, exclude_unset=True)
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.domain.exceptions import DomainValidationError
from src.domain.value_objects.node_type import NodeKind

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

EMPTY_OBJECT_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


class NodeConfigBase(BaseModel):
    """所有节点配置的公共字段"""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    input_mapping: dict[str, Any] = Field(default_factory=dict, description="输入映射（支持 $var 引用）")
    output_schema: dict[str, Any] | None = Field(default=None, description="用户声明的输出 Schema")


# ==================== 触发器 ====================


class ManualTriggerConfig(NodeConfigBase):
    input_schema: dict[str, Any] | None = Field(default=None, description="手动触发输入 Schema")
    has_input: bool | None = None


class EventTriggerConfig(NodeConfigBase):
    event_source: Literal["connector", "data-record"] | None = Field(
        default=None, description="事件来源：连接器事件或数据记录事件"
    )
    integration_key: str | None = None
    connector_event_key: str | None = None
    data_collection: str | None = None
    event_type: str | None = None
    flow_instance_id: str | None = None


# ==================== 动作 ====================


class QueryParameter(BaseModel):
    key: str
    value: Any = None


class HttpNodeConfig(NodeConfigBase):
    uri: str | None = None
    method: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    query_parameters: list[QueryParameter] = Field(default_factory=list)
    body: Any = None
    fail_on_error_status: bool = Field(
        default=False, description="为 True 时 4xx/5xx 响应视为节点失败"
    )

    @field_validator("method")
    @classmethod
    def _normalize_method(cls, value: str | None) -> str | None:
        if value is None:
            return None
        method = value.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"不支持的 HTTP 方法: {value}")
        return method


class ActionNodeConfig(NodeConfigBase):
    action_id: str | None = None
    action_key: str | None = None
    connection_id: str | None = None
    integration_key: str | None = None


class McpServerConfig(BaseModel):
    url: str | None = None
    type: Literal["sse", "http"] | None = None
    headers: dict[str, str] = Field(default_factory=dict)


class AiNodeConfig(NodeConfigBase):
    prompt: str | None = None
    structured_output: bool = Field(default=True, description="是否按 outputSchema 输出结构化结果")
    mcp: McpServerConfig | None = None


class VariableRef(BaseModel):
    """变量引用：{"$var": "$.Previous Steps.HTTP Request.body.id"}"""

    model_config = ConfigDict(populate_by_name=True)

    path: str = Field(alias="$var")


class GateCondition(BaseModel):
    field: VariableRef | str | None = None
    operator: Literal["equals", "not_equals"] | None = None
    value: Any = None


class GateNodeConfig(NodeConfigBase):
    condition: GateCondition | None = None

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_condition(cls, data: Any) -> Any:
        # 注册表的 configurationSchema 把 field/operator/value 放在顶层
        if isinstance(data, dict) and data.get("condition") is None:
            flat = {key: data[key] for key in ("field", "operator", "value") if key in data}
            if flat:
                data = {k: v for k, v in data.items() if k not in flat}
                data["condition"] = flat
        return data


NodeConfig = (
    ManualTriggerConfig
    | EventTriggerConfig
    | HttpNodeConfig
    | ActionNodeConfig
    | AiNodeConfig
    | GateNodeConfig
)

NODE_CONFIG_MODELS: dict[NodeKind, type[NodeConfigBase]] = {
    NodeKind.MANUAL_TRIGGER: ManualTriggerConfig,
    NodeKind.EVENT_TRIGGER: EventTriggerConfig,
    NodeKind.HTTP: HttpNodeConfig,
    NodeKind.ACTION: ActionNodeConfig,
    NodeKind.AI: AiNodeConfig,
    NodeKind.GATE: GateNodeConfig,
}


def parse_node_config(kind: NodeKind, raw: dict[str, Any] | None) -> NodeConfig:
    """按节点类型校验配置

    抛出：
        DomainValidationError: 配置字段类型不合法
    """
    model = NODE_CONFIG_MODELS[kind]
    try:
        return model.model_validate(raw or {})
    except ValidationError as exc:
        raise DomainValidationError(f"{kind.value} 节点配置不合法: {exc.errors()}") from exc
