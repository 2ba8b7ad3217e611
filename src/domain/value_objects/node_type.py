"""节点类型值对象

一个节点由三部分描述：
- type（NodeCategory）：trigger 或 action
- triggerType（TriggerType）：触发器节点的细分类型
- nodeType（ActionNodeType）：动作节点的细分类型

NodeKind 把三者折叠成单一的注册表键（如 "trigger:manual"、"http"），
节点类型注册表、节点执行器、输出 Schema 计算器都按 NodeKind 分派。
"""

from __future__ import annotations

from enum import Enum

from src.domain.exceptions import UnsupportedNodeTypeError


class NodeCategory(str, Enum):
    """节点大类（WorkflowNode.type）"""

    TRIGGER = "trigger"
    ACTION = "action"


class TriggerType(str, Enum):
    MANUAL = "manual"
    EVENT = "event"


class ActionNodeType(str, Enum):
    HTTP = "http"
    ACTION = "action"
    AI = "ai"
    GATE = "gate"


class NodeKind(str, Enum):
    """注册表中的节点类型键"""

    MANUAL_TRIGGER = "trigger:manual"
    EVENT_TRIGGER = "trigger:event"
    HTTP = "http"
    ACTION = "action"
    AI = "ai"
    GATE = "gate"

    @property
    def is_trigger(self) -> bool:
        return self in {NodeKind.MANUAL_TRIGGER, NodeKind.EVENT_TRIGGER}

    @classmethod
    def resolve(
        cls,
        node_type: str,
        *,
        trigger_type: str | None = None,
        action_node_type: str | None = None,
    ) -> NodeKind:
        """根据节点字段推导 NodeKind

        规则：
        - trigger 节点：triggerType（缺省为 manual），兼容把细分类型写在 nodeType 的旧数据
        - action 节点：nodeType

        抛出：
            UnsupportedNodeTypeError: 无法识别的组合
        """
        if node_type == NodeCategory.TRIGGER.value:
            key = f"trigger:{trigger_type or action_node_type or TriggerType.MANUAL.value}"
        elif node_type == NodeCategory.ACTION.value:
            key = action_node_type or ""
        else:
            key = f"{node_type}:{action_node_type or trigger_type or ''}"

        try:
            return cls(key)
        except ValueError as exc:
            raise UnsupportedNodeTypeError(key) from exc
