"""WorkflowStatus 枚举 - 工作流状态

业务定义：
- ACTIVE：可以接收 Webhook 事件并触发运行
- INACTIVE：新建工作流的默认状态，事件接入会被拒绝（手动运行不受限制）
"""

from enum import Enum


class WorkflowStatus(str, Enum):
    """工作流状态枚举"""

    ACTIVE = "active"
    INACTIVE = "inactive"
