"""Domain 值对象

导出所有领域值对象，方便其他模块导入
"""

from src.domain.value_objects.node_type import ActionNodeType, NodeCategory, NodeKind, TriggerType
from src.domain.value_objects.run_status import RunStatus
from src.domain.value_objects.workflow_status import WorkflowStatus

__all__ = [
    "ActionNodeType",
    "NodeCategory",
    "NodeKind",
    "RunStatus",
    "TriggerType",
    "WorkflowStatus",
]
