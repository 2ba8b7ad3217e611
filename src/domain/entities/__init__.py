"""Domain 实体

导出所有领域实体，方便其他模块导入
"""

from src.domain.entities.node_result import NodeError, NodeResult
from src.domain.entities.workflow import Workflow
from src.domain.entities.workflow_event import WorkflowEvent
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.entities.workflow_run import RunSummary, WorkflowRun
from src.domain.entities.workflow_session import WorkflowSession

__all__ = [
    "NodeError",
    "NodeResult",
    "RunSummary",
    "Workflow",
    "WorkflowEvent",
    "WorkflowNode",
    "WorkflowRun",
    "WorkflowSession",
]
