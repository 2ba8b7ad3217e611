"""WorkflowRun DTO

运行记录对外暴露完整的节点快照、逐节点结果和汇总，前端通过轮询观察执行进度。
"""

from datetime import datetime
from typing import Any

from src.domain.entities.workflow_run import WorkflowRun
from src.interfaces.api.dto.base_dto import CamelModel


class WorkflowRunResponse(CamelModel):
    id: str
    workflow_id: str
    user_id: str
    status: str
    input: dict[str, Any]
    nodes: list[dict[str, Any]]
    results: list[dict[str, Any]]
    summary: dict[str, Any]
    started_at: datetime
    completed_at: datetime | None = None
    execution_time: int | None = None
    error: str | None = None

    @classmethod
    def from_entity(cls, run: WorkflowRun) -> "WorkflowRunResponse":
        return cls(
            id=run.id,
            workflow_id=run.workflow_id,
            user_id=run.user_id,
            status=run.status.value,
            input=run.input,
            nodes=[node.to_dict() for node in run.nodes_snapshot],
            results=[result.to_dict() for result in run.results],
            summary=run.summary.to_dict(),
            started_at=run.started_at,
            completed_at=run.completed_at,
            execution_time=run.execution_time,
            error=run.error,
        )
