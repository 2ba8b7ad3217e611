"""WorkflowRun 实体 - 工作流的一次执行尝试

业务定义：
- 触发时以 RUNNING 状态创建，并拷贝当时的节点列表（nodes_snapshot），
  之后对工作流的编辑不影响本次运行
- 编排器每执行完一个节点就追加一条 NodeResult 并重算 summary
- 任一节点失败立即转为 FAILED；所有节点成功后转为 COMPLETED
- 终态不可再变化

不变式：
- results 按节点顺序增长，每个节点尝试一条
- summary.total_nodes == len(nodes_snapshot)
- success_rate = successful_nodes / total_nodes * 100（total_nodes 为 0 时为 0）
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.domain.entities.node_result import NodeResult
from src.domain.entities.workflow import Workflow
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import DomainError
from src.domain.value_objects.run_status import RunStatus

DEFAULT_FAILURE_MESSAGE = "Workflow execution failed"


@dataclass(frozen=True)
class RunSummary:
    total_nodes: int = 0
    successful_nodes: int = 0
    failed_nodes: int = 0
    success_rate: float = 0.0

    @classmethod
    def compute(cls, results: list[NodeResult], total_nodes: int) -> RunSummary:
        successful = sum(1 for result in results if result.success)
        failed = sum(1 for result in results if not result.success)
        rate = (successful / total_nodes) * 100 if total_nodes > 0 else 0.0
        return cls(
            total_nodes=total_nodes,
            successful_nodes=successful,
            failed_nodes=failed,
            success_rate=rate,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalNodes": self.total_nodes,
            "successfulNodes": self.successful_nodes,
            "failedNodes": self.failed_nodes,
            "successRate": self.success_rate,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RunSummary:
        data = data or {}
        return cls(
            total_nodes=int(data.get("totalNodes", 0)),
            successful_nodes=int(data.get("successfulNodes", 0)),
            failed_nodes=int(data.get("failedNodes", 0)),
            success_rate=float(data.get("successRate", 0.0)),
        )


@dataclass
class WorkflowRun:
    """WorkflowRun 实体

    属性说明：
    - workflow_id / user_id: 所属工作流与用户
    - status: running / completed / failed
    - input: 触发载荷（手动运行的 input 或 Webhook 事件数据）
    - nodes_snapshot: 运行开始时的节点拷贝
    - results / summary: 逐节点结果与聚合统计
    - execution_time: 毫秒
    """

    id: str
    workflow_id: str
    user_id: str
    status: RunStatus
    input: dict[str, Any]
    nodes_snapshot: list[WorkflowNode]
    results: list[NodeResult] = field(default_factory=list)
    summary: RunSummary = field(default_factory=RunSummary)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    execution_time: int | None = None
    error: str | None = None

    @classmethod
    def start_for(
        cls,
        workflow: Workflow,
        *,
        user_id: str,
        input: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> WorkflowRun:
        """为工作流创建一次运行（RUNNING，拷贝节点快照）"""
        if not user_id:
            raise DomainError("user_id 不能为空")

        snapshot = list(workflow.nodes)
        return cls(
            id=str(uuid4()),
            workflow_id=workflow.id,
            user_id=user_id,
            status=RunStatus.RUNNING,
            input=dict(input or {}),
            nodes_snapshot=snapshot,
            summary=RunSummary.compute([], len(snapshot)),
            started_at=now or datetime.now(UTC),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal()

    def result_at(self, index: int) -> NodeResult | None:
        if 0 <= index < len(self.results):
            return self.results[index]
        return None

    def record_result(self, result: NodeResult, *, now: datetime | None = None) -> None:
        """追加节点结果并重算 summary；失败结果同时把运行标记为 FAILED

        抛出：
            DomainError: 运行已处于终态
        """
        if self.is_terminal:
            raise DomainError(f"运行已结束（{self.status.value}），不能追加结果")

        self.results = [*self.results, result]
        self.summary = RunSummary.compute(self.results, len(self.nodes_snapshot))

        if not result.success:
            message = result.error.message if result.error and result.error.message else None
            self.fail(message or DEFAULT_FAILURE_MESSAGE, now=now)

    def complete(self, *, now: datetime | None = None) -> None:
        self._transition(RunStatus.COMPLETED)
        self.summary = RunSummary.compute(self.results, len(self.nodes_snapshot))
        self._close(now)

    def fail(self, error: str, *, now: datetime | None = None) -> None:
        self._transition(RunStatus.FAILED)
        self.error = error or DEFAULT_FAILURE_MESSAGE
        self._close(now)

    def _transition(self, target: RunStatus) -> None:
        if not self.status.can_transition_to(target):
            raise DomainError(f"运行状态不能从 {self.status.value} 转换为 {target.value}")
        self.status = target

    def _close(self, now: datetime | None) -> None:
        completed_at = now or datetime.now(UTC)
        self.completed_at = completed_at
        started_at = self.started_at
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=UTC)
        if completed_at.tzinfo is None:
            completed_at = completed_at.replace(tzinfo=UTC)
        self.execution_time = max(0, int((completed_at - started_at).total_seconds() * 1000))
