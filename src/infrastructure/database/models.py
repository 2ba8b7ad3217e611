"""ORM 模型 - 数据库表映射

ORM 模型 vs 领域实体：
- ORM 模型：数据库表映射，关注持久化（Infrastructure 层）
- 领域实体：业务逻辑，关注不变式（Domain 层）
- 由各 Repository 的 Assembler 方法转换：ORM ⇄ Entity

设计原则：
- 使用 SQLAlchemy 2.0 风格（Mapped、mapped_column）
- 工作流节点、运行快照、节点结果都是文档形状，存为 JSON 列（camelCase 字典）
- 每张表都带 owner 字段（user_id / customer_id），用于多租户过滤
- 时间戳统一存 UTC naive datetime，转换为实体时补回 tzinfo
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.base import Base


class WorkflowModel(Base):
    """Workflow ORM 模型

    表名：workflows

    字段说明：
    - nodes: 有序节点列表（JSON，WorkflowNode.to_dict() 形状）
    - version: 节点变更计数
    - last_run_at: 最近一次触发运行的时间
    """

    __tablename__ = "workflows"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, comment="Workflow ID")
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, comment="所属用户")
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="工作流名称")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="", comment="描述")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="inactive", comment="状态（active/inactive）"
    )
    nodes: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list, comment="节点列表"
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, comment="节点版本")
    last_run_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, comment="最近运行时间"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, comment="创建时间"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, comment="更新时间"
    )

    __table_args__ = (
        Index("idx_workflows_user_id", "user_id"),
        Index("idx_workflows_status", "status"),
        Index("idx_workflows_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<WorkflowModel(id={self.id}, name={self.name}, status={self.status})>"


class WorkflowRunModel(Base):
    """WorkflowRun ORM 模型

    表名：workflow_runs

    字段说明：
    - nodes_snapshot: 运行开始时的节点拷贝（JSON）
    - results: NodeResult 列表（JSON，按节点顺序）
    - summary: {totalNodes, successfulNodes, failedNodes, successRate}
    - execution_time: 毫秒
    """

    __tablename__ = "workflow_runs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, comment="Run ID")
    workflow_id: Mapped[str] = mapped_column(String(64), nullable=False, comment="所属工作流")
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, comment="所属用户")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="running", comment="运行状态"
    )
    input: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict, comment="触发载荷"
    )
    nodes_snapshot: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list, comment="节点快照"
    )
    results: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list, comment="节点结果"
    )
    summary: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict, comment="结果汇总"
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, comment="开始时间"
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, comment="结束时间"
    )
    execution_time: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="执行耗时（毫秒）"
    )
    error: Mapped[str | None] = mapped_column(Text, nullable=True, comment="失败信息")

    __table_args__ = (
        Index("idx_workflow_runs_workflow_id", "workflow_id"),
        Index("idx_workflow_runs_user_id", "user_id"),
        Index("idx_workflow_runs_started_at", "started_at"),
    )

    def __repr__(self) -> str:
        return f"<WorkflowRunModel(id={self.id}, workflow_id={self.workflow_id}, status={self.status})>"


class WorkflowEventModel(Base):
    """WorkflowEvent ORM 模型（表名：workflow_events）"""

    __tablename__ = "workflow_events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, comment="Event ID")
    workflow_id: Mapped[str] = mapped_column(String(64), nullable=False, comment="所属工作流")
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, comment="所属用户")
    event_data: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict, comment="事件数据"
    )
    received_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, comment="接收时间"
    )
    processed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, comment="是否已生成运行"
    )
    run_id: Mapped[str | None] = mapped_column(String(64), nullable=True, comment="生成的运行")

    __table_args__ = (
        Index("idx_workflow_events_workflow_user", "workflow_id", "user_id"),
        Index("idx_workflow_events_received_at", "received_at"),
    )


class WorkflowSessionModel(Base):
    """WorkflowSession ORM 模型（表名：workflow_sessions）"""

    __tablename__ = "workflow_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, comment="记录 ID")
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, comment="Agent 会话 ID")
    workflow_id: Mapped[str] = mapped_column(String(64), nullable=False, comment="所属工作流")
    customer_id: Mapped[str] = mapped_column(String(255), nullable=False, comment="所属用户")
    label: Mapped[str] = mapped_column(String(255), nullable=False, comment="会话标签")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, comment="创建时间"
    )

    __table_args__ = (
        Index("idx_workflow_sessions_workflow_customer", "workflow_id", "customer_id"),
    )


class StepResultModel(Base):
    """持久化步骤结果（表名：workflow_step_results）

    step_key 形如 "execute-workflow:<run_id>:<step_id>"，
    进程重启后重放运行时，已完成步骤直接返回记录的结果。
    """

    __tablename__ = "workflow_step_results"

    step_key: Mapped[str] = mapped_column(String(512), primary_key=True, comment="步骤键")
    result: Mapped[Any] = mapped_column(JSON, nullable=True, comment="步骤结果")
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, comment="记录时间"
    )
