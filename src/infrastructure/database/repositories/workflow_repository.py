"""SQLAlchemy Workflow Repository 实现

职责：
1. 转换（Translation）：领域实体 ⇄ ORM 模型
2. 持久化（Persistence）：保存、查询、删除
3. 异常转换：不存在 → NotFoundError

节点列表以 JSON 文档整体存取，保存即整体覆盖。
"""

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.domain.entities.workflow import Workflow
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.workflow_status import WorkflowStatus
from src.infrastructure.database.models import WorkflowModel


def to_utc(value: datetime | None) -> datetime | None:
    """数据库中的 naive datetime 视为 UTC"""
    if value is None:
        return None
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def to_naive(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.astimezone(UTC).replace(tzinfo=None) if value.tzinfo else value


class SQLAlchemyWorkflowRepository:
    """实现 WorkflowRepository Port（Protocol，不显式继承）

    依赖：
    - Session: SQLAlchemy 同步会话（依赖注入，事务由调用方控制）
    """

    def __init__(self, session: Session):
        self.session = session

    # ==================== Assembler 方法 ====================

    def _to_entity(self, model: WorkflowModel) -> Workflow:
        return Workflow(
            id=model.id,
            user_id=model.user_id,
            name=model.name,
            description=model.description or "",
            status=WorkflowStatus(model.status),
            nodes=[WorkflowNode.from_dict(node) for node in model.nodes or []],
            version=model.version,
            last_run_at=to_utc(model.last_run_at),
            created_at=to_utc(model.created_at),
            updated_at=to_utc(model.updated_at),
        )

    def _to_model(self, entity: Workflow) -> WorkflowModel:
        return WorkflowModel(
            id=entity.id,
            user_id=entity.user_id,
            name=entity.name,
            description=entity.description,
            status=entity.status.value,
            nodes=[node.to_dict() for node in entity.nodes],
            version=entity.version,
            last_run_at=to_naive(entity.last_run_at),
            created_at=to_naive(entity.created_at),
            updated_at=to_naive(entity.updated_at),
        )

    # ==================== Repository 方法 ====================

    def save(self, workflow: Workflow) -> None:
        """保存 Workflow（merge 自动判断新增或更新，调用方 commit）"""
        self.session.merge(self._to_model(workflow))
        self.session.flush()

    def get_by_id(self, workflow_id: str) -> Workflow:
        workflow = self.find_by_id(workflow_id)
        if workflow is None:
            raise NotFoundError("Workflow", workflow_id)
        return workflow

    def find_by_id(self, workflow_id: str) -> Workflow | None:
        model = self.session.get(WorkflowModel, workflow_id)
        if model is None:
            return None
        # 其他会话（后台运行）可能已更新同一行
        self.session.refresh(model)
        return self._to_entity(model)

    def list_by_user(self, user_id: str, status: WorkflowStatus | None = None) -> list[Workflow]:
        stmt = select(WorkflowModel).where(WorkflowModel.user_id == user_id)
        if status is not None:
            stmt = stmt.where(WorkflowModel.status == status.value)
        stmt = stmt.order_by(WorkflowModel.created_at.desc())
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]

    def delete(self, workflow_id: str) -> None:
        model = self.session.get(WorkflowModel, workflow_id)
        if model is None:
            raise NotFoundError("Workflow", workflow_id)
        self.session.delete(model)
        self.session.flush()
