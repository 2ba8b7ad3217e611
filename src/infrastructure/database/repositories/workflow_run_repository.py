"""SQLAlchemy WorkflowRun Repository 实现

运行记录整行覆盖保存（last-write-wins），results / summary / nodes_snapshot 为 JSON 列。
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.domain.entities.node_result import NodeResult
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.entities.workflow_run import RunSummary, WorkflowRun
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.run_status import RunStatus
from src.infrastructure.database.models import WorkflowRunModel
from src.infrastructure.database.repositories.workflow_repository import to_naive, to_utc


class SQLAlchemyWorkflowRunRepository:
    def __init__(self, session: Session):
        self.session = session

    def _to_entity(self, model: WorkflowRunModel) -> WorkflowRun:
        return WorkflowRun(
            id=model.id,
            workflow_id=model.workflow_id,
            user_id=model.user_id,
            status=RunStatus(model.status),
            input=dict(model.input or {}),
            nodes_snapshot=[WorkflowNode.from_dict(node) for node in model.nodes_snapshot or []],
            results=[NodeResult.from_dict(result) for result in model.results or []],
            summary=RunSummary.from_dict(model.summary),
            started_at=to_utc(model.started_at),
            completed_at=to_utc(model.completed_at),
            execution_time=model.execution_time,
            error=model.error,
        )

    def _to_model(self, entity: WorkflowRun) -> WorkflowRunModel:
        return WorkflowRunModel(
            id=entity.id,
            workflow_id=entity.workflow_id,
            user_id=entity.user_id,
            status=entity.status.value,
            input=entity.input,
            nodes_snapshot=[node.to_dict() for node in entity.nodes_snapshot],
            results=[result.to_dict() for result in entity.results],
            summary=entity.summary.to_dict(),
            started_at=to_naive(entity.started_at),
            completed_at=to_naive(entity.completed_at),
            execution_time=entity.execution_time,
            error=entity.error,
        )

    def save(self, run: WorkflowRun) -> None:
        self.session.merge(self._to_model(run))
        self.session.flush()

    def get_by_id(self, run_id: str) -> WorkflowRun:
        run = self.find_by_id(run_id)
        if run is None:
            raise NotFoundError("WorkflowRun", run_id)
        return run

    def find_by_id(self, run_id: str) -> WorkflowRun | None:
        model = self.session.get(WorkflowRunModel, run_id)
        if model is None:
            return None
        self.session.refresh(model)
        return self._to_entity(model)

    def list_by_user(self, user_id: str, workflow_id: str | None = None) -> list[WorkflowRun]:
        stmt = select(WorkflowRunModel).where(WorkflowRunModel.user_id == user_id)
        if workflow_id:
            stmt = stmt.where(WorkflowRunModel.workflow_id == workflow_id)
        stmt = stmt.order_by(WorkflowRunModel.started_at.desc())
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]
