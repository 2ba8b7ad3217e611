"""SQLAlchemy WorkflowSession Repository 实现"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.domain.entities.workflow_session import WorkflowSession
from src.infrastructure.database.models import WorkflowSessionModel
from src.infrastructure.database.repositories.workflow_repository import to_naive, to_utc


class SQLAlchemyWorkflowSessionRepository:
    def __init__(self, session: Session):
        self.session = session

    def save(self, workflow_session: WorkflowSession) -> None:
        self.session.merge(
            WorkflowSessionModel(
                id=workflow_session.id,
                session_id=workflow_session.session_id,
                workflow_id=workflow_session.workflow_id,
                customer_id=workflow_session.customer_id,
                label=workflow_session.label,
                created_at=to_naive(workflow_session.created_at),
            )
        )
        self.session.flush()

    def find_by_workflow(self, workflow_id: str, customer_id: str) -> list[WorkflowSession]:
        stmt = (
            select(WorkflowSessionModel)
            .where(
                WorkflowSessionModel.workflow_id == workflow_id,
                WorkflowSessionModel.customer_id == customer_id,
            )
            .order_by(WorkflowSessionModel.created_at.desc())
        )
        return [
            WorkflowSession(
                id=model.id,
                session_id=model.session_id,
                workflow_id=model.workflow_id,
                customer_id=model.customer_id,
                label=model.label,
                created_at=to_utc(model.created_at),
            )
            for model in self.session.scalars(stmt).all()
        ]
