"""SQLAlchemy WorkflowEvent Repository 实现"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.domain.entities.workflow_event import WorkflowEvent
from src.domain.exceptions import NotFoundError
from src.infrastructure.database.models import WorkflowEventModel
from src.infrastructure.database.repositories.workflow_repository import to_naive, to_utc


class SQLAlchemyWorkflowEventRepository:
    def __init__(self, session: Session):
        self.session = session

    def _to_entity(self, model: WorkflowEventModel) -> WorkflowEvent:
        return WorkflowEvent(
            id=model.id,
            workflow_id=model.workflow_id,
            user_id=model.user_id,
            event_data=dict(model.event_data or {}),
            received_at=to_utc(model.received_at),
            processed=model.processed,
            run_id=model.run_id,
        )

    def save(self, event: WorkflowEvent) -> None:
        self.session.merge(
            WorkflowEventModel(
                id=event.id,
                workflow_id=event.workflow_id,
                user_id=event.user_id,
                event_data=event.event_data,
                received_at=to_naive(event.received_at),
                processed=event.processed,
                run_id=event.run_id,
            )
        )
        self.session.flush()

    def get_by_id(self, event_id: str) -> WorkflowEvent:
        model = self.session.get(WorkflowEventModel, event_id)
        if model is None:
            raise NotFoundError("WorkflowEvent", event_id)
        return self._to_entity(model)

    def list_recent(self, workflow_id: str, user_id: str, limit: int = 100) -> list[WorkflowEvent]:
        stmt = (
            select(WorkflowEventModel)
            .where(
                WorkflowEventModel.workflow_id == workflow_id,
                WorkflowEventModel.user_id == user_id,
            )
            .order_by(WorkflowEventModel.received_at.desc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]
