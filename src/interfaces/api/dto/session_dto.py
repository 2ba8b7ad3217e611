"""Agent 会话 DTO"""

from datetime import datetime

from pydantic import Field

from src.domain.entities.workflow_session import WorkflowSession
from src.interfaces.api.dto.base_dto import CamelModel


class CreateSessionRequest(CamelModel):
    message: str | None = Field(default=None, description="会话的第一条消息，同时用作标签")


class WorkflowSessionResponse(CamelModel):
    id: str
    session_id: str
    workflow_id: str
    label: str
    created_at: datetime

    @classmethod
    def from_entity(cls, session: WorkflowSession) -> "WorkflowSessionResponse":
        return cls(
            id=session.id,
            session_id=session.session_id,
            workflow_id=session.workflow_id,
            label=session.label,
            created_at=session.created_at,
        )


class SessionListResponse(CamelModel):
    sessions: list[WorkflowSessionResponse]


class SessionCreatedResponse(CamelModel):
    session_id: str
