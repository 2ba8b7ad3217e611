"""WorkflowEvent DTO 与事件接入响应"""

from datetime import datetime
from typing import Any

from src.domain.entities.workflow_event import WorkflowEvent
from src.interfaces.api.dto.base_dto import CamelModel


class WorkflowEventResponse(CamelModel):
    id: str
    workflow_id: str
    event_data: dict[str, Any]
    received_at: datetime
    processed: bool
    run_id: str | None = None

    @classmethod
    def from_entity(cls, event: WorkflowEvent) -> "WorkflowEventResponse":
        return cls(
            id=event.id,
            workflow_id=event.workflow_id,
            event_data=event.event_data,
            received_at=event.received_at,
            processed=event.processed,
            run_id=event.run_id,
        )


class IngestEventAcceptedResponse(CamelModel):
    success: bool = True
    message: str
    workflow_id: str
    run_id: str
    timestamp: datetime
