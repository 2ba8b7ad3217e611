"""WorkflowEventRepository Port - 入站事件持久化接口"""

from typing import Protocol

from src.domain.entities.workflow_event import WorkflowEvent


class WorkflowEventRepository(Protocol):
    """WorkflowEvent 仓储接口"""

    def save(self, event: WorkflowEvent) -> None:
        ...

    def get_by_id(self, event_id: str) -> WorkflowEvent:
        """抛出：NotFoundError"""
        ...

    def list_recent(self, workflow_id: str, user_id: str, limit: int = 100) -> list[WorkflowEvent]:
        """最近的事件，按 received_at 倒序"""
        ...
