"""WorkflowSessionRepository Port - 工作流会话引用持久化接口"""

from typing import Protocol

from src.domain.entities.workflow_session import WorkflowSession


class WorkflowSessionRepository(Protocol):
    def save(self, session: WorkflowSession) -> None:
        ...

    def find_by_workflow(self, workflow_id: str, customer_id: str) -> list[WorkflowSession]:
        """按 created_at 倒序"""
        ...
