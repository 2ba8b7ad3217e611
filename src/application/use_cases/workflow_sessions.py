"""WorkflowSessionsUseCase - 工作流编辑辅助会话

- create(): 在集成平台创建 Agent 会话，保存会话引用，并登记到活跃会话表
- list(): 列出调用方在该工作流下的会话（最新在前）
"""

import logging
from dataclasses import dataclass

from src.application.services.active_session_store import ActiveSessionStore
from src.application.use_cases.workflow_access import load_owned_workflow
from src.domain.entities.workflow_session import WorkflowSession
from src.domain.exceptions import IntegrationError
from src.domain.ports.integration_client import IntegrationClientFactory
from src.domain.ports.workflow_repository import WorkflowRepository
from src.domain.ports.workflow_session_repository import WorkflowSessionRepository

logger = logging.getLogger(__name__)


@dataclass
class CreateWorkflowSessionInput:
    workflow_id: str
    user_id: str
    access_token: str
    message: str | None = None


class WorkflowSessionsUseCase:
    def __init__(
        self,
        workflow_repository: WorkflowRepository,
        session_repository: WorkflowSessionRepository,
        client_factory: IntegrationClientFactory,
        active_sessions: ActiveSessionStore,
    ):
        self.workflow_repository = workflow_repository
        self.session_repository = session_repository
        self.client_factory = client_factory
        self.active_sessions = active_sessions

    def list(self, workflow_id: str, user_id: str) -> list[WorkflowSession]:
        load_owned_workflow(self.workflow_repository, workflow_id, user_id)
        return self.session_repository.find_by_workflow(workflow_id, user_id)

    async def create(self, input_data: CreateWorkflowSessionInput) -> WorkflowSession:
        """创建会话

        异常：
            NotFoundError: 工作流不存在或不属于调用方
            IntegrationError: Agent 会话创建失败或响应中没有会话 ID
        """
        load_owned_workflow(self.workflow_repository, input_data.workflow_id, input_data.user_id)

        client = self.client_factory(input_data.access_token)
        data = await client.create_agent_session(input_data.message or None)
        remote_session_id = data.get("id") or data.get("sessionId")
        if not remote_session_id:
            raise IntegrationError("Agent session response does not contain a session id")

        session = WorkflowSession.create(
            session_id=str(remote_session_id),
            workflow_id=input_data.workflow_id,
            customer_id=input_data.user_id,
            initial_message=input_data.message,
        )
        self.session_repository.save(session)
        self.active_sessions.create(session.session_id)

        logger.info(
            "workflow_session_created",
            extra={"workflow_id": input_data.workflow_id, "session_id": session.session_id},
        )
        return session
