"""IngestWorkflowEventUseCase - Webhook 事件接入

外部事件源（集成平台的 Flow 实例）把事件 POST 到 ingest-event，请求体形如
{"headers": {"x-workflow-event-verification-hash": ...}, "data": {...}}。

业务流程：
1. 请求体必须是 JSON 对象（非法 JSON 由 API 层拦截）
2. 从事件 headers 取校验哈希（退回 HTTP 请求头），缺失 → VerificationError
3. HMAC-SHA256(secret, workflowId) 常量时间比较，不匹配 → VerificationError
4. 从网关请求头取集成访问令牌，缺失 → AuthenticationError
5. 工作流不存在 → NotFoundError；未激活 → DomainValidationError（不创建运行）
6. 保存 WorkflowEvent（processed=false）
7. 创建 WorkflowRun（input = event.data，缺省为整个事件）
8. 事件标记 processed 并关联 runId，提交后再开始执行
9. 提交后台执行，执行失败由 RunDispatcher 写回运行记录
10. 更新 lastRunAt
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from src.application.services.run_dispatcher import RunDispatcher
from src.application.services.workflow_run_orchestrator import RunExecutionRequest
from src.domain.entities.workflow_event import WorkflowEvent
from src.domain.entities.workflow_run import WorkflowRun
from src.domain.exceptions import (
    AuthenticationError,
    DomainValidationError,
    NotFoundError,
    VerificationError,
)
from src.domain.ports.workflow_event_repository import WorkflowEventRepository
from src.domain.ports.workflow_repository import WorkflowRepository
from src.domain.ports.workflow_run_repository import WorkflowRunRepository
from src.domain.services.workflow_event_verification import (
    WORKFLOW_EVENT_VERIFICATION_HASH_HEADER,
    verify_verification_hash,
)

logger = logging.getLogger(__name__)


@dataclass
class IngestWorkflowEventInput:
    """事件接入输入

    属性说明：
    - workflow_id: 路径中的工作流 ID
    - event: 已解析的请求体
    - access_token: 网关请求头中的集成访问令牌（缺失为 None）
    - verification_hash: HTTP 请求头中的校验哈希，事件 headers 未携带时使用
    """

    workflow_id: str
    event: Any
    access_token: str | None
    verification_hash: str | None = None


@dataclass(frozen=True)
class IngestWorkflowEventResult:
    workflow_id: str
    run_id: str
    event_id: str
    timestamp: datetime


class IngestWorkflowEventUseCase:
    def __init__(
        self,
        workflow_repository: WorkflowRepository,
        run_repository: WorkflowRunRepository,
        event_repository: WorkflowEventRepository,
        dispatcher: RunDispatcher,
        commit: Callable[[], None],
        verification_secret: str,
    ):
        self.workflow_repository = workflow_repository
        self.run_repository = run_repository
        self.event_repository = event_repository
        self.dispatcher = dispatcher
        self.commit = commit
        self.verification_secret = verification_secret

    async def execute(self, input_data: IngestWorkflowEventInput) -> IngestWorkflowEventResult:
        workflow_id = input_data.workflow_id
        event = input_data.event
        if not isinstance(event, dict):
            raise DomainValidationError("Event body must be a JSON object")

        headers = event.get("headers")
        verification_hash = (
            headers.get(WORKFLOW_EVENT_VERIFICATION_HASH_HEADER) if isinstance(headers, dict) else None
        ) or input_data.verification_hash
        if not verification_hash or not isinstance(verification_hash, str):
            raise VerificationError("Verification hash is required")
        if not verify_verification_hash(workflow_id, verification_hash, self.verification_secret):
            logger.warning("workflow_event_verification_failed", extra={"workflow_id": workflow_id})
            raise VerificationError("Invalid verification hash")

        if not input_data.access_token:
            raise AuthenticationError("Invalid integration access token")

        workflow = self.workflow_repository.find_by_id(workflow_id)
        if workflow is None:
            raise NotFoundError("Workflow", workflow_id)
        if not workflow.is_active:
            raise DomainValidationError("Workflow is not active")

        now = datetime.now(UTC)
        event_body = event.get("data") or event

        workflow_event = WorkflowEvent.receive(
            workflow_id=workflow.id,
            user_id=workflow.user_id,
            event_data=event_body if isinstance(event_body, dict) else {"data": event_body},
            now=now,
        )
        self.event_repository.save(workflow_event)

        run = WorkflowRun.start_for(
            workflow, user_id=workflow.user_id, input=workflow_event.event_data, now=now
        )
        self.run_repository.save(run)

        workflow_event.link_run(run.id)
        self.event_repository.save(workflow_event)
        self.commit()

        self.dispatcher.submit(
            RunExecutionRequest(
                workflow_id=workflow.id,
                run_id=run.id,
                access_token=input_data.access_token,
                trigger_input=run.input,
            )
        )

        workflow.mark_run(now)
        self.workflow_repository.save(workflow)
        self.commit()

        logger.info(
            "workflow_event_ingested",
            extra={"workflow_id": workflow.id, "event_id": workflow_event.id, "run_id": run.id},
        )
        return IngestWorkflowEventResult(
            workflow_id=workflow.id,
            run_id=run.id,
            event_id=workflow_event.id,
            timestamp=now,
        )
