"""Application 层用例 - 业务逻辑编排

每个用例协调 Domain 实体、Repository 与应用服务，依赖 Port 接口而不是具体实现。
事务提交由 API 层负责；需要在后台执行开始前落库的用例（触发运行、事件接入）
通过注入的 commit 回调提交。
"""

from src.application.use_cases.create_workflow import CreateWorkflowInput, CreateWorkflowUseCase
from src.application.use_cases.ingest_workflow_event import (
    IngestWorkflowEventInput,
    IngestWorkflowEventResult,
    IngestWorkflowEventUseCase,
)
from src.application.use_cases.manage_workflow import ManageWorkflowUseCase
from src.application.use_cases.start_workflow_run import (
    StartWorkflowRunInput,
    StartWorkflowRunUseCase,
)
from src.application.use_cases.update_workflow import UpdateWorkflowInput, UpdateWorkflowUseCase
from src.application.use_cases.update_workflow_nodes import (
    EventSourceProvisioningError,
    UpdateWorkflowNodesInput,
    UpdateWorkflowNodesUseCase,
)
from src.application.use_cases.workflow_sessions import (
    CreateWorkflowSessionInput,
    WorkflowSessionsUseCase,
)

__all__ = [
    "CreateWorkflowInput",
    "CreateWorkflowSessionInput",
    "CreateWorkflowUseCase",
    "EventSourceProvisioningError",
    "IngestWorkflowEventInput",
    "IngestWorkflowEventResult",
    "IngestWorkflowEventUseCase",
    "ManageWorkflowUseCase",
    "StartWorkflowRunInput",
    "StartWorkflowRunUseCase",
    "UpdateWorkflowInput",
    "UpdateWorkflowNodesInput",
    "UpdateWorkflowNodesUseCase",
    "UpdateWorkflowUseCase",
    "WorkflowSessionsUseCase",
]
