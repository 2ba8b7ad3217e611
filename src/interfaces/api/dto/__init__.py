"""API DTO - 请求与响应模型"""

from src.interfaces.api.dto.event_dto import IngestEventAcceptedResponse, WorkflowEventResponse
from src.interfaces.api.dto.run_dto import WorkflowRunResponse
from src.interfaces.api.dto.session_dto import (
    CreateSessionRequest,
    SessionCreatedResponse,
    SessionListResponse,
    WorkflowSessionResponse,
)
from src.interfaces.api.dto.workflow_dto import (
    CreateWorkflowRequest,
    DeleteWorkflowResponse,
    ReplaceNodesRequest,
    RunStartedResponse,
    RunWorkflowRequest,
    UpdateWorkflowRequest,
    WorkflowResponse,
)

__all__ = [
    "CreateSessionRequest",
    "CreateWorkflowRequest",
    "DeleteWorkflowResponse",
    "IngestEventAcceptedResponse",
    "ReplaceNodesRequest",
    "RunStartedResponse",
    "RunWorkflowRequest",
    "SessionCreatedResponse",
    "SessionListResponse",
    "UpdateWorkflowRequest",
    "WorkflowEventResponse",
    "WorkflowResponse",
    "WorkflowRunResponse",
    "WorkflowSessionResponse",
]
