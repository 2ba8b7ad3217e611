"""Agent 会话 API 路由

端点:
    - GET  /api/workflows/{workflow_id}/sessions - 列出调用方在该工作流上的会话
    - POST /api/workflows/{workflow_id}/sessions - 在集成平台创建 Agent 会话
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.application.use_cases import CreateWorkflowSessionInput, WorkflowSessionsUseCase
from src.domain.exceptions import DomainError, IntegrationError, NotFoundError
from src.infrastructure.database.engine import get_db_session
from src.interfaces.api.container import ApiContainer
from src.interfaces.api.dependencies.caller import Caller, get_caller, get_integration_token
from src.interfaces.api.dependencies.container import get_container
from src.interfaces.api.dto.session_dto import (
    CreateSessionRequest,
    SessionCreatedResponse,
    SessionListResponse,
    WorkflowSessionResponse,
)

router = APIRouter(prefix="/workflows", tags=["Sessions"])


def _use_case(container: ApiContainer, db: Session) -> WorkflowSessionsUseCase:
    return WorkflowSessionsUseCase(
        workflow_repository=container.workflow_repository(db),
        session_repository=container.session_repository(db),
        client_factory=container.integration_client_factory,
        active_sessions=container.active_sessions,
    )


@router.get("/{workflow_id}/sessions", response_model=SessionListResponse, summary="列出会话")
def list_sessions(
    workflow_id: str,
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> SessionListResponse:
    try:
        sessions = _use_case(container, db).list(workflow_id, caller.customer_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return SessionListResponse(
        sessions=[WorkflowSessionResponse.from_entity(session) for session in sessions]
    )


@router.post(
    "/{workflow_id}/sessions",
    response_model=SessionCreatedResponse,
    summary="创建会话",
)
async def create_session(
    workflow_id: str,
    request: CreateSessionRequest | None = None,
    caller: Caller = Depends(get_caller),
    access_token: str = Depends(get_integration_token),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> SessionCreatedResponse:
    """创建 Agent 会话

    Raises:
        404: 工作流不存在
        502: 集成平台调用失败
    """
    try:
        session = await _use_case(container, db).create(
            CreateWorkflowSessionInput(
                workflow_id=workflow_id,
                user_id=caller.customer_id,
                access_token=access_token,
                message=request.message if request else None,
            )
        )
        db.commit()
        return SessionCreatedResponse(session_id=session.session_id)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except IntegrationError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
