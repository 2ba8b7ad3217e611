"""事件接入网关路由

端点:
    - OPTIONS /api/workflows/{workflow_id}/ingest-event - CORS 预检
    - GET     /api/workflows/{workflow_id}/ingest-event - 健康检查
    - POST    /api/workflows/{workflow_id}/ingest-event - 接入事件并启动运行（202）

调用方是集成平台上的任意 Webhook 发送方，没有调用方身份：
- 事件真实性由 HMAC 校验哈希保证
- 集成访问令牌来自 Authorization: Bearer 请求头
- 所有响应（包括错误）都带宽松的 CORS 头
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from src.application.use_cases import IngestWorkflowEventInput, IngestWorkflowEventUseCase
from src.domain.exceptions import AuthenticationError, DomainError, NotFoundError
from src.infrastructure.database.engine import get_db_session
from src.interfaces.api.container import ApiContainer
from src.interfaces.api.dependencies.container import get_container
from src.interfaces.api.dto.event_dto import IngestEventAcceptedResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflows", tags=["Event Ingestion"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, x-workflow-id, Authorization",
}


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _error(status_code: int, detail: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail=detail, headers=CORS_HEADERS)


@router.options("/{workflow_id}/ingest-event", include_in_schema=False)
def ingest_event_preflight(workflow_id: str) -> JSONResponse:
    return JSONResponse(content={}, headers=CORS_HEADERS)


@router.get("/{workflow_id}/ingest-event", summary="事件接入健康检查")
def ingest_event_health(workflow_id: str) -> JSONResponse:
    return JSONResponse(
        content={
            "status": "healthy",
            "endpoint": f"/api/workflows/{workflow_id}/ingest-event",
            "timestamp": datetime.now(UTC).isoformat(),
        },
        headers=CORS_HEADERS,
    )


@router.post(
    "/{workflow_id}/ingest-event",
    status_code=status.HTTP_202_ACCEPTED,
    summary="接入事件",
)
async def ingest_event(
    workflow_id: str,
    request: Request,
    authorization: str | None = Header(None),
    x_workflow_event_verification_hash: str | None = Header(None),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> JSONResponse:
    """接入一个事件

    请求体形如 {"headers": {"x-workflow-event-verification-hash": ...}, "data": {...}}。
    运行被接受后立即返回 202，执行结果只写入运行记录。

    Raises:
        400: 请求体不是合法 JSON 对象，或工作流未激活
        401: 缺少或错误的校验哈希，缺少访问令牌
        404: 工作流不存在
        500: 其他异常（回滚，响应仍带 CORS 头）
    """
    try:
        event = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("workflow_event_malformed_body", extra={"workflow_id": workflow_id})
        raise _error(status.HTTP_400_BAD_REQUEST, "Invalid JSON payload") from exc

    use_case = IngestWorkflowEventUseCase(
        workflow_repository=container.workflow_repository(db),
        run_repository=container.run_repository(db),
        event_repository=container.event_repository(db),
        dispatcher=container.run_dispatcher,
        commit=db.commit,
        verification_secret=container.verification_secret,
    )
    try:
        result = await use_case.execute(
            IngestWorkflowEventInput(
                workflow_id=workflow_id,
                event=event,
                access_token=_bearer_token(authorization),
                verification_hash=x_workflow_event_verification_hash,
            )
        )
    except AuthenticationError as exc:
        db.rollback()
        raise _error(status.HTTP_401_UNAUTHORIZED, str(exc)) from exc
    except NotFoundError as exc:
        db.rollback()
        raise _error(status.HTTP_404_NOT_FOUND, str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise _error(status.HTTP_400_BAD_REQUEST, str(exc)) from exc
    except Exception as exc:
        db.rollback()
        logger.exception("workflow_event_ingest_failed", extra={"workflow_id": workflow_id})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "details": str(exc)},
            headers=CORS_HEADERS,
        )

    body = IngestEventAcceptedResponse(
        success=True,
        message="Event ingested and workflow started",
        workflow_id=result.workflow_id,
        run_id=result.run_id,
        timestamp=result.timestamp,
    )
    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content=body.model_dump(mode="json", by_alias=True),
        headers=CORS_HEADERS,
    )
