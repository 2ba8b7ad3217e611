"""WorkflowRun API 路由

端点:
    - GET /api/workflows/runs?workflowId=  - 调用方的运行记录（新到旧）
    - GET /api/workflows/runs/{run_id}     - 单个运行记录

执行在后台进行，运行记录是观察执行进度与执行后失败的唯一途径。
本路由必须先于 /api/workflows/{workflow_id} 注册。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.domain.exceptions import NotFoundError
from src.infrastructure.database.engine import get_db_session
from src.interfaces.api.container import ApiContainer
from src.interfaces.api.dependencies.caller import Caller, get_caller
from src.interfaces.api.dependencies.container import get_container
from src.interfaces.api.dto.run_dto import WorkflowRunResponse

router = APIRouter(prefix="/workflows/runs", tags=["Runs"])


@router.get(
    "",
    response_model=list[WorkflowRunResponse],
    summary="列出运行记录",
    description="返回调用方的运行记录，可按 workflowId 过滤，包含 results 与 summary",
)
def list_runs(
    workflow_id: str | None = Query(default=None, alias="workflowId"),
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> list[WorkflowRunResponse]:
    runs = container.run_repository(db).list_by_user(caller.customer_id, workflow_id)
    return [WorkflowRunResponse.from_entity(run) for run in runs]


@router.get("/{run_id}", response_model=WorkflowRunResponse, summary="获取运行记录")
def get_run(
    run_id: str,
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> WorkflowRunResponse:
    """获取单个运行记录

    Raises:
        404: 运行不存在或属于其他调用方
    """
    run = container.run_repository(db).find_by_id(run_id)
    if run is None or run.user_id != caller.customer_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(NotFoundError("WorkflowRun", run_id)),
        )
    return WorkflowRunResponse.from_entity(run)
