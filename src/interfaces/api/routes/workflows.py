"""Workflow API 路由

端点:
    - POST   /api/workflows                      - 创建工作流（inactive）
    - GET    /api/workflows?status=              - 列出调用方的工作流
    - GET    /api/workflows/{workflow_id}        - 获取工作流
    - PATCH  /api/workflows/{workflow_id}        - 更新名称/描述/状态/节点
    - DELETE /api/workflows/{workflow_id}        - 删除工作流
    - POST   /api/workflows/{workflow_id}/activate | deactivate
    - POST   /api/workflows/{workflow_id}/run    - 手动触发一次运行
    - PUT    /api/workflows/{workflow_id}/nodes  - 替换节点并开通事件来源
    - GET    /api/workflows/{workflow_id}/events - 最近 100 个接入事件

异常映射：NotFoundError → 404，其余 DomainError → 400，提交前失败时回滚 Session。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from src.application.use_cases import (
    CreateWorkflowInput,
    CreateWorkflowUseCase,
    EventSourceProvisioningError,
    ManageWorkflowUseCase,
    StartWorkflowRunInput,
    StartWorkflowRunUseCase,
    UpdateWorkflowInput,
    UpdateWorkflowNodesInput,
    UpdateWorkflowNodesUseCase,
    UpdateWorkflowUseCase,
)
from src.application.use_cases.workflow_access import load_owned_workflow
from src.domain.exceptions import DomainError, NotFoundError
from src.domain.value_objects.workflow_status import WorkflowStatus
from src.infrastructure.database.engine import get_db_session
from src.interfaces.api.container import ApiContainer
from src.interfaces.api.dependencies.caller import (
    Caller,
    get_caller,
    get_integration_token,
    get_optional_integration_token,
)
from src.interfaces.api.dependencies.container import get_container
from src.interfaces.api.dto.event_dto import WorkflowEventResponse
from src.interfaces.api.dto.workflow_dto import (
    CreateWorkflowRequest,
    DeleteWorkflowResponse,
    ReplaceNodesRequest,
    RunStartedResponse,
    RunWorkflowRequest,
    UpdateWorkflowRequest,
    WorkflowResponse,
)

router = APIRouter(prefix="/workflows", tags=["Workflows"])

RECENT_EVENTS_LIMIT = 100


def _domain_http_error(exc: DomainError, db: Session) -> HTTPException:
    db.rollback()
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post(
    "",
    response_model=WorkflowResponse,
    status_code=status.HTTP_201_CREATED,
    summary="创建工作流",
)
def create_workflow(
    request: CreateWorkflowRequest,
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> WorkflowResponse:
    try:
        use_case = CreateWorkflowUseCase(workflow_repository=container.workflow_repository(db))
        workflow = use_case.execute(
            CreateWorkflowInput(
                user_id=caller.customer_id,
                name=request.name,
                description=request.description,
            )
        )
        db.commit()
        return WorkflowResponse.from_entity(workflow)
    except DomainError as exc:
        raise _domain_http_error(exc, db) from exc


@router.get("", response_model=list[WorkflowResponse], summary="列出工作流")
def list_workflows(
    status_filter: str | None = Query(default=None, alias="status"),
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> list[WorkflowResponse]:
    workflow_status: WorkflowStatus | None = None
    if status_filter:
        try:
            workflow_status = WorkflowStatus(status_filter)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status: {status_filter}",
            ) from exc

    use_case = ManageWorkflowUseCase(workflow_repository=container.workflow_repository(db))
    workflows = use_case.list(caller.customer_id, workflow_status)
    return [WorkflowResponse.from_entity(workflow) for workflow in workflows]


@router.get("/{workflow_id}", response_model=WorkflowResponse, summary="获取工作流")
def get_workflow(
    workflow_id: str,
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> WorkflowResponse:
    try:
        use_case = ManageWorkflowUseCase(workflow_repository=container.workflow_repository(db))
        return WorkflowResponse.from_entity(use_case.get(workflow_id, caller.customer_id))
    except DomainError as exc:
        raise _domain_http_error(exc, db) from exc


@router.patch("/{workflow_id}", response_model=WorkflowResponse, summary="更新工作流")
async def update_workflow(
    workflow_id: str,
    request: UpdateWorkflowRequest,
    caller: Caller = Depends(get_caller),
    access_token: str | None = Depends(get_optional_integration_token),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> WorkflowResponse:
    """更新工作流

    提交了 nodes 时重算每个节点的 outputSchema；无法签发令牌或计算失败都不阻塞保存。
    """
    try:
        use_case = UpdateWorkflowUseCase(
            workflow_repository=container.workflow_repository(db),
            schema_calculator=container.schema_calculator,
        )
        workflow = await use_case.execute(
            UpdateWorkflowInput(
                workflow_id=workflow_id,
                user_id=caller.customer_id,
                name=request.name,
                description=request.description,
                status=request.status,
                nodes=request.nodes,
                access_token=access_token,
            )
        )
        db.commit()
        return WorkflowResponse.from_entity(workflow)
    except DomainError as exc:
        raise _domain_http_error(exc, db) from exc


@router.delete("/{workflow_id}", response_model=DeleteWorkflowResponse, summary="删除工作流")
def delete_workflow(
    workflow_id: str,
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> DeleteWorkflowResponse:
    try:
        use_case = ManageWorkflowUseCase(workflow_repository=container.workflow_repository(db))
        use_case.delete(workflow_id, caller.customer_id)
        db.commit()
        return DeleteWorkflowResponse(success=True)
    except DomainError as exc:
        raise _domain_http_error(exc, db) from exc


@router.post("/{workflow_id}/activate", response_model=WorkflowResponse, summary="激活工作流")
def activate_workflow(
    workflow_id: str,
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> WorkflowResponse:
    try:
        use_case = ManageWorkflowUseCase(workflow_repository=container.workflow_repository(db))
        workflow = use_case.activate(workflow_id, caller.customer_id)
        db.commit()
        return WorkflowResponse.from_entity(workflow)
    except DomainError as exc:
        raise _domain_http_error(exc, db) from exc


@router.post("/{workflow_id}/deactivate", response_model=WorkflowResponse, summary="停用工作流")
def deactivate_workflow(
    workflow_id: str,
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> WorkflowResponse:
    try:
        use_case = ManageWorkflowUseCase(workflow_repository=container.workflow_repository(db))
        workflow = use_case.deactivate(workflow_id, caller.customer_id)
        db.commit()
        return WorkflowResponse.from_entity(workflow)
    except DomainError as exc:
        raise _domain_http_error(exc, db) from exc


@router.post("/{workflow_id}/run", response_model=RunStartedResponse, summary="手动触发运行")
async def run_workflow(
    workflow_id: str,
    request: RunWorkflowRequest | None = None,
    caller: Caller = Depends(get_caller),
    access_token: str = Depends(get_integration_token),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> RunStartedResponse:
    """创建运行并提交后台执行，立即返回 runId；执行进度通过运行记录轮询"""
    try:
        use_case = StartWorkflowRunUseCase(
            workflow_repository=container.workflow_repository(db),
            run_repository=container.run_repository(db),
            dispatcher=container.run_dispatcher,
            commit=db.commit,
        )
        run = await use_case.execute(
            StartWorkflowRunInput(
                workflow_id=workflow_id,
                user_id=caller.customer_id,
                access_token=access_token,
                input=(request.input if request and request.input else {}),
            )
        )
        return RunStartedResponse(
            message="Workflow execution started",
            workflow_id=workflow_id,
            run_id=run.id,
        )
    except DomainError as exc:
        raise _domain_http_error(exc, db) from exc


@router.put("/{workflow_id}/nodes", response_model=WorkflowResponse, summary="替换节点")
async def replace_workflow_nodes(
    workflow_id: str,
    request: ReplaceNodesRequest,
    caller: Caller = Depends(get_caller),
    access_token: str = Depends(get_integration_token),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
):
    """替换节点；第一个节点是完整配置的事件触发器时在集成平台开通事件来源

    Raises:
        400: 节点非法，或事件来源开通失败（{error, details, nodeId}）
        404: 工作流不存在
    """
    try:
        use_case = UpdateWorkflowNodesUseCase(
            workflow_repository=container.workflow_repository(db),
            provisioner=container.event_source_provisioner,
            schema_calculator=container.schema_calculator,
        )
        workflow = await use_case.execute(
            UpdateWorkflowNodesInput(
                workflow_id=workflow_id,
                user_id=caller.customer_id,
                nodes=request.nodes,
                access_token=access_token,
            )
        )
        db.commit()
        return WorkflowResponse.from_entity(workflow)
    except EventSourceProvisioningError as exc:
        db.rollback()
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc), "details": exc.details, "nodeId": exc.node_id},
        )
    except DomainError as exc:
        raise _domain_http_error(exc, db) from exc


@router.get(
    "/{workflow_id}/events",
    response_model=list[WorkflowEventResponse],
    summary="最近的接入事件",
)
def list_workflow_events(
    workflow_id: str,
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
    db: Session = Depends(get_db_session),
) -> list[WorkflowEventResponse]:
    try:
        load_owned_workflow(container.workflow_repository(db), workflow_id, caller.customer_id)
    except DomainError as exc:
        raise _domain_http_error(exc, db) from exc

    events = container.event_repository(db).list_recent(
        workflow_id, caller.customer_id, limit=RECENT_EVENTS_LIMIT
    )
    return [WorkflowEventResponse.from_entity(event) for event in events]
