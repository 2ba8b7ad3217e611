"""Workflow DTO（Data Transfer Objects）

定义 Workflow 相关的请求和响应模型

节点在 API 边界保持原始字典形式，由 build_nodes() 统一校验后再进入 Domain 层。
"""

from datetime import datetime
from typing import Any

from pydantic import Field

from src.domain.entities.workflow import Workflow
from src.interfaces.api.dto.base_dto import CamelModel


class CreateWorkflowRequest(CamelModel):
    """创建 Workflow 请求 DTO

    字段：
    - name: 工作流名称（必填，不能为空字符串）
    - description: 描述（可选）
    """

    name: str = Field(..., min_length=1, description="工作流名称")
    description: str | None = Field(default=None, description="工作流描述")


class UpdateWorkflowRequest(CamelModel):
    """更新 Workflow 请求 DTO

    所有字段可选，只更新请求中出现的字段。
    """

    name: str | None = None
    description: str | None = None
    status: str | None = Field(default=None, description="active / inactive")
    nodes: list[dict[str, Any]] | None = Field(default=None, description="完整的节点列表")


class ReplaceNodesRequest(CamelModel):
    nodes: list[dict[str, Any]] = Field(default_factory=list)


class RunWorkflowRequest(CamelModel):
    input: dict[str, Any] | None = Field(default=None, description="手动触发的输入数据")


class WorkflowResponse(CamelModel):
    """Workflow 响应 DTO"""

    id: str
    user_id: str
    name: str
    description: str
    status: str
    nodes: list[dict[str, Any]]
    version: int
    last_run_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, workflow: Workflow) -> "WorkflowResponse":
        return cls(
            id=workflow.id,
            user_id=workflow.user_id,
            name=workflow.name,
            description=workflow.description,
            status=workflow.status.value,
            nodes=[node.to_dict() for node in workflow.nodes],
            version=workflow.version,
            last_run_at=workflow.last_run_at,
            created_at=workflow.created_at,
            updated_at=workflow.updated_at,
        )


class DeleteWorkflowResponse(CamelModel):
    success: bool = True


class RunStartedResponse(CamelModel):
    message: str
    workflow_id: str
    run_id: str
