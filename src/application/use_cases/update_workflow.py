"""UpdateWorkflowUseCase - 更新工作流（PATCH）

业务场景：
- 构建器保存名称、描述、状态或整个节点列表
- 节点列表变化时，先按节点类型校验配置，再为每个节点重新计算 outputSchema

业务规则：
- 输出 Schema 计算不能阻塞保存：计算器本身对单节点失败降级为空对象 Schema，
  没有访问令牌（令牌生成失败）时跳过计算，节点原样保存
- 节点 id 在工作流内唯一（由 Workflow.replace_nodes() 保证）
"""

import logging
from dataclasses import dataclass
from typing import Any

from src.application.services.output_schema_calculator import OutputSchemaCalculator
from src.application.use_cases.workflow_access import load_owned_workflow
from src.domain.entities.workflow import Workflow
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import DomainValidationError
from src.domain.ports.workflow_repository import WorkflowRepository
from src.domain.value_objects.workflow_status import WorkflowStatus

logger = logging.getLogger(__name__)


def build_nodes(raw_nodes: list[dict[str, Any]]) -> list[WorkflowNode]:
    """把请求中的节点字典转换为已校验的 WorkflowNode

    抛出：
        DomainValidationError: 节点结构或配置不合法
        UnsupportedNodeTypeError: 未知节点类型
    """
    nodes = []
    for index, data in enumerate(raw_nodes):
        if not isinstance(data, dict):
            raise DomainValidationError(f"nodes[{index}] 必须是对象")
        nodes.append(WorkflowNode.from_dict(data).validated())
    return nodes


@dataclass
class UpdateWorkflowInput:
    """PATCH 输入（None 表示不修改该字段）

    access_token 为 None 时跳过输出 Schema 计算。
    """

    workflow_id: str
    user_id: str
    name: str | None = None
    description: str | None = None
    status: str | None = None
    nodes: list[dict[str, Any]] | None = None
    access_token: str | None = None


class UpdateWorkflowUseCase:
    def __init__(
        self,
        workflow_repository: WorkflowRepository,
        schema_calculator: OutputSchemaCalculator,
    ):
        self.workflow_repository = workflow_repository
        self.schema_calculator = schema_calculator

    async def execute(self, input_data: UpdateWorkflowInput) -> Workflow:
        """执行用例

        异常：
            NotFoundError: 工作流不存在或不属于调用方
            DomainError: 字段不合法
        """
        workflow = load_owned_workflow(
            self.workflow_repository, input_data.workflow_id, input_data.user_id
        )

        if input_data.nodes is not None:
            nodes = build_nodes(input_data.nodes)
            if input_data.access_token:
                nodes = await self.schema_calculator.update_nodes_with_output_schemas(
                    nodes, input_data.access_token
                )
            else:
                logger.warning(
                    "output_schema_calculation_skipped",
                    extra={"workflow_id": workflow.id, "reason": "no_access_token"},
                )
            workflow.replace_nodes(nodes)

        if input_data.name is not None or input_data.description is not None:
            workflow.rename(name=input_data.name, description=input_data.description)

        if input_data.status is not None:
            try:
                status = WorkflowStatus(input_data.status)
            except ValueError as exc:
                raise DomainValidationError(f"无效的状态: {input_data.status}") from exc
            if status == WorkflowStatus.ACTIVE:
                workflow.activate()
            else:
                workflow.deactivate()

        self.workflow_repository.save(workflow)
        logger.info(
            "workflow_updated",
            extra={"workflow_id": workflow.id, "version": workflow.version},
        )
        return workflow
