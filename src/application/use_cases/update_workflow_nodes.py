"""UpdateWorkflowNodesUseCase - 替换节点列表并开通事件来源（PUT nodes）

业务流程：
1. 校验节点
2. 第一个节点是配置完整的事件触发器时，在集成平台上创建或更新 Flow 实例
3. 仅在开通了事件来源时重新计算输出 Schema
4. 保存节点（version + 1）
"""

import logging
from dataclasses import dataclass
from typing import Any

from src.application.services.event_source_provisioner import EventSourceProvisioner
from src.application.services.output_schema_calculator import OutputSchemaCalculator
from src.application.use_cases.update_workflow import build_nodes
from src.application.use_cases.workflow_access import load_owned_workflow
from src.domain.entities.workflow import Workflow
from src.domain.exceptions import DomainError, IntegrationError
from src.domain.ports.workflow_repository import WorkflowRepository

logger = logging.getLogger(__name__)


class EventSourceProvisioningError(DomainError):
    """事件来源开通失败（400）

    属性：
        node_id: 第一个节点的 ID
        details: 集成平台返回的错误信息
    """

    def __init__(self, message: str, *, node_id: str, details: str):
        self.node_id = node_id
        self.details = details
        super().__init__(message)


@dataclass
class UpdateWorkflowNodesInput:
    workflow_id: str
    user_id: str
    nodes: list[dict[str, Any]]
    access_token: str


class UpdateWorkflowNodesUseCase:
    def __init__(
        self,
        workflow_repository: WorkflowRepository,
        provisioner: EventSourceProvisioner,
        schema_calculator: OutputSchemaCalculator,
    ):
        self.workflow_repository = workflow_repository
        self.provisioner = provisioner
        self.schema_calculator = schema_calculator

    async def execute(self, input_data: UpdateWorkflowNodesInput) -> Workflow:
        """执行用例

        异常：
            NotFoundError: 工作流不存在或不属于调用方
            EventSourceProvisioningError: Flow 实例创建/更新失败
        """
        workflow = load_owned_workflow(
            self.workflow_repository, input_data.workflow_id, input_data.user_id
        )
        nodes = build_nodes(input_data.nodes)

        try:
            nodes, provisioned = await self.provisioner.sync_first_node(
                workflow.id, workflow.nodes, nodes, input_data.access_token
            )
        except IntegrationError as exc:
            logger.error(
                "event_source_provisioning_failed",
                extra={"workflow_id": workflow.id, "node_id": nodes[0].id, "error": str(exc)},
            )
            raise EventSourceProvisioningError(
                "Failed to provision event source",
                node_id=nodes[0].id,
                details=str(exc),
            ) from exc

        if provisioned:
            nodes = await self.schema_calculator.update_nodes_with_output_schemas(
                nodes, input_data.access_token
            )

        workflow.replace_nodes(nodes)
        self.workflow_repository.save(workflow)
        logger.info(
            "workflow_nodes_updated",
            extra={
                "workflow_id": workflow.id,
                "node_count": len(nodes),
                "provisioned": provisioned,
            },
        )
        return workflow
