"""CreateWorkflowUseCase - 创建工作流用例

业务场景：
用户在构建器中新建一个空白工作流（inactive，无节点），之后再逐步添加节点。

职责：
1. 调用 Workflow.create() 创建领域实体（名称、所属用户校验在 Domain 层）
2. 调用 Repository.save() 持久化
3. 返回创建的 Workflow

事务提交由调用方（API 层）负责。
"""

import logging
from dataclasses import dataclass

from src.domain.entities.workflow import Workflow
from src.domain.ports.workflow_repository import WorkflowRepository

logger = logging.getLogger(__name__)


@dataclass
class CreateWorkflowInput:
    """创建工作流的输入参数

    属性说明：
    - user_id: 调用方 customerId（工作流所属用户）
    - name: 工作流名称（必填）
    - description: 描述（可选）
    """

    user_id: str
    name: str
    description: str | None = None


class CreateWorkflowUseCase:
    def __init__(self, workflow_repository: WorkflowRepository):
        self.workflow_repository = workflow_repository

    def execute(self, input_data: CreateWorkflowInput) -> Workflow:
        """执行用例

        异常：
            DomainError: 名称或用户为空（由 Workflow.create() 抛出）
        """
        workflow = Workflow.create(
            name=input_data.name,
            user_id=input_data.user_id,
            description=input_data.description,
        )
        self.workflow_repository.save(workflow)
        logger.info(
            "workflow_created",
            extra={"workflow_id": workflow.id, "user_id": workflow.user_id},
        )
        return workflow
