"""工作流访问控制 - 多租户隔离

其他用户的工作流与不存在的工作流对调用方不可区分，统一抛出 NotFoundError（404）。
"""

from src.domain.entities.workflow import Workflow
from src.domain.exceptions import NotFoundError
from src.domain.ports.workflow_repository import WorkflowRepository


def load_owned_workflow(
    repository: WorkflowRepository, workflow_id: str, user_id: str
) -> Workflow:
    workflow = repository.find_by_id(workflow_id)
    if workflow is None or workflow.user_id != user_id:
        raise NotFoundError("Workflow", workflow_id)
    return workflow
