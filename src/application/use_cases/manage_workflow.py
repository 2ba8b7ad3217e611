"""ManageWorkflowUseCase - 工作流查询与生命周期操作

包含读取、列表、删除、激活、停用。这些操作都只涉及单个聚合，
合并在一个用例类中，所有操作都按调用方做所有权校验。
"""

import logging

from src.application.use_cases.workflow_access import load_owned_workflow
from src.domain.entities.workflow import Workflow
from src.domain.ports.workflow_repository import WorkflowRepository
from src.domain.value_objects.workflow_status import WorkflowStatus

logger = logging.getLogger(__name__)


class ManageWorkflowUseCase:
    def __init__(self, workflow_repository: WorkflowRepository):
        self.workflow_repository = workflow_repository

    def get(self, workflow_id: str, user_id: str) -> Workflow:
        return load_owned_workflow(self.workflow_repository, workflow_id, user_id)

    def list(self, user_id: str, status: WorkflowStatus | None = None) -> list[Workflow]:
        return self.workflow_repository.list_by_user(user_id, status)

    def delete(self, workflow_id: str, user_id: str) -> None:
        load_owned_workflow(self.workflow_repository, workflow_id, user_id)
        self.workflow_repository.delete(workflow_id)
        logger.info("workflow_deleted", extra={"workflow_id": workflow_id})

    def activate(self, workflow_id: str, user_id: str) -> Workflow:
        workflow = load_owned_workflow(self.workflow_repository, workflow_id, user_id)
        workflow.activate()
        self.workflow_repository.save(workflow)
        logger.info("workflow_activated", extra={"workflow_id": workflow_id})
        return workflow

    def deactivate(self, workflow_id: str, user_id: str) -> Workflow:
        workflow = load_owned_workflow(self.workflow_repository, workflow_id, user_id)
        workflow.deactivate()
        self.workflow_repository.save(workflow)
        logger.info("workflow_deactivated", extra={"workflow_id": workflow_id})
        return workflow
