"""StartWorkflowRunUseCase - 手动触发运行

业务流程：
1. 加载调用方的工作流
2. 创建 WorkflowRun（RUNNING，拷贝节点快照，input = 请求中的 input）
3. 提交事务，保证后台执行读取得到运行记录
4. 提交后台执行（不等待）
5. 更新工作流 lastRunAt

返回的运行 ID 供前端立即刷新运行列表；执行结果通过轮询运行记录获得。
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from src.application.services.run_dispatcher import RunDispatcher
from src.application.services.workflow_run_orchestrator import RunExecutionRequest
from src.application.use_cases.workflow_access import load_owned_workflow
from src.domain.entities.workflow_run import WorkflowRun
from src.domain.ports.workflow_repository import WorkflowRepository
from src.domain.ports.workflow_run_repository import WorkflowRunRepository

logger = logging.getLogger(__name__)


@dataclass
class StartWorkflowRunInput:
    workflow_id: str
    user_id: str
    access_token: str
    input: dict[str, Any] = field(default_factory=dict)


class StartWorkflowRunUseCase:
    def __init__(
        self,
        workflow_repository: WorkflowRepository,
        run_repository: WorkflowRunRepository,
        dispatcher: RunDispatcher,
        commit: Callable[[], None],
    ):
        self.workflow_repository = workflow_repository
        self.run_repository = run_repository
        self.dispatcher = dispatcher
        self.commit = commit

    async def execute(self, input_data: StartWorkflowRunInput) -> WorkflowRun:
        """执行用例

        异常：
            NotFoundError: 工作流不存在或不属于调用方
        """
        workflow = load_owned_workflow(
            self.workflow_repository, input_data.workflow_id, input_data.user_id
        )

        now = datetime.now(UTC)
        run = WorkflowRun.start_for(
            workflow, user_id=input_data.user_id, input=input_data.input, now=now
        )
        self.run_repository.save(run)
        self.commit()

        self.dispatcher.submit(
            RunExecutionRequest(
                workflow_id=workflow.id,
                run_id=run.id,
                access_token=input_data.access_token,
                trigger_input=run.input,
            )
        )

        workflow.mark_run(now)
        self.workflow_repository.save(workflow)
        self.commit()

        logger.info(
            "workflow_run_requested",
            extra={"workflow_id": workflow.id, "run_id": run.id, "node_count": len(run.nodes_snapshot)},
        )
        return run
