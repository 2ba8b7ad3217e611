"""WorkflowRunOrchestrator - 持久化运行编排器

按节点快照顺序执行 WorkflowRun，每个节点是一个持久化步骤：

1. 步骤 load-workflow：确认工作流与运行记录存在
2. 每个节点一个步骤，步骤键为节点名（无名节点为 unnamed-node-{i}）：
   a. 重新加载运行记录（不信任跨步骤的进程内状态）
   b. 已持久化的 results 作为 previous_results
   c. 若该位置已有结果（上一次尝试已落库但未记录步骤结果），直接返回该结果
   d. 执行节点，追加结果、重算 summary，失败时同时标记运行 FAILED，一次提交
3. 遇到失败结果立即停止，后续节点不再执行
4. 步骤 mark-workflow-completed：重算 summary，标记 COMPLETED

节点失败对运行是终态；基础设施失败（存储不可用）由 DurableStepRuntime 整体重放，
已完成的步骤直接返回记录的结果。
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.orm import Session

from src.application.services.durable_step_runtime import DurableStepRuntime, StepContext
from src.application.services.node_execution_service import NodeExecutionService
from src.domain.entities.node_result import NodeResult
from src.domain.entities.workflow_run import WorkflowRun
from src.domain.exceptions import OrchestrationError
from src.domain.ports.workflow_repository import WorkflowRepository
from src.domain.ports.workflow_run_repository import WorkflowRunRepository

logger = logging.getLogger(__name__)

EXECUTE_WORKFLOW_FUNCTION_ID = "execute-workflow"
LOAD_WORKFLOW_STEP = "load-workflow"
MARK_COMPLETED_STEP = "mark-workflow-completed"


def node_step_key(name: str | None, index: int) -> str:
    return name or f"unnamed-node-{index}"


@dataclass(frozen=True)
class RunExecutionRequest:
    """一次运行执行请求（对应一次 workflow/execute 事件）"""

    workflow_id: str
    run_id: str
    access_token: str
    trigger_input: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RunExecutionOutcome:
    run_id: str
    success: bool


class WorkflowRunOrchestrator:
    def __init__(
        self,
        *,
        session_factory: Callable[[], Session],
        workflow_repository_factory: Callable[[Session], WorkflowRepository],
        run_repository_factory: Callable[[Session], WorkflowRunRepository],
        node_execution: NodeExecutionService,
        step_runtime: DurableStepRuntime,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._session_factory = session_factory
        self._workflow_repository_factory = workflow_repository_factory
        self._run_repository_factory = run_repository_factory
        self._node_execution = node_execution
        self._step_runtime = step_runtime
        self._clock = clock

    async def execute(self, request: RunExecutionRequest) -> RunExecutionOutcome:
        """执行整次运行

        抛出：
            OrchestrationError: 重试预算耗尽（存储不可用、工作流或运行消失）
        """

        async def handler(step: StepContext) -> RunExecutionOutcome:
            return await self._run_function(step, request)

        return await self._step_runtime.invoke(
            function_id=EXECUTE_WORKFLOW_FUNCTION_ID,
            run_key=request.run_id,
            handler=handler,
        )

    async def _run_function(
        self, step: StepContext, request: RunExecutionRequest
    ) -> RunExecutionOutcome:
        snapshot = await step.run(LOAD_WORKFLOW_STEP, lambda: self._load(request))
        nodes = snapshot["nodes"]

        logger.info(
            "workflow_run_started",
            extra={
                "workflow_id": request.workflow_id,
                "run_id": request.run_id,
                "node_count": len(nodes),
                "attempt": step.attempt,
            },
        )

        for index in range(len(nodes)):
            step_key = node_step_key(nodes[index].get("name"), index)

            async def execute_node(index: int = index) -> dict[str, Any]:
                return await self._execute_node_step(request, index)

            result = NodeResult.from_dict(await step.run(step_key, execute_node))
            if not result.success:
                logger.info(
                    "workflow_run_failed",
                    extra={
                        "run_id": request.run_id,
                        "node_id": result.node_id,
                        "error": result.error.message if result.error else None,
                    },
                )
                return RunExecutionOutcome(run_id=request.run_id, success=False)

        await step.run(MARK_COMPLETED_STEP, lambda: self._mark_completed(request))
        logger.info("workflow_run_completed", extra={"run_id": request.run_id})
        return RunExecutionOutcome(run_id=request.run_id, success=True)

    # ==================== 步骤实现 ====================

    async def _load(self, request: RunExecutionRequest) -> dict[str, Any]:
        with self._session_scope() as session:
            workflow = self._workflow_repository_factory(session).find_by_id(request.workflow_id)
            if workflow is None:
                raise OrchestrationError(f"Workflow {request.workflow_id} not found")
            run = self._require_run(session, request.run_id)

            if not run.nodes_snapshot and workflow.nodes and not run.results:
                run.nodes_snapshot = list(workflow.nodes)
                run.summary = run.summary.compute(run.results, len(run.nodes_snapshot))
                self._run_repository_factory(session).save(run)

            return {
                "workflowId": workflow.id,
                "runId": run.id,
                "nodes": [node.to_dict() for node in run.nodes_snapshot],
            }

    async def _execute_node_step(self, request: RunExecutionRequest, index: int) -> dict[str, Any]:
        with self._session_scope() as session:
            run = self._require_run(session, request.run_id)
            node = run.nodes_snapshot[index]

            existing = run.result_at(index)
            if existing is not None:
                logger.info(
                    "workflow_node_result_reused",
                    extra={"run_id": run.id, "node_id": node.id, "index": index},
                )
                return existing.to_dict()

            if run.is_terminal:
                raise OrchestrationError(f"Workflow run {run.id} already {run.status.value}")

            result = await self._node_execution.execute_workflow_node(
                node,
                list(run.results),
                request.access_token,
                request.trigger_input,
            )
            run.record_result(result, now=self._clock())
            self._run_repository_factory(session).save(run)

            logger.info(
                "workflow_node_executed",
                extra={
                    "run_id": run.id,
                    "node_id": node.id,
                    "node_name": node.name,
                    "success": result.success,
                    "successful_nodes": run.summary.successful_nodes,
                    "total_nodes": run.summary.total_nodes,
                },
            )
            return result.to_dict()

    async def _mark_completed(self, request: RunExecutionRequest) -> dict[str, Any]:
        with self._session_scope() as session:
            run = self._require_run(session, request.run_id)
            if not run.is_terminal:
                run.complete(now=self._clock())
                self._run_repository_factory(session).save(run)
            return {"runId": run.id, "status": run.status.value}

    def _require_run(self, session: Session, run_id: str) -> WorkflowRun:
        run = self._run_repository_factory(session).find_by_id(run_id)
        if run is None:
            raise OrchestrationError(f"Workflow run {run_id} not found")
        return run

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
