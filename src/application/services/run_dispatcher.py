"""RunDispatcher - 把运行执行提交为后台任务

- submit() 立即返回，请求处理器的响应延迟与执行耗时无关
- 编排器抛出的任何异常在这里兜底：运行仍处于 RUNNING 时标记为 FAILED
- 持有任务引用直到结束；drain() 等待所有未完成任务（关闭应用与测试使用）

接受运行（202）之后的错误只写入运行记录，不再抛给任何调用方。
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from src.application.services.workflow_run_orchestrator import (
    RunExecutionOutcome,
    RunExecutionRequest,
)
from src.domain.ports.workflow_run_repository import WorkflowRunRepository

logger = logging.getLogger(__name__)

RunExecutor = Callable[[RunExecutionRequest], Awaitable[RunExecutionOutcome]]


class RunDispatcher:
    def __init__(
        self,
        *,
        execute: RunExecutor,
        session_factory: Callable[[], Session],
        run_repository_factory: Callable[[Session], WorkflowRunRepository],
    ) -> None:
        self._execute = execute
        self._session_factory = session_factory
        self._run_repository_factory = run_repository_factory
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, request: RunExecutionRequest) -> asyncio.Task[None]:
        task = asyncio.create_task(
            self._run_guarded(request), name=f"workflow-run-{request.run_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info(
            "workflow_run_dispatched",
            extra={"workflow_id": request.workflow_id, "run_id": request.run_id},
        )
        return task

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run_guarded(self, request: RunExecutionRequest) -> None:
        try:
            await self._execute(request)
        except Exception as exc:  # noqa: BLE001 - post-acceptance errors only land in the run record
            logger.exception(
                "workflow_run_execution_error",
                extra={"workflow_id": request.workflow_id, "run_id": request.run_id},
            )
            self._mark_failed(request.run_id, str(exc) or type(exc).__name__)

    def _mark_failed(self, run_id: str, message: str) -> None:
        session = self._session_factory()
        try:
            repository = self._run_repository_factory(session)
            run = repository.find_by_id(run_id)
            if run is None or run.is_terminal:
                return
            run.fail(message, now=datetime.now(UTC))
            repository.save(run)
            session.commit()
        except Exception:  # noqa: BLE001 - last-resort update, already logged above
            session.rollback()
            logger.exception("workflow_run_mark_failed_error", extra={"run_id": run_id})
        finally:
            session.close()
