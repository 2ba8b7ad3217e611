"""测试：RunDispatcher 后台执行兜底"""

import pytest

from src.application.services.run_dispatcher import RunDispatcher
from src.application.services.workflow_run_orchestrator import (
    RunExecutionOutcome,
    RunExecutionRequest,
)
from src.domain.entities.workflow import Workflow
from src.domain.entities.workflow_run import WorkflowRun
from src.domain.value_objects.run_status import RunStatus
from src.infrastructure.database.repositories import SQLAlchemyWorkflowRunRepository


def _seed_run(session_factory) -> str:
    session = session_factory()
    try:
        run = WorkflowRun.start_for(Workflow.create(name="wf", user_id="c1"), user_id="c1")
        SQLAlchemyWorkflowRunRepository(session).save(run)
        session.commit()
        return run.id
    finally:
        session.close()


def _status(session_factory, run_id: str) -> WorkflowRun:
    session = session_factory()
    try:
        return SQLAlchemyWorkflowRunRepository(session).get_by_id(run_id)
    finally:
        session.close()


@pytest.mark.asyncio
async def test_orchestrator_exception_marks_run_failed(session_factory):
    """测试：编排器抛出异常时运行被标记为 failed，异常不外抛"""
    run_id = _seed_run(session_factory)

    async def explode(request: RunExecutionRequest) -> RunExecutionOutcome:
        raise RuntimeError("store unavailable")

    dispatcher = RunDispatcher(
        execute=explode,
        session_factory=session_factory,
        run_repository_factory=SQLAlchemyWorkflowRunRepository,
    )

    dispatcher.submit(RunExecutionRequest(workflow_id="wf", run_id=run_id, access_token="t"))
    await dispatcher.drain()

    run = _status(session_factory, run_id)
    assert run.status == RunStatus.FAILED
    assert run.error == "store unavailable"
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_successful_execution_leaves_run_untouched(session_factory):
    run_id = _seed_run(session_factory)
    seen: list[str] = []

    async def execute(request: RunExecutionRequest) -> RunExecutionOutcome:
        seen.append(request.run_id)
        return RunExecutionOutcome(run_id=request.run_id, success=True)

    dispatcher = RunDispatcher(
        execute=execute,
        session_factory=session_factory,
        run_repository_factory=SQLAlchemyWorkflowRunRepository,
    )

    dispatcher.submit(RunExecutionRequest(workflow_id="wf", run_id=run_id, access_token="t"))
    await dispatcher.drain()

    assert seen == [run_id]
    assert _status(session_factory, run_id).status == RunStatus.RUNNING
