"""测试：WorkflowRunOrchestrator 持久化运行编排

验收标准：
- N 个节点全部成功：运行 completed，results 长度为 N
- 第 k 个节点失败：运行 failed，results 长度为 k，后续节点不执行
- 对同一运行重复调用：已完成的步骤不重复执行，不产生重复结果
- 端到端：manual → http → gate
"""

import httpx
import pytest

from src.application.services.durable_step_runtime import DurableStepRuntime
from src.application.services.node_execution_service import NodeExecutionService
from src.application.services.workflow_run_orchestrator import (
    RunExecutionRequest,
    WorkflowRunOrchestrator,
)
from src.domain.entities.node_result import NodeResult
from src.domain.entities.workflow import Workflow
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.entities.workflow_run import WorkflowRun
from src.domain.exceptions import NodeExecutionError, OrchestrationError
from src.domain.ports.node_executor import NodeExecutionContext, NodeExecutor, NodeExecutorRegistry
from src.domain.value_objects.node_type import NodeKind
from src.domain.value_objects.run_status import RunStatus
from src.infrastructure.adapters import InMemoryStepResultStore
from src.infrastructure.database.repositories import (
    SQLAlchemyWorkflowRepository,
    SQLAlchemyWorkflowRunRepository,
)
from src.infrastructure.executors import GateExecutor, HttpExecutor, TriggerExecutor


class CountingExecutor(NodeExecutor):
    """记录调用次数；名字在 fail_on 中的节点抛出 NodeExecutionError"""

    def __init__(self, fail_on: set[str] | None = None):
        self.calls: list[str] = []
        self.fail_on = fail_on or set()

    async def execute(self, node: WorkflowNode, context: NodeExecutionContext) -> NodeResult:
        self.calls.append(node.name)
        if node.name in self.fail_on:
            raise NodeExecutionError(f"{node.name} exploded", code="HTTP_EXECUTION_ERROR")
        return NodeResult.succeeded(
            node_id=node.id,
            node_name=node.name,
            input={},
            output={"index": len(context.previous_results)},
        )


def _trigger() -> WorkflowNode:
    return WorkflowNode.create(node_id="trigger", name="Trigger", type="trigger", trigger_type="manual")


def _http(node_id: str, name: str, uri: str = "https://api.example.com/items") -> WorkflowNode:
    return WorkflowNode.create(
        node_id=node_id,
        name=name,
        type="action",
        node_type="http",
        config={"uri": uri, "method": "GET"},
    )


def _seed(session_factory, nodes: list[WorkflowNode], trigger_input: dict | None = None) -> tuple[str, str]:
    session = session_factory()
    try:
        workflow = Workflow.create(name="订单同步", user_id="customer-1")
        workflow.replace_nodes(nodes)
        SQLAlchemyWorkflowRepository(session).save(workflow)
        run = WorkflowRun.start_for(workflow, user_id="customer-1", input=trigger_input)
        SQLAlchemyWorkflowRunRepository(session).save(run)
        session.commit()
        return workflow.id, run.id
    finally:
        session.close()


def _load_run(session_factory, run_id: str) -> WorkflowRun:
    session = session_factory()
    try:
        return SQLAlchemyWorkflowRunRepository(session).get_by_id(run_id)
    finally:
        session.close()


def _orchestrator(session_factory, registry, store=None) -> WorkflowRunOrchestrator:
    return WorkflowRunOrchestrator(
        session_factory=session_factory,
        workflow_repository_factory=SQLAlchemyWorkflowRepository,
        run_repository_factory=SQLAlchemyWorkflowRunRepository,
        node_execution=NodeExecutionService(registry=registry),
        step_runtime=DurableStepRuntime(store=store or InMemoryStepResultStore()),
    )


def _counting_registry(executor: CountingExecutor) -> NodeExecutorRegistry:
    registry = NodeExecutorRegistry()
    registry.register(NodeKind.MANUAL_TRIGGER, TriggerExecutor())
    registry.register(NodeKind.HTTP, executor)
    return registry


@pytest.mark.asyncio
async def test_all_nodes_succeed_should_complete_run(session_factory):
    """测试：全部成功 → completed，results 与节点一一对应"""
    executor = CountingExecutor()
    workflow_id, run_id = _seed(
        session_factory, [_trigger(), _http("a", "A"), _http("b", "B"), _http("c", "C")]
    )
    orchestrator = _orchestrator(session_factory, _counting_registry(executor))

    outcome = await orchestrator.execute(
        RunExecutionRequest(workflow_id=workflow_id, run_id=run_id, access_token="token")
    )

    run = _load_run(session_factory, run_id)
    assert outcome.success is True
    assert run.status == RunStatus.COMPLETED
    assert [result.node_id for result in run.results] == ["trigger", "a", "b", "c"]
    assert run.summary.success_rate == 100.0
    assert run.completed_at is not None
    assert executor.calls == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_failing_node_should_stop_run(session_factory):
    """测试：第 3 个节点失败 → failed，results 长度为 3，第 4 个节点不执行"""
    executor = CountingExecutor(fail_on={"B"})
    workflow_id, run_id = _seed(
        session_factory, [_trigger(), _http("a", "A"), _http("b", "B"), _http("c", "C")]
    )
    orchestrator = _orchestrator(session_factory, _counting_registry(executor))

    outcome = await orchestrator.execute(
        RunExecutionRequest(workflow_id=workflow_id, run_id=run_id, access_token="token")
    )

    run = _load_run(session_factory, run_id)
    assert outcome.success is False
    assert run.status == RunStatus.FAILED
    assert len(run.results) == 3
    assert run.results[-1].error.code == "HTTP_EXECUTION_ERROR"
    assert run.error == "B exploded"
    assert run.summary.failed_nodes == 1
    assert "C" not in executor.calls


@pytest.mark.asyncio
async def test_reinvoking_same_run_should_not_duplicate_results(session_factory):
    """测试：同一运行重复投递，已完成步骤直接重放"""
    executor = CountingExecutor()
    store = InMemoryStepResultStore()
    workflow_id, run_id = _seed(session_factory, [_trigger(), _http("a", "A")])
    orchestrator = _orchestrator(session_factory, _counting_registry(executor), store)
    request = RunExecutionRequest(workflow_id=workflow_id, run_id=run_id, access_token="token")

    await orchestrator.execute(request)
    await orchestrator.execute(request)

    run = _load_run(session_factory, run_id)
    assert len(run.results) == 2
    assert executor.calls == ["A"]
    assert f"execute-workflow:{run_id}:A" in store.keys()


@pytest.mark.asyncio
async def test_persisted_result_is_reused_without_step_record(session_factory):
    """测试：结果已落库但步骤结果丢失时，按位置复用已有结果"""
    executor = CountingExecutor()
    workflow_id, run_id = _seed(session_factory, [_trigger(), _http("a", "A")])
    request = RunExecutionRequest(workflow_id=workflow_id, run_id=run_id, access_token="token")

    await _orchestrator(session_factory, _counting_registry(executor)).execute(request)
    run = _load_run(session_factory, run_id)
    assert run.status == RunStatus.COMPLETED

    # 新的步骤存储：所有步骤都会重新进入，但节点不会再次执行
    await _orchestrator(session_factory, _counting_registry(executor)).execute(request)

    assert executor.calls == ["A"]
    assert len(_load_run(session_factory, run_id).results) == 2


@pytest.mark.asyncio
async def test_missing_run_should_exhaust_all_attempts(session_factory):
    orchestrator = _orchestrator(session_factory, _counting_registry(CountingExecutor()))
    workflow_id, _ = _seed(session_factory, [_trigger()])

    with pytest.raises(OrchestrationError):
        await orchestrator.execute(
            RunExecutionRequest(workflow_id=workflow_id, run_id="missing", access_token="token")
        )


@pytest.mark.asyncio
async def test_manual_http_gate_end_to_end(session_factory):
    """测试：manual → http(200, {status: ok}) → gate(status equals ok) 完成"""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["sku"] == "A-1"
        return httpx.Response(200, json={"status": "ok"})

    gate = WorkflowNode.create(
        node_id="gate",
        name="Check",
        type="action",
        node_type="gate",
        config={
            "condition": {
                "field": {"$var": "$.Previous Steps.Fetch.body.status"},
                "operator": "equals",
                "value": "ok",
            }
        },
    )
    fetch = WorkflowNode.create(
        node_id="fetch",
        name="Fetch",
        type="action",
        node_type="http",
        config={
            "uri": "https://api.example.com/items",
            "method": "GET",
            "inputMapping": {
                "queryParameters": [{"key": "sku", "value": {"$var": "$.input.sku"}}]
            },
        },
    )
    workflow_id, run_id = _seed(session_factory, [_trigger(), fetch, gate], {"sku": "A-1"})

    registry = NodeExecutorRegistry()
    registry.register(NodeKind.MANUAL_TRIGGER, TriggerExecutor())
    registry.register(NodeKind.HTTP, HttpExecutor(transport=httpx.MockTransport(handler)))
    registry.register(NodeKind.GATE, GateExecutor())

    await _orchestrator(session_factory, registry).execute(
        RunExecutionRequest(
            workflow_id=workflow_id,
            run_id=run_id,
            access_token="token",
            trigger_input={"sku": "A-1"},
        )
    )

    run = _load_run(session_factory, run_id)
    assert run.status == RunStatus.COMPLETED
    assert len(run.results) == 3
    assert run.results[0].output["sku"] == "A-1"
    assert run.results[2].output["conditionMet"] is True


@pytest.mark.asyncio
async def test_http_timeout_should_fail_run(session_factory):
    """测试：HTTP 节点超时 → failed，results 长度为 2"""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    workflow_id, run_id = _seed(
        session_factory, [_trigger(), _http("fetch", "Fetch"), _http("after", "After")]
    )
    registry = NodeExecutorRegistry()
    registry.register(NodeKind.MANUAL_TRIGGER, TriggerExecutor())
    registry.register(
        NodeKind.HTTP, HttpExecutor(timeout=1.0, transport=httpx.MockTransport(handler))
    )

    await _orchestrator(session_factory, registry).execute(
        RunExecutionRequest(workflow_id=workflow_id, run_id=run_id, access_token="token")
    )

    run = _load_run(session_factory, run_id)
    assert run.status == RunStatus.FAILED
    assert len(run.results) == 2
    assert run.results[1].error.code == "HTTP_EXECUTION_ERROR"
    assert "timed out" in run.error
