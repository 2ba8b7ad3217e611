"""测试：DurableStepRuntime

验收标准：
- 已记录的步骤在重放时不再执行
- 函数失败后整体重放，最多 max_attempts 次，耗尽后抛出 OrchestrationError
- 同一次调用内重复的 step_id 追加序号后缀
"""

import pytest

from src.application.services.durable_step_runtime import DurableStepRuntime, StepContext
from src.domain.exceptions import OrchestrationError
from src.infrastructure.adapters import InMemoryStepResultStore


@pytest.fixture
def store() -> InMemoryStepResultStore:
    return InMemoryStepResultStore()


@pytest.mark.asyncio
async def test_completed_steps_are_replayed_on_retry(store):
    """测试：第二次尝试时第一个步骤直接返回记录值"""
    runtime = DurableStepRuntime(store=store, max_attempts=3)
    executions: list[str] = []

    async def first() -> dict:
        executions.append("first")
        return {"value": 1}

    async def handler(step: StepContext) -> int:
        result = await step.run("first", first)
        if step.attempt == 1:
            raise RuntimeError("storage unavailable")
        return result["value"]

    value = await runtime.invoke(function_id="fn", run_key="run-1", handler=handler)

    assert value == 1
    assert executions == ["first"]


@pytest.mark.asyncio
async def test_exhausted_attempts_raise_orchestration_error(store):
    runtime = DurableStepRuntime(store=store, max_attempts=2)
    attempts: list[int] = []

    async def handler(step: StepContext) -> None:
        attempts.append(step.attempt)
        raise RuntimeError("boom")

    with pytest.raises(OrchestrationError) as exc_info:
        await runtime.invoke(function_id="fn", run_key="run-1", handler=handler)

    assert attempts == [1, 2]
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_duplicate_step_ids_get_suffix(store):
    runtime = DurableStepRuntime(store=store)

    async def handler(step: StepContext) -> list:
        a = await step.run("Fetch", _const("a"))
        b = await step.run("Fetch", _const("b"))
        return [a, b]

    assert await runtime.invoke(function_id="fn", run_key="r", handler=handler) == ["a", "b"]
    assert sorted(store.keys()) == ["fn:r:Fetch", "fn:r:Fetch:1"]


@pytest.mark.asyncio
async def test_run_keys_are_isolated(store):
    runtime = DurableStepRuntime(store=store)

    async def handler(step: StepContext) -> str:
        return await step.run("step", _const(step.attempt))

    await runtime.invoke(function_id="fn", run_key="r1", handler=handler)
    await runtime.invoke(function_id="fn", run_key="r2", handler=handler)

    assert sorted(store.keys()) == ["fn:r1:step", "fn:r2:step"]


def test_max_attempts_must_be_positive(store):
    with pytest.raises(ValueError):
        DurableStepRuntime(store=store, max_attempts=0)


def _const(value):
    async def work():
        return value

    return work
