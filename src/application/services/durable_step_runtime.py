"""DurableStepRuntime - 持久化步骤运行时

契约（至少一次 + 幂等步骤）：
- invoke() 以函数为单位执行，失败后整体重放，最多 max_attempts 次
- 函数内部通过 StepContext.run(step_id, work) 划分持久化步骤；
  已记录结果的步骤直接返回记录值，不再执行 work
- 同一步骤键的并发调用共享同一个执行中的任务
- 同一次调用内重复的 step_id 按出现顺序追加 ":<n>" 后缀，重放时保持一致
- 步骤结果必须可 JSON 序列化（由 StepResultStore 持久化）

重试预算耗尽后抛出 OrchestrationError。
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from src.domain.exceptions import OrchestrationError
from src.domain.ports.step_result_store import StepResultStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3


class StepContext:
    """一次函数调用（一次尝试）内的步骤入口"""

    def __init__(self, *, runtime: DurableStepRuntime, namespace: str, attempt: int) -> None:
        self._runtime = runtime
        self._namespace = namespace
        self._occurrences: dict[str, int] = {}
        self.attempt = attempt

    async def run(self, step_id: str, work: Callable[[], Awaitable[Any]]) -> Any:
        seen = self._occurrences.get(step_id, 0)
        self._occurrences[step_id] = seen + 1
        step_key = step_id if seen == 0 else f"{step_id}:{seen}"
        return await self._runtime.run_step(f"{self._namespace}:{step_key}", work)


class DurableStepRuntime:
    def __init__(
        self,
        *,
        store: StepResultStore,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay_seconds: float = 0.0,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._store = store
        self._max_attempts = max_attempts
        self._retry_delay_seconds = retry_delay_seconds
        self._guard = asyncio.Lock()
        self._in_flight: dict[str, asyncio.Task[Any]] = {}

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def invoke(
        self,
        *,
        function_id: str,
        run_key: str,
        handler: Callable[[StepContext], Awaitable[T]],
    ) -> T:
        namespace = f"{function_id}:{run_key}"
        last_error: Exception | None = None

        for attempt in range(1, self._max_attempts + 1):
            context = StepContext(runtime=self, namespace=namespace, attempt=attempt)
            try:
                return await handler(context)
            except Exception as exc:  # noqa: BLE001 - retry boundary of the runtime
                last_error = exc
                logger.warning(
                    "durable_function_attempt_failed",
                    extra={
                        "function_id": function_id,
                        "run_key": run_key,
                        "attempt": attempt,
                        "max_attempts": self._max_attempts,
                        "error": str(exc),
                    },
                )
                if attempt < self._max_attempts and self._retry_delay_seconds > 0:
                    await asyncio.sleep(self._retry_delay_seconds * attempt)

        raise OrchestrationError(
            f"{function_id} ({run_key}) 在 {self._max_attempts} 次尝试后仍失败: {last_error}"
        ) from last_error

    async def run_step(self, step_key: str, work: Callable[[], Awaitable[Any]]) -> Any:
        if await self._store.has_result(step_key):
            logger.debug("durable_step_replayed", extra={"step_key": step_key})
            return await self._store.get_result(step_key)

        async with self._guard:
            if await self._store.has_result(step_key):
                return await self._store.get_result(step_key)

            task = self._in_flight.get(step_key)
            if task is None:
                task = asyncio.create_task(self._execute_and_record(step_key, work))
                self._in_flight[step_key] = task

        return await asyncio.shield(task)

    async def _execute_and_record(
        self,
        step_key: str,
        work: Callable[[], Awaitable[Any]],
    ) -> Any:
        try:
            result = await work()
            await self._store.save_result(step_key, result)
            return result
        finally:
            async with self._guard:
                self._in_flight.pop(step_key, None)
