"""In-memory StepResultStore adapter (Infrastructure)."""

from __future__ import annotations

import asyncio
import copy
from typing import Any


class InMemoryStepResultStore:
    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = asyncio.Lock()

    async def has_result(self, step_key: str) -> bool:
        async with self._lock:
            return step_key in self._data

    async def get_result(self, step_key: str) -> Any:
        async with self._lock:
            return copy.deepcopy(self._data[step_key])

    async def save_result(self, step_key: str, result: Any) -> None:
        async with self._lock:
            self._data.setdefault(step_key, copy.deepcopy(result))

    def keys(self) -> list[str]:
        return list(self._data)
