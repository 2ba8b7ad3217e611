"""StepResultStore Port（持久化步骤结果存储端口）

Domain 层端口：按步骤键保存已完成步骤的结果，供持久化步骤运行时在重放时直接返回，
避免重复执行已完成的步骤。

约束：
- 只能依赖标准库与 Domain 层类型
- 结果必须可 JSON 序列化，存储介质与序列化细节由 Infrastructure 负责
"""

from __future__ import annotations

from typing import Any, Protocol


class StepResultStore(Protocol):
    """步骤结果存储端口。"""

    async def has_result(self, step_key: str) -> bool:
        """判断步骤是否已有记录的结果。"""
        ...

    async def get_result(self, step_key: str) -> Any:
        """读取步骤已记录的结果（不存在时抛 KeyError）。"""
        ...

    async def save_result(self, step_key: str, result: Any) -> None:
        """记录步骤结果（同一键重复写入以首次为准）。"""
        ...
