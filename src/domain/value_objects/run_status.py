"""RunStatus 枚举 - WorkflowRun 生命周期状态

业务定义：
- WorkflowRun 表示工作流的一次执行尝试
- 状态流转：RUNNING → (COMPLETED | FAILED)
- 终态不可再变化；重新执行意味着创建新的 WorkflowRun
"""

from __future__ import annotations

from enum import Enum


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    def can_transition_to(self, target: RunStatus) -> bool:
        allowed: dict[RunStatus, set[RunStatus]] = {
            RunStatus.RUNNING: {RunStatus.COMPLETED, RunStatus.FAILED},
            RunStatus.COMPLETED: set(),
            RunStatus.FAILED: set(),
        }
        return target in allowed[self]

    def is_terminal(self) -> bool:
        return self in {RunStatus.COMPLETED, RunStatus.FAILED}
