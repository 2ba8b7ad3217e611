"""WorkflowRunRepository Port - WorkflowRun 持久化接口

运行记录是 UI 轮询的系统记录：编排器每个步骤都重新加载运行、追加结果并整体保存。
没有运行级锁，并发写入采用最后写入生效语义。
"""

from typing import Protocol

from src.domain.entities.workflow_run import WorkflowRun


class WorkflowRunRepository(Protocol):
    """WorkflowRun 仓储接口"""

    def save(self, run: WorkflowRun) -> None:
        """保存运行（新增或整体覆盖）"""
        ...

    def get_by_id(self, run_id: str) -> WorkflowRun:
        """根据 ID 获取运行

        抛出：
            NotFoundError: 当运行不存在时
        """
        ...

    def find_by_id(self, run_id: str) -> WorkflowRun | None:
        ...

    def list_by_user(self, user_id: str, workflow_id: str | None = None) -> list[WorkflowRun]:
        """列出用户的运行（可限定工作流），按 started_at 倒序"""
        ...
