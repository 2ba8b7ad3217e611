"""WorkflowRepository Port - 定义 Workflow 实体的持久化接口

设计原则：
- 使用 Protocol（结构化子类型，不需要显式继承）
- 方法签名使用领域对象
- 实现只负责 add/merge/flush，事务提交由调用方负责
"""

from typing import Protocol

from src.domain.entities.workflow import Workflow
from src.domain.value_objects.workflow_status import WorkflowStatus


class WorkflowRepository(Protocol):
    """Workflow 仓储接口

    方法命名规范：
    - save(): 保存实体（新增或更新）
    - get_by_id(): 根据 ID 获取实体（不存在抛 NotFoundError）
    - find_by_id(): 根据 ID 查找实体（不存在返回 None）
    - list_by_user(): 列出某用户的工作流（按创建时间倒序）
    - delete(): 删除实体（不存在抛 NotFoundError）
    """

    def save(self, workflow: Workflow) -> None:
        """保存 Workflow 实体（新增或更新，节点列表整体覆盖）"""
        ...

    def get_by_id(self, workflow_id: str) -> Workflow:
        """根据 ID 获取 Workflow

        抛出：
            NotFoundError: 当 Workflow 不存在时
        """
        ...

    def find_by_id(self, workflow_id: str) -> Workflow | None:
        ...

    def list_by_user(self, user_id: str, status: WorkflowStatus | None = None) -> list[Workflow]:
        """列出用户的工作流，可按状态过滤，按 created_at 倒序"""
        ...

    def delete(self, workflow_id: str) -> None:
        ...
