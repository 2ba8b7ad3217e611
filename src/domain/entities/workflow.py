"""Workflow 实体 - 工作流聚合根

业务定义：
- Workflow 拥有一个有序的 WorkflowNode 序列（第一个节点通常是触发器，但不强制）
- status 控制是否接收 Webhook 事件（active / inactive）
- nodes 每次变更 version + 1（乐观并发信号，不做强制校验）
- 每个工作流属于一个用户（user_id），用于多租户隔离

设计原则：
- 纯 Python dataclass，通过工厂方法 create() 封装创建逻辑
- 节点 id 在工作流内唯一，由 replace_nodes() 维护
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import DomainError, DomainValidationError
from src.domain.value_objects.workflow_status import WorkflowStatus


@dataclass
class Workflow:
    """Workflow 实体（聚合根）

    属性说明：
    - id: 唯一标识符（wf_ 前缀）
    - user_id: 所属用户（customerId）
    - name / description: 用户可见信息
    - status: active / inactive，新建时为 inactive
    - nodes: 有序节点列表
    - version: 节点变更计数
    - last_run_at: 最近一次触发运行的时间
    """

    id: str
    user_id: str
    name: str
    description: str = ""
    status: WorkflowStatus = WorkflowStatus.INACTIVE
    nodes: list[WorkflowNode] = field(default_factory=list)
    version: int = 1
    last_run_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(cls, *, name: str, user_id: str, description: str | None = None) -> "Workflow":
        """创建 Workflow 的工厂方法

        业务规则：
        - name 不能为空
        - user_id 不能为空
        - 新建工作流为 inactive，节点列表为空

        抛出：
            DomainError: 名称或用户为空
        """
        if not name or not name.strip():
            raise DomainError("name 不能为空")
        if not user_id or not user_id.strip():
            raise DomainError("user_id 不能为空")

        return cls(
            id=f"wf_{uuid4().hex[:8]}",
            user_id=user_id.strip(),
            name=name.strip(),
            description=(description or "").strip(),
        )

    @property
    def is_active(self) -> bool:
        return self.status == WorkflowStatus.ACTIVE

    def rename(self, *, name: str | None = None, description: str | None = None) -> None:
        if name is not None:
            if not name.strip():
                raise DomainError("name 不能为空")
            self.name = name.strip()
        if description is not None:
            self.description = description.strip()
        self._touch()

    def replace_nodes(self, nodes: list[WorkflowNode]) -> None:
        """整体替换节点列表

        业务规则：
        - 节点 id 在工作流内唯一
        - version + 1
        """
        seen: set[str] = set()
        for node in nodes:
            if node.id in seen:
                raise DomainValidationError(f"节点 id 重复: {node.id}")
            seen.add(node.id)

        self.nodes = list(nodes)
        self.version += 1
        self._touch()

    def activate(self) -> None:
        self.status = WorkflowStatus.ACTIVE
        self._touch()

    def deactivate(self) -> None:
        self.status = WorkflowStatus.INACTIVE
        self._touch()

    def mark_run(self, at: datetime | None = None) -> None:
        """记录最近一次运行时间"""
        self.last_run_at = at or datetime.now(UTC)
        self._touch()

    def _touch(self) -> None:
        self.updated_at = datetime.now(UTC)
