"""WorkflowSession 实体 - 与工作流关联的 Agent 会话引用

不参与执行引擎本身，只作为构建器中编辑辅助会话的索引。
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from src.domain.exceptions import DomainError

LABEL_MAX_LENGTH = 100
DEFAULT_LABEL = "New session"


def build_session_label(initial_message: str | None) -> str:
    """由首条消息生成会话标签（超过 100 字符截断并追加 ...）"""
    if not initial_message:
        return DEFAULT_LABEL
    label = initial_message[:LABEL_MAX_LENGTH]
    if len(initial_message) > LABEL_MAX_LENGTH:
        label += "..."
    return label.strip() or DEFAULT_LABEL


@dataclass
class WorkflowSession:
    id: str
    session_id: str
    workflow_id: str
    customer_id: str
    label: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        *,
        session_id: str,
        workflow_id: str,
        customer_id: str,
        initial_message: str | None = None,
    ) -> "WorkflowSession":
        if not session_id:
            raise DomainError("session_id 不能为空")
        if not workflow_id or not customer_id:
            raise DomainError("workflow_id 和 customer_id 不能为空")
        return cls(
            id=f"ses_{uuid4().hex[:12]}",
            session_id=session_id,
            workflow_id=workflow_id,
            customer_id=customer_id,
            label=build_session_label(initial_message),
        )
