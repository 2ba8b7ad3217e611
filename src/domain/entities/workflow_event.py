"""WorkflowEvent 实体 - 一次接入的 Webhook 事件

每个入站事件创建一次；生成运行后设置 processed/run_id，
这是外部触发到内部运行的因果链接。
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError


@dataclass
class WorkflowEvent:
    id: str
    workflow_id: str
    user_id: str
    event_data: dict[str, Any]
    received_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    processed: bool = False
    run_id: str | None = None

    @classmethod
    def receive(
        cls,
        *,
        workflow_id: str,
        user_id: str,
        event_data: dict[str, Any],
        now: datetime | None = None,
    ) -> "WorkflowEvent":
        if not workflow_id:
            raise DomainError("workflow_id 不能为空")
        return cls(
            id=f"evt_{uuid4().hex[:12]}",
            workflow_id=workflow_id,
            user_id=user_id,
            event_data=dict(event_data),
            received_at=now or datetime.now(UTC),
        )

    def link_run(self, run_id: str) -> None:
        """标记事件已处理并关联生成的运行"""
        if not run_id:
            raise DomainError("run_id 不能为空")
        self.processed = True
        self.run_id = run_id
