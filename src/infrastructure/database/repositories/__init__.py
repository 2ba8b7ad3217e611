"""Repository 实现 - 数据访问层

- 实现领域层定义的 Port 接口（Protocol）
- 使用 Assembler 方法进行对象转换（ORM ⇄ Entity）
- 只做 merge/flush，事务提交由调用方负责
"""

from src.infrastructure.database.repositories.step_result_store import SQLAlchemyStepResultStore
from src.infrastructure.database.repositories.workflow_event_repository import (
    SQLAlchemyWorkflowEventRepository,
)
from src.infrastructure.database.repositories.workflow_repository import (
    SQLAlchemyWorkflowRepository,
)
from src.infrastructure.database.repositories.workflow_run_repository import (
    SQLAlchemyWorkflowRunRepository,
)
from src.infrastructure.database.repositories.workflow_session_repository import (
    SQLAlchemyWorkflowSessionRepository,
)

__all__ = [
    "SQLAlchemyStepResultStore",
    "SQLAlchemyWorkflowEventRepository",
    "SQLAlchemyWorkflowRepository",
    "SQLAlchemyWorkflowRunRepository",
    "SQLAlchemyWorkflowSessionRepository",
]
