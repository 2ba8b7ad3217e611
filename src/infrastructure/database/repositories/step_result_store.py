"""SQLAlchemy StepResultStore 实现

持久化步骤结果写入 workflow_step_results 表，进程重启后仍然有效。
每次读写使用独立的短会话，不参与编排器步骤内的事务：
步骤结果只在步骤的工作（含运行记录提交）成功之后写入。
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.orm import Session

from src.infrastructure.database.models import StepResultModel


class SQLAlchemyStepResultStore:
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    async def has_result(self, step_key: str) -> bool:
        with self._session_factory() as session:
            return session.get(StepResultModel, step_key) is not None

    async def get_result(self, step_key: str) -> Any:
        with self._session_factory() as session:
            model = session.get(StepResultModel, step_key)
            if model is None:
                raise KeyError(step_key)
            return model.result

    async def save_result(self, step_key: str, result: Any) -> None:
        with self._session_factory() as session:
            if session.get(StepResultModel, step_key) is not None:
                return
            session.add(
                StepResultModel(
                    step_key=step_key,
                    result=result,
                    recorded_at=datetime.now(UTC).replace(tzinfo=None),
                )
            )
            session.commit()
