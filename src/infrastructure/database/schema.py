"""数据库表结构初始化

- SQLite（开发、测试）：启动时直接 create_all
- 其他数据库：由 Alembic 迁移建表（alembic upgrade head）
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine

from src.infrastructure.database.base import Base
from src.infrastructure.database.engine import sync_engine

logger = logging.getLogger(__name__)


def ensure_sqlite_schema(engine: Engine | None = None) -> None:
    """SQLite 启动时建表；其他数据库只记录提示，表结构由迁移负责"""
    # 导入模型，注册到 Base.metadata
    from src.infrastructure.database import models as _models  # noqa: F401

    bind = engine or sync_engine
    if bind.dialect.name == "sqlite":
        Base.metadata.create_all(bind=bind)
        return

    logger.info(
        "database_schema_managed_by_migrations",
        extra={"dialect": bind.dialect.name, "command": "alembic upgrade head"},
    )
