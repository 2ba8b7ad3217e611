"""数据库基础设施 - SQLAlchemy 配置和会话管理

- Base：ORM 模型基类
- sync_engine / SessionLocal：同步引擎与会话工厂
- get_db_session：FastAPI 依赖注入使用的请求级会话
"""

from src.infrastructure.database.base import Base
from src.infrastructure.database.engine import (
    SessionLocal,
    get_db_session,
    get_sync_engine,
    sync_engine,
)

__all__ = [
    "Base",
    "SessionLocal",
    "sync_engine",
    "get_sync_engine",
    "get_db_session",
]
