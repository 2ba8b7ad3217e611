"""数据库引擎配置

设计说明：
- 仓储实现是同步的（sync Session），请求处理器与后台运行编排器各自创建会话
- 从配置读取 database_url
- SQLite 需要 check_same_thread=False：FastAPI 在线程池中执行同步依赖，
  后台运行在事件循环线程中执行，同一连接池会跨线程使用
"""

from collections.abc import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.config import settings


def get_sync_engine(database_url: str | None = None) -> Engine:
    """创建同步数据库引擎

    配置说明：
    - echo: 是否打印 SQL（debug 时开启）
    - pool_pre_ping: 连接前检查（避免使用失效连接）

    返回：
        Engine: 同步数据库引擎
    """
    url = database_url or settings.database_url
    connect_args: dict[str, object] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


# 全局同步引擎实例
sync_engine = get_sync_engine()

# 创建 Session 工厂
SessionLocal = sessionmaker(
    bind=sync_engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_db_session() -> Generator[Session, None, None]:
    """获取数据库会话（FastAPI 依赖）

    - 为每个请求创建新的 Session
    - 请求结束后自动关闭 Session
    - 提交/回滚由路由负责

    Yields:
        Session: 数据库会话
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
