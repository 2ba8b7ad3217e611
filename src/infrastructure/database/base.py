"""数据库 Base 模型

所有 ORM 模型都继承自 Base，Base.metadata 包含所有表的元数据
（ensure_sqlite_schema() 与测试中的 create_all 使用）。
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """ORM 模型基类

    为什么使用 DeclarativeBase？
    - SQLAlchemy 2.0 推荐的方式（替代 declarative_base()）
    - 支持 Mapped[...] 类型提示

    所有 ORM 模型都继承自这个类：
    - class WorkflowModel(Base): ...
    - class WorkflowRunModel(Base): ...
    """

    pass
