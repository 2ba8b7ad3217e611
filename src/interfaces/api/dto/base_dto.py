"""DTO 基类

对外 JSON 统一使用 camelCase，Python 侧保持 snake_case。
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
