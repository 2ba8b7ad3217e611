"""LLM抽象接口(Domain Port) - 隔离Domain与具体LLM实现.

职责:
- 自由文本生成(AI 节点 structuredOutput=false)
- 按 JSON Schema 生成结构化对象(AI 节点默认模式)
- 隔离 LangChain/OpenAI/Mock 等具体实现

设计原则:
- 使用Protocol实现结构化子类型(鸭子类型)
- 不依赖任何具体LLM库
"""

from typing import Any, Protocol


class LLMPort(Protocol):
    """LLM抽象接口(Domain Port)."""

    async def generate_text(self, prompt: str) -> str:
        """生成文本响应.

        异常:
            RuntimeError: LLM调用失败
        """
        ...

    async def generate_object(self, prompt: str, schema: dict[str, Any]) -> dict[str, Any]:
        """按 JSON Schema 生成结构化对象.

        参数:
            prompt: 提示词
            schema: 输出的 JSON Schema

        返回:
            解析后的 JSON 对象

        异常:
            ValueError: 模型输出无法解析为 JSON 对象
            RuntimeError: LLM调用失败
        """
        ...
