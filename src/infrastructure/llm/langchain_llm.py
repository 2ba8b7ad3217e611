"""LangChain adapter that satisfies the LLMPort protocol."""

from __future__ import annotations

import json
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.output_parsers import JsonOutputParser
from langchain_openai import ChatOpenAI
from pydantic import SecretStr

STRUCTURED_SYSTEM_PROMPT = (
    "You are a workflow step. Reply with a single JSON object that conforms to this JSON Schema "
    "and nothing else:\n{schema}"
)


class LangChainLLM:
    """LLMPort adapter backed by LangChain ChatOpenAI."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str | None = None,
        temperature: float = 0.0,
    ) -> None:
        if not api_key:
            raise ValueError("OpenAI API Key is required for AI nodes.")

        self._llm = ChatOpenAI(
            api_key=SecretStr(api_key),
            model=model,
            temperature=temperature,
            base_url=base_url,
        )
        self._parser = JsonOutputParser()

    async def generate_text(self, prompt: str) -> str:
        response = await self._llm.ainvoke([HumanMessage(content=prompt)])
        content = getattr(response, "content", str(response))
        return content if isinstance(content, str) else json.dumps(content)

    async def generate_object(self, prompt: str, schema: dict[str, Any]) -> dict[str, Any]:
        """Return a JSON object shaped by ``schema``."""

        messages = [
            SystemMessage(content=STRUCTURED_SYSTEM_PROMPT.format(schema=json.dumps(schema))),
            HumanMessage(content=prompt),
        ]
        response = await self._llm.ainvoke(messages)
        content = getattr(response, "content", str(response))
        parsed = self._parser.parse(content)
        if not isinstance(parsed, dict):
            raise ValueError(f"Expected a JSON object from the model, got {type(parsed).__name__}")
        return parsed
