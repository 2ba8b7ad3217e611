"""Infrastructure adapters for LLM services."""

from src.infrastructure.llm.langchain_llm import LangChainLLM

__all__ = ["LangChainLLM"]
