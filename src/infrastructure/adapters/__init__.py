"""Infrastructure Adapters Package

提供 Domain Port 的 Infrastructure 层适配器实现。
"""

from src.infrastructure.adapters.httpx_integration_client import (
    HttpxIntegrationClient,
    create_integration_client_factory,
)
from src.infrastructure.adapters.in_memory_step_result_store import InMemoryStepResultStore

__all__ = [
    "HttpxIntegrationClient",
    "InMemoryStepResultStore",
    "create_integration_client_factory",
]
