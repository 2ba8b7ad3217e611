"""Pytest 配置文件 - 全局 fixtures"""

import os

# 必须在导入 src 之前设置：测试不写入默认的 sqlite 文件
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENV", "test")

from collections.abc import Iterator  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import patch  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.domain.exceptions import IntegrationError  # noqa: E402
from src.infrastructure.adapters import InMemoryStepResultStore  # noqa: E402
from src.infrastructure.database import models as _models  # noqa: E402,F401
from src.infrastructure.database.base import Base  # noqa: E402
from src.infrastructure.database.engine import get_db_session  # noqa: E402

TEST_CUSTOMER_ID = "customer-1"


class FakeIntegrationClient:
    """集成平台客户端替身

    - 元数据按键预置在字典里，未预置的键抛出 IntegrationError（404）
    - 所有调用记录在 calls 中，测试据此断言
    """

    def __init__(self) -> None:
        self.integrations: dict[str, dict[str, Any]] = {}
        self.connector_events: dict[tuple[str, str], dict[str, Any]] = {}
        self.data_collections: dict[tuple[str, str], dict[str, Any]] = {}
        self.actions: dict[str, dict[str, Any]] = {}
        self.action_outputs: dict[str, Any] = {}
        self.action_errors: dict[str, IntegrationError] = {}
        self.session_response: dict[str, Any] = {"id": "remote-session-1"}
        self.flow_instance_response: dict[str, Any] = {"id": "flow-1"}
        self.flow_instance_error: IntegrationError | None = None
        self.delete_error: IntegrationError | None = None
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []

    def for_token(self, access_token: str) -> "FakeIntegrationClient":
        self.last_access_token = access_token
        return self

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, getattr(self, "last_access_token", ""), args))

    def call_names(self) -> list[str]:
        return [name for name, _, _ in self.calls]

    async def get_integration(self, integration_key: str) -> dict[str, Any]:
        self._record("get_integration", integration_key)
        if integration_key not in self.integrations:
            raise IntegrationError(f"Integration {integration_key} not found", status_code=404)
        return self.integrations[integration_key]

    async def get_connector_event(self, connector_id: str, event_key: str) -> dict[str, Any]:
        self._record("get_connector_event", connector_id, event_key)
        key = (connector_id, event_key)
        if key not in self.connector_events:
            raise IntegrationError(f"Event {event_key} not found", status_code=404)
        return self.connector_events[key]

    async def get_data_collection(
        self, integration_key: str, collection_key: str
    ) -> dict[str, Any]:
        self._record("get_data_collection", integration_key, collection_key)
        key = (integration_key, collection_key)
        if key not in self.data_collections:
            raise IntegrationError(f"Collection {collection_key} not found", status_code=404)
        return self.data_collections[key]

    async def get_action(self, action_id: str) -> dict[str, Any]:
        self._record("get_action", action_id)
        if action_id not in self.actions:
            raise IntegrationError(f"Action {action_id} not found", status_code=404)
        return self.actions[action_id]

    async def run_action(
        self, action_id: str, input: dict[str, Any], *, connection_id: str | None = None
    ) -> Any:
        self._record("run_action", action_id, input, connection_id)
        if action_id in self.action_errors:
            raise self.action_errors[action_id]
        return self.action_outputs.get(action_id, {})

    async def create_agent_session(self, prompt: str | None = None) -> dict[str, Any]:
        self._record("create_agent_session", prompt)
        return self.session_response

    async def create_flow_instance(self, payload: dict[str, Any]) -> dict[str, Any]:
        self._record("create_flow_instance", payload)
        if self.flow_instance_error is not None:
            raise self.flow_instance_error
        return self.flow_instance_response

    async def patch_flow_instance(self, flow_instance_id: str, payload: dict[str, Any]) -> None:
        self._record("patch_flow_instance", flow_instance_id, payload)
        if self.flow_instance_error is not None:
            raise self.flow_instance_error

    async def delete_flow_instance(self, flow_instance_id: str) -> None:
        self._record("delete_flow_instance", flow_instance_id)
        if self.delete_error is not None:
            raise self.delete_error


@pytest.fixture
def fake_integration() -> FakeIntegrationClient:
    return FakeIntegrationClient()


@pytest.fixture
def memory_session() -> Iterator[Session]:
    """内存 SQLite Session（单连接，适合 Repository 测试）"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def session_factory(tmp_path) -> Iterator[sessionmaker]:
    """文件 SQLite 的 Session 工厂

    每个 Session 独立连接，后台执行与请求处理的事务互不干扰。
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'engine.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        engine.dispose()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {
        "x-auth-id": TEST_CUSTOMER_ID,
        "x-customer-name": "Test Customer",
        "x-workspace-key": "workspace-key",
        "x-workspace-secret": "workspace-secret",
    }


@pytest.fixture
def api(session_factory, fake_integration):
    """完整的 API 测试环境

    返回 (client, container)：文件 SQLite + 集成平台替身 + 内存步骤存储。
    后台运行通过 client.portal.call(container.run_dispatcher.drain) 等待完成。
    """
    from src.interfaces.api.main import build_container, create_app

    container = build_container(
        session_factory=session_factory,
        integration_client_factory=fake_integration.for_token,
        llm=None,
        step_store=InMemoryStepResultStore(),
    )
    app = create_app(lambda: container)

    def override_get_db() -> Iterator[Session]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db_session] = override_get_db

    with TestClient(app) as client:
        yield client, container


@pytest.fixture(autouse=True)
def mock_external_http_calls(request):
    """自动拦截外部 HTTP 调用（仅单元测试）

    - 单元测试不访问真实网络：未显式传入 transport 的 httpx.AsyncClient
      使用返回 {"mocked": true} 的 MockTransport
    - 显式传入 transport（httpx.MockTransport）的测试保持原样
    - 集成测试和手动测试保持真实HTTP调用
    """
    test_path = str(request.fspath)
    is_unit_test = "tests/unit" in test_path or "tests\\unit" in test_path

    if not is_unit_test:
        yield
        return

    real_async_client = httpx.AsyncClient

    def guarded_client(*args: Any, **kwargs: Any) -> httpx.AsyncClient:
        if kwargs.get("transport") is None:
            kwargs["transport"] = httpx.MockTransport(
                lambda _request: httpx.Response(200, json={"mocked": True})
            )
        return real_async_client(*args, **kwargs)

    with patch("httpx.AsyncClient", side_effect=guarded_client):
        yield
