"""Httpx Integration Client - 集成平台 REST 客户端

职责:
- 以 Bearer 访问令牌调用集成平台 API
- 读取集成/动作/数据集合/连接器事件元数据
- 执行动作、创建 Agent 会话、管理 Flow 实例
- 把 httpx 异常统一转换为 IntegrationError
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx

from src.domain.exceptions import IntegrationError

logger = logging.getLogger(__name__)


class HttpxIntegrationClient:
    """集成平台客户端（单个访问令牌作用域）"""

    def __init__(
        self,
        access_token: str,
        *,
        api_uri: str,
        connector_api_uri: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._access_token = access_token
        self._api_uri = api_uri.rstrip("/")
        self._connector_api_uri = connector_api_uri.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def get_integration(self, integration_key: str) -> dict[str, Any]:
        return await self._request("GET", f"{self._api_uri}/integrations/{_seg(integration_key)}")

    async def get_connector_event(self, connector_id: str, event_key: str) -> dict[str, Any]:
        url = f"{self._connector_api_uri}/connectors/{_seg(connector_id)}/events/{_seg(event_key)}"
        return await self._request("GET", url)

    async def get_data_collection(
        self, integration_key: str, collection_key: str
    ) -> dict[str, Any]:
        url = f"{self._api_uri}/connections/{_seg(integration_key)}/data/{_seg(collection_key)}"
        return await self._request("GET", url)

    async def get_action(self, action_id: str) -> dict[str, Any]:
        return await self._request("GET", f"{self._api_uri}/actions/{_seg(action_id)}")

    async def run_action(
        self,
        action_id: str,
        input: dict[str, Any],
        *,
        connection_id: str | None = None,
    ) -> Any:
        payload: dict[str, Any] = {"input": input}
        if connection_id:
            payload["connectionId"] = connection_id
        logger.info(
            "integration_action_run",
            extra={"action_id": action_id, "connection_id": connection_id},
        )
        return await self._request(
            "POST", f"{self._api_uri}/actions/{_seg(action_id)}/run", json_body=payload
        )

    async def create_agent_session(self, prompt: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if prompt:
            payload["prompt"] = prompt
        return await self._request("POST", f"{self._api_uri}/agent/sessions", json_body=payload)

    async def create_flow_instance(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"{self._api_uri}/flow-instances", json_body=payload)

    async def patch_flow_instance(self, flow_instance_id: str, payload: dict[str, Any]) -> None:
        await self._request(
            "PATCH", f"{self._api_uri}/flow-instances/{_seg(flow_instance_id)}", json_body=payload
        )

    async def delete_flow_instance(self, flow_instance_id: str) -> None:
        await self._request("DELETE", f"{self._api_uri}/flow-instances/{_seg(flow_instance_id)}")

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """发送请求并解析 JSON 响应

        异常:
            IntegrationError: 网络错误、超时、4xx/5xx
        """
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(method, url, headers=headers, json=json_body)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise IntegrationError(
                f"{method} {url} failed with status {e.response.status_code}: {e.response.text[:200]}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise IntegrationError(f"{method} {url} timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise IntegrationError(f"{method} {url} failed: {e}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise IntegrationError(f"{method} {url} returned a non-JSON response") from e


def _seg(value: str) -> str:
    return quote(str(value), safe="")


def create_integration_client_factory(
    *,
    api_uri: str,
    connector_api_uri: str,
    timeout: float = 30.0,
) -> Callable[[str], HttpxIntegrationClient]:
    """按访问令牌创建客户端的工厂（注入到应用服务）"""

    def factory(access_token: str) -> HttpxIntegrationClient:
        return HttpxIntegrationClient(
            access_token,
            api_uri=api_uri,
            connector_api_uri=connector_api_uri,
            timeout=timeout,
        )

    return factory
