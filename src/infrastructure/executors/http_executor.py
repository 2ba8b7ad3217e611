"""HTTP Executor（HTTP 执行器）

Infrastructure 层：实现 HTTP 请求节点执行器

请求参数来自节点配置，inputMapping 中解析出的同名字段优先
（{"uri": {"$var": "$.input.url"}} 之类的动态地址）。
"""

import json
from typing import Any

import httpx
from pydantic import ValidationError

from src.domain.entities.node_result import NodeError, NodeResult
from src.domain.entities.workflow_node import WorkflowNode
from src.domain.exceptions import NodeExecutionError
from src.domain.ports.node_executor import NodeExecutionContext, NodeExecutor
from src.domain.value_objects.node_config import HttpNodeConfig

HTTP_EXECUTION_ERROR = "HTTP_EXECUTION_ERROR"
HTTP_ERROR = "HTTP_ERROR"
BODY_METHODS = ("POST", "PUT", "PATCH")


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, dict | list):
        return json.dumps(value)
    return str(value)


class HttpExecutor(NodeExecutor):
    """HTTP 请求节点执行器

    - 4xx/5xx 默认作为正常输出；failOnErrorStatus 为 True 时节点失败（HTTP_ERROR，保留输出）
    - 网络错误、超时抛出 NodeExecutionError（HTTP_EXECUTION_ERROR）
    """

    def __init__(self, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self.transport = transport

    async def execute(self, node: WorkflowNode, context: NodeExecutionContext) -> NodeResult:
        try:
            config = HttpNodeConfig.model_validate({**node.config, **context.inputs})
        except ValidationError as e:
            raise NodeExecutionError(
                f"HTTP 节点配置不合法: {e.errors()}", code=HTTP_EXECUTION_ERROR
            ) from e

        if not config.uri:
            raise NodeExecutionError("HTTP node requires uri", code=HTTP_EXECUTION_ERROR)
        if not config.method:
            raise NodeExecutionError("HTTP node requires method", code=HTTP_EXECUTION_ERROR)

        method = config.method
        headers = {"Content-Type": "application/json", **{k: str(v) for k, v in config.headers.items()}}
        params = [
            (param.key, _query_value(param.value)) for param in config.query_parameters if param.key
        ]

        body = None
        if method in BODY_METHODS and config.body:
            body = config.body
            if isinstance(body, str):
                try:
                    body = json.loads(body)
                except json.JSONDecodeError as e:
                    raise NodeExecutionError(
                        f"HTTP 节点 body 格式错误: {e}", code=HTTP_EXECUTION_ERROR
                    ) from e

        # 发送请求
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(
                    method=method,
                    url=config.uri,
                    headers=headers,
                    params=params or None,
                    json=body,
                )
        except httpx.TimeoutException as e:
            raise NodeExecutionError(
                f"HTTP {method} request to {config.uri} timed out after {self.timeout}s",
                code=HTTP_EXECUTION_ERROR,
                details={"type": type(e).__name__, "message": str(e)},
            ) from e
        except httpx.HTTPError as e:
            raise NodeExecutionError(
                f"HTTP {method} request to {config.uri} failed: {e}",
                code=HTTP_EXECUTION_ERROR,
                details={"type": type(e).__name__, "message": str(e)},
            ) from e

        # 尝试解析 JSON 响应
        try:
            response_body: Any = response.json()
        except ValueError:
            response_body = response.text

        output = {
            "statusCode": response.status_code,
            "headers": dict(response.headers),
            "body": response_body,
        }

        if config.fail_on_error_status and response.status_code >= 400:
            return NodeResult.failed(
                node_id=node.id,
                node_name=node.name,
                input=context.inputs,
                output=output,
                error=NodeError(
                    message=f"HTTP {method} request failed with status {response.status_code}",
                    code=HTTP_ERROR,
                    details={"status": response.status_code, "statusText": response.reason_phrase},
                ),
            )

        return NodeResult.succeeded(
            node_id=node.id, node_name=node.name, input=context.inputs, output=output
        )
