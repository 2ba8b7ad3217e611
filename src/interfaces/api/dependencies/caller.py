"""调用方身份与集成访问令牌的依赖注入

调用方身份来自网关转发的请求头：
- x-auth-id: 客户 ID（必填，缺失返回 401，不做默认值回退）
- x-customer-name: 客户名称（可选）
- x-workspace-key / x-workspace-secret: 工作区凭据（可选，缺省使用配置）

集成访问令牌按调用方签发，节点执行、Schema 计算和会话创建都用它访问集成平台。
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from src.infrastructure.auth.integration_token import (
    IntegrationTokenError,
    WorkspaceCredentials,
    generate_integration_token,
)
from src.interfaces.api.container import ApiContainer
from src.interfaces.api.dependencies.container import get_container


@dataclass(frozen=True)
class Caller:
    customer_id: str
    customer_name: str | None
    credentials: WorkspaceCredentials


def get_caller(
    x_auth_id: str | None = Header(None),
    x_customer_name: str | None = Header(None),
    x_workspace_key: str | None = Header(None),
    x_workspace_secret: str | None = Header(None),
    container: ApiContainer = Depends(get_container),
) -> Caller:
    """获取调用方身份

    Raises:
        401: 缺少 x-auth-id
    """
    if not x_auth_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    defaults = container.default_credentials
    return Caller(
        customer_id=x_auth_id,
        customer_name=x_customer_name,
        credentials=WorkspaceCredentials(
            workspace_key=x_workspace_key or defaults.workspace_key,
            workspace_secret=x_workspace_secret or defaults.workspace_secret,
        ),
    )


def _issue_token(caller: Caller, container: ApiContainer) -> str:
    return generate_integration_token(
        customer_id=caller.customer_id,
        customer_name=caller.customer_name,
        credentials=caller.credentials,
        ttl_seconds=container.integration_token_ttl_seconds,
    )


def get_integration_token(
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
) -> str:
    """为调用方签发集成访问令牌

    Raises:
        401: 工作区凭据未配置
    """
    try:
        return _issue_token(caller, container)
    except IntegrationTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


def get_optional_integration_token(
    caller: Caller = Depends(get_caller),
    container: ApiContainer = Depends(get_container),
) -> str | None:
    """签发令牌（可选）：失败时返回 None，调用方跳过需要令牌的步骤"""
    try:
        return _issue_token(caller, container)
    except IntegrationTokenError:
        return None
