"""集成平台访问令牌

职责：
- 以工作区 Secret 签发客户作用域的访问令牌（JWT HS512）
- 载荷 {id, name}，issuer 为工作区 Key，默认 2 小时过期

集成平台用这个令牌识别客户，并据此限定连接、动作、Flow 实例的访问范围。
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from src.domain.exceptions import AuthenticationError

INTEGRATION_TOKEN_ALGORITHM = "HS512"
DEFAULT_TOKEN_TTL_SECONDS = 7200


class IntegrationTokenError(AuthenticationError):
    """缺少工作区凭据或客户信息，无法签发令牌"""

    pass


@dataclass(frozen=True)
class WorkspaceCredentials:
    workspace_key: str | None
    workspace_secret: str | None


def generate_integration_token(
    *,
    customer_id: str,
    customer_name: str | None,
    credentials: WorkspaceCredentials,
    ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
    now: datetime | None = None,
) -> str:
    """签发访问令牌

    抛出：
        IntegrationTokenError: 工作区凭据未配置或客户 ID 为空
    """
    if not credentials.workspace_key or not credentials.workspace_secret:
        raise IntegrationTokenError("Integration credentials not configured")
    if not customer_id:
        raise IntegrationTokenError("Customer details not provided")

    issued_at = now or datetime.now(UTC)
    payload = {
        "id": customer_id,
        "name": customer_name or customer_id,
        "iss": credentials.workspace_key,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, credentials.workspace_secret, algorithm=INTEGRATION_TOKEN_ALGORITHM)
