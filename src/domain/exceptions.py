"""领域层异常定义

异常分层：
- DomainError：业务规则违反，API 层统一转换为 4xx
- NotFoundError：实体不存在，API 层转换为 404
- AuthenticationError / VerificationError：身份缺失或校验失败，API 层转换为 401
- NodeExecutionError：节点执行失败，只在节点执行器内部流动，最终写入 NodeResult.error
- OrchestrationError：运行编排的基础设施失败（存储不可用、工作流消失），由步骤运行时重试
"""

from typing import Any


class DomainError(Exception):
    """领域层异常基类

    用途：
    - 表示业务规则违反（如：工作流名称不能为空）
    - 表示领域不变式违反（如：终态运行不能再追加结果）

    示例：
        if not name:
            raise DomainError("name 不能为空")
    """

    pass


class NotFoundError(DomainError):
    """实体不存在异常

    用于 Repository 的 get_by_id() 方法，API 层统一捕获并返回 404。

    参数：
        entity_type: 实体类型（如："Workflow"、"WorkflowRun"）
        entity_id: 实体 ID
    """

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} 不存在: {entity_id}")


# EntityNotFoundError是NotFoundError的别名，用于Repository层
EntityNotFoundError = NotFoundError


class DomainValidationError(DomainError):
    """输入或配置不满足约束（节点配置、事件请求体、非激活工作流等）"""

    pass


class UnsupportedNodeTypeError(DomainError):
    """未知的节点类型

    节点类型注册表、节点执行器、输出 Schema 计算器遇到未注册的类型时抛出，
    调用方不得把它当作空操作静默跳过。
    """

    def __init__(self, node_kind: str):
        self.node_kind = node_kind
        super().__init__(f"不支持的节点类型: {node_kind}")


class AuthenticationError(DomainError):
    """调用方身份缺失或无效（401）"""

    pass


class VerificationError(AuthenticationError):
    """事件校验哈希缺失或不匹配（401）"""

    pass


class IntegrationError(DomainError):
    """集成平台调用失败

    属性：
        status_code: 远端返回的 HTTP 状态码（网络错误时为 None）
    """

    def __init__(self, message: str, *, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class NodeExecutionError(DomainError):
    """节点执行失败

    节点执行器抛出，在执行边界被转换为 NodeResult.error，不会继续向编排器传播。

    属性：
        code: 错误码（如 HTTP_EXECUTION_ERROR、GATE_EXECUTION_ERROR）
        details: 附加诊断信息（可 JSON 序列化）
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "NODE_EXECUTION_ERROR",
        details: Any = None,
    ):
        self.code = code
        self.details = details
        super().__init__(message)


class OrchestrationError(DomainError):
    """运行编排失败（存储不可用、工作流或运行记录在执行中消失、重试预算耗尽）"""

    pass
