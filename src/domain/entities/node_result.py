"""NodeResult 值对象 - 单个节点的一次执行结果

一旦追加到 WorkflowRun.results 就不可变。
持久化形状：{nodeId, nodeName, success, message, input, output, error?{message, code, details}}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

NODE_EXECUTION_ERROR = "NODE_EXECUTION_ERROR"


@dataclass(frozen=True)
class NodeError:
    message: str
    code: str = NODE_EXECUTION_ERROR
    details: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details is not None:
            data["details"] = self.details
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NodeError:
        return cls(
            message=str(data.get("message") or "Failed"),
            code=str(data.get("code") or NODE_EXECUTION_ERROR),
            details=data.get("details"),
        )


@dataclass(frozen=True)
class NodeResult:
    """节点执行结果

    属性说明：
    - node_id / node_name: 对应节点（node_name 用于 $var 引用解析）
    - success: 是否成功（条件门未满足也是 False，但不是异常）
    - message: 人类可读的结果描述
    - input: 节点实际收到的输入（解析变量之后）
    - output: 节点输出
    - error: 失败信息
    """

    node_id: str
    node_name: str | None
    success: bool
    message: str
    input: Any = None
    output: Any = None
    error: NodeError | None = None

    @classmethod
    def succeeded(
        cls, *, node_id: str, node_name: str | None, input: Any, output: Any
    ) -> NodeResult:
        message = f"{node_name} completed successfully" if node_name else "Success"
        return cls(
            node_id=node_id,
            node_name=node_name,
            success=True,
            message=message,
            input=input,
            output=output,
        )

    @classmethod
    def failed(
        cls,
        *,
        node_id: str,
        node_name: str | None,
        error: NodeError,
        input: Any = None,
        output: Any = None,
    ) -> NodeResult:
        return cls(
            node_id=node_id,
            node_name=node_name,
            success=False,
            message=error.message or "Failed",
            input=input if input is not None else {},
            output=output,
            error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "nodeId": self.node_id,
            "nodeName": self.node_name,
            "success": self.success,
            "message": self.message,
            "input": self.input,
            "output": self.output,
        }
        if self.error is not None:
            data["error"] = self.error.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NodeResult:
        error = data.get("error")
        return cls(
            node_id=str(data.get("nodeId") or ""),
            node_name=data.get("nodeName"),
            success=bool(data.get("success")),
            message=str(data.get("message") or ""),
            input=data.get("input"),
            output=data.get("output"),
            error=NodeError.from_dict(error) if isinstance(error, dict) else None,
        )
