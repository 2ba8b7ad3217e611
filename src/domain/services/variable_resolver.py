"""变量解析 - 把节点配置中的 {"$var": "<path>"} 引用替换为实际值

支持的路径：
- "$.Previous Steps.<节点名>.<字段路径>"：前序节点输出
- "$.<节点名>.<字段路径>"：同上，省略 "Previous Steps" 前缀
- "$.input.<字段路径>"：触发载荷

节点名可以包含空格和点号：依次尝试由前 1..n 段拼接的名字（以空格或点号连接），
按节点名或节点 ID 匹配，找到即停；剩余部分作为输出内的字段路径。

使用示例：
    resolve_variables(
        {"id": {"$var": "$.Previous Steps.HTTP Request.body.id"}},
        previous_results,
        trigger_input={},
    )
"""

from __future__ import annotations

import json
from typing import Any

from src.domain.entities.node_result import NodeResult
from src.domain.exceptions import DomainValidationError

VARIABLE_KEY = "$var"
PATH_PREFIX = "$."
PREVIOUS_STEPS_SEGMENT = "Previous Steps"
TRIGGER_INPUT_SEGMENT = "input"


class VariableResolutionError(DomainValidationError):
    """变量路径非法、引用的节点不存在或字段不可访问"""

    pass


def is_variable_ref(value: Any) -> bool:
    return isinstance(value, dict) and VARIABLE_KEY in value and isinstance(value[VARIABLE_KEY], str)


def resolve_variables(
    value: Any,
    previous_results: list[NodeResult],
    trigger_input: dict[str, Any] | None = None,
) -> Any:
    """递归解析字典/列表中的全部变量引用，其余值原样返回"""
    if is_variable_ref(value):
        return resolve_variable_path(value[VARIABLE_KEY], previous_results, trigger_input)
    if isinstance(value, dict):
        return {
            key: resolve_variables(item, previous_results, trigger_input)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [resolve_variables(item, previous_results, trigger_input) for item in value]
    return value


def resolve_variable_path(
    path: str,
    previous_results: list[NodeResult],
    trigger_input: dict[str, Any] | None = None,
) -> Any:
    """解析单个变量路径

    抛出：
        VariableResolutionError: 路径不以 "$." 开头、节点不存在、字段不可访问
    """
    if not path.startswith(PATH_PREFIX):
        raise VariableResolutionError(f'Invalid variable path: {path}. Must start with "$."')

    parts = [part for part in path[len(PATH_PREFIX) :].split(".") if part != ""]
    if not parts:
        raise VariableResolutionError(f"Invalid variable path: {path}")

    if parts[0] == TRIGGER_INPUT_SEGMENT:
        return read_path(trigger_input or {}, parts[1:])

    if parts[0] == PREVIOUS_STEPS_SEGMENT:
        parts = parts[1:]
        if not parts:
            raise VariableResolutionError(f"Invalid variable path: {path}")

    result, remaining = _find_result(parts, previous_results)
    return read_path(result.output, remaining)


def read_path(data: Any, parts: list[str]) -> Any:
    """沿字段路径读取嵌套值（列表支持数字下标）"""
    current = data
    for part in parts:
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            raise VariableResolutionError(
                f"Cannot access property {part} on {type(current).__name__}. "
                f"Current data: {json.dumps(current, default=str)}"
            )
    return current


def _find_result(
    parts: list[str], previous_results: list[NodeResult]
) -> tuple[NodeResult, list[str]]:
    # 节点名可含空格或点号，最长前缀优先
    for end in range(len(parts), 0, -1):
        candidates = {" ".join(parts[:end]), ".".join(parts[:end])}
        for result in previous_results:
            if result.node_name in candidates or result.node_id in candidates:
                return result, parts[end:]
    raise VariableResolutionError(f"Node not found: {parts[0]}")
