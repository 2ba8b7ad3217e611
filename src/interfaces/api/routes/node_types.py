"""节点类型目录路由

GET /api/node-types - 返回注册表中的全部节点类型（前端节点面板使用）
"""

from typing import Any

from fastapi import APIRouter

from src.domain.services.node_type_registry import list_node_types

router = APIRouter(prefix="/node-types", tags=["Node Types"])


@router.get("", summary="列出节点类型")
def get_node_types() -> list[dict[str, Any]]:
    return [definition.to_dict() for definition in list_node_types()]
