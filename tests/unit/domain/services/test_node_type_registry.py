"""测试：节点类型注册表"""

import pytest

from src.domain.exceptions import UnsupportedNodeTypeError
from src.domain.services.node_type_registry import get_node_type, list_node_types
from src.domain.value_objects.node_type import NodeKind


def test_registry_covers_every_node_kind():
    kinds = {definition.kind for definition in list_node_types()}

    assert kinds == set(NodeKind)


def test_get_node_type_returns_definition():
    definition = get_node_type("http")

    assert definition.name == "HTTP Request"
    assert definition.is_trigger is False
    assert "uri" in definition.configuration_schema["properties"]


def test_trigger_flags():
    assert get_node_type(NodeKind.MANUAL_TRIGGER).is_trigger
    assert get_node_type(NodeKind.EVENT_TRIGGER).to_dict()["isTrigger"] is True


def test_unknown_type_should_raise():
    with pytest.raises(UnsupportedNodeTypeError):
        get_node_type("loop")
