"""测试：变量解析

验收标准：
- "$.Previous Steps.<name>.<path>" 与 "$.<name>.<path>" 读取前序节点输出
- 节点名可以包含空格和点号，重叠时最长前缀优先
- "$.input.<path>" 读取触发载荷
- 非法路径与不存在的节点抛出 VariableResolutionError
"""

import pytest

from src.domain.entities.node_result import NodeResult
from src.domain.services.variable_resolver import (
    VariableResolutionError,
    read_path,
    resolve_variable_path,
    resolve_variables,
)


def _result(name: str, output, node_id: str | None = None) -> NodeResult:
    return NodeResult.succeeded(node_id=node_id or name, node_name=name, input={}, output=output)


@pytest.fixture
def previous_results() -> list[NodeResult]:
    return [
        _result("Trigger", {"event": "manual.trigger"}, node_id="t1"),
        _result("HTTP Request", {"statusCode": 200, "body": {"id": 42, "items": [{"sku": "A"}]}}),
        _result("api.v2", {"token": "abc"}),
    ]


class TestResolveVariablePath:
    def test_previous_steps_path_with_spaces_in_name(self, previous_results):
        value = resolve_variable_path("$.Previous Steps.HTTP Request.body.id", previous_results)

        assert value == 42

    def test_short_path_without_previous_steps(self, previous_results):
        assert resolve_variable_path("$.HTTP Request.statusCode", previous_results) == 200

    def test_node_name_with_dot(self, previous_results):
        assert resolve_variable_path("$.api.v2.token", previous_results) == "abc"

    def test_overlapping_names_prefer_longest_match(self):
        results = [_result("Fetch", {"v": "short"}), _result("Fetch v2", {"x": "long"})]

        assert resolve_variable_path("$.Fetch.v2.x", results) == "long"
        assert resolve_variable_path("$.Fetch.v", results) == "short"

    def test_match_by_node_id(self, previous_results):
        assert resolve_variable_path("$.t1.event", previous_results) == "manual.trigger"

    def test_list_index(self, previous_results):
        value = resolve_variable_path("$.HTTP Request.body.items.0.sku", previous_results)

        assert value == "A"

    def test_trigger_input(self, previous_results):
        value = resolve_variable_path("$.input.order.id", previous_results, {"order": {"id": "o-1"}})

        assert value == "o-1"

    def test_missing_field_is_none(self, previous_results):
        assert resolve_variable_path("$.HTTP Request.body.missing", previous_results) is None

    def test_path_without_prefix_should_raise(self, previous_results):
        with pytest.raises(VariableResolutionError, match="Must start with"):
            resolve_variable_path("HTTP Request.body", previous_results)

    def test_unknown_node_should_raise(self, previous_results):
        with pytest.raises(VariableResolutionError, match="Node not found"):
            resolve_variable_path("$.Previous Steps.Nope.x", previous_results)


class TestResolveVariables:
    def test_nested_structures(self, previous_results):
        config = {
            "uri": "https://api.example.com",
            "body": {
                "id": {"$var": "$.Previous Steps.HTTP Request.body.id"},
                "tags": ["static", {"$var": "$.api.v2.token"}],
            },
        }

        resolved = resolve_variables(config, previous_results)

        assert resolved == {
            "uri": "https://api.example.com",
            "body": {"id": 42, "tags": ["static", "abc"]},
        }

    def test_values_without_refs_are_unchanged(self):
        assert resolve_variables({"a": [1, "x", None]}, []) == {"a": [1, "x", None]}


class TestReadPath:
    def test_reading_through_scalar_should_raise(self):
        with pytest.raises(VariableResolutionError, match="Cannot access property"):
            read_path({"a": 1}, ["a", "b"])
