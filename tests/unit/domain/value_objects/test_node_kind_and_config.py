"""测试：NodeKind 推导与节点配置校验"""

import pytest

from src.domain.exceptions import DomainValidationError, UnsupportedNodeTypeError
from src.domain.value_objects.node_config import (
    GateNodeConfig,
    HttpNodeConfig,
    VariableRef,
    parse_node_config,
)
from src.domain.value_objects.node_type import NodeKind
from src.domain.value_objects.run_status import RunStatus


class TestNodeKindResolve:
    @pytest.mark.parametrize(
        ("node_type", "trigger_type", "action_type", "expected"),
        [
            ("trigger", "manual", None, NodeKind.MANUAL_TRIGGER),
            ("trigger", "event", None, NodeKind.EVENT_TRIGGER),
            ("trigger", None, None, NodeKind.MANUAL_TRIGGER),
            ("trigger", None, "event", NodeKind.EVENT_TRIGGER),
            ("action", None, "http", NodeKind.HTTP),
            ("action", None, "gate", NodeKind.GATE),
        ],
    )
    def test_resolve(self, node_type, trigger_type, action_type, expected):
        kind = NodeKind.resolve(node_type, trigger_type=trigger_type, action_node_type=action_type)

        assert kind == expected

    def test_resolve_unknown_should_raise(self):
        with pytest.raises(UnsupportedNodeTypeError):
            NodeKind.resolve("action", action_node_type="loop")


class TestNodeConfig:
    def test_http_config_uses_camel_case_aliases(self):
        config = parse_node_config(
            NodeKind.HTTP,
            {
                "uri": "https://x",
                "method": "patch",
                "queryParameters": [{"key": "q", "value": "1"}],
                "failOnErrorStatus": True,
            },
        )

        assert isinstance(config, HttpNodeConfig)
        assert config.method == "PATCH"
        assert config.query_parameters[0].key == "q"
        assert config.fail_on_error_status is True

    def test_http_config_rejects_unknown_method(self):
        with pytest.raises(DomainValidationError):
            parse_node_config(NodeKind.HTTP, {"method": "CONNECTX"})

    def test_gate_flat_fields_are_lifted_into_condition(self):
        config = parse_node_config(
            NodeKind.GATE,
            {"field": {"$var": "$.A.status"}, "operator": "equals", "value": "ok"},
        )

        assert isinstance(config, GateNodeConfig)
        assert isinstance(config.condition.field, VariableRef)
        assert config.condition.field.path == "$.A.status"
        assert config.condition.value == "ok"

    def test_gate_rejects_unknown_operator(self):
        with pytest.raises(DomainValidationError):
            parse_node_config(NodeKind.GATE, {"condition": {"operator": "greater_than"}})


class TestRunStatus:
    def test_terminal_states_have_no_transitions(self):
        assert RunStatus.RUNNING.can_transition_to(RunStatus.COMPLETED)
        assert not RunStatus.COMPLETED.can_transition_to(RunStatus.FAILED)
        assert not RunStatus.FAILED.can_transition_to(RunStatus.RUNNING)
        assert RunStatus.FAILED.is_terminal()
