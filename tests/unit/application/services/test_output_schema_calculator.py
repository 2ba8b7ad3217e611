"""测试：OutputSchemaCalculator

验收标准：
- manual 触发器：inputSchema，缺省为空对象 Schema
- http：固定响应信封，body 为用户声明的 outputSchema
- 事件触发器：连接器事件 Schema / 数据集合 fieldsSchema，配置不全时为 FALLBACK
- 任何失败都退化为空对象 Schema，不抛出
"""

import pytest

from src.application.services.output_schema_calculator import (
    FALLBACK_TRIGGER_SCHEMA,
    OutputSchemaCalculator,
)
from src.domain.entities.workflow_node import WorkflowNode

EMPTY = {"type": "object", "properties": {}}


@pytest.fixture
def calculator(fake_integration) -> OutputSchemaCalculator:
    return OutputSchemaCalculator(client_factory=fake_integration.for_token)


def _event_trigger(config: dict) -> WorkflowNode:
    return WorkflowNode.create(
        node_id="t", name="Trigger", type="trigger", trigger_type="event", config=config
    )


@pytest.mark.asyncio
async def test_manual_trigger_uses_input_schema(calculator):
    schema = {"type": "object", "properties": {"orderId": {"type": "string"}}}
    node = WorkflowNode.create(
        name="Trigger", type="trigger", trigger_type="manual", config={"inputSchema": schema}
    )

    assert await calculator.calculate_node_output_schema(node, "token") == schema


@pytest.mark.asyncio
async def test_manual_trigger_without_schema_is_empty(calculator):
    node = WorkflowNode.create(name="Trigger", type="trigger", trigger_type="manual")

    assert await calculator.calculate_node_output_schema(node, "token") == EMPTY


@pytest.mark.asyncio
async def test_http_node_wraps_body_schema(calculator):
    body = {"type": "object", "properties": {"id": {"type": "number"}}}
    node = WorkflowNode.create(
        name="Fetch",
        type="action",
        node_type="http",
        config={"uri": "https://x", "method": "GET", "outputSchema": body},
    )

    schema = await calculator.calculate_node_output_schema(node, "token")

    assert set(schema["properties"]) == {"statusCode", "headers", "body"}
    assert schema["properties"]["body"] == body


@pytest.mark.asyncio
async def test_connector_event_trigger_reads_event_schema(calculator, fake_integration):
    event_schema = {"type": "object", "properties": {"ticket": {"type": "object"}}}
    fake_integration.integrations["zendesk"] = {"id": "int-1", "connectorId": "conn-1"}
    fake_integration.connector_events[("conn-1", "ticket-created")] = {"schema": event_schema}
    node = _event_trigger(
        {"eventSource": "connector", "integrationKey": "zendesk", "connectorEventKey": "ticket-created"}
    )

    schema = await calculator.calculate_node_output_schema(node, "token-1")

    assert schema == event_schema
    assert fake_integration.calls[0][1] == "token-1"


@pytest.mark.asyncio
async def test_data_record_trigger_reads_fields_schema(calculator, fake_integration):
    fields = {"type": "object", "properties": {"name": {"type": "string"}}}
    fake_integration.data_collections[("hubspot", "contacts")] = {"fieldsSchema": fields}
    node = _event_trigger(
        {"eventSource": "data-record", "integrationKey": "hubspot", "dataCollection": "contacts"}
    )

    assert await calculator.calculate_node_output_schema(node, "token") == fields


@pytest.mark.asyncio
async def test_incomplete_event_trigger_uses_fallback(calculator):
    node = _event_trigger({"eventSource": "connector"})

    assert await calculator.calculate_node_output_schema(node, "token") == FALLBACK_TRIGGER_SCHEMA


@pytest.mark.asyncio
async def test_integration_failure_degrades_to_empty_schema(calculator):
    node = WorkflowNode.create(
        name="Create Ticket", type="action", node_type="action", config={"actionId": "missing"}
    )

    assert await calculator.calculate_node_output_schema(node, "token") == EMPTY


@pytest.mark.asyncio
async def test_ai_node_schema_depends_on_structured_output(calculator):
    structured = WorkflowNode.create(
        name="Summarize",
        type="action",
        node_type="ai",
        config={"prompt": "x", "outputSchema": {"type": "object", "properties": {"s": {}}}},
    )
    text = WorkflowNode.create(
        name="Write", type="action", node_type="ai", config={"prompt": "x", "structuredOutput": False}
    )

    assert (await calculator.calculate_node_output_schema(structured, "t"))["properties"] == {"s": {}}
    assert "text" in (await calculator.calculate_node_output_schema(text, "t"))["properties"]


@pytest.mark.asyncio
async def test_update_nodes_sets_schema_per_node(calculator, fake_integration):
    fake_integration.actions["create-ticket"] = {"outputSchema": {"type": "object", "properties": {"id": {}}}}
    nodes = [
        WorkflowNode.create(node_id="t", name="Trigger", type="trigger", trigger_type="manual"),
        WorkflowNode.create(
            node_id="a",
            name="Create",
            type="action",
            node_type="action",
            config={"actionId": "create-ticket"},
        ),
    ]

    updated = await calculator.update_nodes_with_output_schemas(nodes, "token")

    assert updated[0].output_schema == EMPTY
    assert updated[1].output_schema == {"type": "object", "properties": {"id": {}}}
