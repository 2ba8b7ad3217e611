"""测试：Workflow API

覆盖：
- CRUD、激活/停用、所有权隔离（其他调用方 404）
- 缺少 x-auth-id 返回 401
- 手动运行：立即返回 runId，后台执行完成后可查询运行记录
- PUT nodes：事件来源开通失败返回 400 {error, details, nodeId}
"""

from src.domain.exceptions import IntegrationError

MANUAL_TRIGGER = {"id": "t", "name": "Trigger", "type": "trigger", "triggerType": "manual"}
HTTP_NODE = {
    "id": "h",
    "name": "Fetch",
    "type": "action",
    "nodeType": "http",
    "config": {"uri": "https://api.example.com/items", "method": "GET"},
}
GATE_NODE = {
    "id": "g",
    "name": "Check",
    "type": "action",
    "nodeType": "gate",
    "config": {
        "condition": {
            "field": {"$var": "$.Previous Steps.Fetch.body.mocked"},
            "operator": "equals",
            "value": True,
        }
    },
}
EVENT_TRIGGER = {
    "id": "e",
    "name": "Ticket Created",
    "type": "trigger",
    "triggerType": "event",
    "config": {
        "eventSource": "connector",
        "integrationKey": "zendesk",
        "connectorEventKey": "ticket-created",
        "eventType": "connector-event-trigger",
    },
}


def _create(client, auth_headers, name="订单同步") -> dict:
    response = client.post("/api/workflows", json={"name": name}, headers=auth_headers)
    assert response.status_code == 201
    return response.json()


class TestWorkflowCrud:
    def test_create_and_get(self, api, auth_headers):
        client, _ = api

        created = _create(client, auth_headers)
        response = client.get(f"/api/workflows/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "订单同步"
        assert data["status"] == "inactive"
        assert data["nodes"] == []
        assert data["userId"] == "customer-1"

    def test_missing_auth_header_returns_401(self, api):
        client, _ = api

        response = client.get("/api/workflows")

        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication required"

    def test_empty_name_returns_422(self, api, auth_headers):
        client, _ = api

        response = client.post("/api/workflows", json={"name": ""}, headers=auth_headers)

        assert response.status_code == 422

    def test_other_caller_gets_404(self, api, auth_headers):
        client, _ = api
        created = _create(client, auth_headers)

        response = client.get(
            f"/api/workflows/{created['id']}", headers={**auth_headers, "x-auth-id": "customer-2"}
        )

        assert response.status_code == 404

    def test_list_with_status_filter(self, api, auth_headers):
        client, _ = api
        first = _create(client, auth_headers, "a")
        _create(client, auth_headers, "b")
        client.post(f"/api/workflows/{first['id']}/activate", headers=auth_headers)

        active = client.get("/api/workflows?status=active", headers=auth_headers).json()
        invalid = client.get("/api/workflows?status=paused", headers=auth_headers)

        assert [item["id"] for item in active] == [first["id"]]
        assert invalid.status_code == 400

    def test_patch_updates_nodes_and_schemas(self, api, auth_headers):
        client, _ = api
        created = _create(client, auth_headers)

        response = client.patch(
            f"/api/workflows/{created['id']}",
            json={"name": "新名称", "nodes": [MANUAL_TRIGGER, HTTP_NODE]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "新名称"
        assert data["version"] == 2
        assert "statusCode" in data["nodes"][1]["outputSchema"]["properties"]

    def test_patch_with_invalid_node_returns_400(self, api, auth_headers):
        client, _ = api
        created = _create(client, auth_headers)

        response = client.patch(
            f"/api/workflows/{created['id']}",
            json={"nodes": [{"id": "x", "name": "X", "type": "loop"}]},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_delete_then_get_returns_404(self, api, auth_headers):
        client, _ = api
        created = _create(client, auth_headers)

        response = client.delete(f"/api/workflows/{created['id']}", headers=auth_headers)

        assert response.json() == {"success": True}
        assert client.get(f"/api/workflows/{created['id']}", headers=auth_headers).status_code == 404

    def test_activate_and_deactivate(self, api, auth_headers):
        client, _ = api
        created = _create(client, auth_headers)

        activated = client.post(f"/api/workflows/{created['id']}/activate", headers=auth_headers)
        deactivated = client.post(f"/api/workflows/{created['id']}/deactivate", headers=auth_headers)

        assert activated.json()["status"] == "active"
        assert deactivated.json()["status"] == "inactive"


class TestRunWorkflow:
    def test_run_executes_in_background(self, api, auth_headers):
        """测试：manual → http → gate，立即返回 runId，完成后运行记录为 completed"""
        client, container = api
        created = _create(client, auth_headers)
        client.patch(
            f"/api/workflows/{created['id']}",
            json={"nodes": [MANUAL_TRIGGER, HTTP_NODE, GATE_NODE]},
            headers=auth_headers,
        )

        response = client.post(
            f"/api/workflows/{created['id']}/run",
            json={"input": {"orderId": "o-1"}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Workflow execution started"
        assert body["workflowId"] == created["id"]

        client.portal.call(container.run_dispatcher.drain)

        run = client.get(f"/api/workflows/runs/{body['runId']}", headers=auth_headers).json()
        assert run["status"] == "completed"
        assert run["input"] == {"orderId": "o-1"}
        assert [result["nodeId"] for result in run["results"]] == ["t", "h", "g"]
        assert run["summary"] == {
            "totalNodes": 3,
            "successfulNodes": 3,
            "failedNodes": 0,
            "successRate": 100.0,
        }

        workflow = client.get(f"/api/workflows/{created['id']}", headers=auth_headers).json()
        assert workflow["lastRunAt"] is not None

    def test_failed_gate_marks_run_failed(self, api, auth_headers):
        client, container = api
        created = _create(client, auth_headers)
        failing_gate = {
            **GATE_NODE,
            "config": {"condition": {**GATE_NODE["config"]["condition"], "value": False}},
        }
        client.patch(
            f"/api/workflows/{created['id']}",
            json={"nodes": [MANUAL_TRIGGER, HTTP_NODE, failing_gate]},
            headers=auth_headers,
        )

        run_id = client.post(f"/api/workflows/{created['id']}/run", headers=auth_headers).json()[
            "runId"
        ]
        client.portal.call(container.run_dispatcher.drain)

        run = client.get(f"/api/workflows/runs/{run_id}", headers=auth_headers).json()
        assert run["status"] == "failed"
        assert run["error"] == "Gate condition not met: true !== false"
        assert run["results"][-1]["error"]["code"] == "GATE_CONDITION_FAILED"

    def test_run_list_filters_by_workflow_and_caller(self, api, auth_headers):
        client, container = api
        first = _create(client, auth_headers, "a")
        second = _create(client, auth_headers, "b")
        client.post(f"/api/workflows/{first['id']}/run", headers=auth_headers)
        client.post(f"/api/workflows/{second['id']}/run", headers=auth_headers)
        client.portal.call(container.run_dispatcher.drain)

        runs = client.get(
            f"/api/workflows/runs?workflowId={first['id']}", headers=auth_headers
        ).json()
        others = client.get(
            "/api/workflows/runs", headers={**auth_headers, "x-auth-id": "customer-2"}
        ).json()

        assert [run["workflowId"] for run in runs] == [first["id"]]
        assert others == []

    def test_run_of_other_caller_returns_404(self, api, auth_headers):
        client, container = api
        created = _create(client, auth_headers)
        run_id = client.post(f"/api/workflows/{created['id']}/run", headers=auth_headers).json()[
            "runId"
        ]
        client.portal.call(container.run_dispatcher.drain)

        response = client.get(
            f"/api/workflows/runs/{run_id}", headers={**auth_headers, "x-auth-id": "customer-2"}
        )

        assert response.status_code == 404

    def test_run_without_workspace_credentials_returns_401(self, api, auth_headers):
        client, _ = api
        created = _create(client, auth_headers)
        headers = {"x-auth-id": "customer-1"}

        response = client.post(f"/api/workflows/{created['id']}/run", headers=headers)

        assert response.status_code == 401


class TestReplaceNodes:
    def test_event_trigger_is_provisioned(self, api, auth_headers, fake_integration):
        client, _ = api
        fake_integration.integrations["zendesk"] = {
            "id": "int-1",
            "connectorId": "conn-1",
            "connection": {"id": "con-1"},
        }
        created = _create(client, auth_headers)

        response = client.put(
            f"/api/workflows/{created['id']}/nodes",
            json={"nodes": [EVENT_TRIGGER, HTTP_NODE]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["nodes"][0]["config"]["flowInstanceId"] == "flow-1"

    def test_provisioning_failure_returns_400_with_node_id(
        self, api, auth_headers, fake_integration
    ):
        client, _ = api
        fake_integration.integrations["zendesk"] = {"id": "int-1", "connection": {"id": "con-1"}}
        fake_integration.flow_instance_error = IntegrationError("quota exceeded", status_code=429)
        created = _create(client, auth_headers)

        response = client.put(
            f"/api/workflows/{created['id']}/nodes",
            json={"nodes": [EVENT_TRIGGER]},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "Failed to provision event source",
            "details": "quota exceeded",
            "nodeId": "e",
        }
        stored = client.get(f"/api/workflows/{created['id']}", headers=auth_headers).json()
        assert stored["nodes"] == []
