"""Integration tests for tool invocation, pricing and usage endpoints"""

import pytest
from decimal import Decimal
from sqlalchemy import select

from app.core.exceptions import GatewayError
from app.models.usage_record import UsageRecordModel, UsageStatus


pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


async def usage_rows(db_session):
    result = await db_session.execute(select(UsageRecordModel).order_by(UsageRecordModel.id))
    return list(result.scalars().all())


async def test_list_tools(client):
    response = await client.get("/api/v1/tools")

    assert response.status_code == 200
    tools = {tool["name"]: tool for tool in response.json()}
    assert len(tools) == 10
    assert tools["create_agent"]["expectedCost"] == "0.05"
    assert tools["list_agents"]["expectedCost"] == "0.00"
    assert {f["name"] for f in tools["create_agent"]["fields"]} == {"name", "description", "type", "instructions"}


async def test_invoke_tool_success(client, mock_gateway, broadcaster, db_session):
    mock_gateway.call_tool.return_value = {"success": True, "agent": {"id": 42, "name": "A"}}

    response = await client.post(
        "/api/v1/tools/create_agent",
        json={"userId": "u1", "arguments": {"name": "A", "description": "B", "type": "team"}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["cost"] == "0.05"
    assert body["response"] == {"success": True, "agent": {"id": 42, "name": "A"}}
    assert body["executionTimeMs"] >= 0
    assert body["atxpFlow"]["operation"] == "create_agent"
    assert body["atxpFlow"]["totalSteps"] == 5
    assert body["atxpFlow"]["totalCost"] == "0.05"

    rows = await usage_rows(db_session)
    assert len(rows) == 1
    assert rows[0].user_id == "u1"
    assert rows[0].status is UsageStatus.SUCCESS
    broadcaster.publish_flow.assert_awaited_once()


async def test_invoke_tool_without_body_uses_demo_user(client, mock_gateway, db_session):
    response = await client.post("/api/v1/tools/list_agents")

    assert response.status_code == 200
    rows = await usage_rows(db_session)
    assert rows[0].user_id == "user_demo_123"


async def test_invoke_tool_missing_arguments(client, mock_gateway, db_session):
    response = await client.post(
        "/api/v1/tools/add_user_to_agent",
        json={"arguments": {"agentId": 3}},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["toolName"] == "add_user_to_agent"
    assert body["missingFields"] == ["userEmail"]
    assert "userEmail" in body["error"]
    mock_gateway.call_tool.assert_not_awaited()
    assert await usage_rows(db_session) == []


async def test_invoke_tool_gateway_failure(client, mock_gateway, broadcaster, db_session):
    mock_gateway.call_tool.side_effect = GatewayError(
        "MCP server error: 502 - Bad Gateway",
        tool_name="list_agents",
        status_code=502,
        body="Bad Gateway",
    )

    response = await client.post("/api/v1/tools/list_agents", json={"userId": "u1"})

    assert response.status_code == 500
    assert response.json() == {"error": "MCP server error: 502 - Bad Gateway"}

    rows = await usage_rows(db_session)
    assert len(rows) == 1
    assert rows[0].status is UsageStatus.ERROR
    assert rows[0].response is None
    assert rows[0].error_message == "MCP server error: 502 - Bad Gateway"
    broadcaster.publish_flow.assert_awaited_once()


async def test_semantic_failure_is_200_with_error_trace(client, mock_gateway):
    mock_gateway.call_tool.return_value = {"success": False, "error": "Error: agent 9 not found"}

    response = await client.post("/api/v1/tools/get_agent", json={"agentId": 9})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["cost"] == "0.00"
    steps = {s["id"]: s for s in body["atxpFlow"]["steps"]}
    assert steps["payment-confirmation"]["status"] == "error"
    assert steps["operation-complete"]["status"] == "error"


async def test_json_rpc_error_is_200_with_error_trace(client, mock_gateway, db_session):
    mock_gateway.call_tool.return_value = {
        "jsonrpc": "2.0",
        "id": 1,
        "error": {"code": -32601, "message": "Method not found"},
    }

    response = await client.post("/api/v1/tools/list_agents")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["response"]["error"]["code"] == -32601
    steps = {s["id"]: s for s in body["atxpFlow"]["steps"]}
    assert steps["operation-complete"]["status"] == "error"
    rows = await usage_rows(db_session)
    assert rows[0].status is UsageStatus.ERROR


async def test_get_pricing_refreshes_cache(client, mock_gateway, pricing_service):
    mock_gateway.call_tool.return_value = {
        "success": True,
        "pricing": {"prompt_agent": 0.02, "list_agents": "0.0005"},
    }

    response = await client.get("/api/v1/pricing", params={"userId": "u1"})

    assert response.status_code == 200
    body = response.json()
    assert body["pricing"] == {"prompt_agent": "0.02", "list_agents": "0.0005"}
    assert body["cost"] == "0.001"
    assert pricing_service.expected_cost("prompt_agent") == Decimal("0.02")
    assert pricing_service.expected_cost("list_agents") == Decimal("0.0005")

    tools = {tool["name"]: tool for tool in (await client.get("/api/v1/tools")).json()}
    assert tools["prompt_agent"]["expectedCost"] == "0.02"
    assert tools["list_agents"]["expectedCost"] == "0.0005"
    assert tools["create_agent"]["expectedCost"] == "0.05"


async def test_failed_pricing_call_keeps_cache(client, mock_gateway, pricing_service):
    mock_gateway.call_tool.return_value = {"success": False, "error": "Error: 503"}

    response = await client.get("/api/v1/pricing")

    assert response.status_code == 200
    assert response.json()["pricing"] == {}
    assert pricing_service.is_fresh is False


async def test_usage_report(client, mock_gateway):
    mock_gateway.call_tool.return_value = {"success": True}
    await client.post(
        "/api/v1/tools/prompt_agent",
        json={"userId": "u1", "arguments": {"agentId": 1, "message": "hi"}},
    )
    await client.post(
        "/api/v1/tools/create_agent",
        json={"userId": "u1", "arguments": {"name": "A", "description": "B", "type": "team"}},
    )
    await client.post("/api/v1/tools/list_agents", json={"userId": "someone_else"})

    response = await client.get(
        "/api/v1/usage",
        params={"userId": "u1", "startDate": "2000-01-01T00:00:00Z", "endDate": "2999-01-01T00:00:00Z"},
    )

    assert response.status_code == 200
    report = response.json()
    assert report["totalCost"] == "0.06"
    assert report["totalActions"] == 2
    assert report["successfulActions"] == 2
    assert report["failedActions"] == 0
    assert [r["toolName"] for r in report["usage"]] == ["prompt_agent", "create_agent"]
    assert report["usage"][0]["cost"] == "0.01"
    assert report["usage"][0]["request"]["arguments"] == {"agentId": 1, "message": "hi"}


async def test_usage_report_empty_window(client):
    response = await client.get(
        "/api/v1/usage",
        params={"startDate": "2001-01-01T00:00:00", "endDate": "2001-01-02T00:00:00"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "totalCost": "0.00",
        "totalActions": 0,
        "successfulActions": 0,
        "failedActions": 0,
        "usage": [],
    }


async def test_usage_report_rejects_bad_date(client):
    response = await client.get("/api/v1/usage", params={"startDate": "yesterday"})

    assert response.status_code == 422
    assert response.json()["error"] == "Validation error"
