"""Integration tests for payment method and ATXP status endpoints"""

import pytest

from app.services import mcp_gateway


pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


async def test_default_payment_method(client):
    response = await client.get("/api/v1/payment-method", params={"userId": "u1"})

    assert response.status_code == 200
    assert response.json()["paymentMethod"] == "apikey"


async def test_set_payment_method_applies_to_next_call(client, mock_gateway):
    response = await client.post("/api/v1/payment-method", json={"userId": "u1", "method": "atxp"})

    assert response.status_code == 200
    assert response.json() == {"paymentMethod": "atxp", "message": "Payment method set to atxp"}

    await client.post("/api/v1/tools/list_agents", json={"userId": "u1"})
    credentials = mock_gateway.call_tool.await_args.args[2]
    assert credentials.payment_method == "atxp"

    other = await client.get("/api/v1/payment-method", params={"userId": "u2"})
    assert other.json()["paymentMethod"] == "apikey"


async def test_set_unknown_payment_method(client):
    response = await client.post("/api/v1/payment-method", json={"method": "paypal"})

    assert response.status_code == 422
    assert response.json()["error"] == "Validation error"


async def test_atxp_status(client, monkeypatch):
    monkeypatch.setattr(mcp_gateway, "gateway", object())

    response = await client.get("/api/v1/atxp/status")

    assert response.status_code == 200
    assert response.json() == {
        "connected": True,
        "mode": "ATXP with API key fallback",
        "paymentMethod": "apikey",
    }


async def test_atxp_status_without_gateway(client, monkeypatch, payment_preferences):
    monkeypatch.setattr(mcp_gateway, "gateway", None)
    payment_preferences.atxp_connection_string = None

    response = await client.get("/api/v1/atxp/status")

    body = response.json()
    assert body["connected"] is False
    assert body["mode"] == "Direct HTTP (ATXP unavailable)"
