"""Unit tests for MCP response shape adapters"""

from decimal import Decimal

from app.services.response_adapters import ResponseShape, adapt_response, extract_cost


def test_json_rpc_result_is_unwrapped():
    raw = {"jsonrpc": "2.0", "id": 1, "result": {"content": [{"type": "text", "text": "hi"}], "cost": 0.02}}
    adapted = adapt_response(raw)

    assert adapted.shape is ResponseShape.JSON_RPC
    assert adapted.body == raw["result"]
    assert adapted.cost == Decimal("0.02")
    assert adapted.raw is raw


def test_json_rpc_error_becomes_failed_body():
    adapted = adapt_response({"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "Method not found"}})

    assert adapted.shape is ResponseShape.JSON_RPC
    assert adapted.body == {"success": False, "error": "Error: Method not found"}
    assert adapted.cost is None


def test_json_rpc_without_object_result():
    adapted = adapt_response({"jsonrpc": "2.0", "id": 1, "result": "ok"})
    assert adapted.shape is ResponseShape.JSON_RPC
    assert adapted.body is None


def test_content_envelope():
    raw = {"content": [{"type": "text", "text": "done"}]}
    adapted = adapt_response(raw)

    assert adapted.shape is ResponseShape.CONTENT_ENVELOPE
    assert adapted.body is raw
    assert adapted.cost is None


def test_flat_result_with_cost():
    adapted = adapt_response({"success": True, "cost": 0.05, "agent": {"id": 42}})

    assert adapted.shape is ResponseShape.FLAT
    assert adapted.cost == Decimal("0.05")


def test_opaque_values():
    for raw in (None, "text", 42, [{"success": True}]):
        adapted = adapt_response(raw)
        assert adapted.shape is ResponseShape.OPAQUE
        assert adapted.body is None
        assert adapted.cost is None


def test_extract_cost_ignores_non_numeric_values():
    assert extract_cost({"cost": True}) is None
    assert extract_cost({"cost": "0.05"}) is None
    assert extract_cost({"cost": float("nan")}) is None
    assert extract_cost({"cost": 0}) == Decimal("0")
    assert extract_cost({"cost": 0.1}) == Decimal("0.1")
