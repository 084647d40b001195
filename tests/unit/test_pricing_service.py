"""Unit tests for the pricing cache"""

import json
from decimal import Decimal

from app.services.pricing_service import DEFAULT_TOOL_COSTS, PricingService, parse_pricing


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_defaults_without_snapshot():
    service = PricingService()

    assert service.expected_cost("add_user_to_agent") == Decimal("0.005")
    assert service.expected_cost("get_usage_report") == Decimal("0.002")
    assert service.expected_cost("get_pricing") == Decimal("0.001")
    assert service.expected_cost("list_agents") == Decimal("0")
    assert service.snapshot() == DEFAULT_TOOL_COSTS


def test_snapshot_replaces_and_expires():
    clock = FakeClock()
    service = PricingService(ttl_seconds=60, clock=clock)

    prices = service.update_from_response({"success": True, "pricing": {"prompt_agent": 0.01, "create_agent": "0.05"}})

    assert prices == {"prompt_agent": Decimal("0.01"), "create_agent": Decimal("0.05")}
    assert service.expected_cost("prompt_agent") == Decimal("0.01")
    assert service.expected_cost("get_pricing") == Decimal("0.001")

    clock.now += 61
    assert service.is_fresh is False
    assert service.expected_cost("prompt_agent") == Decimal("0")


def test_unparseable_response_keeps_previous_snapshot():
    service = PricingService(clock=FakeClock())
    service.update_from_response({"pricing": {"prompt_agent": 0.01}})

    assert service.update_from_response({"success": True}) == {}
    assert service.expected_cost("prompt_agent") == Decimal("0.01")


def test_parse_pricing_shapes():
    assert parse_pricing({"pricing": [{"tool": "get_agent", "cost": 0.001}, {"name": "x"}]}) == {
        "get_agent": Decimal("0.001")
    }
    assert parse_pricing({"pricing": {"get_agent": {"price": "$0.002"}}}) == {"get_agent": Decimal("0.002")}

    text = json.dumps({"pricing": {"list_agents": 0.0005}})
    assert parse_pricing({"content": [{"type": "text", "text": text}]}) == {"list_agents": Decimal("0.0005")}

    wrapped = {"jsonrpc": "2.0", "id": 1, "result": {"pricing": {"delete_agent": 0.003}}}
    assert parse_pricing(wrapped) == {"delete_agent": Decimal("0.003")}


def test_parse_pricing_skips_bad_entries():
    assert parse_pricing({"pricing": {"a": True, "b": -1, "c": "free", "d": 0.5}}) == {"d": Decimal("0.5")}
    assert parse_pricing(None) == {}
    assert parse_pricing({"content": [{"type": "text", "text": "not json"}]}) == {}


def test_snapshot_overlays_fresh_prices_on_defaults():
    clock = FakeClock()
    service = PricingService(ttl_seconds=60, clock=clock)
    service.update_from_response({"pricing": {"get_pricing": 0.002, "list_agents": 1}})

    prices = service.snapshot()

    assert prices["get_pricing"] == Decimal("0.002")
    assert prices["list_agents"] == Decimal("1")
    assert prices["get_usage_report"] == Decimal("0.002")

    clock.now += 61
    assert service.snapshot() == DEFAULT_TOOL_COSTS
