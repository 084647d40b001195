"""
Response adapters for the shapes the MCP server has answered with.

The remote server has returned, over time:
- JSON-RPC envelopes: {"jsonrpc": "2.0", "result": {...}} or {"jsonrpc": "2.0", "error": {...}}
- MCP content envelopes: {"content": [{"type": "text", "text": "..."}]}
- flat results: {"success": true, "cost": 0.01, ...}

One parser per shape, tried in priority order. The first parser that
recognizes the body wins; anything else is opaque.
"""

import enum
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional, Tuple


class ResponseShape(str, enum.Enum):
    JSON_RPC = "json_rpc"
    CONTENT_ENVELOPE = "content_envelope"
    FLAT = "flat"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class AdaptedResponse:
    """
    A remote response with its shape identified.

    ``body`` is the object the outcome classifier inspects (the JSON-RPC
    result when enveloped), or None when the response carries no object.
    ``cost`` is the numeric cost the server reported, if any.
    """
    shape: ResponseShape
    body: Optional[Dict[str, Any]]
    cost: Optional[Decimal]
    raw: Any


def extract_cost(body: Any) -> Optional[Decimal]:
    """Numeric ``cost`` field of a response object, as Decimal"""
    if not isinstance(body, dict):
        return None
    value = body.get("cost")
    # bool is an int subclass and never a price
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    try:
        cost = Decimal(str(value))
    except InvalidOperation:
        return None
    if not cost.is_finite():
        return None
    return cost


def _parse_json_rpc(raw: Any) -> Optional[AdaptedResponse]:
    if not isinstance(raw, dict) or "jsonrpc" not in raw:
        return None

    error = raw.get("error")
    if error is not None:
        message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
        return AdaptedResponse(
            shape=ResponseShape.JSON_RPC,
            body={"success": False, "error": f"Error: {message}"},
            cost=None,
            raw=raw,
        )

    result = raw.get("result")
    inner = _parse_content_envelope(result) or _parse_flat(result)
    if inner is None:
        return AdaptedResponse(ResponseShape.JSON_RPC, None, None, raw)
    return AdaptedResponse(ResponseShape.JSON_RPC, inner.body, inner.cost, raw)


def _parse_content_envelope(raw: Any) -> Optional[AdaptedResponse]:
    if not isinstance(raw, dict) or not isinstance(raw.get("content"), list):
        return None
    return AdaptedResponse(ResponseShape.CONTENT_ENVELOPE, raw, extract_cost(raw), raw)


def _parse_flat(raw: Any) -> Optional[AdaptedResponse]:
    if not isinstance(raw, dict):
        return None
    return AdaptedResponse(ResponseShape.FLAT, raw, extract_cost(raw), raw)


PARSERS: Tuple[Callable[[Any], Optional[AdaptedResponse]], ...] = (
    _parse_json_rpc,
    _parse_content_envelope,
    _parse_flat,
)


def adapt_response(raw: Any) -> AdaptedResponse:
    """Identify the shape of a raw response"""
    for parser in PARSERS:
        adapted = parser(raw)
        if adapted is not None:
            return adapted
    return AdaptedResponse(ResponseShape.OPAQUE, None, None, raw)
