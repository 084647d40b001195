"""
Pricing Service - expected per-tool cost, refreshed from ``get_pricing``.

The remote server is the source of truth for prices. A successful
``get_pricing`` relay replaces the whole cached snapshot; lookups never call
the server themselves. When the snapshot is missing, stale or silent on a
tool, the built-in default price is used.
"""

import json
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Mapping, Optional

from app.core.config import settings
from app.core.logging_config import get_logger
from app.services.response_adapters import adapt_response

logger = get_logger(__name__)


DEFAULT_TOOL_COSTS: Dict[str, Decimal] = {
    "add_user_to_agent": Decimal("0.005"),
    "remove_user_from_agent": Decimal("0.005"),
    "get_usage_report": Decimal("0.002"),
    "get_pricing": Decimal("0.001"),
}


def _price(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    if isinstance(value, Mapping):
        for key in ("cost", "price", "amount"):
            if key in value:
                return _price(value[key])
        return None
    if isinstance(value, (int, float, Decimal, str)):
        try:
            price = Decimal(str(value).strip().lstrip("$"))
        except InvalidOperation:
            return None
        return price if price.is_finite() and price >= 0 else None
    return None


def parse_pricing(response: Any) -> Dict[str, Decimal]:
    """
    Per-tool prices from a ``get_pricing`` response.

    Accepts a ``pricing`` map at the top level or inside the adapted body, or
    JSON text in the first content item. Prices may be numbers, numeric
    strings, or objects with a ``cost``/``price``/``amount`` field. Entries
    that do not parse are skipped.
    """
    body = adapt_response(response).body
    if body is None:
        return {}

    table = body.get("pricing")
    if table is None:
        content = body.get("content")
        if isinstance(content, list) and content and isinstance(content[0], dict):
            try:
                decoded = json.loads(content[0].get("text") or "")
            except ValueError:
                decoded = None
            if isinstance(decoded, dict):
                table = decoded.get("pricing", decoded)

    if isinstance(table, list):
        table = {
            item.get("tool") or item.get("name"): item
            for item in table
            if isinstance(item, Mapping) and (item.get("tool") or item.get("name"))
        }

    if not isinstance(table, Mapping):
        return {}

    prices = {}
    for tool_name, value in table.items():
        price = _price(value)
        if price is not None:
            prices[str(tool_name)] = price
    return prices


class PricingService:
    """Cached price snapshot with a time-to-live"""

    def __init__(
        self,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
        defaults: Optional[Mapping[str, Decimal]] = None,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._defaults = dict(DEFAULT_TOOL_COSTS if defaults is None else defaults)
        self._prices: Dict[str, Decimal] = {}
        self._refreshed_at: Optional[float] = None

    @property
    def is_fresh(self) -> bool:
        if self._refreshed_at is None:
            return False
        return self._clock() - self._refreshed_at < self.ttl_seconds

    def snapshot(self) -> Dict[str, Decimal]:
        """Prices currently in effect: cached values over defaults"""
        prices = dict(self._defaults)
        if self.is_fresh:
            prices.update(self._prices)
        return prices

    def update_from_response(self, response: Any) -> Dict[str, Decimal]:
        """Replace the cached snapshot from a ``get_pricing`` response"""
        prices = parse_pricing(response)
        if not prices:
            logger.warning("pricing_response_unparsed")
            return prices

        self._prices = prices
        self._refreshed_at = self._clock()
        logger.info("pricing_cache_refreshed", tool_count=len(prices))
        return prices

    def expected_cost(self, tool_name: str) -> Decimal:
        """Price a tool is expected to cost; zero when unknown"""
        if self.is_fresh and tool_name in self._prices:
            return self._prices[tool_name]
        return self._defaults.get(tool_name, Decimal("0"))


# Global pricing service instance
pricing_service = PricingService(ttl_seconds=settings.PRICING_CACHE_TTL_SECONDS)
