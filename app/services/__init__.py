"""Services package"""

from app.services.tool_orchestrator import (
    ToolOrchestrator,
    ToolInvocation,
    InvocationResult,
)
from app.services.usage_ledger import UsageLedger, UsageEntry, UsageSummary
from app.services.mcp_gateway import MCPGateway, GatewayCredentials
from app.services.outcome_classifier import build_flow_trace, classify_outcome

__all__ = [
    "ToolOrchestrator",
    "ToolInvocation",
    "InvocationResult",
    "UsageLedger",
    "UsageEntry",
    "UsageSummary",
    "MCPGateway",
    "GatewayCredentials",
    "build_flow_trace",
    "classify_outcome",
]
