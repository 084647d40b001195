"""
Tool Orchestrator - runs one tool invocation end to end.

validate arguments -> price -> call the MCP server -> classify -> record
usage -> broadcast the flow trace.

Exactly one usage row is written for every call that reaches the MCP server,
and it is committed before the result is returned. Calls rejected for missing
arguments never reach the server and leave no row.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

from app.core.exceptions import GatewayError, ToolArgumentsError
from app.core.logging_config import get_logger
from app.core.monitoring import MetricsCollector
from app.models.usage_record import UsageRecordModel, UsageStatus
from app.schemas.atxp_flow import FlowTrace
from app.services.flow_broadcaster import FlowBroadcaster
from app.services.mcp_gateway import MCPGateway
from app.services.outcome_classifier import build_flow_trace, transport_failure_trace
from app.services.payment_preferences import PaymentPreferences
from app.services.pricing_service import PricingService
from app.services.response_adapters import adapt_response
from app.services.tool_registry import is_known_tool, missing_required_arguments
from app.services.usage_ledger import UsageEntry, UsageLedger

logger = get_logger(__name__)


@dataclass
class ToolInvocation:
    """A validated request to run one tool"""
    user_id: str
    tool_name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    agent_id: Optional[int] = None


@dataclass
class InvocationResult:
    """Outcome of an invocation whose call returned a response"""
    success: bool
    response: Any
    cost: Decimal
    execution_time_ms: int
    atxp_flow: FlowTrace
    usage_record: UsageRecordModel


class ToolOrchestrator:
    """
    Coordinates the gateway, classifier, ledger and broadcaster for a request.

    Collaborators are injected so tests can swap any of them.
    """

    def __init__(
        self,
        gateway: MCPGateway,
        ledger: UsageLedger,
        pricing: PricingService,
        preferences: PaymentPreferences,
        broadcaster: Optional[FlowBroadcaster] = None,
    ):
        self.gateway = gateway
        self.ledger = ledger
        self.pricing = pricing
        self.preferences = preferences
        self.broadcaster = broadcaster

    def _prepare_arguments(self, invocation: ToolInvocation) -> Dict[str, Any]:
        arguments = dict(invocation.arguments or {})
        if invocation.agent_id is not None and "agentId" not in arguments:
            arguments["agentId"] = invocation.agent_id

        if not is_known_tool(invocation.tool_name):
            logger.warning(
                "unregistered_tool_invoked",
                tool_name=invocation.tool_name,
                user_id=invocation.user_id,
            )

        missing = missing_required_arguments(invocation.tool_name, arguments)
        if missing:
            logger.warning(
                "tool_arguments_rejected",
                tool_name=invocation.tool_name,
                user_id=invocation.user_id,
                missing_fields=missing,
            )
            raise ToolArgumentsError(invocation.tool_name, missing)
        return arguments

    @staticmethod
    def _request_snapshot(invocation: ToolInvocation, arguments: Dict[str, Any]) -> Dict[str, Any]:
        # Taken before credentials are added, so the ledger never holds them
        snapshot: Dict[str, Any] = {"userId": invocation.user_id, "arguments": arguments}
        if invocation.agent_id is not None:
            snapshot["agentId"] = invocation.agent_id
        return snapshot

    async def _publish(self, trace: FlowTrace) -> None:
        if self.broadcaster is None:
            return
        try:
            await self.broadcaster.publish_flow(trace)
        except Exception as e:
            logger.error(
                "flow_broadcast_failed",
                operation=trace.operation,
                error=str(e),
            )

    async def invoke(self, invocation: ToolInvocation) -> InvocationResult:
        """
        Run a tool invocation.

        Returns:
            The classified result; a semantic failure is still a result

        Raises:
            ToolArgumentsError: If required arguments are missing
            GatewayError: If the call failed at the transport level, after
                the failure has been recorded
        """
        tool_name = invocation.tool_name
        arguments = self._prepare_arguments(invocation)
        expected_cost = self.pricing.expected_cost(tool_name)
        credentials = self.preferences.credentials_for(invocation.user_id)
        request_snapshot = self._request_snapshot(invocation, arguments)

        start = time.perf_counter()
        try:
            response = await self.gateway.call_tool(tool_name, arguments, credentials)
        except GatewayError as e:
            elapsed = time.perf_counter() - start
            await self._record_transport_failure(invocation, request_snapshot, e, elapsed)
            raise
        elapsed = time.perf_counter() - start
        execution_time_ms = int(round(elapsed * 1000))

        adapted = adapt_response(response)
        actual_cost = adapted.cost if adapted.cost is not None else expected_cost
        classified = build_flow_trace(tool_name, adapted.body, actual_cost)

        record = await self.ledger.record_usage(
            UsageEntry(
                user_id=invocation.user_id,
                tool_name=tool_name,
                agent_id=invocation.agent_id,
                cost=actual_cost,
                status=UsageStatus.SUCCESS if classified.mcp_success else UsageStatus.ERROR,
                execution_time_ms=execution_time_ms,
                request=request_snapshot,
                response=response,
            )
        )

        outcome = classified.payment_status if classified.mcp_success else "error"
        MetricsCollector.record_tool_invocation(tool_name, outcome, elapsed)

        logger.info(
            "tool_invocation_completed",
            tool_name=tool_name,
            user_id=invocation.user_id,
            mcp_success=classified.mcp_success,
            payment_status=classified.payment_status,
            cost=str(actual_cost),
            execution_time_ms=execution_time_ms,
            response_shape=adapted.shape.value,
        )

        await self._publish(classified.trace)

        return InvocationResult(
            success=classified.mcp_success,
            response=response,
            cost=actual_cost,
            execution_time_ms=execution_time_ms,
            atxp_flow=classified.trace,
            usage_record=record,
        )

    async def _record_transport_failure(
        self,
        invocation: ToolInvocation,
        request_snapshot: Dict[str, Any],
        error: GatewayError,
        elapsed: float,
    ) -> None:
        tool_name = invocation.tool_name
        logger.error(
            "gateway_call_failed",
            tool_name=tool_name,
            user_id=invocation.user_id,
            status_code=error.status_code,
            error=error.message,
        )
        MetricsCollector.record_gateway_error(tool_name)
        MetricsCollector.record_tool_invocation(tool_name, "transport_error", elapsed)

        await self.ledger.record_usage(
            UsageEntry(
                user_id=invocation.user_id,
                tool_name=tool_name,
                agent_id=invocation.agent_id,
                cost=Decimal("0"),
                status=UsageStatus.ERROR,
                execution_time_ms=int(round(elapsed * 1000)),
                error_message=error.message,
                request=request_snapshot,
                response=None,
            )
        )

        await self._publish(transport_failure_trace(tool_name, error.message))
