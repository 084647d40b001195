"""MCP tool invocation and pricing endpoints"""

from decimal import Decimal
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.api.dependencies import (
    get_pricing_service,
    get_tool_orchestrator,
    resolve_user_id,
)
from app.schemas.tool_invocation import (
    PricingResponse,
    ToolDescriptor,
    ToolFieldSchema,
    ToolInvocationRequest,
    ToolInvocationResponse,
)
from app.services.pricing_service import PricingService
from app.services.tool_orchestrator import InvocationResult, ToolInvocation, ToolOrchestrator
from app.services.tool_registry import get_tool_fields, list_tools


router = APIRouter(tags=["Tools"])


def to_response(result: InvocationResult) -> ToolInvocationResponse:
    return ToolInvocationResponse(
        success=result.success,
        response=result.response,
        cost=result.cost,
        execution_time_ms=result.execution_time_ms,
        atxp_flow=result.atxp_flow,
    )


@router.get("/tools", response_model=List[ToolDescriptor])
async def list_registered_tools(
    pricing: PricingService = Depends(get_pricing_service)
):
    """
    List the tools the dashboard knows how to call.

    Each entry carries the fields the UI must collect and the price the
    call is currently expected to cost.
    """
    prices = pricing.snapshot()
    return [
        ToolDescriptor(
            name=name,
            fields=[
                ToolFieldSchema(
                    name=f.name,
                    type=f.type,
                    label=f.label,
                    required=f.required,
                    options=list(f.options),
                )
                for f in get_tool_fields(name)
            ],
            expected_cost=prices.get(name, Decimal("0")),
        )
        for name in list_tools()
    ]


@router.post("/tools/{tool_name}", response_model=ToolInvocationResponse)
async def invoke_tool(
    tool_name: str,
    request: Optional[ToolInvocationRequest] = None,
    orchestrator: ToolOrchestrator = Depends(get_tool_orchestrator)
):
    """
    Invoke a remote MCP tool.

    The call is recorded in the usage ledger and its ATXP flow trace is
    broadcast to WebSocket clients.

    Raises:
        400: If required arguments are missing (nothing is recorded)
        500: If the MCP server could not be reached or answered with an error
    """
    request = request or ToolInvocationRequest()
    result = await orchestrator.invoke(
        ToolInvocation(
            user_id=resolve_user_id(request.user_id),
            tool_name=tool_name,
            arguments=request.arguments,
            agent_id=request.agent_id,
        )
    )
    return to_response(result)


@router.get("/pricing", response_model=PricingResponse)
async def get_pricing(
    user_id: Optional[str] = Query(None, alias="userId"),
    orchestrator: ToolOrchestrator = Depends(get_tool_orchestrator),
    pricing: PricingService = Depends(get_pricing_service)
):
    """
    Fetch current prices from the MCP server.

    The call is itself metered like any other tool call. A parseable
    response replaces the cached price table.
    """
    result = await orchestrator.invoke(
        ToolInvocation(user_id=resolve_user_id(user_id), tool_name="get_pricing")
    )
    prices = pricing.update_from_response(result.response) if result.success else {}

    return PricingResponse(
        success=result.success,
        response=result.response,
        cost=result.cost,
        execution_time_ms=result.execution_time_ms,
        atxp_flow=result.atxp_flow,
        pricing=prices,
    )
