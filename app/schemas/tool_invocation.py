"""Pydantic schemas for MCP tool invocation"""

from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional
from pydantic import Field

from app.schemas.common import CamelModel, CostAmount
from app.schemas.atxp_flow import FlowTrace


class ToolInvocationRequest(CamelModel):
    """Body of POST /tools/{toolName}"""
    user_id: Optional[str] = Field(
        None,
        description="Caller identity; the demo user when omitted"
    )
    agent_id: Optional[int] = Field(
        None,
        description="Agent the call targets, recorded in the usage ledger"
    )
    arguments: Dict[str, Any] = Field(
        default_factory=dict,
        description="Arguments forwarded to the remote tool"
    )


class ToolInvocationResponse(CamelModel):
    """Result of a tool invocation that reached the remote server"""
    success: bool = Field(..., description="Classified outcome of the underlying operation")
    response: Any = Field(None, description="Raw response body from the MCP server")
    cost: CostAmount = Field(..., description="Cost charged for the invocation")
    execution_time_ms: int = Field(..., ge=0, description="Wall-clock duration of the remote call")
    atxp_flow: FlowTrace


class PricingResponse(ToolInvocationResponse):
    """Result of the get_pricing relay"""
    pricing: Dict[str, CostAmount] = Field(
        default_factory=dict,
        description="Per-tool prices parsed from the response"
    )


class ToolFieldSchema(CamelModel):
    """One argument the UI must collect for a tool"""
    name: str
    type: str
    label: str
    required: bool = False
    options: List[str] = Field(default_factory=list)


class ToolDescriptor(CamelModel):
    """Registry entry for a tool"""
    name: str
    fields: List[ToolFieldSchema]
    expected_cost: CostAmount = Decimal("0")


class PaymentMethodRequest(CamelModel):
    """Body of POST /payment-method"""
    method: Literal["apikey", "atxp"]
    user_id: Optional[str] = None


class PaymentMethodResponse(CamelModel):
    payment_method: Literal["apikey", "atxp"]
    message: Optional[str] = None


class AtxpStatusResponse(CamelModel):
    connected: bool
    mode: str
    payment_method: Literal["apikey", "atxp"]
