"""Pydantic schemas for request/response validation"""

from app.schemas.common import (
    CamelModel,
    CostAmount,
    format_cost,
    to_decimal,
)
from app.schemas.atxp_flow import FlowStep, FlowStepStatus, FlowTrace
from app.schemas.tool_invocation import (
    ToolInvocationRequest,
    ToolInvocationResponse,
    PricingResponse,
    ToolFieldSchema,
    ToolDescriptor,
    PaymentMethodRequest,
    PaymentMethodResponse,
    AtxpStatusResponse,
)
from app.schemas.usage import UsageRecord, UsageReport
from app.schemas.agent import (
    AgentCreate,
    AgentUpdate,
    Agent,
    AgentAccessGrant,
    AgentAccess,
    RemoteAgentCreate,
    RemoteAgentUpdate,
)

__all__ = [
    # Common
    "CamelModel",
    "CostAmount",
    "format_cost",
    "to_decimal",
    # Flow
    "FlowStep",
    "FlowStepStatus",
    "FlowTrace",
    # Tool invocation
    "ToolInvocationRequest",
    "ToolInvocationResponse",
    "PricingResponse",
    "ToolFieldSchema",
    "ToolDescriptor",
    "PaymentMethodRequest",
    "PaymentMethodResponse",
    "AtxpStatusResponse",
    # Usage
    "UsageRecord",
    "UsageReport",
    # Agents
    "AgentCreate",
    "AgentUpdate",
    "Agent",
    "AgentAccessGrant",
    "AgentAccess",
    "RemoteAgentCreate",
    "RemoteAgentUpdate",
]
