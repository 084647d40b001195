"""Common API dependencies"""

from typing import Optional
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.services.agent_store import AgentStore
from app.services.flow_broadcaster import FlowBroadcaster, flow_broadcaster
from app.services.mcp_gateway import MCPGateway, get_gateway
from app.services.payment_preferences import PaymentPreferences, payment_preferences
from app.services.pricing_service import PricingService, pricing_service
from app.services.tool_orchestrator import ToolOrchestrator
from app.services.usage_ledger import UsageLedger


def resolve_user_id(user_id: Optional[str]) -> str:
    """Caller identity is trusted from the request; the demo user when absent"""
    return user_id or settings.DEMO_USER_ID


def get_pricing_service() -> PricingService:
    return pricing_service


def get_payment_preferences() -> PaymentPreferences:
    return payment_preferences


def get_flow_broadcaster() -> FlowBroadcaster:
    return flow_broadcaster


def get_mcp_gateway() -> MCPGateway:
    return get_gateway()


async def get_usage_ledger(db: AsyncSession = Depends(get_db)) -> UsageLedger:
    """Dependency to get UsageLedger instance"""
    return UsageLedger(db)


async def get_agent_store(db: AsyncSession = Depends(get_db)) -> AgentStore:
    """Dependency to get AgentStore instance"""
    return AgentStore(db)


async def get_tool_orchestrator(
    gateway: MCPGateway = Depends(get_mcp_gateway),
    ledger: UsageLedger = Depends(get_usage_ledger),
    pricing: PricingService = Depends(get_pricing_service),
    preferences: PaymentPreferences = Depends(get_payment_preferences),
    broadcaster: FlowBroadcaster = Depends(get_flow_broadcaster),
) -> ToolOrchestrator:
    """Dependency to get a ToolOrchestrator wired to the request's session"""
    return ToolOrchestrator(
        gateway=gateway,
        ledger=ledger,
        pricing=pricing,
        preferences=preferences,
        broadcaster=broadcaster,
    )
