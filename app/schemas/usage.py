"""Pydantic schemas for the usage ledger"""

from datetime import datetime
from typing import Any, List, Optional
from pydantic import ConfigDict

from app.models.usage_record import UsageStatus
from app.schemas.common import CamelModel, CostAmount


class UsageRecord(CamelModel):
    """A usage ledger row as returned to the dashboard"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    tool_name: str
    agent_id: Optional[int] = None
    cost: CostAmount
    tokens_used: Optional[int] = None
    execution_time_ms: Optional[int] = None
    status: UsageStatus
    error_message: Optional[str] = None
    request: Any
    response: Any = None
    created_at: datetime


class UsageReport(CamelModel):
    """Summary of a user's usage between two instants"""
    total_cost: CostAmount
    total_actions: int
    successful_actions: int
    failed_actions: int
    usage: List[UsageRecord]
