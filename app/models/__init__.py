"""SQLAlchemy models for the Agent Dashboard"""

from app.models.base import Base
from app.models.usage_record import UsageRecordModel, UsageStatus
from app.models.agent import AgentModel, AgentAccessModel, AgentType

__all__ = [
    "Base",
    "UsageRecordModel",
    "UsageStatus",
    "AgentModel",
    "AgentAccessModel",
    "AgentType",
]
