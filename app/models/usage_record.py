"""MCP tool usage ledger model"""

import enum
from datetime import datetime
from sqlalchemy import Column, String, Integer, Text, Numeric, Enum, JSON, TIMESTAMP, Index

from app.models.base import Base


class UsageStatus(str, enum.Enum):
    """Terminal status of a tool invocation. PENDING is reserved and never written."""
    SUCCESS = "success"
    ERROR = "error"
    PENDING = "pending"


class UsageRecordModel(Base):
    """
    Usage ledger row, one per tool invocation attempt.

    Rows are append-only: the ledger service exposes no update or delete.
    Cost is stored as fixed-point NUMERIC(10, 4) and read back as Decimal.
    """
    __tablename__ = "mcp_tool_usage"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    tool_name = Column(String(255), nullable=False)
    agent_id = Column(Integer, nullable=True)
    cost = Column(Numeric(10, 4, asdecimal=True), nullable=False)
    tokens_used = Column(Integer, nullable=True)
    execution_time_ms = Column(Integer, nullable=True)
    status = Column(
        Enum(
            UsageStatus,
            name="usagestatus",
            values_callable=lambda statuses: [s.value for s in statuses]
        ),
        nullable=False
    )
    error_message = Column(Text, nullable=True)
    request = Column(JSON, nullable=False)
    response = Column(JSON, nullable=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_usage_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self) -> str:
        return f"<UsageRecordModel(id={self.id}, tool_name={self.tool_name}, status={self.status})>"
