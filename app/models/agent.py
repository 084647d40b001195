"""Agent and agent access grant models"""

import enum
from datetime import datetime
from sqlalchemy import Column, String, Text, Boolean, Enum, JSON, Integer, TIMESTAMP, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from app.models.base import Base, BaseModel


class AgentType(str, enum.Enum):
    """Kind of agent"""
    FILE_BASED = "file-based"
    TEAM = "team"
    HYBRID = "hybrid"
    CHAT_BASED = "chat-based"


class AgentModel(BaseModel):
    """
    Agent owned by a single user.

    Other users reach an agent only through an AgentAccessModel grant.
    """
    __tablename__ = "agents"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    instructions = Column(Text, nullable=False)
    type = Column(
        Enum(
            AgentType,
            name="agenttype",
            values_callable=lambda types: [t.value for t in types]
        ),
        nullable=False
    )
    is_public = Column(Boolean, default=False, nullable=False)
    owner_id = Column(String(255), nullable=False, index=True)
    # "metadata" is reserved on declarative classes
    agent_metadata = Column("metadata", JSON, default=dict, nullable=False)

    access_grants = relationship(
        "AgentAccessModel",
        back_populates="agent",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<AgentModel(id={self.id}, name={self.name}, owner_id={self.owner_id})>"


class AgentAccessModel(Base):
    """Access grant of one agent to one user. Grants are added or removed, never updated."""
    __tablename__ = "agent_access"

    id = Column(Integer, primary_key=True, autoincrement=True)
    agent_id = Column(
        Integer,
        ForeignKey("agents.id", ondelete="CASCADE"),
        nullable=False
    )
    user_id = Column(String(255), nullable=False)
    granted_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)

    agent = relationship("AgentModel", back_populates="access_grants")

    __table_args__ = (
        UniqueConstraint('agent_id', 'user_id', name='uq_agent_access_agent_user'),
        Index('idx_agent_access_user', 'user_id'),
    )
