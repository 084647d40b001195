"""Pydantic schemas for agents"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import Field, field_validator

from app.models.agent import AgentModel, AgentType
from app.schemas.common import CamelModel


class AgentCreate(CamelModel):
    """Schema for creating an agent"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    instructions: str = Field(default="", description="Free-text agent instructions")
    type: AgentType
    is_public: bool = False
    owner_id: Optional[str] = Field(None, description="Owner; the demo user when omitted")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('name must not be blank')
        return v


class AgentUpdate(CamelModel):
    """Schema for updating an agent. Only the owner may update."""
    user_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    instructions: Optional[str] = None
    type: Optional[AgentType] = None
    is_public: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None


class Agent(CamelModel):
    """Schema for agent response"""
    id: int
    name: str
    description: Optional[str] = None
    instructions: str
    type: AgentType
    is_public: bool
    owner_id: str
    metadata: Dict[str, Any]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, agent: AgentModel) -> "Agent":
        return cls(
            id=agent.id,
            name=agent.name,
            description=agent.description,
            instructions=agent.instructions,
            type=agent.type,
            is_public=agent.is_public,
            owner_id=agent.owner_id,
            metadata=agent.agent_metadata or {},
            created_at=agent.created_at,
            updated_at=agent.updated_at,
        )


class AgentAccessGrant(CamelModel):
    """Schema for granting a user access to an agent"""
    user_id: str = Field(..., min_length=1)
    owner_id: Optional[str] = None


class AgentAccess(CamelModel):
    id: int
    agent_id: int
    user_id: str
    granted_at: datetime


class RemoteAgentCreate(CamelModel):
    """Body of POST /agents, relayed to the create_agent tool"""
    user_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    type: str
    instructions: Optional[str] = None


class RemoteAgentUpdate(CamelModel):
    """Body of PUT /agents/{id}, relayed to the update_agent tool"""
    user_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    instructions: Optional[str] = None
