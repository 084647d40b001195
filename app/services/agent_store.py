"""
Agent Store - the dashboard's own agents and their access grants.

An agent is visible to its owner and to users holding a grant. Only the
owner may update or delete it, or grant and revoke access.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AgentAccessError, AgentNotFoundError
from app.core.logging_config import get_logger
from app.models.agent import AgentModel, AgentAccessModel
from app.schemas.agent import AgentCreate, AgentUpdate

logger = get_logger(__name__)


class AgentStore:
    """CRUD over ``agents`` and ``agent_access``"""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def create_agent(self, agent: AgentCreate, owner_id: str) -> AgentModel:
        agent_model = AgentModel(
            name=agent.name,
            description=agent.description,
            instructions=agent.instructions,
            type=agent.type,
            is_public=agent.is_public,
            owner_id=owner_id,
            agent_metadata=agent.metadata,
        )
        self.db.add(agent_model)
        await self.db.commit()
        await self.db.refresh(agent_model)

        logger.info(
            "agent_created",
            agent_id=agent_model.id,
            owner_id=owner_id,
            agent_type=agent_model.type.value,
        )
        return agent_model

    async def _load(self, agent_id: int) -> Optional[AgentModel]:
        result = await self.db.execute(
            select(AgentModel).where(AgentModel.id == agent_id)
        )
        return result.scalar_one_or_none()

    async def _has_grant(self, agent_id: int, user_id: str) -> bool:
        result = await self.db.execute(
            select(AgentAccessModel.id).where(
                AgentAccessModel.agent_id == agent_id,
                AgentAccessModel.user_id == user_id,
            )
        )
        return result.first() is not None

    async def _load_owned(self, agent_id: int, user_id: str, action: str) -> AgentModel:
        agent = await self._load(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id, user_id)
        if agent.owner_id != user_id:
            raise AgentAccessError(agent_id, user_id, action)
        return agent

    async def get_agent(self, agent_id: int, user_id: str) -> AgentModel:
        """
        Fetch an agent the user owns or has been granted.

        Raises:
            AgentNotFoundError: If the agent does not exist or is not visible
        """
        agent = await self._load(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id, user_id)
        if agent.owner_id == user_id or await self._has_grant(agent_id, user_id):
            return agent
        raise AgentNotFoundError(agent_id, user_id)

    async def list_user_agents(self, user_id: str) -> List[AgentModel]:
        """Agents the user owns, followed by agents shared with them"""
        granted = select(AgentAccessModel.agent_id).where(AgentAccessModel.user_id == user_id)
        result = await self.db.execute(
            select(AgentModel)
            .where(or_(AgentModel.owner_id == user_id, AgentModel.id.in_(granted)))
            .order_by(AgentModel.id)
        )
        agents = list(result.scalars().all())
        owned = [a for a in agents if a.owner_id == user_id]
        shared = [a for a in agents if a.owner_id != user_id]
        return owned + shared

    async def update_agent(self, agent_id: int, user_id: str, updates: AgentUpdate) -> AgentModel:
        """
        Apply the fields set in ``updates``.

        Raises:
            AgentNotFoundError: If the agent does not exist
            AgentAccessError: If the user is not the owner
        """
        agent = await self._load_owned(agent_id, user_id, "update")

        changes = updates.model_dump(exclude_unset=True, exclude={"user_id"})
        if "metadata" in changes:
            agent.agent_metadata = changes.pop("metadata") or {}
        for key, value in changes.items():
            if value is not None:
                setattr(agent, key, value)
        agent.updated_at = datetime.utcnow()

        await self.db.commit()
        await self.db.refresh(agent)

        logger.info("agent_updated", agent_id=agent_id, fields=sorted(changes))
        return agent

    async def delete_agent(self, agent_id: int, user_id: str) -> None:
        """Delete an agent and every grant on it"""
        agent = await self._load_owned(agent_id, user_id, "delete")

        # SQLite enforces ON DELETE CASCADE only with foreign keys enabled
        await self.db.execute(delete(AgentAccessModel).where(AgentAccessModel.agent_id == agent_id))
        await self.db.delete(agent)
        await self.db.commit()

        logger.info("agent_deleted", agent_id=agent_id, owner_id=user_id)

    async def add_user_to_agent(
        self,
        agent_id: int,
        user_id: str,
        owner_id: str
    ) -> Optional[AgentAccessModel]:
        """
        Grant ``user_id`` access to an agent owned by ``owner_id``.

        Returns:
            The new grant, or None if the user already has access
        """
        await self._load_owned(agent_id, owner_id, "share")

        if await self._has_grant(agent_id, user_id):
            return None

        grant = AgentAccessModel(agent_id=agent_id, user_id=user_id, granted_at=datetime.utcnow())
        self.db.add(grant)
        await self.db.commit()
        await self.db.refresh(grant)

        logger.info("agent_access_granted", agent_id=agent_id, user_id=user_id, owner_id=owner_id)
        return grant

    async def remove_user_from_agent(self, agent_id: int, user_id: str, owner_id: str) -> bool:
        """
        Revoke a grant.

        Returns:
            False if the user had no grant to remove
        """
        await self._load_owned(agent_id, owner_id, "unshare")

        result = await self.db.execute(
            delete(AgentAccessModel).where(
                AgentAccessModel.agent_id == agent_id,
                AgentAccessModel.user_id == user_id,
            )
        )
        await self.db.commit()

        removed = result.rowcount > 0
        if removed:
            logger.info("agent_access_revoked", agent_id=agent_id, user_id=user_id, owner_id=owner_id)
        return removed

    async def get_user_agent_access(self, user_id: str) -> List[AgentAccessModel]:
        result = await self.db.execute(
            select(AgentAccessModel)
            .where(AgentAccessModel.user_id == user_id)
            .order_by(AgentAccessModel.granted_at, AgentAccessModel.id)
        )
        return list(result.scalars().all())
