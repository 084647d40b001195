"""Workspace agent endpoints: the dashboard's own agent store and access grants"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional

from app.api.dependencies import get_agent_store, resolve_user_id
from app.schemas.agent import Agent, AgentAccess, AgentAccessGrant, AgentCreate, AgentUpdate
from app.services.agent_store import AgentStore


router = APIRouter(prefix="/workspace", tags=["Workspace Agents"])


@router.post("/agents", response_model=Agent, status_code=status.HTTP_201_CREATED)
async def create_agent(
    agent: AgentCreate,
    store: AgentStore = Depends(get_agent_store)
):
    """Create an agent owned by ``ownerId`` (the demo user when omitted)"""
    created = await store.create_agent(agent, owner_id=resolve_user_id(agent.owner_id))
    return Agent.from_model(created)


@router.get("/agents", response_model=List[Agent])
async def list_agents(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: AgentStore = Depends(get_agent_store)
):
    """Agents the user owns, followed by agents shared with them"""
    agents = await store.list_user_agents(resolve_user_id(user_id))
    return [Agent.from_model(a) for a in agents]


@router.get("/agents/{agent_id}", response_model=Agent)
async def get_agent(
    agent_id: int,
    user_id: Optional[str] = Query(None, alias="userId"),
    store: AgentStore = Depends(get_agent_store)
):
    """
    Get an agent the user owns or has access to.

    Raises:
        404: If the agent does not exist or is not visible to the user
    """
    agent = await store.get_agent(agent_id, resolve_user_id(user_id))
    return Agent.from_model(agent)


@router.patch("/agents/{agent_id}", response_model=Agent)
async def update_agent(
    agent_id: int,
    updates: AgentUpdate,
    store: AgentStore = Depends(get_agent_store)
):
    """
    Update an agent. Only the owner may update.

    Raises:
        403: If the user is not the owner
        404: If the agent does not exist
    """
    agent = await store.update_agent(agent_id, resolve_user_id(updates.user_id), updates)
    return Agent.from_model(agent)


@router.delete("/agents/{agent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_agent(
    agent_id: int,
    user_id: Optional[str] = Query(None, alias="userId"),
    store: AgentStore = Depends(get_agent_store)
):
    """Delete an agent and all access grants on it. Only the owner may delete."""
    await store.delete_agent(agent_id, resolve_user_id(user_id))


@router.post(
    "/agents/{agent_id}/access",
    response_model=AgentAccess,
    status_code=status.HTTP_201_CREATED
)
async def grant_access(
    agent_id: int,
    grant: AgentAccessGrant,
    store: AgentStore = Depends(get_agent_store)
):
    """
    Share an agent with another user.

    Raises:
        403: If the caller is not the owner
        409: If the user already has access
    """
    access = await store.add_user_to_agent(
        agent_id,
        user_id=grant.user_id,
        owner_id=resolve_user_id(grant.owner_id),
    )
    if access is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User {grant.user_id} already has access to agent {agent_id}"
        )
    return AgentAccess.model_validate(access, from_attributes=True)


@router.delete("/agents/{agent_id}/access/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_access(
    agent_id: int,
    user_id: str,
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    store: AgentStore = Depends(get_agent_store)
):
    """
    Revoke a user's access to an agent.

    Raises:
        403: If the caller is not the owner
        404: If the user had no access
    """
    removed = await store.remove_user_from_agent(agent_id, user_id, resolve_user_id(owner_id))
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} has no access to agent {agent_id}"
        )


@router.get("/access", response_model=List[AgentAccess])
async def list_access(
    user_id: Optional[str] = Query(None, alias="userId"),
    store: AgentStore = Depends(get_agent_store)
):
    """Access grants held by a user"""
    grants = await store.get_user_agent_access(resolve_user_id(user_id))
    return [AgentAccess.model_validate(g, from_attributes=True) for g in grants]
