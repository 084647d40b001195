"""
Agent management endpoints backed by the remote MCP server.

Each route is a relay to the matching agent tool and is metered and
recorded like any other tool call.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from typing import Optional

from app.api.dependencies import get_tool_orchestrator, resolve_user_id
from app.api.v1.tools import to_response
from app.schemas.agent import RemoteAgentCreate, RemoteAgentUpdate
from app.schemas.tool_invocation import ToolInvocationResponse
from app.services.tool_orchestrator import ToolInvocation, ToolOrchestrator


router = APIRouter(prefix="/agents", tags=["Agents"])


@router.post("", response_model=ToolInvocationResponse, status_code=status.HTTP_201_CREATED)
async def create_agent(
    agent: RemoteAgentCreate,
    response: Response,
    orchestrator: ToolOrchestrator = Depends(get_tool_orchestrator)
):
    """
    Create an agent on the MCP server.

    Returns 201 when the server reports the agent created, 200 with the
    failure narrated in ``atxpFlow`` otherwise.
    """
    arguments = agent.model_dump(include={"name", "description", "type", "instructions"}, exclude_none=True)
    result = await orchestrator.invoke(
        ToolInvocation(
            user_id=resolve_user_id(agent.user_id),
            tool_name="create_agent",
            arguments=arguments,
        )
    )
    if not result.success:
        response.status_code = status.HTTP_200_OK
    return to_response(result)


@router.get("", response_model=ToolInvocationResponse)
async def list_agents(
    user_id: Optional[str] = Query(None, alias="userId"),
    orchestrator: ToolOrchestrator = Depends(get_tool_orchestrator)
):
    """List the agents visible on the MCP server"""
    result = await orchestrator.invoke(
        ToolInvocation(user_id=resolve_user_id(user_id), tool_name="list_agents")
    )
    return to_response(result)


@router.get("/{agent_id}", response_model=ToolInvocationResponse)
async def get_agent(
    agent_id: int,
    user_id: Optional[str] = Query(None, alias="userId"),
    orchestrator: ToolOrchestrator = Depends(get_tool_orchestrator)
):
    result = await orchestrator.invoke(
        ToolInvocation(
            user_id=resolve_user_id(user_id),
            tool_name="get_agent",
            agent_id=agent_id,
        )
    )
    return to_response(result)


@router.put("/{agent_id}", response_model=ToolInvocationResponse)
async def update_agent(
    agent_id: int,
    updates: RemoteAgentUpdate,
    orchestrator: ToolOrchestrator = Depends(get_tool_orchestrator)
):
    """Update an agent on the MCP server; omitted fields are left unchanged"""
    arguments = updates.model_dump(exclude={"user_id"}, exclude_none=True)
    result = await orchestrator.invoke(
        ToolInvocation(
            user_id=resolve_user_id(updates.user_id),
            tool_name="update_agent",
            arguments=arguments,
            agent_id=agent_id,
        )
    )
    return to_response(result)


@router.delete("/{agent_id}", response_model=ToolInvocationResponse)
async def delete_agent(
    agent_id: int,
    user_id: Optional[str] = Query(None, alias="userId"),
    orchestrator: ToolOrchestrator = Depends(get_tool_orchestrator)
):
    result = await orchestrator.invoke(
        ToolInvocation(
            user_id=resolve_user_id(user_id),
            tool_name="delete_agent",
            agent_id=agent_id,
        )
    )
    return to_response(result)
