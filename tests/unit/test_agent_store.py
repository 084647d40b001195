"""Unit tests for the workspace agent store"""

import pytest
import pytest_asyncio
from sqlalchemy import select, func

from app.core.exceptions import AgentAccessError, AgentNotFoundError
from app.models.agent import AgentAccessModel, AgentType
from app.schemas.agent import AgentCreate, AgentUpdate
from app.services.agent_store import AgentStore


OWNER = "owner_1"
FRIEND = "friend_2"
STRANGER = "stranger_3"


@pytest.fixture
def store(db_session):
    return AgentStore(db_session)


@pytest_asyncio.fixture
async def agent(store):
    return await store.create_agent(
        AgentCreate(name="Research", description="Finds papers", type=AgentType.TEAM, metadata={"tier": 1}),
        owner_id=OWNER,
    )


@pytest.mark.asyncio
async def test_create_agent(agent):
    assert agent.id is not None
    assert agent.owner_id == OWNER
    assert agent.type is AgentType.TEAM
    assert agent.instructions == ""
    assert agent.is_public is False
    assert agent.agent_metadata == {"tier": 1}


@pytest.mark.asyncio
async def test_visibility_is_owner_or_grantee(store, agent):
    assert (await store.get_agent(agent.id, OWNER)).id == agent.id

    with pytest.raises(AgentNotFoundError):
        await store.get_agent(agent.id, FRIEND)

    await store.add_user_to_agent(agent.id, FRIEND, OWNER)
    assert (await store.get_agent(agent.id, FRIEND)).id == agent.id

    with pytest.raises(AgentNotFoundError):
        await store.get_agent(agent.id, STRANGER)
    with pytest.raises(AgentNotFoundError):
        await store.get_agent(9999, OWNER)


@pytest.mark.asyncio
async def test_list_puts_owned_before_shared(store, agent):
    theirs = await store.create_agent(AgentCreate(name="Theirs", type=AgentType.HYBRID), owner_id=FRIEND)
    await store.create_agent(AgentCreate(name="Hidden", type=AgentType.HYBRID), owner_id=STRANGER)
    await store.add_user_to_agent(agent.id, FRIEND, OWNER)
    mine_later = await store.create_agent(AgentCreate(name="Mine", type=AgentType.CHAT_BASED), owner_id=OWNER)

    assert [a.id for a in await store.list_user_agents(FRIEND)] == [theirs.id, agent.id]
    assert [a.id for a in await store.list_user_agents(OWNER)] == [agent.id, mine_later.id]


@pytest.mark.asyncio
async def test_update_applies_only_set_fields(store, agent):
    updated = await store.update_agent(
        agent.id, OWNER, AgentUpdate(instructions="Be brief", metadata={"tier": 2})
    )

    assert updated.instructions == "Be brief"
    assert updated.name == "Research"
    assert updated.description == "Finds papers"
    assert updated.agent_metadata == {"tier": 2}


@pytest.mark.asyncio
async def test_only_owner_mutates(store, agent):
    await store.add_user_to_agent(agent.id, FRIEND, OWNER)

    with pytest.raises(AgentAccessError):
        await store.update_agent(agent.id, FRIEND, AgentUpdate(name="Mine now"))
    with pytest.raises(AgentAccessError):
        await store.delete_agent(agent.id, FRIEND)
    with pytest.raises(AgentAccessError):
        await store.add_user_to_agent(agent.id, STRANGER, FRIEND)
    with pytest.raises(AgentNotFoundError):
        await store.update_agent(9999, OWNER, AgentUpdate(name="x"))


@pytest.mark.asyncio
async def test_duplicate_grant_returns_none(store, agent):
    first = await store.add_user_to_agent(agent.id, FRIEND, OWNER)
    second = await store.add_user_to_agent(agent.id, FRIEND, OWNER)

    assert first is not None
    assert first.user_id == FRIEND
    assert second is None
    assert [g.agent_id for g in await store.get_user_agent_access(FRIEND)] == [agent.id]


@pytest.mark.asyncio
async def test_remove_grant(store, agent):
    await store.add_user_to_agent(agent.id, FRIEND, OWNER)

    assert await store.remove_user_from_agent(agent.id, FRIEND, OWNER) is True
    assert await store.remove_user_from_agent(agent.id, FRIEND, OWNER) is False
    assert await store.get_user_agent_access(FRIEND) == []


@pytest.mark.asyncio
async def test_delete_removes_grants(store, agent, db_session):
    await store.add_user_to_agent(agent.id, FRIEND, OWNER)

    await store.delete_agent(agent.id, OWNER)

    with pytest.raises(AgentNotFoundError):
        await store.get_agent(agent.id, OWNER)
    count = await db_session.scalar(select(func.count()).select_from(AgentAccessModel))
    assert count == 0
