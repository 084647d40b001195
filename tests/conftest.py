"""Shared test fixtures for all tests"""

import pytest
import pytest_asyncio
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import AsyncMock

from app.models.base import Base
from app.core.database import get_db
from app.api.dependencies import (
    get_flow_broadcaster,
    get_mcp_gateway,
    get_payment_preferences,
    get_pricing_service,
)
from app.main import app
from app.services.flow_broadcaster import FlowBroadcaster
from app.services.mcp_gateway import MCPGateway
from app.services.payment_preferences import PaymentMethod, PaymentPreferences
from app.services.pricing_service import PricingService
from app.services.usage_ledger import UsageLedger


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine (in-memory SQLite)"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create test database session"""
    async_session_factory = sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_factory() as session:
        yield session
        await session.rollback()


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def mock_gateway():
    """Gateway double; tests set call_tool.return_value or side_effect"""
    gateway = AsyncMock(spec=MCPGateway)
    gateway.call_tool.return_value = {"success": True}
    return gateway


@pytest.fixture
def pricing_service():
    """Pricing with fixed test prices and no cached snapshot"""
    return PricingService(
        ttl_seconds=300,
        defaults={
            "create_agent": Decimal("0.05"),
            "prompt_agent": Decimal("0.01"),
            "get_pricing": Decimal("0.001"),
        },
    )


@pytest.fixture
def payment_preferences():
    return PaymentPreferences(
        default=PaymentMethod.APIKEY,
        api_key="test-api-key",
        atxp_connection_string="https://accounts.atxp.ai?connection_token=test",
    )


@pytest.fixture
def broadcaster():
    broadcaster = FlowBroadcaster()
    broadcaster.publish_flow = AsyncMock(return_value=0)
    return broadcaster


@pytest.fixture
def ledger(db_session):
    return UsageLedger(db_session)


# ============================================================================
# Application Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def client(db_session, mock_gateway, pricing_service, payment_preferences, broadcaster):
    """HTTP client against the app with the database and MCP server replaced"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mcp_gateway] = lambda: mock_gateway
    app.dependency_overrides[get_pricing_service] = lambda: pricing_service
    app.dependency_overrides[get_payment_preferences] = lambda: payment_preferences
    app.dependency_overrides[get_flow_broadcaster] = lambda: broadcaster

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
