"""FastAPI Application Entry Point"""

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from app.api.v1 import health, tools, usage, agents, payments, workspace_agents, websocket
from app.api.exception_handlers import register_exception_handlers
from app.api.middleware import (
    RequestIDMiddleware,
    LoggingMiddleware,
    ErrorHandlingMiddleware,
)
from app.core.config import settings
from app.core.database import init_db, close_db
from app.core.logging_config import get_logger
from app.services.mcp_gateway import init_gateway, close_gateway

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events"""
    # Startup: database schema and the shared MCP HTTP client
    await init_db()
    init_gateway()
    logger.info(
        "application_started",
        environment=settings.ENVIRONMENT,
        mcp_server_url=settings.MCP_SERVER_URL,
    )
    yield
    # Shutdown
    await close_gateway()
    await close_db()
    logger.info("application_stopped")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan
)

register_exception_handlers(app)

# Add middleware in correct order (LIFO - last added is executed first)
# Order: CORS -> Error Handler -> Request ID -> Logging

# 1. Logging Middleware (innermost)
app.add_middleware(LoggingMiddleware)

# 2. Request ID Middleware (must wrap logging)
app.add_middleware(RequestIDMiddleware)

# 3. Error Handling Middleware (catches anything the handlers let through)
app.add_middleware(ErrorHandlingMiddleware)

# 4. CORS Middleware (outermost - handles preflight requests first)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)

# Include routers
app.include_router(health.router)
app.include_router(tools.router, prefix="/api/v1")
app.include_router(usage.router, prefix="/api/v1")
app.include_router(agents.router, prefix="/api/v1")
app.include_router(payments.router, prefix="/api/v1")
app.include_router(workspace_agents.router, prefix="/api/v1")
app.include_router(websocket.router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": settings.APP_NAME, "version": settings.APP_VERSION}
