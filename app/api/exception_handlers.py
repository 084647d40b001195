"""Custom exception handlers for FastAPI application"""

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Union

from app.core.exceptions import (
    GatewayError,
    ToolArgumentsError,
    AgentNotFoundError,
    AgentAccessError,
)
from app.core.logging_config import get_logger


logger = get_logger(__name__)


async def gateway_exception_handler(
    request: Request,
    exc: GatewayError
) -> JSONResponse:
    """
    Handle GatewayError exceptions.

    The failure has already been recorded in the usage ledger by the time it
    reaches here; the client only sees the raw failure text.
    """
    logger.error(
        "gateway_error_handled",
        request_path=request.url.path,
        request_method=request.method,
        **exc.to_dict()
    )

    return JSONResponse(status_code=500, content=exc.get_api_response())


async def tool_arguments_exception_handler(
    request: Request,
    exc: ToolArgumentsError
) -> JSONResponse:
    """Handle ToolArgumentsError: the call was rejected before reaching the server"""
    logger.warning(
        "tool_arguments_error_handled",
        request_path=request.url.path,
        request_method=request.method,
        tool_name=exc.tool_name,
        missing_fields=exc.missing_fields,
    )

    return JSONResponse(status_code=400, content=exc.get_api_response())


async def agent_not_found_exception_handler(
    request: Request,
    exc: AgentNotFoundError
) -> JSONResponse:
    logger.info(
        "agent_not_found_handled",
        request_path=request.url.path,
        agent_id=exc.agent_id,
        user_id=exc.user_id,
    )

    return JSONResponse(status_code=404, content=exc.get_api_response())


async def agent_access_exception_handler(
    request: Request,
    exc: AgentAccessError
) -> JSONResponse:
    logger.warning(
        "agent_access_denied_handled",
        request_path=request.url.path,
        agent_id=exc.agent_id,
        user_id=exc.user_id,
        action=exc.action,
    )

    return JSONResponse(status_code=403, content=exc.get_api_response())


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError]
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Provides detailed error information for validation failures.
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(
        "validation_error_handled",
        request_path=request.url.path,
        request_method=request.method,
        errors=errors,
    )

    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "details": {"errors": errors}
        }
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """
    Handle HTTP exceptions.

    Provides consistent error response format for HTTP exceptions.
    """
    logger.warning(
        "http_exception_handled",
        request_path=request.url.path,
        request_method=request.method,
        status_code=exc.status_code,
        detail=str(exc.detail),
    )

    headers = getattr(exc, "headers", None)

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=headers
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs detailed error information and returns the message as ``error``.
    """
    logger.error(
        "unexpected_exception_handled",
        request_path=request.url.path,
        request_method=request.method,
        error_type=type(exc).__name__,
        error_message=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={"error": str(exc) or "Internal server error"}
    )


def register_exception_handlers(app):
    """
    Register all custom exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(GatewayError, gateway_exception_handler)
    app.add_exception_handler(ToolArgumentsError, tool_arguments_exception_handler)
    app.add_exception_handler(AgentNotFoundError, agent_not_found_exception_handler)
    app.add_exception_handler(AgentAccessError, agent_access_exception_handler)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Fallback
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info(
        "exception_handlers_registered",
        handlers=[
            "GatewayError",
            "ToolArgumentsError",
            "AgentNotFoundError",
            "AgentAccessError",
            "RequestValidationError",
            "ValidationError",
            "HTTPException",
            "StarletteHTTPException",
            "Exception"
        ]
    )
