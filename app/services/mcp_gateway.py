"""
MCP Gateway - the single outbound HTTP call to the remote tool server.

The gateway sends ``{"name": tool, "arguments": {...}}`` (or the legacy
``{"tool": ..., "arguments": ...}`` shape) and returns the JSON body verbatim.
It does not interpret results; that is the outcome classifier's job.

Credentials travel in-band as ``apiKey`` and ``paymentMethod`` inside a copy
of the arguments. They are passed per call, so concurrent requests with
different payment methods never share mutable state.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import GatewayError
from app.core.logging_config import get_logger

logger = get_logger(__name__)

# Truncation limit for error bodies kept in logs and the ledger
MAX_ERROR_BODY_CHARS = 2000


@dataclass(frozen=True)
class GatewayCredentials:
    """Credential and payment method for one call"""
    api_key: Optional[str]
    payment_method: str = "apikey"

    def __repr__(self) -> str:
        return f"GatewayCredentials(api_key={'***' if self.api_key else None}, payment_method={self.payment_method!r})"


class MCPGateway:
    """
    HTTP client for the remote MCP server.

    One ``httpx.AsyncClient`` is shared across requests; it is created at
    startup and closed on shutdown.
    """

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        request_shape: str = "name",
        timeout: float = 30.0,
    ):
        if request_shape not in ("name", "tool"):
            raise ValueError(f"Unknown request shape: {request_shape}")

        self.base_url = base_url
        self.request_shape = request_shape
        self.timeout = timeout
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    def build_payload(
        self,
        tool_name: str,
        arguments: Dict[str, Any],
        credentials: GatewayCredentials,
    ) -> Dict[str, Any]:
        """Request body for a call; the caller's argument dict is left untouched"""
        call_arguments = dict(arguments)
        if credentials.api_key:
            call_arguments["apiKey"] = credentials.api_key
        call_arguments["paymentMethod"] = credentials.payment_method
        return {self.request_shape: tool_name, "arguments": call_arguments}

    async def call_tool(
        self,
        tool_name: str,
        arguments: Dict[str, Any],
        credentials: GatewayCredentials,
    ) -> Any:
        """
        Invoke a remote tool.

        Args:
            tool_name: Name of the remote tool
            arguments: Tool arguments, without credentials
            credentials: Credential and payment method for this call

        Returns:
            The decoded JSON body of a 2xx response

        Raises:
            ValueError: If tool_name is empty
            GatewayError: On transport failure, non-2xx status or non-JSON body
        """
        if not tool_name:
            raise ValueError("tool_name must not be empty")

        payload = self.build_payload(tool_name, arguments, credentials)

        logger.debug(
            "gateway_call_started",
            tool_name=tool_name,
            url=self.base_url,
            payment_method=credentials.payment_method,
        )

        try:
            response = await self.client.post(self.base_url, json=payload, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise GatewayError(
                f"MCP server call timed out after {self.timeout}s",
                tool_name=tool_name,
                details={"exception": type(e).__name__},
            ) from e
        except httpx.HTTPError as e:
            raise GatewayError(
                f"MCP server request failed: {e}",
                tool_name=tool_name,
                details={"exception": type(e).__name__},
            ) from e

        body_text = response.text
        if not response.is_success:
            raise GatewayError(
                f"MCP server error: {response.status_code} - {body_text[:MAX_ERROR_BODY_CHARS]}",
                tool_name=tool_name,
                status_code=response.status_code,
                body=body_text[:MAX_ERROR_BODY_CHARS],
            )

        try:
            result = response.json()
        except ValueError as e:
            raise GatewayError(
                "MCP server returned a non-JSON response",
                tool_name=tool_name,
                status_code=response.status_code,
                body=body_text[:MAX_ERROR_BODY_CHARS],
            ) from e

        logger.debug(
            "gateway_call_completed",
            tool_name=tool_name,
            status_code=response.status_code,
        )
        return result

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()


# Global gateway, created in the application lifespan
gateway: Optional[MCPGateway] = None


def init_gateway(client: Optional[httpx.AsyncClient] = None) -> MCPGateway:
    """Create the shared gateway from settings"""
    global gateway
    gateway = MCPGateway(
        base_url=settings.MCP_SERVER_URL,
        client=client,
        request_shape=settings.MCP_REQUEST_SHAPE,
        timeout=settings.MCP_TIMEOUT_SECONDS,
    )
    logger.info(
        "mcp_gateway_initialized",
        url=settings.MCP_SERVER_URL,
        request_shape=settings.MCP_REQUEST_SHAPE,
        timeout_seconds=settings.MCP_TIMEOUT_SECONDS,
    )
    return gateway


async def close_gateway() -> None:
    global gateway
    if gateway is not None:
        await gateway.close()
        gateway = None


def get_gateway() -> MCPGateway:
    """Return the shared gateway, creating it lazily outside the app lifespan"""
    if gateway is None:
        return init_gateway()
    return gateway
