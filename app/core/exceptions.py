"""Custom exceptions for the Agent Dashboard backend"""

from typing import List, Optional, Dict, Any
from datetime import datetime


class GatewayError(Exception):
    """
    Raised when a call to the remote MCP tool server fails at the transport level.

    This exception is raised when:
    - The remote server answers with a non-2xx HTTP status
    - The connection fails or times out
    - The response body is not JSON

    The raw status code and body text are kept so the failure can be recorded
    verbatim in the usage ledger.
    """

    def __init__(
        self,
        message: str,
        tool_name: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize GatewayError.

        Args:
            message: Human-readable error message
            tool_name: Remote tool that was being called
            status_code: HTTP status returned by the remote server, if any
            body: Raw response body text, if any
            details: Additional error details for debugging
        """
        self.message = message
        self.tool_name = tool_name
        self.status_code = status_code
        self.body = body
        self.details = details or {}
        self.timestamp = datetime.utcnow()

        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error_type": "gateway_error",
            "message": self.message,
            "tool_name": self.tool_name,
            "status_code": self.status_code,
            "body": self.body,
            "details": self.details,
            "timestamp": self.timestamp.isoformat()
        }

    def get_api_response(self) -> Dict[str, Any]:
        """
        Get API-friendly error response.

        Returns:
            Dictionary suitable for HTTP error responses
        """
        return {"error": self.message}


class ToolArgumentsError(ValueError):
    """
    Raised when a tool invocation is missing required arguments.

    Raised before the remote server is contacted, so no usage is recorded.
    """

    def __init__(
        self,
        tool_name: str,
        missing_fields: List[str],
        context: Optional[str] = None
    ):
        self.tool_name = tool_name
        self.missing_fields = missing_fields
        self.context = context
        self.timestamp = datetime.utcnow()

        message = f"Missing required arguments for {tool_name}: {', '.join(missing_fields)}"
        if context:
            message = f"{context}: {message}"

        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": "tool_arguments_error",
            "message": str(self),
            "tool_name": self.tool_name,
            "missing_fields": self.missing_fields,
            "context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

    def get_api_response(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "toolName": self.tool_name,
            "missingFields": self.missing_fields
        }


class AgentNotFoundError(LookupError):
    """Raised when an agent does not exist or is not visible to the caller."""

    def __init__(self, agent_id: int, user_id: Optional[str] = None):
        self.agent_id = agent_id
        self.user_id = user_id
        self.timestamp = datetime.utcnow()
        super().__init__(f"Agent {agent_id} not found")

    def get_api_response(self) -> Dict[str, Any]:
        return {"error": str(self), "agentId": self.agent_id}


class AgentAccessError(PermissionError):
    """
    Raised when a user tries to modify an agent they do not own.

    Only the owner may update or delete an agent, or grant and revoke access.
    """

    def __init__(self, agent_id: int, user_id: str, action: str):
        self.agent_id = agent_id
        self.user_id = user_id
        self.action = action
        self.timestamp = datetime.utcnow()
        super().__init__(f"User {user_id} may not {action} agent {agent_id}")

    def get_api_response(self) -> Dict[str, Any]:
        return {"error": str(self), "agentId": self.agent_id, "action": self.action}
