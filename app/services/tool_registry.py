"""
Tool Registry - static description of the arguments each remote tool takes.

The dashboard renders its forms from this table and the orchestrator uses it
to reject calls that are missing required arguments before anything is sent
to the MCP server. Unknown tools have no fields and are forwarded unchecked.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple


@dataclass(frozen=True)
class ToolField:
    """An argument the caller must (or may) supply for a tool"""
    name: str
    type: str  # text, number, email, textarea, select
    label: str
    required: bool = False
    options: Tuple[str, ...] = ()


AGENT_ID = ToolField("agentId", "number", "Agent ID", required=True)
USER_EMAIL = ToolField("userEmail", "email", "User Email", required=True)

TOOL_FIELDS: Dict[str, Tuple[ToolField, ...]] = {
    "create_agent": (
        ToolField("name", "text", "Agent Name", required=True),
        ToolField("description", "text", "Description", required=True),
        ToolField(
            "type", "select", "Agent Type", required=True,
            options=("file-based", "team", "hybrid", "chat-based"),
        ),
        ToolField("instructions", "textarea", "Instructions"),
    ),
    "list_agents": (),
    "get_agent": (AGENT_ID,),
    "update_agent": (
        AGENT_ID,
        ToolField("name", "text", "New Name"),
        ToolField("description", "text", "New Description"),
        ToolField("instructions", "textarea", "New Instructions"),
    ),
    "delete_agent": (AGENT_ID,),
    "add_user_to_agent": (AGENT_ID, USER_EMAIL),
    "remove_user_from_agent": (AGENT_ID, USER_EMAIL),
    "prompt_agent": (
        AGENT_ID,
        ToolField("message", "textarea", "Message", required=True),
        ToolField("model", "select", "Model", options=("gpt-5", "claude", "grok")),
    ),
    "get_usage_report": (
        ToolField("days", "number", "Last X Days", required=True),
    ),
    "get_pricing": (),
}


def list_tools() -> List[str]:
    """Names of all tools with a known argument shape"""
    return list(TOOL_FIELDS)


def get_tool_fields(tool_name: str) -> List[ToolField]:
    """Fields for a tool; an unknown tool has none"""
    return list(TOOL_FIELDS.get(tool_name, ()))


def is_known_tool(tool_name: str) -> bool:
    return tool_name in TOOL_FIELDS


def missing_required_arguments(tool_name: str, arguments: Mapping[str, Any]) -> List[str]:
    """
    Required fields absent from the arguments.

    None and empty strings count as absent. Values are not type-checked; the
    remote server owns argument semantics.
    """
    missing = []
    for tool_field in TOOL_FIELDS.get(tool_name, ()):
        if not tool_field.required:
            continue
        value = arguments.get(tool_field.name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(tool_field.name)
    return missing
