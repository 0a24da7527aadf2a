"""Response formatting utilities."""
import json
from typing import Any

from mcp import types

ERROR_MARKER = "Error: "


def format_success(data: Any) -> types.CallToolResult:
    """
    Wrap a tool result in the MCP content envelope.

    Args:
        data: Result object, serialized as 2-space indented JSON; strings pass through

    Returns:
        Tool result with a single text payload
    """
    text = data if isinstance(data, str) else json.dumps(data, indent=2, default=str)
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=False,
    )


def format_error(message: Any) -> types.CallToolResult:
    """
    Wrap an error in the MCP content envelope with the error flag set.

    Args:
        message: Human-readable error message (or exception)

    Returns:
        Tool result whose single text payload starts with "Error: "
    """
    text = " ".join(str(message).split())
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=f"{ERROR_MARKER}{text}")],
        isError=True,
    )
