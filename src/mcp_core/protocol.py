"""
Tool and resource descriptors shared by the dispatcher and the MCP wiring.
"""
from typing import Any, Awaitable, Callable, Dict, Type

from pydantic import BaseModel, ConfigDict

ToolHandler = Callable[[Any, Any], Awaitable[Any]]


class ToolDescriptor(BaseModel):
    """A registered tool: name, input contract and execution function."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str
    params_model: Type[BaseModel]
    handler: ToolHandler
    input_schema: Dict[str, Any]


class ResourceDescriptor(BaseModel):
    """A read-only JSON document exposed under a URI."""

    model_config = ConfigDict(frozen=True)

    uri: str
    name: str
    description: str
    mime_type: str = "application/json"
