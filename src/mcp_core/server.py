"""
ServiceNow MCP Server implementation for handling requests and tools.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

import mcp.server.stdio
from mcp import types
from mcp.server import NotificationOptions, Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.models import InitializationOptions

from config import ServerConfig
from mcp_core import resources
from mcp_core.protocol import ToolDescriptor
from mcp_core.schema import param_model_from_func, tool_schema_from_model
from servicenow_api.client import ServiceNowClient
from tools import TOOL_MODULES
from utils.error_handler import ServiceNowError, ToolValidationError, UnknownToolError
from utils.response_formatter import format_error, format_success
from utils.validation import validate_params

logger = logging.getLogger(__name__)

SERVER_VERSION = "1.0.0"


def build_registry(modules: Iterable[Any]) -> Dict[str, ToolDescriptor]:
    """
    Collect the ``OPERATIONS`` tables of the tool modules into descriptors.

    Args:
        modules: Tool modules, each exposing ``OPERATIONS``

    Returns:
        Mapping of tool name to descriptor

    Raises:
        ValueError: If a tool has no params model or a name is registered twice.
    """
    registry: Dict[str, ToolDescriptor] = {}
    for module in modules:
        operations = getattr(module, "OPERATIONS", {})
        logger.debug("Registering %d tools from %s", len(operations), getattr(module, "TOOL_NAME", module.__name__))
        for name, meta in operations.items():
            if name in registry:
                raise ValueError(f"Duplicate tool name: {name}")
            handler = meta["handler"]
            model_cls = param_model_from_func(handler)
            if model_cls is None:
                raise ValueError(f"Tool {name} has no params model")
            registry[name] = ToolDescriptor(
                name=name,
                description=meta["description"],
                params_model=model_cls,
                handler=handler,
                input_schema=tool_schema_from_model(model_cls),
            )
    return registry


class ServiceNowMCPServer:
    """
    ServiceNow MCP Server implementation.

    Validates tool arguments, dispatches to the tool handler and turns every
    outcome into an MCP tool result. The tool table is built once and never
    changes afterwards.
    """

    def __init__(
        self,
        config: ServerConfig,
        client: Optional[ServiceNowClient] = None,
        modules: Optional[Iterable[Any]] = None,
    ):
        """
        Initialize the ServiceNow MCP server.

        Args:
            config: Server configuration.
            client: ServiceNow client; one is created from config if omitted.
            modules: Tool modules to register; defaults to all of them.
        """
        self.config = config
        self.client = client or ServiceNowClient(config)
        self.tools = build_registry(TOOL_MODULES if modules is None else modules)
        logger.info("Loaded %d tools", len(self.tools))

    def list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
            for tool in self.tools.values()
        ]

    def get_tool(self, name: str) -> ToolDescriptor:
        tool = self.tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    async def call_tool(self, name: str, arguments: Optional[Mapping[str, Any]]) -> types.CallToolResult:
        """
        Run one tool call through validation, the handler and formatting.

        Args:
            name: Tool name
            arguments: Raw tool arguments

        Returns:
            Tool result; errors are reported with ``isError`` set, never raised.
        """
        logger.info("Tool call: %s", name)
        logger.debug("Arguments for %s: %s", name, arguments)
        try:
            tool = self.get_tool(name)
            params = validate_params(name, tool.params_model, arguments)
            result = await tool.handler(self.client, params)
        except (UnknownToolError, ToolValidationError) as e:
            logger.warning("%s", e)
            return format_error(e)
        except ServiceNowError as e:
            logger.error("ServiceNow error in %s: %s", name, e.message)
            return format_error(e.message)
        except Exception as e:
            logger.exception("Error handling tool %s", name)
            return format_error(f"Internal server error: {str(e)}")
        return format_success(result)

    def list_resources(self) -> List[types.Resource]:
        return [
            types.Resource(
                uri=resource.uri,
                name=resource.name,
                description=resource.description,
                mimeType=resource.mime_type,
            )
            for resource in resources.RESOURCES
        ]

    def read_resource(self, uri: Any) -> str:
        return resources.read_resource(self.config, str(uri))

    def build_server(self) -> Server:
        """Wire this dispatcher into an MCP low-level server."""
        server = Server(self.config.name)

        @server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            return self.list_tools()

        @server.list_resources()
        async def handle_list_resources() -> List[types.Resource]:
            return self.list_resources()

        @server.read_resource()
        async def handle_read_resource(uri: Any) -> List[ReadResourceContents]:
            return [ReadResourceContents(content=self.read_resource(uri), mime_type="application/json")]

        # Registered directly so argument validation and the error envelope stay here.
        async def handle_call_tool(req: types.CallToolRequest) -> types.ServerResult:
            result = await self.call_tool(req.params.name, req.params.arguments)
            return types.ServerResult(result)

        server.request_handlers[types.CallToolRequest] = handle_call_tool
        return server

    async def run_stdio(self) -> None:
        """Serve MCP over stdin/stdout until the client disconnects."""
        server = self.build_server()
        logger.info("Starting %s MCP server for %s", self.config.name, self.config.instance_url)
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=self.config.name,
                    server_version=SERVER_VERSION,
                    capabilities=server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )

    async def aclose(self) -> None:
        await self.client.aclose()
