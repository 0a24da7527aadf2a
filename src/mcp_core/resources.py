"""
Read-only MCP resources: instance metadata and a catalogue of common tables.
"""
import json
from typing import Any, Callable, Dict, List

from config import ServerConfig
from mcp_core.protocol import ResourceDescriptor

INSTANCE_INFO_URI = "servicenow://instance/info"
COMMON_TABLES_URI = "servicenow://tables/common"

RESOURCES: List[ResourceDescriptor] = [
    ResourceDescriptor(
        uri=INSTANCE_INFO_URI,
        name="Instance Information",
        description="ServiceNow instance metadata and connection details",
    ),
    ResourceDescriptor(
        uri=COMMON_TABLES_URI,
        name="Common Tables",
        description="List of frequently used ServiceNow tables with their primary fields",
    ),
]

COMMON_TABLES: List[Dict[str, Any]] = [
    {
        "name": "incident",
        "label": "Incident",
        "description": "IT incidents and service disruptions",
        "primaryFields": ["number", "short_description", "priority", "state", "assigned_to", "assignment_group"],
    },
    {
        "name": "sys_user",
        "label": "User",
        "description": "System users",
        "primaryFields": ["user_name", "first_name", "last_name", "email", "active", "title", "department"],
    },
    {
        "name": "sys_user_group",
        "label": "Group",
        "description": "User groups and assignment groups",
        "primaryFields": ["name", "description", "type", "active", "manager"],
    },
    {
        "name": "change_request",
        "label": "Change Request",
        "description": "Change management records",
        "primaryFields": ["number", "short_description", "priority", "state", "type", "risk", "impact"],
    },
    {
        "name": "problem",
        "label": "Problem",
        "description": "Problem management records",
        "primaryFields": ["number", "short_description", "priority", "state", "assigned_to"],
    },
    {
        "name": "cmdb_ci",
        "label": "Configuration Item",
        "description": "Configuration items from the CMDB",
        "primaryFields": ["name", "asset_tag", "serial_number", "sys_class_name", "operational_status"],
    },
    {
        "name": "kb_knowledge",
        "label": "Knowledge Article",
        "description": "Knowledge base articles",
        "primaryFields": ["number", "short_description", "text", "workflow_state", "author"],
    },
    {
        "name": "task",
        "label": "Task",
        "description": "Generic task records (parent of incident, change, etc.)",
        "primaryFields": ["number", "short_description", "priority", "state", "assigned_to"],
    },
    {
        "name": "sc_request",
        "label": "Service Catalog Request",
        "description": "Service catalog requests",
        "primaryFields": ["number", "short_description", "state", "requested_for", "request_state"],
    },
    {
        "name": "sc_req_item",
        "label": "Requested Item",
        "description": "Individual items from service catalog requests",
        "primaryFields": ["number", "short_description", "state", "request"],
    },
]


def get_instance_info(config: ServerConfig) -> str:
    return json.dumps(
        {
            "name": config.name,
            "instance": config.instance_url,
            "baseUrl": config.api_url,
            "apiVersion": "now",
            "description": "ServiceNow instance connected to this MCP server",
        },
        indent=2,
    )


def get_common_tables(config: ServerConfig) -> str:
    return json.dumps(
        {
            "description": "Frequently used ServiceNow tables",
            "count": len(COMMON_TABLES),
            "tables": COMMON_TABLES,
        },
        indent=2,
    )


READERS: Dict[str, Callable[[ServerConfig], str]] = {
    INSTANCE_INFO_URI: get_instance_info,
    COMMON_TABLES_URI: get_common_tables,
}


def read_resource(config: ServerConfig, uri: str) -> str:
    """Render the resource at ``uri`` as JSON text.

    Raises:
        ValueError: No resource is registered under ``uri``.
    """
    reader = READERS.get(str(uri))
    if reader is None:
        raise ValueError(f"Unknown resource: {uri}")
    return reader(config)
