"""
Service Desk tools for ServiceNow MCP integration.
Handles incident search and user lookup operations.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from servicenow_api.client import ServiceNowClient
from tools.table_api import build_query_params
from utils.validation import FieldList, Limit, Offset, is_sys_id

logger = logging.getLogger(__name__)


class SearchIncidentsParams(BaseModel):
    """Parameters for searching incidents."""

    status: Optional[str] = Field(None, description='Incident state (e.g., "1" New, "2" In Progress, "6" Resolved, "7" Closed)')
    priority: Optional[str] = Field(None, description='Priority ("1" Critical through "5" Planning)')
    assigned_to: Optional[str] = Field(None, description="Username of the assigned user")
    assignment_group: Optional[str] = Field(None, description="Name of the assignment group")
    search_text: Optional[str] = Field(None, description="Text to search for in short_description or description")
    limit: Limit
    offset: Offset


class GetUserParams(BaseModel):
    """Parameters for getting a specific user."""

    identifier: str = Field(..., min_length=1, description='Username (e.g., "admin") or 32-character sys_id')
    fields: FieldList = None


def build_incident_query(params: SearchIncidentsParams) -> Optional[str]:
    """Build the encoded query for an incident search; None when unfiltered."""
    parts: List[str] = []
    if params.status:
        parts.append(f"state={params.status}")
    if params.priority:
        parts.append(f"priority={params.priority}")
    if params.assigned_to:
        parts.append(f"assigned_to.user_name={params.assigned_to}")
    if params.assignment_group:
        parts.append(f"assignment_group.name={params.assignment_group}")
    if params.search_text:
        parts.append(f"short_descriptionLIKE{params.search_text}^ORdescriptionLIKE{params.search_text}")
    return "^".join(parts) if parts else None


async def search_incidents(client: ServiceNowClient, params: SearchIncidentsParams) -> Dict[str, Any]:
    """
    Search incidents by state, priority, assignment and text.

    Args:
        client: ServiceNow client
        params: Search filters

    Returns:
        Dictionary containing incidents and their count
    """
    logger.info("Searching incidents with params: %s", params)
    qp = build_query_params(build_incident_query(params), None, params.limit, params.offset)
    incidents = await client.query("incident", qp)
    return {
        "success": True,
        "count": len(incidents),
        "incidents": incidents,
    }


async def get_user(client: ServiceNowClient, params: GetUserParams) -> Dict[str, Any]:
    """
    Get a user by sys_id or username.

    Args:
        client: ServiceNow client
        params: User identifier and optional field projection

    Returns:
        The user record, or success=False when no user has that username
    """
    logger.info("Getting user: %s", params.identifier)
    qp = build_query_params(fields=params.fields)

    if is_sys_id(params.identifier):
        user = await client.get("sys_user", params.identifier, qp)
        return {"success": True, "user": user}

    qp["sysparm_limit"] = 1
    qp["sysparm_query"] = f"user_name={params.identifier}"
    users = await client.query("sys_user", qp)
    if not users:
        return {
            "success": False,
            "message": f"No user found with username: {params.identifier}",
        }
    return {"success": True, "user": users[0]}


TOOL_NAME = "Service Desk"

OPERATIONS = {
    "search_incidents": {
        "handler": search_incidents,
        "description": "Search ServiceNow incidents with common filters like status, priority, assignment, and text search. Simplified interface for incident management.",
    },
    "get_user": {
        "handler": get_user,
        "description": "Retrieve ServiceNow user information by username or sys_id. Returns user details from the sys_user table.",
    },
}
