"""
Server-side script execution.

Requires the admin or script_debugger role on the ServiceNow user. Scripts
run with that user's privileges and can modify any data.
"""
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from servicenow_api.client import ServiceNowClient
from utils.error_handler import ServiceNowStatusError

logger = logging.getLogger(__name__)

MAX_SCRIPT_LENGTH = 100000
PREVIEW_LENGTH = 200

PERMISSION_MESSAGE = (
    "Script execution failed: User lacks required permissions. "
    'The ServiceNow user must have the "admin" or "script_debugger" role to execute scripts.'
)


class ExecuteScriptParams(BaseModel):
    script: str = Field(
        ...,
        min_length=1,
        max_length=MAX_SCRIPT_LENGTH,
        description="Server-side JavaScript to execute (GlideRecord, GlideSystem and Script Includes are available)",
    )
    description: Optional[str] = Field(None, description="What this script does (for logging purposes)")


def script_preview(script: str) -> str:
    if len(script) > PREVIEW_LENGTH:
        return script[:PREVIEW_LENGTH] + "..."
    return script


async def execute_script(client: ServiceNowClient, params: ExecuteScriptParams) -> Dict[str, Any]:
    logger.info("Executing background script")
    if params.description:
        logger.info("Script description: %s", params.description)
    logger.debug("Script preview: %s", script_preview(params.script))

    try:
        result = await client.execute_script(params.script)
    except ServiceNowStatusError as e:
        if e.status_code == 403:
            raise ServiceNowStatusError(PERMISSION_MESSAGE, status_code=403, details=e.details) from e
        raise

    return {
        "success": True,
        "result": result,
        "script_length": len(params.script),
        "description": params.description,
    }


TOOL_NAME = "Scripting"

OPERATIONS = {
    "execute_script": {
        "handler": execute_script,
        "description": "Execute server-side JavaScript on the ServiceNow instance for complex operations, data analysis, calling Script Includes, or administrative tasks. SECURITY WARNING: requires the admin or script_debugger role; scripts can modify data.",
    },
}
