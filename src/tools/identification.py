"""
Identification and Reconciliation Engine (IRE) tools.

CIs submitted through IRE are matched against existing records by the
instance's identification rules instead of being inserted blindly, so
repeated imports from the same data source do not create duplicates.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from servicenow_api.client import ServiceNowClient
from utils.validation import RecordData

logger = logging.getLogger(__name__)

MAX_IRE_BATCH = 100
CI_CLASS_PATTERN = r"^cmdb_ci[a-zA-Z0-9_]*$"

OPERATION_MESSAGES = {
    "created": "New CI created successfully via IRE",
    "updated": "Existing CI updated successfully via IRE",
    "identified": "Existing CI identified, no changes needed",
    "skipped": "CI skipped - validation failed or no changes detected",
    "error": "Error occurred during IRE processing",
}
STAT_BUCKETS = ("created", "updated", "identified", "skipped")


class IreRelation(BaseModel):
    type: str = Field(..., min_length=1, description="Relationship type")
    target: str = Field(..., min_length=1, description="Target CI sys_id")
    properties: Optional[Dict[str, Any]] = Field(None, description="Additional relationship properties")


class IreItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    class_name: str = Field(
        ...,
        alias="className",
        pattern=CI_CLASS_PATTERN,
        description='CI class name (must start with "cmdb_ci")',
    )
    values: RecordData = Field(..., description="CI attributes as key-value pairs")
    internal_id: Optional[str] = Field(None, description="Unique identifier from the source system")
    relations: Optional[List[IreRelation]] = Field(None, description="CI relationships")
    reference_items: Optional[List[Any]] = Field(None, alias="referenceItems", description="Reference field data")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class IreCreateOrUpdateCiParams(BaseModel):
    data_source: str = Field(..., min_length=1, description="Discovery source name (must be configured in ServiceNow)")
    class_name: str = Field(
        ...,
        pattern=CI_CLASS_PATTERN,
        description='CI class name (must start with "cmdb_ci", e.g., "cmdb_ci_server")',
    )
    values: RecordData = Field(
        ..., description='CI attributes (e.g., {"name": "server-01", "ip_address": "10.0.1.50"})'
    )
    internal_id: Optional[str] = Field(None, description="Unique identifier from the source system")
    relations: Optional[List[IreRelation]] = Field(None, description="CI relationships")
    reference_items: Optional[List[Any]] = Field(None, description="Reference field data (advanced)")


class IreBatchCreateOrUpdateCisParams(BaseModel):
    data_source: str = Field(..., min_length=1, description="Discovery source name (must be configured in ServiceNow)")
    items: List[IreItem] = Field(
        ...,
        min_length=1,
        max_length=MAX_IRE_BATCH,
        description=f"CI definitions to create or update (1-{MAX_IRE_BATCH} items)",
    )


class IreListDataSourcesParams(BaseModel):
    active_only: bool = Field(True, description="Show only active data sources")


def ire_results(response: Any) -> List[Dict[str, Any]]:
    """Per-item results of an IRE call; the API answers with a list or {"items": [...]}."""
    if isinstance(response, list):
        return response
    if isinstance(response, dict):
        return response.get("items") or []
    return []


def operation_message(operation: Optional[str]) -> str:
    return OPERATION_MESSAGES.get(operation or "", f"IRE operation completed: {operation}")


async def ire_create_or_update_ci(client: ServiceNowClient, params: IreCreateOrUpdateCiParams) -> Dict[str, Any]:
    """Create or update one CI through IRE."""
    item = IreItem(
        class_name=params.class_name,
        values=params.values,
        internal_id=params.internal_id,
        relations=params.relations,
        reference_items=params.reference_items,
    )
    logger.info("IRE create/update of %s from %s", params.class_name, params.data_source)
    results = ire_results(await client.identify_reconcile(params.data_source, [item.to_payload()]))
    if not results:
        return {"success": False, "error": "No result returned from IRE API"}

    result = results[0]
    operation = result.get("operation")
    return {
        "success": operation != "error",
        "operation": operation,
        "sys_id": result.get("sys_id"),
        "ci_identifier": result.get("ci_identifier"),
        "status": result.get("status"),
        "error": result.get("error"),
        "message": operation_message(operation),
    }


async def ire_batch_create_or_update_cis(
    client: ServiceNowClient, params: IreBatchCreateOrUpdateCisParams
) -> Dict[str, Any]:
    """Create or update up to 100 CIs in a single IRE call."""
    payload = [item.to_payload() for item in params.items]
    logger.info("IRE batch of %d items from %s", len(payload), params.data_source)
    results = ire_results(await client.identify_reconcile(params.data_source, payload))

    stats = {"total": len(payload), "created": 0, "updated": 0, "identified": 0, "skipped": 0, "failed": 0}
    processed: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []

    for index, result in enumerate(results):
        operation = result.get("operation")
        if operation == "error":
            stats["failed"] += 1
            errors.append(
                {
                    "index": index,
                    "error": result.get("error") or result.get("status"),
                    "item": payload[index] if index < len(payload) else None,
                }
            )
            continue
        if operation not in STAT_BUCKETS:
            logger.warning("Unrecognized IRE operation %r for item %d", operation, index)
            continue
        stats[operation] += 1
        processed.append(
            {
                "index": index,
                "operation": operation,
                "sys_id": result.get("sys_id"),
                "ci_identifier": result.get("ci_identifier"),
                "status": result.get("status"),
            }
        )

    return {
        "success": stats["failed"] == 0,
        **stats,
        "results": processed,
        "errors": errors,
        "summary": (
            f"Processed {stats['total']} CIs: {stats['created']} created, {stats['updated']} updated, "
            f"{stats['identified']} identified, {stats['skipped']} skipped, {stats['failed']} failed"
        ),
    }


async def ire_list_data_sources(client: ServiceNowClient, params: IreListDataSourcesParams) -> Dict[str, Any]:
    """List the discovery_source choices IRE accepts as a data source."""
    query = "name=cmdb_ci^element=discovery_source"
    if params.active_only:
        query += "^inactive=false"
    choices = await client.query(
        "sys_choice",
        {"sysparm_query": query, "sysparm_fields": "value,label,inactive,element", "sysparm_limit": 1000},
    )
    sources = [
        {
            "name": choice.get("value"),
            "label": choice.get("label"),
            "active": str(choice.get("inactive", "false")).lower() != "true",
            "type": choice.get("element"),
        }
        for choice in choices
    ]
    return {"success": True, "count": len(sources), "sources": sources}


TOOL_NAME = "Identification and Reconciliation"

OPERATIONS = {
    "ire_create_or_update_ci": {
        "handler": ire_create_or_update_ci,
        "description": "Create or update a Configuration Item using ServiceNow's Identification and Reconciliation Engine (IRE), which detects duplicates and reconciles with existing data. The data source must exist; use ire_list_data_sources to see available sources.",
    },
    "ire_batch_create_or_update_cis": {
        "handler": ire_batch_create_or_update_cis,
        "description": "Batch create or update up to 100 Configuration Items through IRE in a single API call. Returns per-CI status (created/updated/identified/skipped/failed).",
    },
    "ire_list_data_sources": {
        "handler": ire_list_data_sources,
        "description": "List available discovery data sources for use with IRE operations. Data sources must be configured in ServiceNow before using IRE tools.",
    },
}
