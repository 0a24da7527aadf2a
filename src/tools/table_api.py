"""
Table API tools: generic CRUD against any ServiceNow table.
"""
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from servicenow_api.client import ServiceNowClient
from utils.validation import FieldList, Limit, Offset, QueryString, RecordData, SysId, TableName

logger = logging.getLogger(__name__)

SCHEMA_FIELDS = "element,column_label,internal_type,max_length,mandatory,reference,default_value"


def build_query_params(
    query: Optional[str] = None,
    fields: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> Dict[str, Any]:
    """Translate tool arguments into Table API sysparm_* parameters."""
    qp: Dict[str, Any] = {}
    if limit is not None:
        qp["sysparm_limit"] = limit
    if offset is not None:
        qp["sysparm_offset"] = offset
    if query:
        qp["sysparm_query"] = query
    if fields:
        qp["sysparm_fields"] = fields
    return qp


class QueryTableParams(BaseModel):
    """Parameters for querying a table."""

    table: TableName
    query: QueryString = None
    fields: FieldList = None
    limit: Limit
    offset: Offset


class GetRecordParams(BaseModel):
    """Parameters for getting a single record."""

    table: TableName
    sys_id: SysId
    fields: FieldList = None


class CreateRecordParams(BaseModel):
    """Parameters for creating a record."""

    table: TableName
    data: RecordData = Field(..., description='Record data as key-value pairs (e.g., {"short_description": "Server down", "priority": "1"})')


class UpdateRecordParams(BaseModel):
    """Parameters for updating a record."""

    table: TableName
    sys_id: SysId
    data: RecordData = Field(..., description='Fields to update as key-value pairs (e.g., {"state": "6", "close_notes": "Resolved"})')


class DeleteRecordParams(BaseModel):
    """Parameters for deleting a record."""

    table: TableName
    sys_id: SysId


class GetTableSchemaParams(BaseModel):
    table: TableName


async def query_table(client: ServiceNowClient, params: QueryTableParams) -> Dict[str, Any]:
    """Query a table with filters, pagination and field selection."""
    logger.info("Querying table %s", params.table)
    qp = build_query_params(params.query, params.fields, params.limit, params.offset)
    records = await client.query(params.table, qp)
    return {
        "success": True,
        "table": params.table,
        "count": len(records),
        "records": records,
    }


async def get_record(client: ServiceNowClient, params: GetRecordParams) -> Dict[str, Any]:
    """Get a single record by sys_id."""
    record = await client.get(params.table, params.sys_id, build_query_params(fields=params.fields))
    return {
        "success": True,
        "table": params.table,
        "sys_id": params.sys_id,
        "record": record,
    }


async def create_record(client: ServiceNowClient, params: CreateRecordParams) -> Dict[str, Any]:
    """Create a record and return it with its new sys_id."""
    logger.info("Creating record in %s", params.table)
    record = await client.create(params.table, params.data)
    return {
        "success": True,
        "table": params.table,
        "sys_id": record.get("sys_id"),
        "record": record,
    }


async def update_record(client: ServiceNowClient, params: UpdateRecordParams) -> Dict[str, Any]:
    """Update only the given fields of a record."""
    logger.info("Updating %s/%s", params.table, params.sys_id)
    record = await client.update(params.table, params.sys_id, params.data)
    return {
        "success": True,
        "table": params.table,
        "sys_id": params.sys_id,
        "record": record,
    }


async def delete_record(client: ServiceNowClient, params: DeleteRecordParams) -> Dict[str, Any]:
    """Delete a record. Cannot be undone."""
    logger.warning("Deleting %s/%s", params.table, params.sys_id)
    await client.delete(params.table, params.sys_id)
    return {
        "success": True,
        "table": params.table,
        "sys_id": params.sys_id,
        "message": "Record deleted successfully",
    }


async def get_table_schema(client: ServiceNowClient, params: GetTableSchemaParams) -> Dict[str, Any]:
    """Describe a table's fields from sys_dictionary."""
    entries = await client.query(
        "sys_dictionary",
        {
            "sysparm_query": f"name={params.table}",
            "sysparm_fields": SCHEMA_FIELDS,
            "sysparm_limit": 1000,
        },
    )
    fields = [
        {
            "name": entry.get("element"),
            "label": entry.get("column_label"),
            "type": entry.get("internal_type"),
            "max_length": entry.get("max_length"),
            "mandatory": entry.get("mandatory"),
            "reference": entry.get("reference"),
            "default_value": entry.get("default_value"),
        }
        for entry in entries
    ]
    return {
        "success": True,
        "table": params.table,
        "field_count": len(fields),
        "fields": fields,
    }


TOOL_NAME = "Table API"

OPERATIONS = {
    "query_table": {
        "handler": query_table,
        "description": "Query any ServiceNow table with filters, pagination, and field selection. Returns matching records from the specified table.",
    },
    "get_record": {
        "handler": get_record,
        "description": "Retrieve a single ServiceNow record by its sys_id. Returns the complete record with all requested fields.",
    },
    "create_record": {
        "handler": create_record,
        "description": "Create a new record in any ServiceNow table. Returns the created record including its sys_id.",
    },
    "update_record": {
        "handler": update_record,
        "description": "Update an existing ServiceNow record by its sys_id. Only the fields specified in data will be modified.",
    },
    "delete_record": {
        "handler": delete_record,
        "description": "Delete a ServiceNow record by its sys_id. WARNING: This operation cannot be undone. Use with caution.",
    },
    "get_table_schema": {
        "handler": get_table_schema,
        "description": "Get the structure and available fields of a ServiceNow table. Returns field names, types, labels, and constraints.",
    },
}
