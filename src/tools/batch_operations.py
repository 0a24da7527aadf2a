"""
Batch tools: create, update or query many records in one call.

Operations run concurrently; each one succeeds or fails on its own and is
reported under its position in the submitted list.
"""
import logging
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from servicenow_api.client import ServiceNowClient
from tools.table_api import build_query_params
from utils.batch import BatchAction, BatchOperation, execute_batch
from utils.validation import FieldList, Limit, Offset, QueryString, RecordData, SysId, TableName

logger = logging.getLogger(__name__)

MAX_WRITE_BATCH = 100
MAX_QUERY_BATCH = 20


class UpdateOperation(BaseModel):
    sys_id: SysId
    data: RecordData


class QueryOperation(BaseModel):
    table: TableName
    query: QueryString = None
    fields: FieldList = None
    limit: Limit
    offset: Offset


class BatchCreateRecordsParams(BaseModel):
    table: TableName
    records: List[RecordData] = Field(
        ...,
        min_length=1,
        max_length=MAX_WRITE_BATCH,
        description=f"Record data objects to create. Maximum {MAX_WRITE_BATCH} records per batch.",
    )


class BatchUpdateRecordsParams(BaseModel):
    table: TableName
    updates: List[UpdateOperation] = Field(
        ...,
        min_length=1,
        max_length=MAX_WRITE_BATCH,
        description=f"Updates, each a sys_id and the data to set. Maximum {MAX_WRITE_BATCH} updates per batch.",
    )


class BatchQueryTablesParams(BaseModel):
    queries: List[QueryOperation] = Field(
        ...,
        min_length=1,
        max_length=MAX_QUERY_BATCH,
        description=f"Query operations, one table each. Maximum {MAX_QUERY_BATCH} queries per batch.",
    )


async def batch_create_records(client: ServiceNowClient, params: BatchCreateRecordsParams) -> Dict[str, Any]:
    """Create many records in one table concurrently."""
    operations = [
        BatchOperation(index=i, action=BatchAction.CREATE, table=params.table, payload=record)
        for i, record in enumerate(params.records)
    ]
    summary = (await execute_batch(client, operations)).to_dict()
    return {"table": params.table, "created": summary["succeeded"], **summary}


async def batch_update_records(client: ServiceNowClient, params: BatchUpdateRecordsParams) -> Dict[str, Any]:
    """Update many records in one table concurrently."""
    operations = [
        BatchOperation(
            index=i,
            action=BatchAction.UPDATE,
            table=params.table,
            payload=update.data,
            sys_id=update.sys_id,
        )
        for i, update in enumerate(params.updates)
    ]
    summary = (await execute_batch(client, operations)).to_dict()
    return {"table": params.table, "updated": summary["succeeded"], **summary}


async def batch_query_tables(client: ServiceNowClient, params: BatchQueryTablesParams) -> Dict[str, Any]:
    """Query several tables concurrently."""
    operations = [
        BatchOperation(
            index=i,
            action=BatchAction.QUERY,
            table=q.table,
            payload=build_query_params(q.query, q.fields, q.limit, q.offset),
        )
        for i, q in enumerate(params.queries)
    ]
    return (await execute_batch(client, operations)).to_dict()


TOOL_NAME = "Batch Operations"

OPERATIONS = {
    "batch_create_records": {
        "handler": batch_create_records,
        "description": "Create multiple records in a ServiceNow table in a single batch operation. Records are created in parallel for better performance. Returns results for all records including any failures.",
    },
    "batch_update_records": {
        "handler": batch_update_records,
        "description": "Update multiple records in a ServiceNow table in a single batch operation. Records are updated in parallel for better performance. Returns results for all records including any failures.",
    },
    "batch_query_tables": {
        "handler": batch_query_tables,
        "description": "Query multiple ServiceNow tables in a single batch operation. Queries are executed in parallel for better performance. Useful for gathering related data from different tables simultaneously.",
    },
}
