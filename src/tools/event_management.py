"""
Event Management tools: push monitoring events and inspect the event queue.
"""
import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from servicenow_api.client import ServiceNowClient
from tools.table_api import build_query_params
from utils.validation import Limit, Offset, QueryString

logger = logging.getLogger(__name__)

EVENT_FIELDS = "sys_id,source,node,type,resource,severity,state,description,sys_created_on,message_key,ci_identifier"

SEVERITY_BUCKETS = {
    "0": "clear",
    "1": "critical",
    "2": "major",
    "3": "minor",
    "4": "warning",
    "5": "info",
}
STATE_BUCKETS = ("ready", "queued", "processing", "processed", "error")

OPTIONAL_EVENT_FIELDS = (
    "type",
    "resource",
    "message_key",
    "additional_info",
    "ci_identifier",
    "metric_name",
    "metric_value",
)


class CreateEventParams(BaseModel):
    source: str = Field(..., min_length=1, description='Event source system (e.g., "Nagios", "Splunk")')
    node: str = Field(..., min_length=1, description='Source node/host name (e.g., "webserver01.company.com")')
    description: str = Field(..., min_length=1, description="Event description/message")
    type: Optional[str] = Field(None, description='Event type (e.g., "CPU", "Disk", "Memory")')
    resource: Optional[str] = Field(None, description='Affected resource (e.g., "/dev/sda1")')
    severity: Literal["0", "1", "2", "3", "4", "5"] = Field(
        "3", description="0=Clear, 1=Critical, 2=Major, 3=Minor, 4=Warning, 5=Info"
    )
    message_key: Optional[str] = Field(None, description="Unique message key for event correlation")
    additional_info: Optional[str] = Field(None, description="Additional context (JSON string supported)")
    ci_identifier: Optional[str] = Field(None, description="CI identifier to bind the event to a Configuration Item")
    metric_name: Optional[str] = Field(None, description='Metric name (e.g., "cpu_utilization")')
    metric_value: Optional[str] = Field(None, description='Metric value (e.g., "95%")')


class QueryEventsParams(BaseModel):
    source: Optional[str] = Field(None, description="Filter by event source system")
    node: Optional[str] = Field(None, description="Filter by source node/host name")
    severity: Optional[str] = Field(None, description="Filter by severity (0-5)")
    state: Optional[str] = Field(None, description="Filter by processing state (Ready, Queued, Processing, Processed, Error)")
    time_range_hours: Optional[int] = Field(None, ge=1, le=168, strict=True, description="Only events from the last N hours (1-168)")
    custom_query: QueryString = None
    limit: Limit
    offset: Offset


def _field_value(value: Any) -> str:
    # sysparm_display_value=all returns {"value", "display_value"} pairs
    if isinstance(value, dict):
        return str(value.get("value") or value.get("display_value") or "")
    return str(value or "")


def event_statistics(events: List[Dict[str, Any]]) -> Dict[str, Any]:
    by_severity = {bucket: 0 for bucket in SEVERITY_BUCKETS.values()}
    by_state = {bucket: 0 for bucket in STATE_BUCKETS}
    for event in events:
        severity = SEVERITY_BUCKETS.get(_field_value(event.get("severity")))
        if severity:
            by_severity[severity] += 1
        state = _field_value(event.get("state")).lower()
        for bucket in STATE_BUCKETS:
            if bucket in state:
                by_state[bucket] += 1
                break
    return {"total": len(events), "by_severity": by_severity, "by_state": by_state}


async def create_event(client: ServiceNowClient, params: CreateEventParams) -> Dict[str, Any]:
    """Create an event in em_event for Event Management rules to process."""
    event: Dict[str, Any] = {
        "source": params.source,
        "node": params.node,
        "severity": params.severity,
        "description": params.description,
    }
    for name in OPTIONAL_EVENT_FIELDS:
        value = getattr(params, name)
        if value:
            event[name] = value

    logger.info("Creating event from %s on %s (severity %s)", params.source, params.node, params.severity)
    record = await client.create("em_event", event)
    return {
        "success": True,
        "event_sys_id": record.get("sys_id"),
        "event": record,
        "message": "Event created successfully. It will be processed by Event Management rules.",
    }


async def query_events(client: ServiceNowClient, params: QueryEventsParams) -> Dict[str, Any]:
    """Query events, newest first, with severity and state statistics."""
    parts: List[str] = []
    if params.source:
        parts.append(f"source={params.source}")
    if params.node:
        parts.append(f"node={params.node}")
    if params.severity:
        parts.append(f"severity={params.severity}")
    if params.state:
        parts.append(f"state={params.state}")
    if params.time_range_hours:
        parts.append(f"sys_created_on>=javascript:gs.hoursAgo({params.time_range_hours})")
    if params.custom_query:
        parts.append(params.custom_query)
    parts.append("ORDERBYDESCsys_created_on")

    qp = build_query_params("^".join(parts), EVENT_FIELDS, params.limit, params.offset)
    qp["sysparm_display_value"] = "all"
    events = await client.query("em_event", qp)
    return {
        "success": True,
        "count": len(events),
        "statistics": event_statistics(events),
        "events": events,
    }


TOOL_NAME = "Event Management"

OPERATIONS = {
    "create_event": {
        "handler": create_event,
        "description": "Create an event in ServiceNow Event Management for monitoring, alerting, and automated incident creation. Events can trigger alerts and automation workflows.",
    },
    "query_events": {
        "handler": query_events,
        "description": "Query Event Management events with filtering by source, node, severity, and time range. Includes statistics on event distribution.",
    },
}
