"""
Service Mapping tools: business services, their CI links and topology.
"""
import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from servicenow_api.client import ServiceNowClient
from tools.cmdb_reader import query_by_sys_ids, reference_value
from utils.error_handler import ServiceNowError
from utils.validation import SysId

logger = logging.getLogger(__name__)

DEFAULT_RELATIONSHIP_TYPE = "Depends On::Used By"

SERVICE_FIELDS = (
    "sys_id,name,service_classification,busines_criticality,operational_status,"
    "service_owner,support_group,parent,used_for,version"
)
CI_MAP_FIELDS = "sys_id,name,sys_class_name,operational_status,ip_address,fqdn,environment"

CRITICALITY_LABELS = {
    "1": "Mission Critical",
    "2": "High",
    "3": "Medium",
    "4": "Low",
    "5": "Planning",
}

ServiceClassification = Literal["Business Service", "Technical Service", "Service Offering", "Application Service"]
UsedFor = Literal["Production", "Staging", "QA", "Development", "Disaster Recovery"]


class CreateServiceParams(BaseModel):
    name: str = Field(..., min_length=1, description='Service name (e.g., "Email Service")')
    description: Optional[str] = Field(None, description="Service description")
    service_classification: ServiceClassification = Field("Business Service", description="Type of service")
    business_criticality: Literal["1", "2", "3", "4", "5"] = Field(
        "3", description="1=Mission Critical, 2=High, 3=Medium, 4=Low, 5=Planning"
    )
    operational_status: Literal["1", "2", "3", "4", "5", "6"] = Field(
        "1", description="1=Operational, 2=Non-Operational, 3=Repair in Progress, 4=DR Standby, 5=Ready, 6=Retired"
    )
    owned_by: Optional[str] = Field(None, description="Owner (user sys_id)")
    managed_by: Optional[str] = Field(None, description="Managing user (sys_id)")
    parent_service: Optional[str] = Field(None, description="Parent service sys_id")
    service_owner: Optional[str] = Field(None, description="Service owner username or sys_id")
    support_group: Optional[str] = Field(None, description="Support group name")
    used_for: Optional[UsedFor] = Field(None, description="Environment the service is used for")
    version: Optional[str] = Field(None, description="Service version")


class LinkCiToServiceParams(BaseModel):
    service_sys_id: SysId
    ci_sys_id: SysId
    relationship_type: str = Field(
        DEFAULT_RELATIONSHIP_TYPE, min_length=1, description="Relationship type between the service and the CI"
    )


class GetServiceMapParams(BaseModel):
    service_sys_id: SysId
    include_child_services: bool = Field(True, description="Include child services in the map")
    max_depth: int = Field(3, ge=1, le=5, strict=True, description="Maximum relationship depth (1-5)")


async def _lookup_sys_id(client: ServiceNowClient, table: str, query: str, label: str) -> Optional[str]:
    """Best-effort reference lookup; a failed lookup leaves the field unset."""
    try:
        matches = await client.query(table, {"sysparm_query": query, "sysparm_fields": "sys_id", "sysparm_limit": 1})
    except ServiceNowError as e:
        logger.warning("Could not look up %s: %s", label, e)
        return None
    if not matches:
        logger.warning("No match for %s (%s)", label, query)
        return None
    return matches[0].get("sys_id")


async def create_service(client: ServiceNowClient, params: CreateServiceParams) -> Dict[str, Any]:
    """Create a business service in cmdb_ci_service."""
    service: Dict[str, Any] = {
        "name": params.name,
        "service_classification": params.service_classification,
        "busines_criticality": params.business_criticality,
        "operational_status": params.operational_status,
    }
    if params.description:
        service["short_description"] = params.description
    if params.owned_by:
        service["owned_by"] = params.owned_by
    if params.managed_by:
        service["managed_by"] = params.managed_by
    if params.parent_service:
        service["parent"] = params.parent_service
    if params.used_for:
        service["used_for"] = params.used_for
    if params.version:
        service["version"] = params.version

    if params.service_owner:
        owner = await _lookup_sys_id(
            client,
            "sys_user",
            f"user_name={params.service_owner}^ORsys_id={params.service_owner}",
            f"service owner {params.service_owner}",
        )
        if owner:
            service["service_owner"] = owner
    if params.support_group:
        group = await _lookup_sys_id(
            client, "sys_user_group", f"name={params.support_group}", f"support group {params.support_group}"
        )
        if group:
            service["support_group"] = group

    logger.info("Creating service %s", params.name)
    record = await client.create("cmdb_ci_service", service)
    return {
        "success": True,
        "service_sys_id": record.get("sys_id"),
        "service": record,
        "message": "Service created successfully. You can now link CIs to this service.",
    }


async def link_ci_to_service(client: ServiceNowClient, params: LinkCiToServiceParams) -> Dict[str, Any]:
    """Relate a CI to a service, reusing an existing relationship."""
    service = await client.get(
        "cmdb_ci_service",
        params.service_sys_id,
        {"sysparm_fields": "sys_id,name,service_classification,busines_criticality"},
    )
    ci = await client.get(
        "cmdb_ci", params.ci_sys_id, {"sysparm_fields": "sys_id,name,sys_class_name,operational_status"}
    )

    existing = await client.query(
        "cmdb_rel_ci",
        {
            "sysparm_query": f"parent.sys_id={params.service_sys_id}^child.sys_id={params.ci_sys_id}",
            "sysparm_limit": 1,
        },
    )
    if existing:
        return {
            "success": True,
            "message": "Relationship already exists",
            "relationship_sys_id": existing[0].get("sys_id"),
            "relationship": existing[0],
        }

    relationship = await client.create(
        "cmdb_rel_ci",
        {"parent": params.service_sys_id, "child": params.ci_sys_id, "type": params.relationship_type},
    )
    return {
        "success": True,
        "relationship_sys_id": relationship.get("sys_id"),
        "service": {"sys_id": service.get("sys_id"), "name": service.get("name")},
        "ci": {
            "sys_id": ci.get("sys_id"),
            "name": ci.get("name"),
            "class": ci.get("sys_class_name"),
        },
        "relationship": relationship,
        "message": "CI successfully linked to service",
    }


def criticality_label(value: Any) -> str:
    return CRITICALITY_LABELS.get(str(value or ""), "Unknown")


async def get_service_map(client: ServiceNowClient, params: GetServiceMapParams) -> Dict[str, Any]:
    """Topology of a service: related CIs by class, child services and health."""
    service = await client.get("cmdb_ci_service", params.service_sys_id, {"sysparm_fields": SERVICE_FIELDS})

    relationships = await client.query(
        "cmdb_rel_ci",
        {
            "sysparm_query": f"parent.sys_id={params.service_sys_id}",
            "sysparm_fields": "sys_id,child,type",
            "sysparm_limit": 1000,
        },
    )
    ci_ids = [cid for cid in (reference_value(rel.get("child")) for rel in relationships) if cid]
    cis = await query_by_sys_ids(client, "cmdb_ci", ci_ids, CI_MAP_FIELDS)

    child_services: List[Dict[str, Any]] = []
    if params.include_child_services:
        child_services = await client.query(
            "cmdb_ci_service",
            {
                "sysparm_query": f"parent.sys_id={params.service_sys_id}",
                "sysparm_fields": "sys_id,name,service_classification,busines_criticality,operational_status",
                "sysparm_limit": 100,
            },
        )

    cis_by_class: Dict[str, List[Dict[str, Any]]] = {}
    for ci in cis:
        cis_by_class.setdefault(ci.get("sys_class_name") or "unknown", []).append(ci)

    operational = sum(1 for ci in cis if ci.get("operational_status") == "1")
    non_operational = len(cis) - operational
    health_percentage = round(operational / len(cis) * 100) if cis else 100
    criticality = service.get("busines_criticality")

    return {
        "success": True,
        "service": {
            "sys_id": service.get("sys_id"),
            "name": service.get("name"),
            "classification": service.get("service_classification"),
            "criticality": criticality,
            "criticality_label": criticality_label(criticality),
            "operational_status": service.get("operational_status"),
            "used_for": service.get("used_for"),
            "version": service.get("version"),
        },
        "topology": {
            "total_cis": len(cis),
            "ci_classes": len(cis_by_class),
            "cis_by_class": cis_by_class,
            "child_services": child_services,
            "relationships": relationships,
        },
        "health": {
            "operational_cis": operational,
            "non_operational_cis": non_operational,
            "health_percentage": health_percentage,
        },
        "risk_assessment": {
            "is_critical": criticality in ("1", "2"),
            "has_non_operational_cis": non_operational > 0,
            "single_points_of_failure": len(cis) == 1,
        },
    }


TOOL_NAME = "Service Mapping"

OPERATIONS = {
    "create_service": {
        "handler": create_service,
        "description": "Create a new business service in the CMDB. Services represent business capabilities and can be linked to infrastructure CIs.",
    },
    "link_ci_to_service": {
        "handler": link_ci_to_service,
        "description": "Link a Configuration Item to a business service, creating a dependency relationship used for impact analysis and service mapping.",
    },
    "get_service_map": {
        "handler": get_service_map,
        "description": "Get the complete topology of a business service: related CIs grouped by class, child services, health and risk assessment.",
    },
}
