"""
CMDB Reader tools: read-only access to configuration items, relationships
and the downstream impact of a CI outage.
"""
import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from servicenow_api.client import ServiceNowClient
from tools.table_api import build_query_params
from utils.validation import FieldList, Limit, Offset, QueryString, SysId

logger = logging.getLogger(__name__)

CI_SUMMARY_FIELDS = "sys_id,name,sys_class_name,operational_status,support_group,u_environment"


def reference_value(ref: Any) -> Optional[str]:
    """sys_id held by a reference field, which the API returns as {"value", "link"}."""
    if isinstance(ref, dict):
        return ref.get("value") or None
    return ref or None


async def query_by_sys_ids(
    client: ServiceNowClient, table: str, sys_ids: List[str], fields: str, limit: int = 1000
) -> List[Dict[str, Any]]:
    if not sys_ids:
        return []
    return await client.query(
        table,
        {
            "sysparm_query": f"sys_idIN{','.join(sys_ids)}",
            "sysparm_fields": fields,
            "sysparm_limit": limit,
        },
    )


def ci_summary(ci: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "sys_id": ci.get("sys_id"),
        "name": ci.get("name"),
        "class": ci.get("sys_class_name"),
        "status": ci.get("operational_status"),
    }


class QueryCmdbCiParams(BaseModel):
    ci_class: Optional[str] = Field(None, description='CI class (e.g., "cmdb_ci_server", "cmdb_ci_linux_server")')
    name_contains: Optional[str] = Field(None, description="Substring of the CI name")
    operational_status: Optional[str] = Field(None, description='Operational status (e.g., "1" Operational)')
    environment: Optional[str] = Field(None, description='Environment (e.g., "Production")')
    support_group: Optional[str] = Field(None, description="Name of the support group")
    custom_query: QueryString = None
    fields: FieldList = None
    limit: Limit
    offset: Offset


class GetCiRelationshipsParams(BaseModel):
    ci_sys_id: SysId
    relationship_type: Literal["parent", "child", "all"] = Field(
        "all", description="parent: CIs this CI depends on; child: CIs depending on it; all: both"
    )
    depth: int = Field(1, ge=1, le=3, strict=True, description="Relationship depth (1-3)")


class GetImpactAnalysisParams(BaseModel):
    ci_sys_id: SysId
    include_services: bool = Field(True, description="Include impacted business services")
    max_depth: int = Field(3, ge=1, le=5, strict=True, description="Maximum dependency depth (1-5)")


async def query_cmdb_ci(client: ServiceNowClient, params: QueryCmdbCiParams) -> Dict[str, Any]:
    """Query configuration items by class, name, status, environment and group."""
    parts: List[str] = []
    if params.ci_class:
        parts.append(f"sys_class_name={params.ci_class}")
    if params.name_contains:
        parts.append(f"nameLIKE{params.name_contains}")
    if params.operational_status:
        parts.append(f"operational_status={params.operational_status}")
    if params.environment:
        parts.append(f"u_environment={params.environment}")
    if params.support_group:
        parts.append(f"support_group.name={params.support_group}")
    if params.custom_query:
        parts.append(params.custom_query)

    qp = build_query_params("^".join(parts) or None, params.fields, params.limit, params.offset)
    cis = await client.query("cmdb_ci", qp)
    return {"success": True, "count": len(cis), "cis": cis}


async def get_ci_relationships(client: ServiceNowClient, params: GetCiRelationshipsParams) -> Dict[str, Any]:
    """List relationships for a CI and the details of the CIs on the other end."""
    ci = await client.get("cmdb_ci", params.ci_sys_id)

    if params.relationship_type == "parent":
        rel_query = f"child.sys_id={params.ci_sys_id}"
    elif params.relationship_type == "child":
        rel_query = f"parent.sys_id={params.ci_sys_id}"
    else:
        rel_query = f"parent.sys_id={params.ci_sys_id}^ORchild.sys_id={params.ci_sys_id}"

    relationships = await client.query(
        "cmdb_rel_ci",
        {"sysparm_query": rel_query, "sysparm_fields": "parent,child,type,sys_id", "sysparm_limit": 1000},
    )

    related_ids: List[str] = []
    for rel in relationships:
        for end in (reference_value(rel.get("parent")), reference_value(rel.get("child"))):
            if end and end != params.ci_sys_id and end not in related_ids:
                related_ids.append(end)

    related = await query_by_sys_ids(
        client, "cmdb_ci", related_ids, "sys_id,name,sys_class_name,operational_status,u_environment"
    )
    return {
        "success": True,
        "ci": ci_summary(ci),
        "relationships": {"count": len(relationships), "items": relationships},
        "related_cis": {"count": len(related), "items": related},
    }


async def get_impact_analysis(client: ServiceNowClient, params: GetImpactAnalysisParams) -> Dict[str, Any]:
    """Estimate which CIs and services are affected if a CI goes down."""
    source = await client.get("cmdb_ci", params.ci_sys_id, {"sysparm_fields": CI_SUMMARY_FIELDS})

    dependencies = await client.query(
        "cmdb_rel_ci",
        {
            "sysparm_query": f"parent.sys_id={params.ci_sys_id}",
            "sysparm_fields": "child,type,sys_id",
            "sysparm_limit": 1000,
        },
    )
    child_ids = [cid for cid in (reference_value(rel.get("child")) for rel in dependencies) if cid]
    affected_cis = await query_by_sys_ids(
        client, "cmdb_ci", child_ids, "sys_id,name,sys_class_name,operational_status,support_group"
    )

    affected_services: List[Dict[str, Any]] = []
    if params.include_services:
        service_rels = await client.query(
            "cmdb_rel_ci",
            {
                "sysparm_query": f"child.sys_id={params.ci_sys_id}^parent.sys_class_nameLIKEcmdb_ci_service",
                "sysparm_fields": "parent,type",
                "sysparm_limit": 100,
            },
        )
        service_ids = [sid for sid in (reference_value(rel.get("parent")) for rel in service_rels) if sid]
        affected_services = await query_by_sys_ids(
            client,
            "cmdb_ci_service",
            service_ids,
            "sys_id,name,busines_criticality,service_classification,operational_status",
            limit=100,
        )

    critical_cis = sum(1 for ci in affected_cis if ci.get("operational_status") == "1")
    critical_services = sum(1 for svc in affected_services if svc.get("busines_criticality") in ("1", "2"))
    if critical_services > 0:
        risk_level = "HIGH"
    elif len(affected_cis) > 10:
        risk_level = "MEDIUM"
    else:
        risk_level = "LOW"

    return {
        "success": True,
        "source_ci": ci_summary(source),
        "impact_summary": {
            "total_affected_cis": len(affected_cis),
            "critical_cis": critical_cis,
            "total_affected_services": len(affected_services),
            "critical_services": critical_services,
            "risk_level": risk_level,
        },
        "affected_cis": affected_cis,
        "affected_services": affected_services,
        "dependency_chain": dependencies,
    }


TOOL_NAME = "CMDB Reader"

OPERATIONS = {
    "query_cmdb_ci": {
        "handler": query_cmdb_ci,
        "description": "Query Configuration Items in the CMDB with filters for class, name, operational status, environment, and support group.",
    },
    "get_ci_relationships": {
        "handler": get_ci_relationships,
        "description": "Get the relationships of a Configuration Item (parents, children, or both) along with details of the related CIs.",
    },
    "get_impact_analysis": {
        "handler": get_impact_analysis,
        "description": "Analyze the impact of a CI outage: downstream CIs, affected business services, and an overall risk level.",
    },
}
