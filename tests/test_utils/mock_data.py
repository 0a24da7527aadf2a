"""
Mock data and responses for tests.
"""
from typing import Any, Dict

INCIDENT_SYS_ID = "9d385017c611228701d22104cc95c371"
USER_SYS_ID = "6816f79cc0a8016401c5a33be04be441"
GROUP_SYS_ID = "287ebd7da9fe198100f92cc8d1d2154e"
CI_SYS_ID = "27d3f35cc0a8000b001df42d019a418f"
CHILD_CI_SYS_ID = "53fdbc8437201000deeabfc8bcbe5d10"
SERVICE_SYS_ID = "26e426be0a0a0bb40046890d90059eaa"
REL_SYS_ID = "1f2bf4b7dba2330035e07e3dbf96194e"

MOCK_INCIDENT_DATA: Dict[str, Any] = {
    "sys_id": INCIDENT_SYS_ID,
    "number": "INC0010001",
    "short_description": "Email server down",
    "state": "1",
    "priority": "1",
    "active": "true",
}

MOCK_USER_DATA: Dict[str, Any] = {
    "sys_id": USER_SYS_ID,
    "user_name": "abel.tuter",
    "first_name": "Abel",
    "last_name": "Tuter",
    "email": "abel.tuter@example.com",
    "active": "true",
}

MOCK_CI_DATA: Dict[str, Any] = {
    "sys_id": CI_SYS_ID,
    "name": "lnux100",
    "sys_class_name": "cmdb_ci_linux_server",
    "operational_status": "1",
    "u_environment": "Production",
}

MOCK_CHILD_CI_DATA: Dict[str, Any] = {
    "sys_id": CHILD_CI_SYS_ID,
    "name": "db-oracle-01",
    "sys_class_name": "cmdb_ci_db_ora_instance",
    "operational_status": "2",
}

MOCK_SERVICE_DATA: Dict[str, Any] = {
    "sys_id": SERVICE_SYS_ID,
    "name": "Email",
    "service_classification": "Business Service",
    "busines_criticality": "1",
    "operational_status": "1",
    "used_for": "Production",
    "version": "2.1",
}

MOCK_RELATIONSHIP_DATA: Dict[str, Any] = {
    "sys_id": REL_SYS_ID,
    "parent": {"link": f"https://dev12345.service-now.com/api/now/table/cmdb_ci/{CI_SYS_ID}", "value": CI_SYS_ID},
    "child": {
        "link": f"https://dev12345.service-now.com/api/now/table/cmdb_ci/{CHILD_CI_SYS_ID}",
        "value": CHILD_CI_SYS_ID,
    },
    "type": {"value": "1a9cb166f1571100a92eb60da2bce5c5"},
}

MOCK_EVENTS = [
    {
        "sys_id": "a1" * 16,
        "source": "Nagios",
        "node": "web01",
        "severity": {"value": "1", "display_value": "Critical"},
        "state": {"value": "Ready", "display_value": "Ready"},
    },
    {
        "sys_id": "b2" * 16,
        "source": "Nagios",
        "node": "web02",
        "severity": {"value": "4", "display_value": "Warning"},
        "state": {"value": "Processed", "display_value": "Processed"},
    },
    {
        "sys_id": "c3" * 16,
        "source": "Splunk",
        "node": "db01",
        "severity": "1",
        "state": "Error",
    },
]

# Mock error responses
MOCK_AUTH_ERROR = {
    "error": {
        "message": "User Not Authenticated",
        "detail": "Required to provide Auth information",
    },
    "status": "failure",
}

MOCK_NOT_FOUND = {
    "error": {
        "message": "No Record found",
        "detail": "Record doesn't exist or ACL restricts the record retrieval",
    },
    "status": "failure",
}

MOCK_TEAPOT_ERROR = {
    "error": {
        "message": "Short and stout",
        "detail": "Here is my handle",
    },
    "status": "failure",
}
