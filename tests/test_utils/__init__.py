"""Test utilities for the ServiceNow MCP server."""

from .config import mock_auth_config, mock_server_config
from .snow_client import FakeServiceNowClient, make_mock_snow_client
from .mock_data import (
    CHILD_CI_SYS_ID,
    CI_SYS_ID,
    GROUP_SYS_ID,
    INCIDENT_SYS_ID,
    MOCK_AUTH_ERROR,
    MOCK_CHILD_CI_DATA,
    MOCK_CI_DATA,
    MOCK_EVENTS,
    MOCK_INCIDENT_DATA,
    MOCK_NOT_FOUND,
    MOCK_RELATIONSHIP_DATA,
    MOCK_SERVICE_DATA,
    MOCK_TEAPOT_ERROR,
    MOCK_USER_DATA,
    REL_SYS_ID,
    SERVICE_SYS_ID,
    USER_SYS_ID,
)

__all__ = [
    'FakeServiceNowClient',
    'make_mock_snow_client',
    'mock_server_config',
    'mock_auth_config',
    'CHILD_CI_SYS_ID',
    'CI_SYS_ID',
    'GROUP_SYS_ID',
    'INCIDENT_SYS_ID',
    'REL_SYS_ID',
    'SERVICE_SYS_ID',
    'USER_SYS_ID',
    'MOCK_AUTH_ERROR',
    'MOCK_CHILD_CI_DATA',
    'MOCK_CI_DATA',
    'MOCK_EVENTS',
    'MOCK_INCIDENT_DATA',
    'MOCK_NOT_FOUND',
    'MOCK_RELATIONSHIP_DATA',
    'MOCK_SERVICE_DATA',
    'MOCK_TEAPOT_ERROR',
    'MOCK_USER_DATA',
]
