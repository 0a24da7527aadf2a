"""Common error handling utilities."""
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Required configuration is missing at startup."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(
            f"Missing required environment variables: {', '.join(self.missing)}\n"
            "Please set these variables in your MCP server configuration."
        )


class ToolValidationError(Exception):
    """Tool arguments do not satisfy the tool's input contract."""

    def __init__(self, tool_name: str, issues: List[str]):
        self.tool_name = tool_name
        self.issues = list(issues)
        super().__init__(f"Validation error in {tool_name}: {'; '.join(self.issues)}")


class UnknownToolError(Exception):
    """No tool is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ServiceNowError(Exception):
    """Base error for ServiceNow API interactions."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class ServiceNowTransportError(ServiceNowError):
    """No usable response was received (connection, DNS, timeout or decoding failure)."""


class ServiceNowStatusError(ServiceNowError):
    """ServiceNow answered with a non-success status."""


def _error_detail(response: httpx.Response) -> str:
    """Pull the error text ServiceNow puts in {"error": {"message", "detail"}}."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        error = body["error"]
        detail = error.get("message") or error.get("detail")
        if detail:
            return str(detail)
    return response.reason_phrase or response.text or "Unknown error"


def handle_http_error(e: httpx.HTTPStatusError, operation: str) -> ServiceNowStatusError:
    """
    Map an HTTP status error to a human-readable ServiceNow error.

    Args:
        e: HTTP error
        operation: Client operation that failed (e.g., "query", "create")

    Returns:
        Error carrying the status code and a fixed message per well-known status
    """
    status_code = e.response.status_code
    logger.error("HTTP %s during ServiceNow %s: %s", status_code, operation, e.request.url)

    if status_code == 401:
        message = (
            "Authentication failed. Please check your SERVICENOW_USERNAME and "
            "SERVICENOW_PASSWORD environment variables."
        )
    elif status_code == 403:
        message = (
            f"Forbidden: You don't have permission to {operation} this resource. "
            "Check user permissions in ServiceNow."
        )
    elif status_code == 404:
        message = "Not found: The requested resource does not exist. Check table name and sys_id."
    elif status_code == 429:
        message = "Rate limit exceeded. Please wait before making more requests."
    elif status_code in (500, 502, 503):
        message = (
            f"ServiceNow server error ({status_code}). "
            "The ServiceNow instance may be experiencing issues."
        )
    else:
        message = f"ServiceNow API error ({status_code}): {_error_detail(e.response)}"

    return ServiceNowStatusError(message, status_code=status_code, details={"operation": operation})


def handle_network_error(e: httpx.RequestError, instance_url: str, timeout: Optional[float] = None) -> ServiceNowTransportError:
    """
    Map a request that produced no usable response to an error naming the instance.

    Args:
        e: Network error
        instance_url: Configured ServiceNow instance URL
        timeout: Request timeout in seconds, reported for timeouts

    Returns:
        Transport error
    """
    logger.error("Network error talking to %s: %s", instance_url, str(e))
    if isinstance(e, httpx.TimeoutException):
        limit = f" after {timeout:g}s" if timeout else ""
        message = f"Request to ServiceNow instance at {instance_url} timed out{limit}."
    elif not isinstance(e, httpx.TransportError):
        # decoding failures, redirect loops
        message = f"Invalid response from ServiceNow instance at {instance_url}: {str(e)}"
    else:
        message = (
            f"Network error: Could not connect to ServiceNow instance at {instance_url}. "
            "Check the SERVICENOW_INSTANCE URL and your network connection."
        )
    return ServiceNowTransportError(message, details={"error": str(e)})
