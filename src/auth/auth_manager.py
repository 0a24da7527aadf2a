"""
Authentication manager for ServiceNow MCP integration.
Builds the Basic Authentication header sent with every API request.
"""
import base64
import logging
from typing import Dict

from config import BasicAuthConfig

logger = logging.getLogger(__name__)


def generate_basic_auth_header(username: str, password: str) -> str:
    """Return the Authorization header value for username/password credentials."""
    credentials = f"{username}:{password}".encode("utf-8")
    return f"Basic {base64.b64encode(credentials).decode('ascii')}"


class AuthManager:
    """
    Manages authentication for ServiceNow API requests.

    Credentials come from the process-wide configuration and are never
    modified after construction.
    """

    def __init__(self, auth: BasicAuthConfig):
        """
        Initialize the auth manager.

        Args:
            auth: Basic authentication credentials.
        """
        self.auth = auth
        self._header = generate_basic_auth_header(auth.username, auth.password)
        logger.debug("Initialized basic auth for user %s", auth.username)

    def get_headers(self) -> Dict[str, str]:
        """
        Get authentication headers for API requests.

        Returns:
            Dictionary of headers.
        """
        return {"Authorization": self._header}

    async def aget_headers(self) -> Dict[str, str]:
        """Async variant of get_headers for callers on the event loop."""
        return self.get_headers()
