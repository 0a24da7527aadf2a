"""Configuration module for ServiceNow MCP server."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.error_handler import ConfigError

DEFAULT_TIMEOUT = 30
DEFAULT_SCRIPT_PATH = "/api/global/mcp/execute_script"


def normalize_instance_url(url: str) -> str:
    """Add https:// when no scheme is given and drop a trailing slash."""
    normalized = url.strip()
    if not normalized.startswith(("http://", "https://")):
        normalized = f"https://{normalized}"
    if normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized


class BasicAuthConfig(BaseModel):
    """Configuration for basic authentication."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str


class ServerConfig(BaseModel):
    """Server configuration."""

    model_config = ConfigDict(frozen=True)

    instance_url: str
    name: str
    auth: BasicAuthConfig
    timeout: int = DEFAULT_TIMEOUT
    script_path: str = DEFAULT_SCRIPT_PATH

    @property
    def api_url(self) -> str:
        """Get the API URL for the ServiceNow instance."""
        return f"{self.instance_url}/api/now"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    servicenow_instance: Optional[str] = None
    servicenow_username: Optional[str] = None
    servicenow_password: Optional[str] = None
    name: Optional[str] = None
    servicenow_timeout: int = DEFAULT_TIMEOUT
    servicenow_script_path: str = DEFAULT_SCRIPT_PATH


REQUIRED_SETTINGS = {
    "SERVICENOW_INSTANCE": "servicenow_instance",
    "SERVICENOW_USERNAME": "servicenow_username",
    "SERVICENOW_PASSWORD": "servicenow_password",
    "NAME": "name",
}


def load_config(settings: Optional[Settings] = None) -> ServerConfig:
    """Build the server configuration, failing on every missing required variable.

    Raises:
        ConfigError: One or more required environment variables are unset or empty.
    """
    settings = settings or Settings()

    missing: List[str] = [
        env_name
        for env_name, attr in REQUIRED_SETTINGS.items()
        if not (getattr(settings, attr) or "").strip()
    ]
    if missing:
        raise ConfigError(missing)

    return ServerConfig(
        instance_url=normalize_instance_url(settings.servicenow_instance),
        name=settings.name,
        auth=BasicAuthConfig(
            username=settings.servicenow_username,
            password=settings.servicenow_password,
        ),
        timeout=settings.servicenow_timeout,
        script_path=settings.servicenow_script_path,
    )
