"""
ServiceNow MCP Server entry point.

Speaks MCP over stdin/stdout; all logging goes to stderr.
"""
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from config import ServerConfig, load_config
from mcp_core.server import ServiceNowMCPServer
from utils.error_handler import ConfigError
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def configure_logging() -> None:
    log_level = "DEBUG" if _env_flag("DEBUG") else os.getenv("LOG_LEVEL", "INFO")
    setup_logging(
        log_level=log_level,
        log_file=os.getenv("LOG_FILE") or None,
        log_json=_env_flag("LOG_JSON"),
    )


async def serve(config: ServerConfig) -> None:
    mcp_server = ServiceNowMCPServer(config)
    try:
        await mcp_server.run_stdio()
    finally:
        await mcp_server.aclose()


def main() -> None:
    load_dotenv()
    configure_logging()

    try:
        config = load_config()
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Server stopped")


if __name__ == "__main__":
    main()
