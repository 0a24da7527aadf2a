"""Tests for the ServiceNow MCP server."""
