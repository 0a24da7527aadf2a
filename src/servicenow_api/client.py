"""
Thin ServiceNow HTTP client used by the MCP server.

Provides async query/get/create/update/delete methods that:
- Attach auth + default headers via AuthManager
- Share one httpx.AsyncClient with secure defaults for the process lifetime
- Translate HTTP and transport failures into ServiceNowError subclasses
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from auth.auth_manager import AuthManager
from config import ServerConfig
from utils.error_handler import ServiceNowError, handle_http_error, handle_network_error

logger = logging.getLogger(__name__)

# A full create/update batch is dispatched at once.
MAX_CONNECTIONS = 100


def _secure_headers(base: Dict[str, str]) -> Dict[str, str]:
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        **(base or {}),
    }
    return headers


class ServiceNowClient:
    def __init__(
        self,
        config: ServerConfig,
        auth_manager: Optional[AuthManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.auth_manager = auth_manager or AuthManager(config.auth)
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=self.config.timeout,
                verify=True,
                http2=False,  # Disable HTTP/2 to avoid h2 dependency
                limits=httpx.Limits(max_connections=MAX_CONNECTIONS),
                transport=self._transport,
            )
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "ServiceNowClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        operation: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = _secure_headers(await self.auth_manager.aget_headers())
        logger.debug("%s %s params=%s", method, url, params)

        try:
            resp = await self._client().request(
                method=method,
                url=url,
                params=params,
                json=json,
                headers=headers,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise handle_http_error(e, operation) from e
        except httpx.RequestError as e:
            raise handle_network_error(e, self.config.instance_url, self.config.timeout) from e

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            logger.error("Failed to parse JSON response from %s: %s", url, str(e))
            raise ServiceNowError(
                f"Invalid JSON response from ServiceNow ({resp.status_code}): {str(e)}",
                status_code=resp.status_code,
            ) from e

    def _table_url(self, table: str, sys_id: Optional[str] = None) -> str:
        url = f"{self.config.api_url}/table/{table}"
        return f"{url}/{sys_id}" if sys_id else url

    @staticmethod
    def _result(body: Any) -> Any:
        if isinstance(body, dict) and "result" in body:
            return body["result"]
        return body

    # Table API
    async def query(self, table: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Query a table; returns the list of matching records."""
        body = await self._request("GET", self._table_url(table), "query", params=params)
        return self._result(body) or []

    async def get(self, table: str, sys_id: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Get a single record by sys_id."""
        body = await self._request("GET", self._table_url(table, sys_id), "get", params=params)
        return self._result(body) or {}

    async def create(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a record; returns the created record including its sys_id."""
        body = await self._request("POST", self._table_url(table), "create", json=data)
        return self._result(body) or {}

    async def update(self, table: str, sys_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Update the given fields of a record."""
        body = await self._request("PUT", self._table_url(table, sys_id), "update", json=data)
        return self._result(body) or {}

    async def delete(self, table: str, sys_id: str) -> None:
        """Delete a record."""
        await self._request("DELETE", self._table_url(table, sys_id), "delete")

    # Admin APIs
    async def identify_reconcile(self, data_source: str, items: List[Dict[str, Any]]) -> Any:
        """Submit items to the Identification and Reconciliation Engine."""
        body = await self._request(
            "POST",
            f"{self.config.api_url}/identifyreconcile",
            "reconcile",
            params={"sysparm_data_source": data_source},
            json={"items": items},
        )
        return self._result(body)

    async def execute_script(self, script: str) -> Any:
        """Run a server-side script through the configured scripted REST endpoint."""
        body = await self._request(
            "POST",
            f"{self.config.instance_url}{self.config.script_path}",
            "execute scripts on",
            json={"script": script},
        )
        return self._result(body)

