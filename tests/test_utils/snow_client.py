"""Mock ServiceNow client utilities for tests."""
import uuid
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, Mock

from utils.error_handler import ServiceNowStatusError


def make_mock_snow_client(
    query: Any = None,
    get: Any = None,
    create: Any = None,
    update: Any = None,
    identify_reconcile: Any = None,
    execute_script: Any = None,
):
    """Factory that returns a mock ServiceNow client.

    Each argument becomes the return value of the matching async method.
    Pass a list via ``side_effect`` on the returned mock for per-call answers.
    """
    client = Mock()
    client.query = AsyncMock(return_value=[] if query is None else query)
    client.get = AsyncMock(return_value={} if get is None else get)
    client.create = AsyncMock(return_value={} if create is None else create)
    client.update = AsyncMock(return_value={} if update is None else update)
    client.delete = AsyncMock(return_value=None)
    client.identify_reconcile = AsyncMock(return_value=identify_reconcile)
    client.execute_script = AsyncMock(return_value=execute_script)
    client.aclose = AsyncMock(return_value=None)
    return client


def _not_found() -> ServiceNowStatusError:
    return ServiceNowStatusError(
        "Not found: The requested resource does not exist. Check table name and sys_id.",
        status_code=404,
    )


class FakeServiceNowClient:
    """In-memory table store with the record-method surface of ServiceNowClient.

    Understands ``field=value`` terms joined by ``^`` and ``sys_idIN`` lists,
    which is enough for round-trip tests.
    """

    def __init__(self, tables: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = tables or {}
        self.calls: List[tuple] = []

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        return self.tables.setdefault(table, {})

    @staticmethod
    def _matches(record: Dict[str, Any], query: Optional[str]) -> bool:
        if not query:
            return True
        for term in query.split("^"):
            if term.startswith("sys_idIN"):
                if record.get("sys_id") not in term[len("sys_idIN"):].split(","):
                    return False
            elif "=" in term:
                field, value = term.split("=", 1)
                if str(record.get(field)) != value:
                    return False
        return True

    async def query(self, table: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        params = params or {}
        self.calls.append(("query", table, params))
        rows = [dict(r) for r in self._table(table).values() if self._matches(r, params.get("sysparm_query"))]
        offset = params.get("sysparm_offset", 0)
        limit = params.get("sysparm_limit", 10000)
        return rows[offset:offset + limit]

    async def get(self, table: str, sys_id: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.calls.append(("get", table, sys_id))
        record = self._table(table).get(sys_id)
        if record is None:
            raise _not_found()
        return dict(record)

    async def create(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("create", table, data))
        sys_id = uuid.uuid4().hex
        record = {**data, "sys_id": sys_id}
        self._table(table)[sys_id] = record
        return dict(record)

    async def update(self, table: str, sys_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("update", table, sys_id, data))
        record = self._table(table).get(sys_id)
        if record is None:
            raise _not_found()
        record.update(data)
        return dict(record)

    async def delete(self, table: str, sys_id: str) -> None:
        self.calls.append(("delete", table, sys_id))
        if self._table(table).pop(sys_id, None) is None:
            raise _not_found()

    async def aclose(self) -> None:
        pass
