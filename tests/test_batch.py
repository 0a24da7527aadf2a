"""Tests for the concurrent batch executor."""
import asyncio

import pytest

from utils.batch import BatchAction, BatchOperation, execute_batch
from utils.error_handler import ServiceNowStatusError, ServiceNowTransportError


class RecordingClient:
    """Client whose create calls finish in reverse order and can fail on chosen rows."""

    def __init__(self, fail_on=(), error=None):
        self.fail_on = set(fail_on)
        self.error = error or ServiceNowStatusError("Rate limit exceeded. Please wait before making more requests.", 429)
        self.in_flight = 0
        self.max_in_flight = 0
        self.started = []

    async def create(self, table, data):
        n = data["n"]
        self.started.append(n)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.001 * (10 - n % 10))
            if n in self.fail_on:
                raise self.error
            return {"sys_id": f"{n:032x}", "n": n}
        finally:
            self.in_flight -= 1

    async def update(self, table, sys_id, data):
        return {"sys_id": sys_id, **data}

    async def query(self, table, params):
        return [{"table": table}]


def _creates(count):
    return [
        BatchOperation(index=i, action=BatchAction.CREATE, table="incident", payload={"n": i})
        for i in range(count)
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [1, 7, 100])
async def test_one_result_per_operation(count):
    summary = await execute_batch(RecordingClient(), _creates(count))
    assert summary.total == count
    assert sorted(item.index for item in summary.items) == list(range(count))
    data = summary.to_dict()
    assert data["success"] is True
    assert data["succeeded"] == count
    assert data["failed"] == 0
    assert data["errors"] == []


@pytest.mark.asyncio
async def test_results_keep_submission_order_when_completion_is_reversed():
    summary = await execute_batch(RecordingClient(), _creates(10))
    results = summary.to_dict()["results"]
    assert [r["index"] for r in results] == list(range(10))
    assert [r["record"]["n"] for r in results] == list(range(10))
    assert results[3]["sys_id"] == f"{3:032x}"


@pytest.mark.asyncio
async def test_all_operations_start_before_any_finishes():
    client = RecordingClient()
    await execute_batch(client, _creates(20))
    assert client.max_in_flight == 20


@pytest.mark.asyncio
async def test_single_failure_is_isolated():
    summary = (await execute_batch(RecordingClient(fail_on={4}), _creates(8))).to_dict()
    assert summary["success"] is False
    assert summary["total"] == 8
    assert summary["succeeded"] == 7
    assert summary["failed"] == 1
    assert len(summary["errors"]) == 1
    error = summary["errors"][0]
    assert error["index"] == 4
    assert error["error"].startswith("Rate limit exceeded")
    assert error["operation"] == {"action": "create", "table": "incident", "data": {"n": 4}}
    assert 4 not in [r["index"] for r in summary["results"]]


@pytest.mark.asyncio
async def test_transport_error_message_is_reported():
    error = ServiceNowTransportError("Request to ServiceNow instance at https://x timed out after 5s.")
    summary = (await execute_batch(RecordingClient(fail_on={0, 2}, error=error), _creates(3))).to_dict()
    assert [e["index"] for e in summary["errors"]] == [0, 2]
    assert all("timed out" in e["error"] for e in summary["errors"])


@pytest.mark.asyncio
async def test_unexpected_exception_is_captured():
    summary = (await execute_batch(RecordingClient(fail_on={1}, error=KeyError("n")), _creates(2))).to_dict()
    assert summary["failed"] == 1
    assert summary["errors"][0]["error"].startswith("Unexpected error:")


@pytest.mark.asyncio
async def test_update_and_query_actions():
    client = RecordingClient()
    sys_id = "a" * 32
    summary = await execute_batch(
        client,
        [
            BatchOperation(index=0, action=BatchAction.UPDATE, table="incident", payload={"state": "2"}, sys_id=sys_id),
            BatchOperation(index=1, action=BatchAction.QUERY, table="problem", payload={"sysparm_limit": 1}),
        ],
    )
    results = summary.to_dict()["results"]
    assert results[0] == {"index": 0, "sys_id": sys_id, "record": {"sys_id": sys_id, "state": "2"}}
    assert results[1] == {"index": 1, "table": "problem", "count": 1, "records": [{"table": "problem"}]}


def test_describe_update_includes_sys_id():
    op = BatchOperation(index=0, action=BatchAction.UPDATE, table="incident", payload={"state": "2"}, sys_id="b" * 32)
    assert op.describe() == {"action": "update", "table": "incident", "sys_id": "b" * 32, "data": {"state": "2"}}
