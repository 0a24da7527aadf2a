"""
Concurrent batch execution against the ServiceNow Table API.

Every operation in a batch is started before any is awaited. Results are
reported in submission order; one item failing never affects another.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from utils.error_handler import ServiceNowError

logger = logging.getLogger(__name__)


class BatchAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    QUERY = "query"


@dataclass(frozen=True)
class BatchOperation:
    """One unit of work, identified by its position in the submitted batch."""

    index: int
    action: BatchAction
    table: str
    payload: Dict[str, Any] = field(default_factory=dict)
    sys_id: Optional[str] = None

    def describe(self) -> Dict[str, Any]:
        described: Dict[str, Any] = {"action": self.action.value, "table": self.table}
        if self.sys_id:
            described["sys_id"] = self.sys_id
        if self.action is BatchAction.QUERY:
            described["params"] = self.payload
        else:
            described["data"] = self.payload
        return described


@dataclass(frozen=True)
class BatchItemResult:
    index: int
    operation: BatchOperation
    ok: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def as_success(self) -> Dict[str, Any]:
        return {"index": self.index, **(self.data or {})}

    def as_failure(self) -> Dict[str, Any]:
        return {"index": self.index, "operation": self.operation.describe(), "error": self.error}


@dataclass(frozen=True)
class BatchSummary:
    items: List[BatchItemResult]

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def successes(self) -> List[BatchItemResult]:
        return [item for item in self.items if item.ok]

    @property
    def failures(self) -> List[BatchItemResult]:
        return [item for item in self.items if not item.ok]

    @property
    def success(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        failures = self.failures
        successes = self.successes
        return {
            "success": not failures,
            "total": self.total,
            "succeeded": len(successes),
            "failed": len(failures),
            "results": [item.as_success() for item in successes],
            "errors": [item.as_failure() for item in failures],
        }


async def _perform(client: Any, op: BatchOperation) -> Dict[str, Any]:
    if op.action is BatchAction.CREATE:
        record = await client.create(op.table, op.payload)
        return {"sys_id": record.get("sys_id"), "record": record}
    if op.action is BatchAction.UPDATE:
        record = await client.update(op.table, op.sys_id, op.payload)
        return {"sys_id": op.sys_id, "record": record}
    if op.action is BatchAction.QUERY:
        records = await client.query(op.table, op.payload)
        return {"table": op.table, "count": len(records), "records": records}
    raise ValueError(f"Unsupported batch action: {op.action}")


async def execute_batch(client: Any, operations: Sequence[BatchOperation]) -> BatchSummary:
    """
    Run all operations concurrently and collect one result per operation.

    Args:
        client: ServiceNow client
        operations: Operations in submission order

    Returns:
        Summary whose items line up with ``operations`` by index
    """
    logger.info("Executing batch of %d operations", len(operations))
    outcomes = await asyncio.gather(
        *(_perform(client, op) for op in operations),
        return_exceptions=True,
    )

    items: List[BatchItemResult] = []
    for op, outcome in zip(operations, outcomes):
        if isinstance(outcome, ServiceNowError):
            items.append(BatchItemResult(index=op.index, operation=op, ok=False, error=outcome.message))
        elif isinstance(outcome, Exception):
            logger.error("Unexpected error in batch item %d: %r", op.index, outcome)
            items.append(BatchItemResult(index=op.index, operation=op, ok=False, error=f"Unexpected error: {outcome}"))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            items.append(BatchItemResult(index=op.index, operation=op, ok=True, data=outcome))

    summary = BatchSummary(items=items)
    if not summary.success:
        logger.warning("Batch finished with %d of %d operations failed", len(summary.failures), summary.total)
    return summary
