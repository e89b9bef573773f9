import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
import structlog

from adapters.google.client import AdsIdentity, GoogleAdsClient
from core.models.campaign import OperationResult
from exceptions.custom_exceptions import (
    BatchJobCreationException,
    InternalServerException,
    UpstreamRequestException,
)

logger = structlog.get_logger(__name__)

DONE_STATUS = "DONE"
UNKNOWN_STATUS = "UNKNOWN"

# Errors that end polling / result listing without failing the request
_BEST_EFFORT_ERRORS = (UpstreamRequestException, httpx.HTTPError)

# Job statuses the API can report back once the job has been run
_OBSERVABLE_STATUSES = frozenset({"PENDING", "RUNNING", "DONE", "FAILED"})


class BatchJobState(str, Enum):
    NEW = "NEW"
    CREATED = "CREATED"
    OPERATIONS_ATTACHED = "OPERATIONS_ATTACHED"
    RUNNING = "RUNNING"
    PENDING = "PENDING"
    DONE = "DONE"
    FAILED = "FAILED"


class BatchJobOrchestrator:
    """Drives one Google Ads batch job from creation to results.

    Each step checks the job is in the state the previous step leaves it in:
    NEW -> CREATED -> OPERATIONS_ATTACHED -> RUNNING -> PENDING | DONE | FAILED.
    Polling and result listing are best-effort; creation, attaching and
    running are not.
    """

    def __init__(
        self,
        client: GoogleAdsClient,
        customer_id: str,
        identity: AdsIdentity,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.customer_id = customer_id
        self.identity = identity
        self._sleep = sleep
        self.state = BatchJobState.NEW
        self.batch_job: Optional[str] = None

    async def create(self) -> str:
        self._require(BatchJobState.NEW)
        result = await self.client.batch_job_create(self.customer_id, self.identity)
        batch_job = (result or {}).get("resourceName")
        if not batch_job:
            raise BatchJobCreationException(
                "Failed to create batch job: no resource name returned",
                details={"customer_id": self.customer_id, "response": result},
            )

        self.batch_job = batch_job
        self.state = BatchJobState.CREATED
        logger.info("batch_job_created", customer_id=self.customer_id, batch_job=batch_job)
        return batch_job

    async def add_operations(self, batch_job: str, operations: List[Dict[str, Any]]) -> None:
        """Attach all operations in one call; order is preserved for temp refs."""
        self._require(BatchJobState.CREATED, batch_job)
        await self.client.batch_job_add_operations(batch_job, operations, self.identity)
        self.state = BatchJobState.OPERATIONS_ATTACHED
        logger.info("batch_job_operations_added", batch_job=batch_job, count=len(operations))

    async def run(self, batch_job: str) -> None:
        self._require(BatchJobState.OPERATIONS_ATTACHED, batch_job)
        await self.client.batch_job_run(batch_job, self.identity)
        self.state = BatchJobState.RUNNING
        logger.info("batch_job_started", batch_job=batch_job)

    async def poll_until_done(
        self, batch_job: str, max_attempts: int, interval_ms: int
    ) -> str:
        """Poll the job status until DONE, the attempt budget runs out, or a fetch fails.

        Every poll is preceded by ``interval_ms`` of sleep. Returns the last
        status seen, ``UNKNOWN`` if none was; never raises for a job that is
        merely unfinished.
        """
        self._require(BatchJobState.RUNNING, batch_job)
        status = UNKNOWN_STATUS

        for attempt in range(1, max_attempts + 1):
            await self._sleep(interval_ms / 1000)
            try:
                status = await self.client.batch_job_get_status(
                    self.customer_id, batch_job, self.identity
                )
            except _BEST_EFFORT_ERRORS as e:
                logger.warning(
                    "batch_job_poll_failed",
                    batch_job=batch_job,
                    attempt=attempt,
                    error=str(e),
                )
                break

            logger.debug("batch_job_polled", batch_job=batch_job, attempt=attempt, status=status)
            if status == DONE_STATUS:
                break

        if status in _OBSERVABLE_STATUSES:
            self.state = BatchJobState(status)
        if status != DONE_STATUS:
            logger.warning(
                "batch_job_unconfirmed",
                batch_job=batch_job,
                status=status,
                max_attempts=max_attempts,
            )
        return status

    async def list_results(self, batch_job: str) -> Optional[List[OperationResult]]:
        """Per-operation results ordered by operation index, or None if listing failed."""
        if batch_job != self.batch_job:
            raise InternalServerException(f"Unknown batch job {batch_job}")
        try:
            raw_results = await self.client.batch_job_list_results(batch_job, self.identity)
        except _BEST_EFFORT_ERRORS as e:
            logger.warning("batch_job_list_results_failed", batch_job=batch_job, error=str(e))
            return None

        results = [_parse_result(position, raw) for position, raw in enumerate(raw_results)]
        results.sort(key=lambda result: result.index)
        logger.info(
            "batch_job_results_listed",
            batch_job=batch_job,
            count=len(results),
            errors=sum(1 for result in results if result.error),
        )
        return results

    def _require(self, expected: BatchJobState, batch_job: Optional[str] = None) -> None:
        if self.state != expected:
            raise InternalServerException(
                f"Batch job step out of order: expected {expected.value}, "
                f"job is {self.state.value}"
            )
        if batch_job is not None and batch_job != self.batch_job:
            raise InternalServerException(f"Unknown batch job {batch_job}")


def _parse_result(position: int, raw: Dict[str, Any]) -> OperationResult:
    try:
        index = int(raw.get("operationIndex", position))
    except (TypeError, ValueError):
        index = position
    error = raw.get("status")
    resource = None
    response = raw.get("mutateOperationResponse") or {}
    # Exactly one *Result key is set, e.g. {"campaignResult": {"resourceName": ...}}
    for value in response.values():
        if isinstance(value, dict) and value.get("resourceName"):
            resource = value["resourceName"]
            break
    return OperationResult(index=index, resourceName=resource, error=error or None)
