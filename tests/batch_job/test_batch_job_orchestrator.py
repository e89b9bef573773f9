import httpx
import pytest

from adapters.google.mutation.batch_job_orchestrator import (
    DONE_STATUS,
    UNKNOWN_STATUS,
    BatchJobOrchestrator,
    BatchJobState,
)
from exceptions.custom_exceptions import (
    BatchJobCreationException,
    InternalServerException,
    UpstreamRequestException,
)

CUSTOMER_ID = "6388991727"
BATCH_JOB = f"customers/{CUSTOMER_ID}/batchJobs/987654"


@pytest.fixture
def orchestrator(ads_client, identity, no_sleep):
    ads_client.batch_job_create.return_value = {"resourceName": BATCH_JOB}
    return BatchJobOrchestrator(ads_client, CUSTOMER_ID, identity, sleep=no_sleep)


async def _running(orchestrator) -> str:
    batch_job = await orchestrator.create()
    await orchestrator.add_operations(batch_job, [{"campaignBudgetOperation": {"create": {}}}])
    await orchestrator.run(batch_job)
    return batch_job


# ===========================================================================
# LIFECYCLE
# ===========================================================================


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_steps_advance_state(self, orchestrator, ads_client, identity):
        operations = [{"campaignBudgetOperation": {"create": {}}}]

        batch_job = await orchestrator.create()
        assert batch_job == BATCH_JOB
        assert orchestrator.state == BatchJobState.CREATED

        await orchestrator.add_operations(batch_job, operations)
        assert orchestrator.state == BatchJobState.OPERATIONS_ATTACHED
        ads_client.batch_job_add_operations.assert_awaited_once_with(
            BATCH_JOB, operations, identity
        )

        await orchestrator.run(batch_job)
        assert orchestrator.state == BatchJobState.RUNNING
        ads_client.batch_job_run.assert_awaited_once_with(BATCH_JOB, identity)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("created", [{}, {"resourceName": ""}, None])
    async def test_create_without_resource_name_fails(self, orchestrator, ads_client, created):
        ads_client.batch_job_create.return_value = created

        with pytest.raises(BatchJobCreationException):
            await orchestrator.create()
        assert orchestrator.state == BatchJobState.NEW

    @pytest.mark.asyncio
    async def test_run_before_operations_attached_is_rejected(self, orchestrator, ads_client):
        batch_job = await orchestrator.create()

        with pytest.raises(InternalServerException):
            await orchestrator.run(batch_job)
        ads_client.batch_job_run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_twice_is_rejected(self, orchestrator):
        await orchestrator.create()
        with pytest.raises(InternalServerException):
            await orchestrator.create()

    @pytest.mark.asyncio
    async def test_foreign_batch_job_is_rejected(self, orchestrator):
        await orchestrator.create()
        with pytest.raises(InternalServerException):
            await orchestrator.add_operations(f"customers/{CUSTOMER_ID}/batchJobs/1", [])

    @pytest.mark.asyncio
    async def test_attach_failure_propagates(self, orchestrator, ads_client):
        ads_client.batch_job_add_operations.side_effect = UpstreamRequestException(
            "bad operation", upstream_status=400
        )
        batch_job = await orchestrator.create()

        with pytest.raises(UpstreamRequestException):
            await orchestrator.add_operations(batch_job, [])
        assert orchestrator.state == BatchJobState.CREATED


# ===========================================================================
# POLLING
# ===========================================================================


class TestPolling:
    @pytest.mark.asyncio
    async def test_stops_as_soon_as_done(self, orchestrator, ads_client, no_sleep):
        ads_client.batch_job_get_status.side_effect = ["RUNNING", DONE_STATUS, "RUNNING"]
        batch_job = await _running(orchestrator)

        status = await orchestrator.poll_until_done(batch_job, max_attempts=5, interval_ms=2000)

        assert status == DONE_STATUS
        assert orchestrator.state == BatchJobState.DONE
        assert ads_client.batch_job_get_status.await_count == 2
        no_sleep.assert_awaited_with(2.0)
        assert no_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_attempts_return_last_status(self, orchestrator, ads_client, no_sleep):
        ads_client.batch_job_get_status.return_value = "RUNNING"
        batch_job = await _running(orchestrator)

        status = await orchestrator.poll_until_done(batch_job, max_attempts=3, interval_ms=0)

        assert status == "RUNNING"
        assert ads_client.batch_job_get_status.await_count == 3
        assert no_sleep.await_count == 3

    @pytest.mark.asyncio
    async def test_pending_status_is_tracked(self, orchestrator, ads_client):
        ads_client.batch_job_get_status.return_value = "PENDING"
        batch_job = await _running(orchestrator)

        await orchestrator.poll_until_done(batch_job, max_attempts=1, interval_ms=0)
        assert orchestrator.state == BatchJobState.PENDING

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            UpstreamRequestException("boom", upstream_status=500),
            httpx.ConnectError("connection refused"),
        ],
    )
    async def test_fetch_error_stops_polling(self, orchestrator, ads_client, error):
        ads_client.batch_job_get_status.side_effect = ["RUNNING", error, DONE_STATUS]
        batch_job = await _running(orchestrator)

        status = await orchestrator.poll_until_done(batch_job, max_attempts=5, interval_ms=0)

        assert status == "RUNNING"
        assert ads_client.batch_job_get_status.await_count == 2

    @pytest.mark.asyncio
    async def test_error_on_first_poll_reports_unknown(self, orchestrator, ads_client):
        ads_client.batch_job_get_status.side_effect = UpstreamRequestException("not found")
        batch_job = await _running(orchestrator)

        status = await orchestrator.poll_until_done(batch_job, max_attempts=3, interval_ms=0)

        assert status == UNKNOWN_STATUS
        assert orchestrator.state == BatchJobState.RUNNING

    @pytest.mark.asyncio
    async def test_poll_before_run_is_rejected(self, orchestrator, ads_client):
        batch_job = await orchestrator.create()
        with pytest.raises(InternalServerException):
            await orchestrator.poll_until_done(batch_job, max_attempts=1, interval_ms=0)
        ads_client.batch_job_get_status.assert_not_awaited()


# ===========================================================================
# RESULTS
# ===========================================================================


class TestResults:
    @pytest.mark.asyncio
    async def test_results_parsed_and_ordered_by_index(self, orchestrator, ads_client):
        ads_client.batch_job_list_results.return_value = [
            {
                "operationIndex": "1",
                "mutateOperationResponse": {
                    "campaignResult": {"resourceName": f"customers/{CUSTOMER_ID}/campaigns/111"}
                },
            },
            {
                "operationIndex": "0",
                "mutateOperationResponse": {
                    "campaignBudgetResult": {
                        "resourceName": f"customers/{CUSTOMER_ID}/campaignBudgets/222"
                    }
                },
            },
            {
                "operationIndex": "2",
                "status": {"code": 3, "message": "Keyword text is invalid."},
            },
        ]
        batch_job = await _running(orchestrator)

        results = await orchestrator.list_results(batch_job)

        assert [r.index for r in results] == [0, 1, 2]
        assert results[0].resourceName == f"customers/{CUSTOMER_ID}/campaignBudgets/222"
        assert results[1].resourceName == f"customers/{CUSTOMER_ID}/campaigns/111"
        assert results[2].resourceName is None
        assert results[2].error == {"code": 3, "message": "Keyword text is invalid."}

    @pytest.mark.asyncio
    async def test_missing_operation_index_falls_back_to_position(self, orchestrator, ads_client):
        ads_client.batch_job_list_results.return_value = [
            {"mutateOperationResponse": {"campaignResult": {"resourceName": "a"}}},
            {"mutateOperationResponse": {"adGroupResult": {"resourceName": "b"}}},
        ]
        batch_job = await _running(orchestrator)

        results = await orchestrator.list_results(batch_job)
        assert [(r.index, r.resourceName) for r in results] == [(0, "a"), (1, "b")]

    @pytest.mark.asyncio
    async def test_unreadable_operation_index_falls_back_to_position(
        self, orchestrator, ads_client
    ):
        ads_client.batch_job_list_results.return_value = [
            {
                "operationIndex": None,
                "mutateOperationResponse": {"campaignResult": {"resourceName": "a"}},
            },
            {
                "operationIndex": "n/a",
                "mutateOperationResponse": {"adGroupResult": {"resourceName": "b"}},
            },
        ]
        batch_job = await _running(orchestrator)

        results = await orchestrator.list_results(batch_job)
        assert [(r.index, r.resourceName) for r in results] == [(0, "a"), (1, "b")]

    @pytest.mark.asyncio
    async def test_listing_failure_returns_none(self, orchestrator, ads_client):
        ads_client.batch_job_list_results.side_effect = UpstreamRequestException(
            "job not finished", upstream_status=400
        )
        batch_job = await _running(orchestrator)

        assert await orchestrator.list_results(batch_job) is None

    @pytest.mark.asyncio
    async def test_listing_unknown_job_is_rejected(self, orchestrator):
        await _running(orchestrator)
        with pytest.raises(InternalServerException):
            await orchestrator.list_results(f"customers/{CUSTOMER_ID}/batchJobs/1")
