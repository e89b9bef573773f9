import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Tuple

import structlog

from adapters.google.client import AdsIdentity, GoogleAdsClient, get_google_ads_client
from adapters.google.mutation.batch_job_orchestrator import DONE_STATUS, BatchJobOrchestrator
from adapters.google.mutation.campaign_graph_builder import CampaignGraph, CampaignGraphBuilder
from config.settings import Settings, get_settings
from core.models.campaign import (
    CampaignCreationResponse,
    CampaignSpec,
    CompleteCampaignRequest,
    CreatedResource,
    OperationResult,
)
from core.services.currency_normalizer import BASE_CURRENCY, CurrencyNormalizer
from exceptions.custom_exceptions import BusinessValidationException

logger = structlog.get_logger(__name__)


class CampaignCreationService:
    """Creates a complete search campaign in one Google Ads batch job."""

    def __init__(
        self,
        client: GoogleAdsClient,
        settings: Settings,
        currency_normalizer: Optional[CurrencyNormalizer] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.settings = settings
        self.currency_normalizer = currency_normalizer or CurrencyNormalizer(
            client, settings.exchange_rate_api_url
        )
        self.graph_builder = CampaignGraphBuilder()
        self._sleep = sleep

    async def create_complete_campaign(
        self, customer_id: str, request: CompleteCampaignRequest
    ) -> CampaignCreationResponse:
        identity = self._validate(customer_id, request)
        log = logger.bind(customer_id=customer_id, campaign_name=request.campaignName)

        currency_code, cpc_bid_micros = await self._resolve_cpc(customer_id, request, identity)
        graph = self.graph_builder.build(
            customer_id, request, cpc_bid_micros, currency_code=currency_code
        )

        orchestrator = BatchJobOrchestrator(
            self.client, customer_id, identity, sleep=self._sleep
        )
        batch_job = await orchestrator.create()
        await orchestrator.add_operations(batch_job, graph.operations)
        await orchestrator.run(batch_job)

        status = await orchestrator.poll_until_done(
            batch_job,
            max_attempts=self.settings.batch_job_max_poll_attempts,
            interval_ms=self.settings.batch_job_poll_interval_ms,
        )
        results = await orchestrator.list_results(batch_job)
        confirmed = status == DONE_STATUS

        log.info(
            "complete_campaign_submitted",
            batch_job=batch_job,
            status=status,
            confirmed=confirmed,
            operations=len(graph.operations),
            skipped_extensions=len(graph.skipped),
        )
        # success reflects submission; confirmed reflects an observed DONE
        return CampaignCreationResponse(
            success=True,
            batchJob=batch_job,
            status=status,
            confirmed=confirmed,
            operationCount=len(graph.operations),
            campaign=_created(graph, results, "campaign", request.campaignName),
            adGroup=_created(graph, results, "adGroup", request.adGroupName),
            results=results,
            skippedExtensions=graph.skipped,
        )

    def _validate(self, customer_id: str, request: CompleteCampaignRequest) -> AdsIdentity:
        missing = [
            name
            for name, value in (
                ("customerId", customer_id),
                ("externalUserId", request.externalUserId),
                ("accountId", request.accountId),
                ("campaignName", request.campaignName),
            )
            if not value
        ]
        if missing:
            raise BusinessValidationException(
                f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required",
                details={"missing": missing},
            )
        return AdsIdentity(
            external_user_id=request.externalUserId,
            account_id=request.accountId,
            login_customer_id=request.loginCustomerId,
        )

    async def _resolve_cpc(
        self, customer_id: str, spec: CampaignSpec, identity: AdsIdentity
    ) -> Tuple[str, int]:
        """Account currency and the ad group CPC bid in that currency's micros."""
        if not spec.adGroupName:
            # No ad group, no bid: skip the currency lookups entirely
            return BASE_CURRENCY, 0
        currency_code = await self.currency_normalizer.resolve_currency(customer_id, identity)
        cpc_bid_micros = await self.currency_normalizer.to_micros(spec.maxCpcUsd, currency_code)
        return currency_code, cpc_bid_micros


def _created(
    graph: CampaignGraph,
    results: Optional[List[OperationResult]],
    ref_name: str,
    name: Optional[str],
) -> Optional[CreatedResource]:
    if ref_name not in graph.refs or not results:
        return None
    index = graph.index_of(ref_name)
    result = next((r for r in results if r.index == index), None)
    if result is None or not result.resourceName:
        return None
    return CreatedResource(
        resourceName=result.resourceName,
        id=result.resourceName.rsplit("/", 1)[-1],
        name=name,
    )


_service: Optional[CampaignCreationService] = None


def get_campaign_creation_service() -> CampaignCreationService:
    global _service
    if _service is None:
        _service = CampaignCreationService(get_google_ads_client(), get_settings())
    return _service
