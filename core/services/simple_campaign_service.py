from typing import Any, Dict, Optional

import structlog

from adapters.google.client import AdsIdentity, GoogleAdsClient, get_google_ads_client
from adapters.google.mutation.mutation_config import CONFIG
from core.models.campaign import SimpleCampaignRequest, SimpleCampaignResponse
from exceptions.custom_exceptions import BusinessValidationException, UpstreamRequestException

logger = structlog.get_logger(__name__)


class SimpleCampaignService:
    """Creates a budget, then a manual-CPC search campaign on it.

    Unlike the complete campaign flow this is two synchronous mutates, so
    a failed campaign create leaves the budget behind.
    """

    def __init__(self, client: GoogleAdsClient) -> None:
        self.client = client

    async def create_simple_campaign(
        self, customer_id: str, request: SimpleCampaignRequest
    ) -> SimpleCampaignResponse:
        identity = _validate(request)
        log = logger.bind(customer_id=customer_id, campaign_name=request.campaignName)

        budget = await self.client.mutate(
            customer_id,
            "campaignBudgets",
            [{"create": _budget(request)}],
            identity,
        )
        budget_resource = _first_resource_name(budget)
        if not budget_resource:
            raise UpstreamRequestException(
                message="Failed to create budget: no resource name returned",
                body=budget,
                details={"customer_id": customer_id},
            )
        log.info("simple_campaign_budget_created", budget=budget_resource)

        campaign = await self.client.mutate(
            customer_id,
            "campaigns",
            [{"create": _campaign(request, budget_resource)}],
            identity,
        )
        log.info("simple_campaign_created", campaign=_first_resource_name(campaign))
        return SimpleCampaignResponse(success=True, budget=budget, campaign=campaign)


def _validate(request: SimpleCampaignRequest) -> AdsIdentity:
    missing = [
        name
        for name, value in (
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


def _budget(request: SimpleCampaignRequest) -> Dict[str, Any]:
    return {
        "name": f"{request.campaignName} Budget",
        "deliveryMethod": CONFIG.CAMPAIGN.DELIVERY_METHOD,
        "amountMicros": str(request.budgetAmountMicros),
    }


def _campaign(request: SimpleCampaignRequest, budget_resource: str) -> Dict[str, Any]:
    return {
        "campaignBudget": budget_resource,
        "name": request.campaignName,
        "advertisingChannelType": CONFIG.CAMPAIGN.ADVERTISING_CHANNEL_TYPE,
        "status": request.status,
        "manualCpc": {},
        "networkSettings": {
            "targetGoogleSearch": True,
            "targetSearchNetwork": True,
            "targetContentNetwork": False,
            "targetPartnerSearchNetwork": False,
        },
        "containsEuPoliticalAdvertising": CONFIG.CAMPAIGN.EU_POLITICAL_ADVERTISING,
    }


def _first_resource_name(response: Any) -> Optional[str]:
    if not isinstance(response, dict):
        return None
    results = response.get("results") or []
    if not results or not isinstance(results[0], dict):
        return None
    return results[0].get("resourceName")


_service: Optional[SimpleCampaignService] = None


def get_simple_campaign_service() -> SimpleCampaignService:
    global _service
    if _service is None:
        _service = SimpleCampaignService(get_google_ads_client())
    return _service
