from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional

import structlog

from adapters.pipedream.connect_proxy import ConnectProxy, get_connect_proxy
from config.settings import get_settings
from exceptions.custom_exceptions import UpstreamRequestException

logger = structlog.get_logger(__name__)

CAMPAIGNS_QUERY = (
    "SELECT campaign.id, campaign.name, campaign.status, "
    "campaign.advertising_channel_type, campaign.start_date, campaign.end_date, "
    "campaign_budget.amount_micros, campaign_budget.delivery_method "
    "FROM campaign ORDER BY campaign.name"
)

AD_GROUPS_QUERY = (
    "SELECT ad_group.id, ad_group.name, ad_group.status, ad_group.type, "
    "ad_group.cpc_bid_micros, campaign.id, campaign.name "
    "FROM ad_group"
)

ADS_QUERY = (
    "SELECT ad_group_ad.ad.id, ad_group_ad.ad.name, ad_group_ad.ad.type, "
    "ad_group_ad.ad.final_urls, ad_group_ad.ad.responsive_search_ad.headlines, "
    "ad_group_ad.ad.responsive_search_ad.descriptions, ad_group_ad.status, "
    "ad_group.id, ad_group.name "
    "FROM ad_group_ad"
)


@dataclass(frozen=True)
class AdsIdentity:
    """Who a Google Ads call is made for: the app user and their connected account."""

    external_user_id: str
    account_id: str
    login_customer_id: Optional[str] = None


class GoogleAdsClient:
    """Google Ads REST calls relayed through the Pipedream Connect proxy.

    Each call is wrapped in the envelope the Google Ads proxy expects
    (``url``/``method``/``data``) and posted on behalf of the connected
    account. Non-success responses surface as ``UpstreamRequestException``.
    """

    def __init__(self, proxy: ConnectProxy, proxy_url: str, api_version: str) -> None:
        self.proxy = proxy
        self.proxy_url = proxy_url
        self.api_version = api_version

    async def request(
        self,
        path: str,
        identity: AdsIdentity,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        envelope: Dict[str, Any] = {
            "url": f"/{self.api_version}{path}",
            "method": method.upper(),
        }
        if body is not None:
            envelope["data"] = body
        if identity.login_customer_id:
            envelope["headers"] = {"login-customer-id": identity.login_customer_id}

        logger.debug("Google Ads request", method=envelope["method"], url=envelope["url"])
        return await self.proxy.post(
            self.proxy_url,
            envelope,
            external_user_id=identity.external_user_id,
            account_id=identity.account_id,
        )

    async def list_accessible_customers(self, identity: AdsIdentity) -> Any:
        return await self.request("/customers:listAccessibleCustomers", identity)

    async def search(self, customer_id: str, query: str, identity: AdsIdentity) -> List[dict]:
        """Execute GAQL query via googleAds:search."""
        response = await self.request(
            f"/customers/{customer_id}/googleAds:search",
            identity,
            method="POST",
            body={"query": query},
        )
        return response.get("results", []) if isinstance(response, dict) else []

    async def mutate(
        self,
        customer_id: str,
        resource: str,
        operations: List[Dict[str, Any]],
        identity: AdsIdentity,
    ) -> Any:
        """Execute operations via the resource-specific :mutate endpoint."""
        return await self.request(
            f"/customers/{customer_id}/{resource}:mutate",
            identity,
            method="POST",
            body={"operations": operations},
        )

    async def get_customer(self, customer_id: str, identity: AdsIdentity) -> Any:
        return await self.request(f"/customers/{customer_id}", identity)

    async def generate_keyword_ideas(
        self,
        customer_id: str,
        identity: AdsIdentity,
        keywords: List[str],
        url: Optional[str],
        language: str,
        geo_target_constants: List[str],
    ) -> Any:
        """Keyword Planner ideas seeded by keywords, a URL, or both."""
        body: Dict[str, Any] = {
            "language": language,
            "geoTargetConstants": geo_target_constants,
            "includeAdultKeywords": False,
            "keywordPlanNetwork": "GOOGLE_SEARCH",
        }
        if keywords and url:
            body["keywordAndUrlSeed"] = {"keywords": keywords, "url": url}
        elif keywords:
            body["keywordSeed"] = {"keywords": keywords}
        else:
            body["urlSeed"] = {"url": url}
        return await self.request(
            f"/customers/{customer_id}:generateKeywordIdeas",
            identity,
            method="POST",
            body=body,
        )

    async def list_campaigns(self, customer_id: str, identity: AdsIdentity) -> List[dict]:
        return await self.search(customer_id, CAMPAIGNS_QUERY, identity)

    async def list_ad_groups(
        self, customer_id: str, identity: AdsIdentity, campaign_id: Optional[int] = None
    ) -> List[dict]:
        query = AD_GROUPS_QUERY
        if campaign_id is not None:
            query += f" WHERE campaign.id = {int(campaign_id)}"
        return await self.search(customer_id, f"{query} ORDER BY ad_group.name", identity)

    async def list_ads(
        self, customer_id: str, identity: AdsIdentity, ad_group_id: Optional[int] = None
    ) -> List[dict]:
        query = ADS_QUERY
        if ad_group_id is not None:
            query += f" WHERE ad_group.id = {int(ad_group_id)}"
        return await self.search(customer_id, f"{query} ORDER BY ad_group_ad.ad.id", identity)

    async def batch_job_create(self, customer_id: str, identity: AdsIdentity) -> Dict[str, Any]:
        response = await self.request(
            f"/customers/{customer_id}/batchJobs:mutate",
            identity,
            method="POST",
            body={"operation": {"create": {}}},
        )
        if not isinstance(response, dict):
            return {}
        return response.get("result") or {}

    async def batch_job_add_operations(
        self,
        batch_job: str,
        operations: List[Dict[str, Any]],
        identity: AdsIdentity,
    ) -> Any:
        return await self.request(
            f"/{batch_job}:addOperations",
            identity,
            method="POST",
            body={"mutateOperations": operations},
        )

    async def batch_job_run(self, batch_job: str, identity: AdsIdentity) -> Any:
        return await self.request(f"/{batch_job}:run", identity, method="POST", body={})

    async def batch_job_get_status(
        self, customer_id: str, batch_job: str, identity: AdsIdentity
    ) -> str:
        query = (
            "SELECT batch_job.status FROM batch_job "
            f"WHERE batch_job.resource_name = '{batch_job}'"
        )
        rows = await self.search(customer_id, query, identity)
        if not rows:
            raise UpstreamRequestException(
                message=f"Batch job {batch_job} not found",
                details={"batch_job": batch_job},
            )
        return rows[0].get("batchJob", {}).get("status", "UNKNOWN")

    async def batch_job_list_results(self, batch_job: str, identity: AdsIdentity) -> List[dict]:
        response = await self.request(f"/{batch_job}:listResults", identity)
        if not isinstance(response, dict):
            return []
        return response.get("results", [])


@lru_cache(maxsize=1)
def get_google_ads_client() -> GoogleAdsClient:
    settings = get_settings()
    return GoogleAdsClient(
        proxy=get_connect_proxy(),
        proxy_url=settings.google_ads_proxy_url,
        api_version=settings.google_ads_api_version,
    )
