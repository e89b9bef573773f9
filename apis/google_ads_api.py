from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from adapters.google.client import AdsIdentity, GoogleAdsClient, get_google_ads_client
from adapters.pipedream.connect_proxy import ConnectProxy, get_connect_proxy
from exceptions.custom_exceptions import BusinessValidationException

router = APIRouter(prefix="/api/customers", tags=["google-ads"])
listing_router = APIRouter(prefix="/api", tags=["google-ads"])

DEFAULT_KEYWORD_LANGUAGE = "languageConstants/1000"
DEFAULT_GEO_TARGET_CONSTANTS = ("geoTargetConstants/2376",)


class SearchRequest(BaseModel):
    query: Optional[str] = Field(None, description="GAQL query, passed through unchanged")


class MutateRequest(BaseModel):
    externalUserId: Optional[str] = None
    accountId: Optional[str] = None
    loginCustomerId: Optional[str] = None
    operations: Optional[List[Dict[str, Any]]] = None


class KeywordIdeasRequest(BaseModel):
    externalUserId: Optional[str] = None
    accountId: Optional[str] = None
    loginCustomerId: Optional[str] = None
    keywords: List[str] = []
    url: Optional[str] = None
    language: str = DEFAULT_KEYWORD_LANGUAGE
    geoTargetConstants: List[str] = Field(
        default_factory=lambda: list(DEFAULT_GEO_TARGET_CONSTANTS)
    )


def _identity(
    external_user_id: Optional[str],
    account_id: Optional[str],
    login_customer_id: Optional[str] = None,
) -> AdsIdentity:
    if not external_user_id or not account_id:
        raise BusinessValidationException("externalUserId and accountId are required")
    return AdsIdentity(
        external_user_id=external_user_id,
        account_id=account_id,
        login_customer_id=login_customer_id,
    )


@router.get("")
async def list_customers(
    external_user_id: Optional[str] = Query(None, alias="externalUserId"),
    account_id: Optional[str] = Query(None, alias="accountId"),
    client: GoogleAdsClient = Depends(get_google_ads_client),
):
    identity = _identity(external_user_id, account_id)
    return await client.list_accessible_customers(identity)


@router.post("/{customer_id}/googleAds:search")
async def search(
    customer_id: str,
    body: SearchRequest,
    external_user_id: Optional[str] = Query(None, alias="externalUserId"),
    account_id: Optional[str] = Query(None, alias="accountId"),
    login_customer_id: Optional[str] = Query(None, alias="loginCustomerId"),
    client: GoogleAdsClient = Depends(get_google_ads_client),
):
    identity = _identity(external_user_id, account_id, login_customer_id)
    if not body.query:
        raise BusinessValidationException("query is required in request body")
    results = await client.search(customer_id, body.query, identity)
    return {"results": results}


@router.post("/{customer_id}/{resource}/mutate")
async def mutate(
    customer_id: str,
    resource: str,
    body: MutateRequest,
    client: GoogleAdsClient = Depends(get_google_ads_client),
):
    identity = _identity(body.externalUserId, body.accountId, body.loginCustomerId)
    if not body.operations:
        raise BusinessValidationException("operations are required")
    return await client.mutate(customer_id, resource, body.operations, identity)


def _numeric_id(name: str, value: Optional[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    if not (value.isascii() and value.isdigit()):
        raise BusinessValidationException(f"{name} must be numeric", details={name: value})
    return int(value)


def _listing_identity(
    external_user_id: Optional[str],
    account_id: Optional[str],
    customer_id: Optional[str],
    login_customer_id: Optional[str],
) -> AdsIdentity:
    if not external_user_id or not account_id or not customer_id:
        raise BusinessValidationException(
            "externalUserId, accountId, and customerId are required"
        )
    # Listings run as the customer itself unless a manager is named
    return _identity(external_user_id, account_id, login_customer_id or customer_id)


@router.get("/{customer_id}")
async def get_customer(
    customer_id: str,
    external_user_id: Optional[str] = Query(None, alias="externalUserId"),
    account_id: Optional[str] = Query(None, alias="accountId"),
    login_customer_id: Optional[str] = Query(None, alias="loginCustomerId"),
    client: GoogleAdsClient = Depends(get_google_ads_client),
):
    identity = _identity(external_user_id, account_id, login_customer_id)
    return await client.get_customer(customer_id, identity)


@router.post("/{customer_id}/generateKeywordIdeas")
async def generate_keyword_ideas(
    customer_id: str,
    body: KeywordIdeasRequest,
    client: GoogleAdsClient = Depends(get_google_ads_client),
):
    identity = _identity(body.externalUserId, body.accountId, body.loginCustomerId)
    if not body.keywords and not body.url:
        raise BusinessValidationException("At least one keyword or url is required")
    return await client.generate_keyword_ideas(
        customer_id,
        identity,
        keywords=body.keywords,
        url=body.url,
        language=body.language,
        geo_target_constants=body.geoTargetConstants,
    )


@listing_router.get("/campaigns")
async def list_campaigns(
    external_user_id: Optional[str] = Query(None, alias="externalUserId"),
    account_id: Optional[str] = Query(None, alias="accountId"),
    customer_id: Optional[str] = Query(None, alias="customerId"),
    login_customer_id: Optional[str] = Query(None, alias="loginCustomerId"),
    client: GoogleAdsClient = Depends(get_google_ads_client),
):
    identity = _listing_identity(external_user_id, account_id, customer_id, login_customer_id)
    return {"results": await client.list_campaigns(customer_id, identity)}


@listing_router.get("/ad-groups")
async def list_ad_groups(
    external_user_id: Optional[str] = Query(None, alias="externalUserId"),
    account_id: Optional[str] = Query(None, alias="accountId"),
    customer_id: Optional[str] = Query(None, alias="customerId"),
    campaign_id: Optional[str] = Query(None, alias="campaignId"),
    login_customer_id: Optional[str] = Query(None, alias="loginCustomerId"),
    client: GoogleAdsClient = Depends(get_google_ads_client),
):
    identity = _listing_identity(external_user_id, account_id, customer_id, login_customer_id)
    results = await client.list_ad_groups(
        customer_id, identity, campaign_id=_numeric_id("campaignId", campaign_id)
    )
    return {"results": results}


@listing_router.get("/ads")
async def list_ads(
    external_user_id: Optional[str] = Query(None, alias="externalUserId"),
    account_id: Optional[str] = Query(None, alias="accountId"),
    customer_id: Optional[str] = Query(None, alias="customerId"),
    ad_group_id: Optional[str] = Query(None, alias="adGroupId"),
    login_customer_id: Optional[str] = Query(None, alias="loginCustomerId"),
    client: GoogleAdsClient = Depends(get_google_ads_client),
):
    identity = _listing_identity(external_user_id, account_id, customer_id, login_customer_id)
    results = await client.list_ads(
        customer_id, identity, ad_group_id=_numeric_id("adGroupId", ad_group_id)
    )
    return {"results": results}


@listing_router.get("/account-details/{account_id}")
async def get_account_details(
    account_id: str,
    external_user_id: Optional[str] = Query(None, alias="externalUserId"),
    proxy: ConnectProxy = Depends(get_connect_proxy),
):
    if not external_user_id:
        raise BusinessValidationException("externalUserId is required")
    return await proxy.get_account(account_id)
