from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

# Single Source of Truth (SSOT) for campaign enums and character limits.
# Pydantic models only shape the payload; limits are enforced by truncation
# in the operation builders so over-long copy never fails a whole campaign.

DEFAULT_MATCH_TYPE = "BROAD"

CampaignStatus = Literal["ENABLED", "PAUSED"]

# API Limits
HEADLINE_MAX_LENGTH = 30
DESCRIPTION_MAX_LENGTH = 90
DISPLAY_PATH_MAX_LENGTH = 15
PROMOTION_TARGET_MAX_LENGTH = 20
PRICE_HEADER_MAX_LENGTH = 25
PRICE_DESCRIPTION_MAX_LENGTH = 25
CALLOUT_TEXT_MAX_LENGTH = 25
LEAD_FORM_BUSINESS_NAME_MAX_LENGTH = 25
LEAD_FORM_HEADLINE_MAX_LENGTH = 30
LEAD_FORM_DESCRIPTION_MAX_LENGTH = 200
MOBILE_APP_LINK_TEXT_MAX_LENGTH = 25
SITELINK_TEXT_MAX_LENGTH = 25
SITELINK_DESCRIPTION_MAX_LENGTH = 35

DEFAULT_BUDGET_AMOUNT_MICROS = 10000
DEFAULT_MAX_CPC_USD = 1.0


class KeywordInput(BaseModel):
    text: str
    matchType: Optional[str] = None


class PromotionExtension(BaseModel):
    promotionTarget: Optional[str] = None
    percentOff: Optional[float] = Field(None, description="Percent, e.g. 15 for 15% off")
    moneyAmountOff: Optional[float] = Field(None, description="Amount in account currency")
    promotionCode: Optional[str] = None
    ordersOverAmount: Optional[float] = None
    occasion: Optional[str] = None
    languageCode: str = "en"
    finalUrl: Optional[str] = None


class PriceOffering(BaseModel):
    header: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    unit: Optional[str] = None
    finalUrl: Optional[str] = None


class PriceExtension(BaseModel):
    type: Optional[str] = None
    priceQualifier: Optional[str] = None
    languageCode: str = "en"
    offerings: List[PriceOffering] = []


class CallExtension(BaseModel):
    phoneNumber: Optional[str] = None
    countryCode: Optional[str] = None


class LeadFormExtension(BaseModel):
    businessName: Optional[str] = None
    headline: Optional[str] = None
    description: Optional[str] = None
    privacyPolicyUrl: Optional[str] = None
    callToActionType: str = "LEARN_MORE"
    callToActionDescription: str = "Get in touch today"
    formFields: List[str] = ["FULL_NAME", "EMAIL", "PHONE_NUMBER"]


class MobileAppExtension(BaseModel):
    appId: Optional[str] = None
    appStore: Optional[str] = None
    linkText: Optional[str] = None


class SitelinkExtension(BaseModel):
    linkText: Optional[str] = None
    description1: Optional[str] = None
    description2: Optional[str] = None
    finalUrl: Optional[str] = None


class CampaignSpec(BaseModel):
    """Everything needed to describe one search campaign and its children."""

    campaignName: Optional[str] = None
    budgetAmountMicros: int = DEFAULT_BUDGET_AMOUNT_MICROS
    status: CampaignStatus = "PAUSED"
    adGroupName: Optional[str] = None
    maxCpcUsd: float = Field(DEFAULT_MAX_CPC_USD, gt=0)
    keywords: List[Union[str, KeywordInput]] = []
    adHeadlines: List[str] = []
    adDescriptions: List[str] = []
    finalUrl: Optional[str] = None
    displayPath1: Optional[str] = None
    displayPath2: Optional[str] = None

    promotion: Optional[PromotionExtension] = None
    price: Optional[PriceExtension] = None
    call: Optional[CallExtension] = None
    callouts: List[str] = []
    leadForm: Optional[LeadFormExtension] = None
    mobileApp: Optional[MobileAppExtension] = None
    sitelinks: List[SitelinkExtension] = []


class CompleteCampaignRequest(CampaignSpec):
    externalUserId: Optional[str] = None
    accountId: Optional[str] = None
    loginCustomerId: Optional[str] = None


class SkippedExtension(BaseModel):
    extension: str
    reason: str


class OperationResult(BaseModel):
    """Outcome of one submitted operation, aligned by index with the batch."""

    index: int
    resourceName: Optional[str] = None
    error: Optional[Dict[str, Any]] = None


class CreatedResource(BaseModel):
    resourceName: str
    id: Optional[str] = None
    name: Optional[str] = None


class CampaignCreationResponse(BaseModel):
    success: bool
    batchJob: str
    status: str
    confirmed: bool
    operationCount: int
    campaign: Optional[CreatedResource] = None
    adGroup: Optional[CreatedResource] = None
    results: Optional[List[OperationResult]] = None
    skippedExtensions: List[SkippedExtension] = []


class SimpleCampaignRequest(BaseModel):
    """A budget and a search campaign, created with two plain mutates."""

    externalUserId: Optional[str] = None
    accountId: Optional[str] = None
    loginCustomerId: Optional[str] = None
    campaignName: Optional[str] = None
    budgetAmountMicros: int = DEFAULT_BUDGET_AMOUNT_MICROS
    status: CampaignStatus = "PAUSED"


class SimpleCampaignResponse(BaseModel):
    success: bool
    budget: Any
    campaign: Any
