from dataclasses import dataclass
from core.models.campaign import (
    HEADLINE_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    DISPLAY_PATH_MAX_LENGTH,
    PROMOTION_TARGET_MAX_LENGTH,
    PRICE_HEADER_MAX_LENGTH,
    PRICE_DESCRIPTION_MAX_LENGTH,
    CALLOUT_TEXT_MAX_LENGTH,
    LEAD_FORM_BUSINESS_NAME_MAX_LENGTH,
    LEAD_FORM_HEADLINE_MAX_LENGTH,
    LEAD_FORM_DESCRIPTION_MAX_LENGTH,
    MOBILE_APP_LINK_TEXT_MAX_LENGTH,
    SITELINK_TEXT_MAX_LENGTH,
    SITELINK_DESCRIPTION_MAX_LENGTH,
)

# Source for System limits: https://developers.google.com/google-ads/api/docs/best-practices/system-limits


@dataclass(frozen=True)
class _TempIdConfig:
    """Temporary resource ids used to cross-reference creates within one batch."""

    # Source: https://developers.google.com/google-ads/api/docs/batch-processing/temporary-ids
    BUDGET: int = -1
    CAMPAIGN: int = -2
    AD_GROUP: int = -3
    ASSET_START: int = -10


@dataclass(frozen=True)
class _ResponsiveSearchAdConfig:
    """Constraints for the RSA created with a new ad group."""

    # Source: https://support.google.com/google-ads/answer/7684791
    HEADLINE_MAX_LENGTH: int = HEADLINE_MAX_LENGTH
    HEADLINE_MIN_COUNT: int = 2
    HEADLINE_MAX_COUNT: int = 15
    DESCRIPTION_MAX_LENGTH: int = DESCRIPTION_MAX_LENGTH
    DESCRIPTION_MIN_COUNT: int = 2
    DESCRIPTION_MAX_COUNT: int = 4
    PATH_MAX_LENGTH: int = DISPLAY_PATH_MAX_LENGTH


@dataclass(frozen=True)
class _ExtensionConfig:
    """Text limits for ad group extension assets."""

    # Source: https://developers.google.com/google-ads/api/reference/rpc/v19/Asset
    PROMOTION_TARGET_MAX_LENGTH: int = PROMOTION_TARGET_MAX_LENGTH
    PRICE_HEADER_MAX_LENGTH: int = PRICE_HEADER_MAX_LENGTH
    PRICE_DESCRIPTION_MAX_LENGTH: int = PRICE_DESCRIPTION_MAX_LENGTH
    PRICE_MIN_OFFERINGS: int = 3
    PRICE_MAX_OFFERINGS: int = 8
    CALLOUT_TEXT_MAX_LENGTH: int = CALLOUT_TEXT_MAX_LENGTH
    LEAD_FORM_BUSINESS_NAME_MAX_LENGTH: int = LEAD_FORM_BUSINESS_NAME_MAX_LENGTH
    LEAD_FORM_HEADLINE_MAX_LENGTH: int = LEAD_FORM_HEADLINE_MAX_LENGTH
    LEAD_FORM_DESCRIPTION_MAX_LENGTH: int = LEAD_FORM_DESCRIPTION_MAX_LENGTH
    LEAD_FORM_CTA_DESCRIPTION_MAX_LENGTH: int = 30
    MOBILE_APP_LINK_TEXT_MAX_LENGTH: int = MOBILE_APP_LINK_TEXT_MAX_LENGTH
    SITELINK_TEXT_MAX_LENGTH: int = SITELINK_TEXT_MAX_LENGTH
    SITELINK_DESCRIPTION_MAX_LENGTH: int = SITELINK_DESCRIPTION_MAX_LENGTH


@dataclass(frozen=True)
class _CampaignDefaultsConfig:
    ADVERTISING_CHANNEL_TYPE: str = "SEARCH"
    AD_GROUP_TYPE: str = "SEARCH_STANDARD"
    DELIVERY_METHOD: str = "STANDARD"
    EU_POLITICAL_ADVERTISING: str = "DOES_NOT_CONTAIN_EU_POLITICAL_ADVERTISING"


@dataclass(frozen=True)
class GoogleAdsMutationConfig:
    """Centralized, immutable configuration for Google Ads mutations."""

    TEMP_IDS: _TempIdConfig = _TempIdConfig()
    RSA: _ResponsiveSearchAdConfig = _ResponsiveSearchAdConfig()
    EXTENSIONS: _ExtensionConfig = _ExtensionConfig()
    CAMPAIGN: _CampaignDefaultsConfig = _CampaignDefaultsConfig()

    MICROS_PER_UNIT: int = 1_000_000


# Global immutable configuration instance
CONFIG = GoogleAdsMutationConfig()
