import structlog
from typing import Any, Dict, List, Optional, Tuple
from core.models.campaign import (
    CallExtension,
    CampaignSpec,
    LeadFormExtension,
    MobileAppExtension,
    PriceExtension,
    PromotionExtension,
)
from adapters.google.mutation.mutation_config import CONFIG
from adapters.google.mutation.operation_builders.asset_builders.asset_draft import (
    AssetDraft,
    ExtensionContext,
    Skip,
)
from adapters.google.mutation.operation_builders.asset_builders.sitelink_operation_builder import (
    SitelinkOperationBuilder,
)
from adapters.google.mutation.utils import amount_to_micros, truncate

logger = structlog.get_logger(__name__)

DraftResult = Tuple[List[AssetDraft], List[Skip]]


class ExtensionAssetBuilder:
    """Turns the optional extension blocks of a campaign into asset drafts.

    Blocks missing a required sub-field are skipped with a reason instead of
    failing the campaign. Drafts come back in a fixed order: promotion, price,
    call, callouts, lead form, mobile app, sitelinks.
    """

    def __init__(self):
        self.sitelink_builder = SitelinkOperationBuilder()

    def build_drafts(self, spec: CampaignSpec, context: ExtensionContext) -> DraftResult:
        drafts: List[AssetDraft] = []
        skipped: List[Skip] = []

        steps = [
            (spec.promotion, self.build_promotion_drafts),
            (spec.price, self.build_price_drafts),
            (spec.call, self.build_call_drafts),
            (spec.callouts, self.build_callout_drafts),
            (spec.leadForm, self.build_lead_form_drafts),
            (spec.mobileApp, self.build_mobile_app_drafts),
            (spec.sitelinks, self.sitelink_builder.build_sitelink_drafts),
        ]
        for block, builder in steps:
            if not block:
                continue
            step_drafts, step_skipped = builder(block, context)
            drafts.extend(step_drafts)
            skipped.extend(step_skipped)

        for skip in skipped:
            logger.info("extension_skipped", extension=skip.extension, reason=skip.reason)
        return drafts, skipped

    def build_promotion_drafts(
        self, promotion: PromotionExtension, context: ExtensionContext
    ) -> DraftResult:
        if not promotion.promotionTarget:
            return [], [Skip("promotion", "promotionTarget is required")]
        if promotion.percentOff is None and promotion.moneyAmountOff is None:
            return [], [Skip("promotion", "percentOff or moneyAmountOff is required")]
        final_url = promotion.finalUrl or context.default_final_url
        if not final_url:
            return [], [Skip("promotion", "finalUrl is required")]

        promotion_asset: Dict[str, Any] = {
            "promotionTarget": truncate(
                promotion.promotionTarget, CONFIG.EXTENSIONS.PROMOTION_TARGET_MAX_LENGTH
            ),
            "languageCode": promotion.languageCode,
        }
        if promotion.percentOff is not None:
            # percentOff is expressed in micros of 100%: 15% -> 150000
            promotion_asset["percentOff"] = str(amount_to_micros(promotion.percentOff / 100))
        else:
            promotion_asset["moneyAmountOff"] = _money(
                promotion.moneyAmountOff, context.currency_code
            )
        if promotion.promotionCode:
            promotion_asset["promotionCode"] = promotion.promotionCode
        elif promotion.ordersOverAmount is not None:
            # Google accepts either a promotion code or an order minimum, not both
            promotion_asset["ordersOverAmount"] = _money(
                promotion.ordersOverAmount, context.currency_code
            )
        if promotion.occasion:
            promotion_asset["occasion"] = promotion.occasion

        return [
            AssetDraft(
                slot="promotion",
                field_type="PROMOTION",
                asset={"promotionAsset": promotion_asset, "finalUrls": [final_url]},
            )
        ], []

    def build_price_drafts(
        self, price: PriceExtension, context: ExtensionContext
    ) -> DraftResult:
        if not price.type:
            return [], [Skip("price", "type is required")]

        offerings = []
        for offering in price.offerings[: CONFIG.EXTENSIONS.PRICE_MAX_OFFERINGS]:
            final_url = offering.finalUrl or context.default_final_url
            if not (offering.header and offering.description and offering.price is not None and final_url):
                continue
            price_offering = {
                "header": truncate(offering.header, CONFIG.EXTENSIONS.PRICE_HEADER_MAX_LENGTH),
                "description": truncate(
                    offering.description, CONFIG.EXTENSIONS.PRICE_DESCRIPTION_MAX_LENGTH
                ),
                "price": _money(offering.price, context.currency_code),
                "finalUrl": final_url,
            }
            if offering.unit:
                price_offering["unit"] = offering.unit
            offerings.append(price_offering)

        if len(offerings) < CONFIG.EXTENSIONS.PRICE_MIN_OFFERINGS:
            return [], [
                Skip(
                    "price",
                    f"at least {CONFIG.EXTENSIONS.PRICE_MIN_OFFERINGS} complete offerings "
                    f"are required, got {len(offerings)}",
                )
            ]

        price_asset: Dict[str, Any] = {
            "type": price.type,
            "languageCode": price.languageCode,
            "priceOfferings": offerings,
        }
        if price.priceQualifier:
            price_asset["priceQualifier"] = price.priceQualifier

        return [AssetDraft(slot="price", field_type="PRICE", asset={"priceAsset": price_asset})], []

    def build_call_drafts(self, call: CallExtension, context: ExtensionContext) -> DraftResult:
        if not call.phoneNumber or not call.countryCode:
            return [], [Skip("call", "phoneNumber and countryCode are required")]
        return [
            AssetDraft(
                slot="call",
                field_type="CALL",
                asset={
                    "callAsset": {
                        "phoneNumber": call.phoneNumber,
                        "countryCode": call.countryCode,
                    }
                },
            )
        ], []

    def build_callout_drafts(self, callouts: List[str], context: ExtensionContext) -> DraftResult:
        drafts, skipped = [], []
        for index, text in enumerate(callouts):
            slot = f"callout[{index}]"
            if not text or not text.strip():
                skipped.append(Skip(slot, "callout text is empty"))
                continue
            drafts.append(
                AssetDraft(
                    slot=slot,
                    field_type="CALLOUT",
                    asset={
                        "calloutAsset": {
                            "calloutText": truncate(text, CONFIG.EXTENSIONS.CALLOUT_TEXT_MAX_LENGTH)
                        }
                    },
                )
            )
        return drafts, skipped

    def build_lead_form_drafts(
        self, lead_form: LeadFormExtension, context: ExtensionContext
    ) -> DraftResult:
        missing = [
            name
            for name in ("businessName", "headline", "description", "privacyPolicyUrl")
            if not getattr(lead_form, name)
        ]
        if missing:
            return [], [Skip("leadForm", f"missing {', '.join(missing)}")]

        return [
            AssetDraft(
                slot="leadForm",
                field_type="LEAD_FORM",
                asset={
                    "leadFormAsset": {
                        "businessName": truncate(
                            lead_form.businessName,
                            CONFIG.EXTENSIONS.LEAD_FORM_BUSINESS_NAME_MAX_LENGTH,
                        ),
                        "headline": truncate(
                            lead_form.headline, CONFIG.EXTENSIONS.LEAD_FORM_HEADLINE_MAX_LENGTH
                        ),
                        "description": truncate(
                            lead_form.description,
                            CONFIG.EXTENSIONS.LEAD_FORM_DESCRIPTION_MAX_LENGTH,
                        ),
                        "privacyPolicyUrl": lead_form.privacyPolicyUrl,
                        "callToActionType": lead_form.callToActionType,
                        "callToActionDescription": truncate(
                            lead_form.callToActionDescription,
                            CONFIG.EXTENSIONS.LEAD_FORM_CTA_DESCRIPTION_MAX_LENGTH,
                        ),
                        "fields": [{"inputType": field} for field in lead_form.formFields],
                    }
                },
            )
        ], []

    def build_mobile_app_drafts(
        self, mobile_app: MobileAppExtension, context: ExtensionContext
    ) -> DraftResult:
        if not (mobile_app.appId and mobile_app.appStore and mobile_app.linkText):
            return [], [Skip("mobileApp", "appId, appStore and linkText are required")]
        return [
            AssetDraft(
                slot="mobileApp",
                field_type="MOBILE_APP",
                asset={
                    "mobileAppAsset": {
                        "appId": mobile_app.appId,
                        "appStore": mobile_app.appStore,
                        "linkText": truncate(
                            mobile_app.linkText, CONFIG.EXTENSIONS.MOBILE_APP_LINK_TEXT_MAX_LENGTH
                        ),
                    }
                },
            )
        ], []


def _money(amount: Optional[float], currency_code: str) -> Dict[str, str]:
    return {"amountMicros": str(amount_to_micros(amount)), "currencyCode": currency_code}
