from dataclasses import dataclass, field
from typing import Any, Dict, List

import structlog

from adapters.google.mutation.mutation_config import CONFIG
from adapters.google.mutation.operation_builders.asset_builders import (
    ExtensionAssetBuilder,
    ResponsiveSearchAdBuilder,
)
from adapters.google.mutation.operation_builders.asset_builders.asset_draft import (
    ExtensionContext,
    Skip,
    link_drafts,
)
from adapters.google.mutation.operation_builders.campaign_operation_builder import (
    CampaignOperationBuilder,
)
from adapters.google.mutation.operation_builders.keyword_operation_builder import (
    KeywordOperationBuilder,
)
from adapters.google.mutation.utils import normalize_final_url
from core.models.campaign import CampaignSpec, SkippedExtension
from exceptions.custom_exceptions import BusinessValidationException

logger = structlog.get_logger(__name__)

NO_AD_GROUP_REASON = "extensions are linked to the ad group and no adGroupName was given"


@dataclass(frozen=True)
class CampaignGraph:
    """Ordered mutate operations for one campaign plus the temp refs they use.

    ``refs`` maps logical names (``budget``, ``campaign``, ``adGroup``,
    ``callout[0]``...) to the temp resource names inside ``operations``.
    ``next_temp_id`` is the first asset temp id not handed out.
    """

    operations: List[Dict[str, Any]]
    refs: Dict[str, str]
    next_temp_id: int
    skipped: List[SkippedExtension] = field(default_factory=list)

    def index_of(self, ref_name: str) -> int:
        """Position of the operation that creates ``ref_name``."""
        target = self.refs[ref_name]
        for index, operation in enumerate(self.operations):
            create = next(iter(operation.values())).get("create", {})
            if create.get("resourceName") == target:
                return index
        raise KeyError(ref_name)


class CampaignGraphBuilder:
    """Builds the full operation list for a new search campaign.

    No network calls and no clock or randomness: identical input with the
    same asset temp id start yields identical output.
    """

    def __init__(self):
        self.campaign_builder = CampaignOperationBuilder()
        self.keyword_builder = KeywordOperationBuilder()
        self.ad_builder = ResponsiveSearchAdBuilder()
        self.extension_builder = ExtensionAssetBuilder()

    def build(
        self,
        customer_id: str,
        spec: CampaignSpec,
        cpc_bid_micros: int,
        currency_code: str = "USD",
        asset_temp_id_start: int = CONFIG.TEMP_IDS.ASSET_START,
    ) -> CampaignGraph:
        if not spec.campaignName:
            raise BusinessValidationException("campaignName is required")

        operations: List[Dict[str, Any]] = [
            self.campaign_builder.build_budget_op(
                customer_id, spec.campaignName, spec.budgetAmountMicros
            ),
            self.campaign_builder.build_campaign_op(
                customer_id, spec.campaignName, spec.status
            ),
        ]
        refs = {
            "budget": self.campaign_builder.budget_ref(customer_id),
            "campaign": self.campaign_builder.campaign_ref(customer_id),
        }
        normalized_url = normalize_final_url(spec.finalUrl) if spec.finalUrl else None

        if not spec.adGroupName:
            skipped = [
                SkippedExtension(extension=name, reason=NO_AD_GROUP_REASON)
                for name in _present_extensions(spec)
            ]
            return CampaignGraph(
                operations=operations,
                refs=refs,
                next_temp_id=asset_temp_id_start,
                skipped=skipped,
            )

        ad_group_ref = self.campaign_builder.ad_group_ref(customer_id)
        refs["adGroup"] = ad_group_ref
        operations.append(
            self.campaign_builder.build_ad_group_op(
                customer_id, spec.adGroupName, cpc_bid_micros
            )
        )
        operations.extend(self.keyword_builder.build_keywords_ops(spec.keywords, ad_group_ref))

        if self.ad_builder.has_minimum_assets(
            spec.adHeadlines, spec.adDescriptions, spec.finalUrl
        ):
            operations.append(
                self.ad_builder.build_ad_op(
                    ad_group_ref=ad_group_ref,
                    headlines=spec.adHeadlines,
                    descriptions=spec.adDescriptions,
                    url=normalized_url,
                    display_path1=spec.displayPath1,
                    display_path2=spec.displayPath2,
                )
            )

        drafts, skips = self.extension_builder.build_drafts(
            spec,
            ExtensionContext(
                default_final_url=normalized_url.final_url if normalized_url else None,
                currency_code=currency_code,
            ),
        )
        asset_ops, asset_refs, next_temp_id = link_drafts(
            customer_id, drafts, ad_group_ref, asset_temp_id_start
        )
        operations.extend(asset_ops)
        refs.update(asset_refs)

        logger.info(
            "campaign_graph_built",
            customer_id=customer_id,
            operations=len(operations),
            assets=len(drafts),
            skipped=len(skips),
        )
        return CampaignGraph(
            operations=operations,
            refs=refs,
            next_temp_id=next_temp_id,
            skipped=[_to_skipped(skip) for skip in skips],
        )


def _present_extensions(spec: CampaignSpec) -> List[str]:
    present = [name for name in ("promotion", "price", "call") if getattr(spec, name) is not None]
    present.extend(f"callout[{index}]" for index in range(len(spec.callouts)))
    present.extend(name for name in ("leadForm", "mobileApp") if getattr(spec, name) is not None)
    present.extend(f"sitelink[{index}]" for index in range(len(spec.sitelinks)))
    return present


def _to_skipped(skip: Skip) -> SkippedExtension:
    return SkippedExtension(extension=skip.extension, reason=skip.reason)


def build_campaign_graph(
    customer_id: str,
    spec: CampaignSpec,
    cpc_bid_micros: int,
    currency_code: str = "USD",
    asset_temp_id_start: int = CONFIG.TEMP_IDS.ASSET_START,
) -> CampaignGraph:
    return CampaignGraphBuilder().build(
        customer_id,
        spec,
        cpc_bid_micros,
        currency_code=currency_code,
        asset_temp_id_start=asset_temp_id_start,
    )
