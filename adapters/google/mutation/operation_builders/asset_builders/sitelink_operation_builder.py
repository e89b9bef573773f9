import structlog
from typing import List, Tuple
from core.models.campaign import SitelinkExtension
from adapters.google.mutation.mutation_config import CONFIG
from adapters.google.mutation.operation_builders.asset_builders.asset_draft import (
    AssetDraft,
    ExtensionContext,
    Skip,
)
from adapters.google.mutation.utils import truncate

logger = structlog.get_logger(__name__)

FIELD_TYPE_SITELINK = "SITELINK"


class SitelinkOperationBuilder:
    def build_sitelink_drafts(
        self, sitelinks: List[SitelinkExtension], context: ExtensionContext
    ) -> Tuple[List[AssetDraft], List[Skip]]:
        drafts, skipped = [], []
        for index, sitelink in enumerate(sitelinks):
            slot = f"sitelink[{index}]"
            if not sitelink.linkText:
                skipped.append(Skip(slot, "linkText is required"))
                continue

            final_url = sitelink.finalUrl or context.default_final_url
            if not final_url:
                skipped.append(Skip(slot, "finalUrl is required"))
                continue

            sitelink_asset = {
                "linkText": truncate(
                    sitelink.linkText, CONFIG.EXTENSIONS.SITELINK_TEXT_MAX_LENGTH
                )
            }
            # Populate optional descriptions
            for key in ("description1", "description2"):
                value = getattr(sitelink, key)
                if value:
                    sitelink_asset[key] = truncate(
                        value, CONFIG.EXTENSIONS.SITELINK_DESCRIPTION_MAX_LENGTH
                    )

            drafts.append(
                AssetDraft(
                    slot=slot,
                    field_type=FIELD_TYPE_SITELINK,
                    asset={"sitelinkAsset": sitelink_asset, "finalUrls": [final_url]},
                )
            )

        logger.debug("sitelink_drafts_built", count=len(drafts), skipped=len(skipped))
        return drafts, skipped
