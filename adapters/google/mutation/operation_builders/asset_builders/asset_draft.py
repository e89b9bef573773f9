from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from adapters.google.mutation.utils import resource_name


@dataclass(frozen=True)
class AssetDraft:
    """An extension asset body waiting for its temp resource name.

    ``slot`` names the asset in the graph's ref map (``promotion``,
    ``callout[1]``...); ``field_type`` is the ad group asset link type.
    """

    slot: str
    field_type: str
    asset: Dict[str, Any]


@dataclass(frozen=True)
class Skip:
    extension: str
    reason: str


@dataclass(frozen=True)
class ExtensionContext:
    """Campaign-level values extension assets fall back on."""

    default_final_url: Optional[str]
    currency_code: str


def link_drafts(
    customer_id: str,
    drafts: List[AssetDraft],
    ad_group_ref: str,
    temp_id: int,
) -> Tuple[List[Dict[str, Any]], Dict[str, str], int]:
    """Assign decreasing temp ids and pair each asset create with its link.

    Returns the operations, the slot -> asset ref map, and the next unused
    temp id so the caller can keep numbering.
    """
    operations: List[Dict[str, Any]] = []
    refs: Dict[str, str] = {}
    for draft in drafts:
        asset_ref = resource_name(customer_id, "assets", temp_id)
        temp_id -= 1
        refs[draft.slot] = asset_ref
        operations.append(
            {"assetOperation": {"create": {"resourceName": asset_ref, **draft.asset}}}
        )
        operations.append(
            {
                "adGroupAssetOperation": {
                    "create": {
                        "adGroup": ad_group_ref,
                        "asset": asset_ref,
                        "fieldType": draft.field_type,
                    }
                }
            }
        )
    return operations, refs, temp_id
