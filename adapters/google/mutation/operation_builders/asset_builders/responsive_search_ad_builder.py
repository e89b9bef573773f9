import structlog
from typing import List, Dict, Any, Optional
from adapters.google.mutation.mutation_config import CONFIG
from adapters.google.mutation.utils import NormalizedUrl, truncate

logger = structlog.get_logger(__name__)


class ResponsiveSearchAdBuilder:
    def has_minimum_assets(
        self, headlines: List[str], descriptions: List[str], final_url: Optional[str]
    ) -> bool:
        return (
            len(headlines) >= CONFIG.RSA.HEADLINE_MIN_COUNT
            and len(descriptions) >= CONFIG.RSA.DESCRIPTION_MIN_COUNT
            and bool(final_url)
        )

    def build_ad_op(
        self,
        ad_group_ref: str,
        headlines: List[str],
        descriptions: List[str],
        url: NormalizedUrl,
        display_path1: Optional[str] = None,
        display_path2: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Build the single RSA create for a new ad group.

        Explicit display paths win over the ones derived from the URL; every
        text field is cut to its platform limit rather than rejected.
        """
        responsive_search_ad: Dict[str, Any] = {
            "headlines": [
                {"text": truncate(text, CONFIG.RSA.HEADLINE_MAX_LENGTH)}
                for text in headlines[: CONFIG.RSA.HEADLINE_MAX_COUNT]
            ],
            "descriptions": [
                {"text": truncate(text, CONFIG.RSA.DESCRIPTION_MAX_LENGTH)}
                for text in descriptions[: CONFIG.RSA.DESCRIPTION_MAX_COUNT]
            ],
        }

        path1 = truncate(display_path1 or url.path1, CONFIG.RSA.PATH_MAX_LENGTH)
        path2 = truncate(display_path2 or url.path2, CONFIG.RSA.PATH_MAX_LENGTH)
        if path1:
            responsive_search_ad["path1"] = path1
        if path2:
            responsive_search_ad["path2"] = path2

        return {
            "adGroupAdOperation": {
                "create": {
                    "adGroup": ad_group_ref,
                    "status": "ENABLED",
                    "ad": {
                        "responsiveSearchAd": responsive_search_ad,
                        "finalUrls": [url.final_url],
                    },
                }
            }
        }
