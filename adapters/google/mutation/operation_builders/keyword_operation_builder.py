from typing import List, Dict, Any, Union
from core.models.campaign import DEFAULT_MATCH_TYPE, KeywordInput
import structlog

logger = structlog.get_logger(__name__)


class KeywordOperationBuilder:
    def build_keywords_ops(
        self,
        keywords: List[Union[str, KeywordInput]],
        ad_group_ref: str,
    ) -> List[Dict[str, Any]]:
        # Text and match type go through as given: no dedup, no case folding
        operations = []
        for keyword in keywords:
            if isinstance(keyword, str):
                text, match_type = keyword, DEFAULT_MATCH_TYPE
            else:
                text, match_type = keyword.text, keyword.matchType or DEFAULT_MATCH_TYPE

            operations.append(
                {
                    "adGroupCriterionOperation": {
                        "create": {
                            "adGroup": ad_group_ref,
                            "status": "ENABLED",
                            "keyword": {
                                "text": text,
                                "matchType": match_type,
                            },
                        }
                    }
                }
            )

        logger.debug("keyword_operations_built", count=len(operations))
        return operations
