from typing import Dict, Any

from adapters.google.mutation.mutation_config import CONFIG
from adapters.google.mutation.utils import resource_name


class CampaignOperationBuilder:
    """Budget, campaign and ad group creates, chained through temp resource names."""

    def build_budget_op(
        self, customer_id: str, campaign_name: str, amount_micros: int
    ) -> Dict[str, Any]:
        return {
            "campaignBudgetOperation": {
                "create": {
                    "resourceName": self.budget_ref(customer_id),
                    "name": f"{campaign_name} Budget",
                    "deliveryMethod": CONFIG.CAMPAIGN.DELIVERY_METHOD,
                    "amountMicros": str(amount_micros),
                }
            }
        }

    def build_campaign_op(
        self, customer_id: str, campaign_name: str, status: str
    ) -> Dict[str, Any]:
        return {
            "campaignOperation": {
                "create": {
                    "resourceName": self.campaign_ref(customer_id),
                    "name": campaign_name,
                    "advertisingChannelType": CONFIG.CAMPAIGN.ADVERTISING_CHANNEL_TYPE,
                    "status": status,
                    "manualCpc": {},
                    "campaignBudget": self.budget_ref(customer_id),
                    "networkSettings": {
                        "targetGoogleSearch": True,
                        "targetSearchNetwork": True,
                        "targetContentNetwork": False,
                        "targetPartnerSearchNetwork": False,
                    },
                    "containsEuPoliticalAdvertising": CONFIG.CAMPAIGN.EU_POLITICAL_ADVERTISING,
                }
            }
        }

    def build_ad_group_op(
        self, customer_id: str, ad_group_name: str, cpc_bid_micros: int
    ) -> Dict[str, Any]:
        return {
            "adGroupOperation": {
                "create": {
                    "resourceName": self.ad_group_ref(customer_id),
                    "name": ad_group_name,
                    "campaign": self.campaign_ref(customer_id),
                    "type": CONFIG.CAMPAIGN.AD_GROUP_TYPE,
                    "status": "ENABLED",
                    "cpcBidMicros": str(cpc_bid_micros),
                }
            }
        }

    @staticmethod
    def budget_ref(customer_id: str) -> str:
        return resource_name(customer_id, "campaignBudgets", CONFIG.TEMP_IDS.BUDGET)

    @staticmethod
    def campaign_ref(customer_id: str) -> str:
        return resource_name(customer_id, "campaigns", CONFIG.TEMP_IDS.CAMPAIGN)

    @staticmethod
    def ad_group_ref(customer_id: str) -> str:
        return resource_name(customer_id, "adGroups", CONFIG.TEMP_IDS.AD_GROUP)
