from fastapi import APIRouter, Depends

from core.models.campaign import (
    CampaignCreationResponse,
    CompleteCampaignRequest,
    SimpleCampaignRequest,
    SimpleCampaignResponse,
)
from core.services.campaign_creation_service import (
    CampaignCreationService,
    get_campaign_creation_service,
)
from core.services.simple_campaign_service import (
    SimpleCampaignService,
    get_simple_campaign_service,
)

router = APIRouter(prefix="/api/customers", tags=["campaigns"])


@router.post(
    "/{customer_id}/createCompleteCampaign",
    response_model=CampaignCreationResponse,
)
async def create_complete_campaign(
    customer_id: str,
    request: CompleteCampaignRequest,
    service: CampaignCreationService = Depends(get_campaign_creation_service),
):
    return await service.create_complete_campaign(customer_id, request)


@router.post(
    "/{customer_id}/createSimpleCampaign",
    response_model=SimpleCampaignResponse,
)
async def create_simple_campaign(
    customer_id: str,
    request: SimpleCampaignRequest,
    service: SimpleCampaignService = Depends(get_simple_campaign_service),
):
    return await service.create_simple_campaign(customer_id, request)
