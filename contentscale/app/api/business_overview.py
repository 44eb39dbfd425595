"""Business overview endpoint."""

from typing import Optional

from fastapi import APIRouter

from contentscale.app.api.deps import AnalysisServiceDep
from contentscale.app.exceptions import BadRequestError
from contentscale.app.services.models import CamelModel

router = APIRouter(prefix="/api/business-overview", tags=["analysis"])


class BusinessOverviewRequest(CamelModel):
    business_context: Optional[str] = None
    industry: Optional[str] = None


class BusinessOverviewResponse(CamelModel):
    overview: str


@router.post("", response_model=BusinessOverviewResponse)
async def create_business_overview(
    payload: BusinessOverviewRequest,
    service: AnalysisServiceDep,
) -> BusinessOverviewResponse:
    """Generate a strategic overview for a business in an industry."""
    if not payload.business_context or not payload.industry:
        raise BadRequestError("Business context and industry are required")
    overview = await service.overview(payload.business_context, payload.industry)
    return BusinessOverviewResponse(overview=overview)
