from typing import Optional

from fastapi import APIRouter, Body, Depends

from bloom.api.deps import get_pipeline
from bloom.core.pipeline import IdentificationPipeline
from bloom.schemas.recommend import RecommendRequest

router = APIRouter(prefix="/api", tags=["recommend"])


@router.post("/recommend")
async def recommend(
    payload: Optional[RecommendRequest] = Body(None),
    pipeline: IdentificationPipeline = Depends(get_pipeline),
):
    """
    Location-based recommendations. Returns the model's JSON as-is
    (location_info, recommended_plants, seasonal_tips, local_considerations).
    """
    payload = payload or RecommendRequest()
    return await pipeline.recommend(payload.latitude, payload.longitude, payload.address)
