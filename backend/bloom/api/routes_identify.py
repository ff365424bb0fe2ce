from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from bloom.api.deps import get_pipeline
from bloom.core.config import Settings, get_settings
from bloom.core.pipeline import IdentificationPipeline
from bloom.core.uploads import buffered_uploads
from bloom.schemas.identify import IdentifyResponse

router = APIRouter(prefix="/api", tags=["identify"])


@router.get("/identify", response_model=IdentifyResponse)
async def identify_by_name(
    name: Optional[str] = None,
    pipeline: IdentificationPipeline = Depends(get_pipeline),
):
    """
    Name lookup: skips PlantNet and asks the LLM for the profile directly.
    """
    return await pipeline.identify_name(name)


@router.post("/identify", response_model=IdentifyResponse)
async def identify_by_images(
    images: Optional[List[UploadFile]] = File(None),
    organs: Optional[List[str]] = Form(None),
    settings: Settings = Depends(get_settings),
    pipeline: IdentificationPipeline = Depends(get_pipeline),
):
    """
    1-5 images (field "images"), optional parallel "organs" (leaf/flower/fruit/bark, default leaf).
    Temp files are removed whether identification succeeds or fails.
    """
    async with buffered_uploads(
        images,
        organs,
        upload_dir=settings.UPLOAD_DIR,
        max_images=settings.MAX_IMAGES,
        default_organ=settings.DEFAULT_ORGAN,
    ) as buffered:
        return await pipeline.identify_images(buffered)
