from fastapi import Depends

from bloom.core.config import Settings, get_settings
from bloom.core.llm import LLMClient, build_llm_client
from bloom.core.pipeline import IdentificationPipeline
from bloom.core.plantnet import PlantNetClient


def get_plantnet_client(settings: Settings = Depends(get_settings)) -> PlantNetClient:
    return PlantNetClient(
        api_key=settings.PLANTNET_API_KEY,
        project=settings.PLANTNET_PROJECT,
        api_base=settings.PLANTNET_API_BASE,
        timeout=settings.PLANTNET_TIMEOUT_SECONDS,
    )


def get_llm_client(settings: Settings = Depends(get_settings)) -> LLMClient:
    return build_llm_client(settings)


def get_pipeline(
    plantnet: PlantNetClient = Depends(get_plantnet_client),
    llm: LLMClient = Depends(get_llm_client),
) -> IdentificationPipeline:
    return IdentificationPipeline(plantnet=plantnet, llm=llm)
