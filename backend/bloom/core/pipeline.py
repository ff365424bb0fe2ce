import logging
from typing import Any, Dict, Optional, Sequence

from bloom.core.errors import InputValidationError
from bloom.core.json_recovery import parse_llm_json, require_content
from bloom.core.llm import LLMClient
from bloom.core.plantnet import PlantNetClient, summarize
from bloom.core import prompts
from bloom.core.uploads import ImageInput

logger = logging.getLogger(__name__)


def _text(v: Any) -> Optional[str]:
    return v if isinstance(v, str) else None


class IdentificationPipeline:
    """
    image intake -> PlantNet -> best match -> prompt -> LLM -> JSON recovery -> combined payload.

    Strictly sequential: the enrichment call needs PlantNet's answer. Any failure is terminal
    for the request (no retries).
    """

    def __init__(self, plantnet: PlantNetClient, llm: LLMClient):
        self.plantnet = plantnet
        self.llm = llm

    async def _ask(self, system_prompt: str, user_prompt: str, *, max_tokens: int, temperature: float) -> Any:
        text = await self.llm.complete(
            system_prompt,
            user_prompt,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return parse_llm_json(require_content(text))

    async def _profile(self, species_name: str, family: Optional[str] = None, confidence: Optional[float] = None) -> Any:
        return await self._ask(
            prompts.PROFILE_SYSTEM_PROMPT,
            prompts.build_profile_prompt(species_name, family, confidence),
            max_tokens=prompts.PROFILE_MAX_TOKENS,
            temperature=prompts.PROFILE_TEMPERATURE,
        )

    async def identify_images(self, images: Sequence[ImageInput]) -> Dict[str, Any]:
        if not images:
            raise InputValidationError("No images uploaded")

        logger.info("Identifying %d image(s), organs=%s", len(images), [img.organ for img in images])
        raw = await self.plantnet.identify(images)
        plantnet = summarize(raw)

        logger.info("PlantNet best match: %r (score=%s)", plantnet["scientific_name"], plantnet["score"])

        # Image flow always reports a confidence to the model (0 when PlantNet omits it)
        confidence = plantnet["score"] if plantnet["score"] is not None else 0.0
        ai = await self._profile(plantnet["scientific_name"], plantnet["family"], confidence)

        # Both scientific_name values are kept; the client picks which one to show
        return {"plantnet": plantnet, "ai": ai}

    async def identify_name(self, name: Optional[str]) -> Dict[str, Any]:
        name = (name or "").strip()
        if not name:
            raise InputValidationError("Plant name is required")

        logger.info("Looking up plant by name: %r", name)
        ai = await self._profile(name)

        profile = ai if isinstance(ai, dict) else {}
        common_names = profile.get("common_names")
        plantnet = {
            "raw": {},
            "best_result": {},
            "scientific_name": _text(profile.get("scientific_name")),
            "common_names": [str(x) for x in common_names] if isinstance(common_names, list) else [],
            "family": _text(profile.get("family")),
            "score": None,
        }
        return {"plantnet": plantnet, "ai": ai}

    async def recommend(
        self,
        latitude: Optional[float],
        longitude: Optional[float],
        address: Optional[str] = None,
    ) -> Any:
        if latitude is None or longitude is None:
            raise InputValidationError("Location coordinates are required")

        logger.info("Recommending plants for (%s, %s) address=%r", latitude, longitude, address)
        return await self._ask(
            prompts.RECOMMENDATION_SYSTEM_PROMPT,
            prompts.build_recommendation_prompt(latitude, longitude, address),
            max_tokens=prompts.RECOMMENDATION_MAX_TOKENS,
            temperature=prompts.RECOMMENDATION_TEMPERATURE,
        )
