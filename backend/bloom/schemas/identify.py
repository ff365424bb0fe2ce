from pydantic import BaseModel
from typing import Any, Dict, Optional, List


class PlantNetSummary(BaseModel):
    raw: Dict[str, Any] = {}            # full PlantNet payload (empty for name lookups)
    best_result: Dict[str, Any] = {}
    scientific_name: Optional[str] = None
    common_names: List[str] = []
    family: Optional[str] = None
    score: Optional[float] = None       # PlantNet confidence, 0..1


class IdentifyResponse(BaseModel):
    plantnet: PlantNetSummary
    # PlantProfile as returned by the LLM; only checked for being valid JSON
    ai: Any
