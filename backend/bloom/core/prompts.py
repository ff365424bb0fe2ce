import json
from typing import Any, Dict, Optional

PROFILE_SYSTEM_PROMPT = "You must return only valid JSON matching the requested schema."
RECOMMENDATION_SYSTEM_PROMPT = (
    "You are a plant expert providing location-specific recommendations. Return only valid JSON."
)

# Output budgets per flow
PROFILE_MAX_TOKENS = 800
PROFILE_TEMPERATURE = 0.2
RECOMMENDATION_MAX_TOKENS = 1200
RECOMMENDATION_TEMPERATURE = 0.3


# Shapes are shown to the model verbatim; nothing validates the reply against them.
PLANT_PROFILE_SHAPE: Dict[str, Any] = {
    "scientific_name": "string",
    "common_names": ["string"],
    "family": "string",
    "category": "string",
    "short_description": "string",
    "care": {
        "watering": "string",
        "sunlight": "string",
        "soil": "string",
        "temperature": "string",
        "fertilizer": "string",
        "pruning": "string",
    },
    "pests_and_diseases": "string",
    "medicinal_use": "string",
    "pet_friendly": "string",
    "typical_health_issues": "string",
    "recommended_action": "string",
}

RECOMMENDATION_SHAPE: Dict[str, Any] = {
    "location_info": {
        "climate_zone": "string",
        "season": "string",
        "temperature_range": "string",
        "humidity": "string",
        "soil_type": "string",
    },
    "recommended_plants": [
        {
            "name": "string",
            "scientific_name": "string",
            "category": "string",
            "difficulty": "Easy|Medium|Hard",
            "best_season": "string",
            "growth_time": "string",
            "benefits": "string",
            "care_tips": "string",
            "watering_frequency": "string",
        }
    ],
    "seasonal_tips": "string",
    "local_considerations": "string",
}


def _shape(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, indent=2)


def build_profile_prompt(
    species_name: str,
    family: Optional[str] = None,
    confidence: Optional[float] = None,
) -> str:
    """
    Enrichment prompt for one species.

    With a confidence (image flow) the species comes from PlantNet and the model is
    told how sure the identifier was. Without one (name flow) the user typed the name.
    """
    if confidence is None:
        return (
            f'You are a plant expert. Given the plant name "{species_name}", '
            "provide detailed information in this exact JSON format:\n"
            f"{_shape(PLANT_PROFILE_SHAPE)}\n\n"
            "Return only valid JSON."
        )

    return (
        "You are a plant-care assistant. Given the species identified below, produce a single "
        "JSON object (no surrounding text) with the following fields:\n"
        f"{_shape(PLANT_PROFILE_SHAPE)}\n\n"
        "Species info:\n"
        f'- scientific_name: "{species_name or "unknown"}"\n'
        f'- family: "{family or "unknown"}"\n'
        f"- identification_confidence: {confidence}\n\n"
        "Return valid JSON only. If you are unsure about any field, provide a best-effort "
        "reasonable value and mark it with the word 'approx' in the text."
    )


def build_recommendation_prompt(
    latitude: float,
    longitude: float,
    address: Optional[str] = None,
) -> str:
    where = f" in {address}" if address else ""
    return (
        f"You are a plant expert. Based on the location coordinates ({latitude}, {longitude}){where}, "
        "recommend the best plants to grow in this area. Consider climate, soil conditions, "
        "and local growing conditions.\n\n"
        "Provide recommendations in this exact JSON format:\n"
        f"{_shape(RECOMMENDATION_SHAPE)}\n\n"
        "Return only valid JSON with 5-8 plant recommendations."
    )
