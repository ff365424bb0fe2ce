from pydantic import BaseModel
from typing import Optional


class RecommendRequest(BaseModel):
    # Optional so a missing coordinate is a 400 from the route, not a 422 from validation
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
