# spacefit/schemas/analysis.py

from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class Coordinates(BaseModel):
    lat: float
    lng: float


class AreaScore(BaseModel):
    total_score: float
    grade: str
    living: float
    transportation: float
    leisure: float
    recommend: str


class RecommendedFacility(BaseModel):
    rank: int
    facility_type: str
    description: str
    score: float
    reason: str


class FacilityTypeStats(BaseModel):
    total_count: int
    nearby_count: int
    nearest_distance_m: Optional[int] = None


class ExistingFacilityStats(BaseModel):
    total_count: int = 0
    nearby_count: int = 0
    by_type: Dict[str, FacilityTypeStats] = {}


class PoiItem(BaseModel):
    name: str
    category_group_code: str
    x: float
    y: float
    distance: int
    address: str = ""


class AnalysisResult(BaseModel):
    address: str
    coordinates: Coordinates
    analysis: AreaScore
    area_indicators: Dict[str, float]
    recommended_public_facilities: List[RecommendedFacility]
    existing_facilities: ExistingFacilityStats
    facility_report: Dict[str, Any]
    details: Dict[str, Any]
    poi_list: List[PoiItem]
