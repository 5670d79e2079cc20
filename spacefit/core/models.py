# spacefit/core/models.py
# -----------------------------------------------------------------------------
# 분석 1회 동안만 사용하는 불변 도메인 레코드
# - Poi: 카카오 카테고리 검색 결과 1건
# - ExistingFacility: 기부채납 공공시설 1건
# - Recommendation: 순위가 매겨진 추천 시설
# -----------------------------------------------------------------------------
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True, slots=True)
class Location:
    address: str
    lat: float
    lng: float

    def as_dict(self) -> dict:
        return {"address": self.address, "lat": self.lat, "lng": self.lng}


@dataclass(frozen=True, slots=True)
class Poi:
    name: str
    category_code: str
    lat: float
    lng: float
    distance_m: float = 0.0
    address: str = ""


@dataclass(frozen=True, slots=True)
class ExistingFacility:
    name: str
    category: str
    raw_category: Optional[str] = None
    area: Optional[float] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    established_date: Optional[date] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    extra: Tuple[Tuple[str, str], ...] = field(default=())

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None


@dataclass(frozen=True, slots=True)
class Recommendation:
    facility_type: str
    description: str
    score: float
    rank: int
    reason: str

    def as_dict(self) -> dict:
        return {
            "rank": self.rank,
            "facility_type": self.facility_type,
            "description": self.description,
            "score": round(self.score, 1),
            "reason": self.reason,
        }


# 그룹 키 → POI 목록 (제공자 관련도 순서 유지)
PoiGroups = Mapping[str, Sequence[Poi]]
# 표준 분류명 → 기존 시설 목록
FacilitySnapshot = Mapping[str, Sequence[ExistingFacility]]
Indicators = Dict[str, float]
