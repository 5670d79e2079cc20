# spacefit/services/analyzer.py
# -----------------------------------------------------------------------------
# 입지 분석 오케스트레이션
# 지오코딩 → POI 검색 → {기본 점수, 상위 지표} → {공공시설 추천, 기존 시설 통계}
# → 보고서/결과 조립. 단계 중 하나라도 실패하면 부분 결과 없이 중단.
# -----------------------------------------------------------------------------
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from loguru import logger

from spacefit.core.categories import POI_GROUP_KEYS, PoiCategory
from spacefit.core.errors import AddressNotFound
from spacefit.core.models import FacilitySnapshot, Location, Poi, PoiGroups
from spacefit.core.scoring_config import ScoringModel, grade_for, usage_tier
from spacefit.services.distance import (
    distance_weight,
    haversine_m,
    normalize_score,
    within_radius,
)
from spacefit.services.indicators import IndicatorCalculator
from spacefit.services.recommender import PublicFacilityRecommender
from spacefit.services.report import FacilityReportGenerator

# 기본 점수에 쓰는 5개 카테고리
BASELINE_GROUPS = {
    "medical": POI_GROUP_KEYS[PoiCategory.MEDICAL],
    "school": POI_GROUP_KEYS[PoiCategory.SCHOOL],
    "convenience_store": POI_GROUP_KEYS[PoiCategory.CONVENIENCE_STORE],
    "subway": POI_GROUP_KEYS[PoiCategory.SUBWAY_STATION],
    "cafe": POI_GROUP_KEYS[PoiCategory.CAFE],
}


def _group(pois: PoiGroups, key: str):
    return pois.get(key) or ()


class AreaAnalyzer:
    def __init__(
        self,
        provider,
        model: ScoringModel,
        existing_facilities: Optional[FacilitySnapshot] = None,
    ):
        # provider: geocode(address) / search_all_categories(lat, lng) 코루틴 제공
        self.provider = provider
        self.model = model
        self.existing_facilities = existing_facilities or {}
        self.indicator_calculator = IndicatorCalculator(model)
        self.recommender = PublicFacilityRecommender(model)
        self.report_generator = FacilityReportGenerator(model)

    async def analyze(self, address: str) -> dict:
        # 1. 주소 → 좌표
        location = await self.provider.geocode(address)
        if location is None:
            raise AddressNotFound(address)

        # 2. POI 검색
        pois = await self.provider.search_all_categories(location.lat, location.lng)
        logger.info(
            f"[Analyze] {location.address} ({location.lat}, {location.lng}) "
            f"POI {sum(len(v) for v in pois.values())}건"
        )

        return self.evaluate(location, pois, analyzed_at=datetime.now())

    def evaluate(
        self, location: Location, pois: PoiGroups, analyzed_at: Optional[datetime] = None
    ) -> dict:
        # 3. 기본 점수 + 상위 지표
        scores = self.weighted_scores(pois)
        total_score = normalize_score(scores["total"], self.model.baseline_max_score)
        grade = grade_for(total_score)
        indicators = self.indicator_calculator.calculate(pois)

        # 4. 공공시설 추천 + 기존 시설 통계
        recommendations = self.recommender.recommend(
            indicators, pois, self.existing_facilities
        )
        existing_stats = self.existing_facility_stats(location)

        # 5. 보고서 및 결과 조립
        report = self.report_generator.generate(
            recommendations,
            indicators,
            pois,
            self.existing_facilities,
            location,
            analyzed_at=analyzed_at,
        )

        return {
            "address": location.address,
            "coordinates": {"lat": location.lat, "lng": location.lng},
            "analysis": {
                "total_score": round(total_score, 1),
                "grade": grade,
                "living": round(scores["living"], 1),
                "transportation": round(scores["transportation"], 1),
                "leisure": round(scores["leisure"], 1),
                "recommend": usage_tier(grade),
            },
            "area_indicators": self.indicator_calculator.normalize(indicators),
            "recommended_public_facilities": [r.as_dict() for r in recommendations],
            "existing_facilities": existing_stats,
            "facility_report": report,
            "details": self.detailed_analysis(pois, scores),
            "poi_list": self.poi_list(pois),
        }

    # ── 기본 점수 (고정 가중치 5개 카테고리) ────────────────────────────────
    def weighted_scores(self, pois: PoiGroups) -> Dict[str, float]:
        weights = self.model.baseline
        per = {
            name: getattr(weights, name)
            * sum(distance_weight(p.distance_m) for p in _group(pois, key))
            for name, key in BASELINE_GROUPS.items()
        }
        living = per["medical"] + per["school"] + per["convenience_store"]
        transportation = per["subway"]
        leisure = per["cafe"]
        return {
            "living": living,
            "transportation": transportation,
            "leisure": leisure,
            "total": living + transportation + leisure,
        }

    # ── 기존 시설 근접 통계 ────────────────────────────────────────────────
    def existing_facility_stats(self, location: Location) -> dict:
        radius = self.model.nearby_radius_m
        by_type = {}
        total = nearby = 0

        for kind, items in self.existing_facilities.items():
            distances = [
                haversine_m(location.lat, location.lng, f.lat, f.lng)
                for f in items
                if f.has_coordinates
            ]
            kind_nearby = sum(1 for d in distances if within_radius(d, radius))
            by_type[kind] = {
                "total_count": len(items),
                "nearby_count": kind_nearby,
                "nearest_distance_m": round(min(distances)) if distances else None,
            }
            total += len(items)
            nearby += kind_nearby

        return {"total_count": total, "nearby_count": nearby, "by_type": by_type}

    # ── 지도/상세 ──────────────────────────────────────────────────────────
    @staticmethod
    def poi_list(pois: PoiGroups) -> List[dict]:
        return [
            {
                "name": p.name,
                "category_group_code": p.category_code,
                "x": p.lng,
                "y": p.lat,
                "distance": int(p.distance_m),
                "address": p.address,
            }
            for items in pois.values()
            for p in items
        ]

    @staticmethod
    def nearest_poi(items) -> Optional[dict]:
        if not items:
            return None
        nearest: Poi = min(items, key=lambda p: p.distance_m)
        return {"name": nearest.name, "distance": int(nearest.distance_m)}

    def detailed_analysis(self, pois: PoiGroups, scores: Dict[str, float]) -> dict:
        return {
            "counts": {key: len(_group(pois, key)) for key in BASELINE_GROUPS.values()},
            "nearest": {
                name: self.nearest_poi(_group(pois, key))
                for name, key in BASELINE_GROUPS.items()
            },
            "weighted_scores": {
                "living": round(scores["living"], 1),
                "transportation": round(scores["transportation"], 1),
                "leisure": round(scores["leisure"], 1),
            },
        }
