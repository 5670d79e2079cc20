# spacefit/services/indicators.py
# -----------------------------------------------------------------------------
# 상위 지표 계산 (4개)
# - 지표별로 설정된 카테고리의 POI 를 거리 가중치 × 카테고리 가중치로 합산
# - 결과는 정규화 전 원점수
# -----------------------------------------------------------------------------
from __future__ import annotations

from typing import Dict

from spacefit.core.categories import POI_GROUP_KEYS
from spacefit.core.models import Indicators, PoiGroups
from spacefit.core.scoring_config import IndicatorDefinition, ScoringModel
from spacefit.services.distance import distance_weight, normalize_score


class IndicatorCalculator:
    def __init__(self, model: ScoringModel):
        self.model = model

    def calculate(self, pois: PoiGroups) -> Indicators:
        return {
            ind.name: self._calculate_indicator(pois, ind)
            for ind in self.model.indicators
        }

    def normalize(self, indicators: Indicators) -> Dict[str, float]:
        """표시용 0~100 점수 (지표 모델 기준값 사용)"""
        return {
            name: round(normalize_score(raw, self.model.indicator_max_score), 1)
            for name, raw in indicators.items()
        }

    def _calculate_indicator(
        self, pois: PoiGroups, indicator: IndicatorDefinition
    ) -> float:
        total = 0.0
        for code in indicator.categories:
            poi_key = POI_GROUP_KEYS.get(code)
            if not poi_key or not pois.get(poi_key):
                continue
            weight = indicator.weight_for(code)
            total += sum(distance_weight(p.distance_m) * weight for p in pois[poi_key])
        return total
