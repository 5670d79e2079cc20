# spacefit/services/recommender.py
# -----------------------------------------------------------------------------
# 공공시설 추천
# - 시설 유형별 적합도 = Σ(지표 원점수 × 가중치)
# - 주변 POI 포화 감점 → 기부채납 기존 시설 감점 순서로 곱셈 적용
# - 0~100 정규화 후 점수 내림차순(동점은 설정 순서) 상위 N개
# -----------------------------------------------------------------------------
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from loguru import logger

from spacefit.core.categories import FACILITY_EXISTING_CATEGORY, category_label, group_key_for
from spacefit.core.models import FacilitySnapshot, Indicators, PoiGroups, Recommendation
from spacefit.core.scoring_config import FacilityRule, ScoringModel
from spacefit.services.distance import normalize_score

POI_PENALTY_SATURATION = 10.0  # 이 개수 이상이면 최대 감점
EXISTING_PENALTY_SATURATION = 3.0
EXISTING_PENALTY_CAP = 0.3
SATURATION_NOTE_THRESHOLD = 5
DEFAULT_REASON = "종합 평가 완료"


@dataclass(frozen=True, slots=True)
class PenaltyDetail:
    count: int
    fraction: float
    label: str


def poi_penalty(rule: FacilityRule, pois: PoiGroups) -> Optional[PenaltyDetail]:
    """주변 동종 POI 수 기반 감점 (최대 penalty_weight)"""
    if rule.penalty_category is None:
        return None
    poi_key = group_key_for(rule.penalty_category)
    if not poi_key or poi_key not in pois:
        return None
    count = len(pois[poi_key])
    pw = rule.penalty_weight
    fraction = min(min(count / POI_PENALTY_SATURATION, 1.0) * pw, pw)
    return PenaltyDetail(count, fraction, category_label(rule.penalty_category))


def existing_penalty(
    facility_type: str, existing: FacilitySnapshot
) -> Optional[PenaltyDetail]:
    """기부채납 기존 시설 수 기반 감점 (최대 30%)"""
    category = FACILITY_EXISTING_CATEGORY.get(facility_type)
    if category is None:
        return None
    count = len(existing.get(category.value) or ())
    fraction = min(
        min(count / EXISTING_PENALTY_SATURATION, 1.0) * EXISTING_PENALTY_CAP,
        EXISTING_PENALTY_CAP,
    )
    return PenaltyDetail(count, fraction, category.value)


def base_raw_score(rule: FacilityRule, indicators: Indicators) -> float:
    raw = 0.0
    for name, weight in rule.indicator_weights:
        if name not in indicators:
            logger.warning(
                f"[Recommender] '{rule.facility_type}' 규칙의 지표 '{name}' 없음 → 0점 처리"
            )
        raw += indicators.get(name, 0.0) * weight
    return raw


class PublicFacilityRecommender:
    def __init__(self, model: ScoringModel):
        self.model = model

    def recommend(
        self,
        indicators: Indicators,
        pois: PoiGroups,
        existing_facilities: Optional[FacilitySnapshot] = None,
    ) -> List[Recommendation]:
        existing = existing_facilities or {}
        scored: List[Tuple[FacilityRule, float, str]] = []

        for rule in self.model.facility_rules:
            score = self.score(rule, indicators, pois, existing)
            reason = self.reason(rule, indicators, pois, existing)
            scored.append((rule, score, reason))

        # sorted 는 안정 정렬 → 동점이면 설정 선언 순서 유지
        ranked = sorted(scored, key=lambda item: -item[1])
        top_n = self.model.top_n_recommendations

        return [
            Recommendation(
                facility_type=rule.facility_type,
                description=rule.description,
                score=score,
                rank=rank,
                reason=reason,
            )
            for rank, (rule, score, reason) in enumerate(ranked[:top_n], start=1)
        ]

    def score(
        self,
        rule: FacilityRule,
        indicators: Indicators,
        pois: PoiGroups,
        existing: FacilitySnapshot,
    ) -> float:
        raw = base_raw_score(rule, indicators)

        penalty = poi_penalty(rule, pois)
        if penalty:
            raw *= 1.0 - penalty.fraction

        if existing:
            excel = existing_penalty(rule.facility_type, existing)
            if excel:
                raw *= 1.0 - excel.fraction

        return self.normalize(raw)

    def normalize(self, raw: float) -> float:
        return normalize_score(raw, self.model.indicator_max_score)

    def reason(
        self,
        rule: FacilityRule,
        indicators: Indicators,
        pois: PoiGroups,
        existing: FacilitySnapshot,
    ) -> str:
        reasons: List[str] = []

        for name, _weight in rule.top_indicators(2):
            normalized = self.normalize(indicators.get(name, 0.0))
            label = self.model.indicator_label(name)
            if normalized >= 70:
                reasons.append(f"{label} 우수({round(normalized, 1)}점)")
            elif normalized >= 50:
                reasons.append(f"{label} 양호({round(normalized, 1)}점)")

        penalty = poi_penalty(rule, pois)
        if penalty and penalty.count > SATURATION_NOTE_THRESHOLD:
            reasons.append(f"기존 {penalty.label} {penalty.count}개 존재")

        if existing:
            excel = existing_penalty(rule.facility_type, existing)
            if excel and excel.count > 0:
                reasons.append(f"기부채납 {excel.label} {excel.count}개 존재")

        return ", ".join(reasons) if reasons else DEFAULT_REASON
