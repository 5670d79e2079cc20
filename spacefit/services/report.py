# spacefit/services/report.py
# -----------------------------------------------------------------------------
# 공공시설 추천 상세 보고서
# - 요약 / 시설별 상세 / 지역 특성 / 점수 분해 / 비교 분석 / 결론
# - 입력만으로 결정되는 순수 변환 (분석 시각도 인자로 받음)
# -----------------------------------------------------------------------------
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from spacefit.core.categories import FACILITY_EXISTING_CATEGORY, category_label
from spacefit.core.models import (
    FacilitySnapshot,
    Indicators,
    Location,
    PoiGroups,
    Recommendation,
)
from spacefit.core.scoring_config import (
    FACILITY_GROUPS,
    REPORT_GRADE_FLOOR,
    REPORT_GRADES,
    FacilityRule,
    ScoringModel,
    grade_for,
)
from spacefit.services.distance import normalize_score
from spacefit.services.recommender import base_raw_score, existing_penalty, poi_penalty

NO_DATA = "데이터 없음"
MAX_CONSIDERATIONS = 4
NEXT_STEPS = (
    "주민 의견 수렴 및 수요 조사",
    "부지 선정 및 타당성 검토",
    "예산 편성 및 재원 확보 방안 수립",
    "설계 및 인허가 절차 진행",
)


def _level(value: float, high: float, mid: float, labels=("높음", "중간", "낮음")) -> str:
    if value >= high:
        return labels[0]
    if value >= mid:
        return labels[1]
    return labels[2]


def _pct(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


class FacilityReportGenerator:
    def __init__(self, model: ScoringModel):
        self.model = model

    def generate(
        self,
        recommendations: Sequence[Recommendation],
        indicators: Indicators,
        pois: PoiGroups,
        existing_facilities: FacilitySnapshot,
        location: Location,
        analyzed_at: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        existing = existing_facilities or {}
        return {
            "summary": self.summary(recommendations, indicators, location, analyzed_at),
            "detailed_recommendations": self.detailed_recommendations(
                recommendations, indicators, pois, existing
            ),
            "area_analysis": self.area_analysis(indicators, pois, existing),
            "scoring_breakdown": self.scoring_breakdown(recommendations, indicators),
            "comparative_analysis": self.comparative_analysis(recommendations),
            "conclusion": self.conclusion(recommendations, indicators),
        }

    # ── 공통 ────────────────────────────────────────────────────────────────
    def _normalize(self, raw: float) -> float:
        return normalize_score(raw, self.model.indicator_max_score)

    def _label(self, name: str) -> str:
        return self.model.indicator_label(name)

    @staticmethod
    def score_to_grade(score: float) -> str:
        return grade_for(score, REPORT_GRADES, REPORT_GRADE_FLOOR)

    # ── 1. 요약 ─────────────────────────────────────────────────────────────
    def summary(self, recommendations, indicators, location, analyzed_at=None) -> dict:
        top = recommendations[0] if recommendations else None
        strongest = max(indicators.items(), key=lambda kv: kv[1]) if indicators else None
        return {
            "location": location.address,
            "coordinates": location.as_dict(),
            "analysis_date": analyzed_at.strftime("%Y-%m-%d %H:%M") if analyzed_at else None,
            "top_recommendation": {
                "facility_type": top.facility_type,
                "score": round(top.score, 1),
                "description": top.description,
            }
            if top
            else None,
            "strongest_characteristic": {
                "indicator": self._label(strongest[0]),
                "score": round(strongest[1], 1),
            }
            if strongest
            else None,
            "total_facilities_analyzed": len(recommendations),
        }

    # ── 2. 시설별 상세 ──────────────────────────────────────────────────────
    def detailed_recommendations(self, recommendations, indicators, pois, existing) -> list:
        out = []
        for rec in recommendations:
            rule = self.model.rule_for(rec.facility_type)
            if rule is None:
                continue
            out.append(
                {
                    "rank": rec.rank,
                    "facility_type": rec.facility_type,
                    "description": rec.description,
                    "overall_score": round(rec.score, 1),
                    "grade": self.score_to_grade(rec.score),
                    "scoring_detail": {
                        "base_score": round(
                            self._normalize(base_raw_score(rule, indicators)), 1
                        ),
                        "indicator_contributions": self.indicator_contributions(
                            rule, indicators
                        ),
                        "penalties": self.penalties_detail(rule, pois, existing),
                        "final_score": round(rec.score, 1),
                    },
                    "location_analysis": self.location_suitability(rule, indicators, pois),
                    "recommendation_basis": rec.reason,
                    "feasibility": self.feasibility(rec.score, rec.facility_type, existing),
                }
            )
        return out

    def indicator_contributions(self, rule: FacilityRule, indicators: Indicators) -> list:
        total = base_raw_score(rule, indicators)
        items = []
        for name, weight in rule.indicator_weights:
            raw = indicators.get(name, 0.0)
            contribution = raw * weight
            items.append(
                {
                    "indicator": self._label(name),
                    "raw_score": round(raw, 1),
                    "weight": weight,
                    "contribution": round(contribution, 1),
                    "percentage": _pct(contribution, total),
                }
            )
        return sorted(items, key=lambda c: -c["contribution"])

    def penalties_detail(self, rule: FacilityRule, pois, existing) -> dict:
        penalties = []

        poi = poi_penalty(rule, pois)
        if poi:
            penalties.append(
                {
                    "type": "POI 기반 감점",
                    "reason": f"주변 {poi.label} {poi.count}개 존재",
                    "penalty_percentage": round(poi.fraction * 100, 1),
                    "impact": "높음" if poi.fraction > 0.1 else "낮음",
                }
            )

        if existing:
            excel = existing_penalty(rule.facility_type, existing)
            if excel and excel.fraction > 0:
                penalties.append(
                    {
                        "type": "기부채납 시설 감점",
                        "reason": f"기존 {excel.label} {excel.count}개 존재",
                        "penalty_percentage": round(excel.fraction * 100, 1),
                        "impact": "높음"
                        if excel.fraction > 0.2
                        else "중간"
                        if excel.fraction > 0.1
                        else "낮음",
                    }
                )

        return {
            "total_penalty_percentage": round(
                sum(p["penalty_percentage"] for p in penalties), 1
            ),
            "details": penalties,
        }

    def location_suitability(self, rule: FacilityRule, indicators, pois) -> dict:
        strengths, weaknesses = [], []
        for name, _weight in rule.indicator_weights:
            normalized = self._normalize(indicators.get(name, 0.0))
            if normalized >= 70:
                strengths.append(f"{self._label(name)} 우수 ({round(normalized, 1)}점)")
            elif normalized < 50:
                weaknesses.append(f"{self._label(name)} 보완 필요 ({round(normalized, 1)}점)")

        competition = []
        poi = poi_penalty(rule, pois)
        if poi:
            competition.append(f"{poi.label} {poi.count}개")

        return {
            "strengths": strengths,
            "weaknesses": weaknesses,
            "competition": competition,
            "overall_suitability": "적합" if len(strengths) >= len(weaknesses) else "보통",
        }

    def feasibility(self, score: float, facility_type: str, existing) -> dict:
        category = FACILITY_EXISTING_CATEGORY.get(facility_type)
        count = len(existing.get(category.value) or ()) if category else 0

        if count > 3:
            impact = "기존 시설 포화"
        elif count > 0:
            impact = "기존 시설 존재"
        else:
            impact = "신규 수요 높음"

        return {
            "score": round(score, 1),
            "level": _level(score, 70, 50),
            "existing_facilities_impact": impact,
            "recommendation": _level(
                score, 70, 50, ("적극 추진 권장", "조건부 추진", "신중한 검토 필요")
            ),
        }

    # ── 3. 지역 특성 ────────────────────────────────────────────────────────
    def area_analysis(self, indicators, pois, existing) -> dict:
        return {
            "location_type": self.classify_location_type(indicators),
            "indicators": [
                {
                    "name": self._label(name),
                    "raw_score": round(raw, 1),
                    "score": round(self._normalize(raw), 1),
                    "grade": self.score_to_grade(self._normalize(raw)),
                    "interpretation": self.interpret_indicator(name, raw),
                }
                for name, raw in indicators.items()
            ],
            "poi_distribution": self.poi_distribution(pois),
            "existing_facilities_status": self.existing_status(existing),
            "estimated_population_density": self.population_density(pois),
            "development_potential": self.development_potential(indicators, existing),
        }

    @staticmethod
    def classify_location_type(indicators: Indicators) -> str:
        # 원점수 기준
        commercial = indicators.get("commercial_vitality", 0.0)
        residential = indicators.get("residential_demand", 0.0)
        transportation = indicators.get("transportation", 0.0)

        if residential > commercial and residential > 30:
            return "주거 중심 지역"
        if commercial > residential and commercial > 30:
            return "상업 중심 지역"
        if transportation > 40:
            return "교통 요충지"
        return "복합 지역"

    def interpret_indicator(self, name: str, raw: float) -> str:
        normalized = self._normalize(raw)
        if normalized >= 80:
            text = "매우 우수한 수준"
        elif normalized >= 60:
            text = "양호한 수준"
        elif normalized >= 40:
            text = "보통 수준"
        elif normalized >= 20:
            text = "개선 필요"
        else:
            text = "크게 부족"

        definition = self.model.indicator(name)
        if definition is None or not definition.aspect:
            return text
        word = definition.strong_word if normalized >= 60 else definition.weak_word
        return f"{text} - {definition.aspect} {word}"

    @staticmethod
    def poi_distribution(pois: PoiGroups) -> dict:
        total = sum(len(items) for items in pois.values())
        top = sorted(pois.items(), key=lambda kv: -len(kv[1]))[:5]
        return {
            "total_count": total,
            "density": "높음" if total > 100 else "중간" if total > 50 else "낮음",
            "top_categories": [
                {"category": key, "count": len(items), "percentage": _pct(len(items), total)}
                for key, items in top
            ],
        }

    @staticmethod
    def existing_status(existing: FacilitySnapshot) -> dict:
        if not existing:
            return {"status": NO_DATA}

        total = sum(len(items) for items in existing.values())
        breakdown = [
            {"type": kind, "count": len(items), "percentage": _pct(len(items), total)}
            for kind, items in existing.items()
        ]
        return {
            "total_count": total,
            "diversity": len(existing),
            "saturation_level": "포화" if total > 30 else "보통" if total > 15 else "여유",
            "facility_breakdown": sorted(breakdown, key=lambda f: -f["count"]),
        }

    @staticmethod
    def population_density(pois: PoiGroups) -> dict:
        # POI 밀집도 기반 휴리스틱
        residential = len(pois.get("schools") or ()) + len(pois.get("daycares") or ())
        commercial = len(pois.get("restaurants") or ()) + len(pois.get("cafes") or ())
        total = residential + commercial
        return {
            "level": "높음" if total > 50 else "중간" if total > 20 else "낮음",
            "estimated_score": total,
            "basis": "주거·상업 POI 밀집도 기반 추정",
        }

    def development_potential(self, indicators: Indicators, existing) -> dict:
        avg = sum(indicators.values()) / len(indicators) if indicators else 0.0
        saturation = sum(len(items) for items in existing.values())
        potential = max(0.0, min(100.0, self._normalize(avg) - saturation * 2))

        if potential >= 70:
            reasoning = "인프라 우수, 추가 개발 여력 있음"
        elif potential >= 40:
            reasoning = "개발 가능하나 신중한 선택 필요"
        else:
            reasoning = "기존 시설 포화, 대체 입지 검토 권장"

        return {
            "score": round(potential, 1),
            "level": _level(potential, 70, 40),
            "reasoning": reasoning,
        }

    # ── 4. 점수 분해 ────────────────────────────────────────────────────────
    def scoring_breakdown(self, recommendations, indicators) -> dict:
        top_score = recommendations[0].score if recommendations else 0.0
        scores = [r.score for r in recommendations]
        return {
            "top_3_comparison": [
                {
                    "rank": rec.rank,
                    "facility_type": rec.facility_type,
                    "score": round(rec.score, 1),
                    "score_difference_from_top": round(top_score - rec.score, 1),
                }
                for rec in recommendations[:3]
            ],
            "indicator_importance": self.indicator_importance(recommendations, indicators),
            "score_distribution": {
                "excellent": sum(1 for s in scores if s >= 80),
                "good": sum(1 for s in scores if 60 <= s < 80),
                "fair": sum(1 for s in scores if 40 <= s < 60),
                "poor": sum(1 for s in scores if s < 40),
            },
        }

    def indicator_importance(self, recommendations, indicators) -> list:
        items = []
        for name, raw in indicators.items():
            relevant = 0
            for rec in recommendations:
                rule = self.model.rule_for(rec.facility_type)
                if rule and dict(rule.indicator_weights).get(name, 0.0) > 0.3:
                    relevant += 1
            items.append(
                {
                    "indicator": self._label(name),
                    "score": round(raw, 1),
                    "influences_facilities_count": relevant,
                    "importance": "높음" if relevant > 5 else "중간" if relevant > 2 else "낮음",
                }
            )
        return sorted(items, key=lambda i: -i["influences_facilities_count"])

    # ── 5. 비교 분석 ────────────────────────────────────────────────────────
    def comparative_analysis(self, recommendations) -> dict:
        return {
            "top_vs_bottom": self.compare_top_and_bottom(recommendations),
            "category_leaders": self.category_leaders(recommendations),
            "competitiveness": self.competitiveness(recommendations),
        }

    @staticmethod
    def compare_top_and_bottom(recommendations) -> Optional[dict]:
        if len(recommendations) < 2:
            return None
        top, bottom = recommendations[0], recommendations[-1]
        gap = top.score - bottom.score
        return {
            "top_facility": {"type": top.description, "score": round(top.score, 1)},
            "bottom_facility": {"type": bottom.description, "score": round(bottom.score, 1)},
            "score_gap": round(gap, 1),
            "interpretation": "명확한 우선순위 존재" if gap > 30 else "경쟁적 선택지 다수",
        }

    @staticmethod
    def category_leaders(recommendations) -> list:
        leaders = []
        for group_name, facility_types in FACILITY_GROUPS:
            members = [r for r in recommendations if r.facility_type in facility_types]
            if not members:
                continue
            # max 는 동점이면 앞 순위를 유지
            leader = max(members, key=lambda r: r.score)
            leaders.append(
                {
                    "category": group_name,
                    "leader": leader.description,
                    "score": round(leader.score, 1),
                }
            )
        return leaders

    @staticmethod
    def competitiveness(recommendations) -> dict:
        if not recommendations:
            return {"status": NO_DATA}

        scores = np.array([r.score for r in recommendations], dtype=float)
        std_dev = float(np.std(scores))  # 모표준편차
        if std_dev < 10:
            label = "매우 경쟁적 (점수 근소)"
        elif std_dev < 20:
            label = "경쟁적"
        else:
            label = "명확한 순위"

        return {
            "average_score": round(float(scores.mean()), 1),
            "standard_deviation": round(std_dev, 1),
            "competitiveness": label,
            "score_range": {
                "min": round(float(scores.min()), 1),
                "max": round(float(scores.max()), 1),
            },
        }

    # ── 6. 결론 ─────────────────────────────────────────────────────────────
    def conclusion(self, recommendations, indicators) -> dict:
        top_3 = list(recommendations[:3])
        primary = None
        if top_3:
            primary = {
                "facility": top_3[0].description,
                "reason": self.primary_reason(top_3[0]),
            }
        return {
            "primary_recommendation": primary,
            "alternative_options": [
                {"facility": rec.description, "reason": f"{rec.facility_type}: {rec.reason}"}
                for rec in top_3[1:]
            ],
            "key_considerations": self.key_considerations(indicators, top_3),
            "next_steps": list(NEXT_STEPS),
        }

    def primary_reason(self, top: Recommendation) -> str:
        rule = self.model.rule_for(top.facility_type)
        if rule is None:
            return top.reason
        labels = [f"{self._label(name)} 우수" for name, _ in rule.top_indicators(2)]
        return f"{', '.join(labels)} - 해당 지역에 최적화된 시설입니다."

    def key_considerations(self, indicators, top_3: List[Recommendation]) -> List[str]:
        considerations = []
        for name, raw in indicators.items():
            normalized = self._normalize(raw)
            if normalized < 50:
                considerations.append(
                    f"{self._label(name)} 보완 필요 (현재 {round(normalized, 1)}점)"
                )

        if top_3:
            avg = sum(r.score for r in top_3) / len(top_3)
            if avg < 60:
                considerations.append("전반적인 적합도가 중간 수준 - 복합 시설 검토 권장")

        if not considerations:
            considerations.append("주민 참여 의견 수렴 필수")

        return considerations[:MAX_CONSIDERATIONS]
