"""
Scoring model configuration for SpaceFit.

Owns every static table that drives the area indicators and the public
facility recommendation: indicator definitions, facility rules and the
fixed baseline weights. Numeric knobs that operators tune per deployment
(normalization scales, top-N, nearby radius) come from Settings.

Frozen dataclasses keep the model read-only once built, so a single
instance is shared by every request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from spacefit.core.categories import PoiCategory
from spacefit.core.config import Settings, settings as default_settings


# =============================================================================
# Dataclasses
# =============================================================================

@dataclass(frozen=True)
class IndicatorDefinition:
    """One area indicator: which POI categories feed it and how strongly.

    weights only lists overrides; a category without one counts 1.0.
    """
    name: str
    label: str
    categories: Tuple[PoiCategory, ...]
    weights: Tuple[Tuple[PoiCategory, float], ...] = ()
    # interpret_indicator 문구: "<aspect> <strong|weak>"
    aspect: str = ""
    strong_word: str = ""
    weak_word: str = ""

    def weight_for(self, code: PoiCategory) -> float:
        for c, w in self.weights:
            if c == code:
                return w
        return 1.0


@dataclass(frozen=True)
class FacilityRule:
    """Fitness of one candidate public-facility type.

    indicator_weights keeps declaration order; it is the tie-break when
    two indicators carry the same weight in the reason text.
    """
    facility_type: str
    description: str
    indicator_weights: Tuple[Tuple[str, float], ...]
    penalty_category: Optional[PoiCategory] = None
    penalty_weight: float = 0.0

    def __post_init__(self):
        if not 0.0 <= self.penalty_weight <= 1.0:
            raise ValueError(
                f"penalty_weight must be within [0, 1]: {self.facility_type}"
            )

    def top_indicators(self, n: int = 2) -> Tuple[Tuple[str, float], ...]:
        return tuple(
            sorted(self.indicator_weights, key=lambda kv: -kv[1])[:n]
        )


@dataclass(frozen=True)
class BaselineWeights:
    """Fixed per-POI weights of the 5-category baseline score."""
    medical: float = 2.0
    school: float = 1.5
    convenience_store: float = 0.3
    subway: float = 3.0
    cafe: float = 0.5


@dataclass(frozen=True)
class GradeBand:
    threshold: float
    label: str


@dataclass(frozen=True)
class ScoringModel:
    indicators: Tuple[IndicatorDefinition, ...]
    facility_rules: Tuple[FacilityRule, ...]
    indicator_max_score: float = 50.0
    baseline_max_score: float = 30.0
    top_n_recommendations: int = 5
    nearby_radius_m: float = 500.0
    baseline: BaselineWeights = BaselineWeights()

    def indicator(self, name: str) -> Optional[IndicatorDefinition]:
        for ind in self.indicators:
            if ind.name == name:
                return ind
        return None

    def indicator_label(self, name: str) -> str:
        ind = self.indicator(name)
        return ind.label if ind else name

    def rule_for(self, facility_type: str) -> Optional[FacilityRule]:
        for rule in self.facility_rules:
            if rule.facility_type == facility_type:
                return rule
        return None


# =============================================================================
# Indicator definitions
# =============================================================================

INDICATORS: Tuple[IndicatorDefinition, ...] = (
    IndicatorDefinition(
        name="commercial_vitality",
        label="상권 활력도",
        categories=(
            PoiCategory.RESTAURANT,
            PoiCategory.CAFE,
            PoiCategory.CONVENIENCE_STORE,
            PoiCategory.LARGE_MART,
            PoiCategory.BANK,
        ),
        weights=(
            (PoiCategory.CAFE, 0.8),
            (PoiCategory.CONVENIENCE_STORE, 0.5),
            (PoiCategory.LARGE_MART, 1.5),
            (PoiCategory.BANK, 0.7),
        ),
        aspect="상권 활성화",
        strong_word="활발",
        weak_word="부진",
    ),
    IndicatorDefinition(
        name="residential_demand",
        label="주거 수요",
        categories=(
            PoiCategory.SCHOOL,
            PoiCategory.DAYCARE,
            PoiCategory.ACADEMY,
            PoiCategory.MEDICAL,
            PoiCategory.PHARMACY,
            PoiCategory.REAL_ESTATE,
        ),
        weights=(
            (PoiCategory.SCHOOL, 1.5),
            (PoiCategory.DAYCARE, 1.5),
            (PoiCategory.ACADEMY, 0.8),
            (PoiCategory.PHARMACY, 0.7),
            (PoiCategory.REAL_ESTATE, 0.5),
        ),
        aspect="주거 인프라",
        strong_word="충분",
        weak_word="부족",
    ),
    IndicatorDefinition(
        name="transportation",
        label="교통 접근성",
        categories=(
            PoiCategory.SUBWAY_STATION,
            PoiCategory.PARKING,
            PoiCategory.GAS_STATION,
        ),
        weights=(
            (PoiCategory.SUBWAY_STATION, 3.0),
            (PoiCategory.PARKING, 0.8),
            (PoiCategory.GAS_STATION, 0.3),
        ),
        aspect="교통 접근성",
        strong_word="우수",
        weak_word="불편",
    ),
    IndicatorDefinition(
        name="culture_public",
        label="문화/공공시설",
        categories=(
            PoiCategory.CULTURE,
            PoiCategory.PUBLIC_OFFICE,
            PoiCategory.TOURIST_SPOT,
            PoiCategory.ACCOMMODATION,
        ),
        weights=(
            (PoiCategory.CULTURE, 2.0),
            (PoiCategory.PUBLIC_OFFICE, 1.5),
            (PoiCategory.ACCOMMODATION, 0.3),
        ),
        aspect="문화/공공 시설",
        strong_word="풍부",
        weak_word="빈약",
    ),
)


# =============================================================================
# Facility rules (declaration order is the ranking tie-break)
# =============================================================================

FACILITY_RULES: Tuple[FacilityRule, ...] = (
    FacilityRule(
        facility_type="playground",
        description="어린이 놀이터",
        indicator_weights=(
            ("residential_demand", 0.6),
            ("culture_public", 0.2),
            ("transportation", 0.2),
        ),
    ),
    FacilityRule(
        facility_type="park",
        description="근린공원",
        indicator_weights=(
            ("residential_demand", 0.4),
            ("culture_public", 0.3),
            ("commercial_vitality", 0.3),
        ),
        penalty_category=PoiCategory.TOURIST_SPOT,
        penalty_weight=0.2,
    ),
    FacilityRule(
        facility_type="parking_lot",
        description="공영주차장",
        indicator_weights=(
            ("commercial_vitality", 0.6),
            ("transportation", 0.4),
        ),
        penalty_category=PoiCategory.PARKING,
        penalty_weight=0.5,
    ),
    FacilityRule(
        facility_type="senior_center",
        description="경로당",
        indicator_weights=(
            ("residential_demand", 0.5),
            ("culture_public", 0.3),
            ("transportation", 0.2),
        ),
    ),
    FacilityRule(
        facility_type="daycare",
        description="국공립 어린이집",
        indicator_weights=(
            ("residential_demand", 0.7),
            ("transportation", 0.3),
        ),
        penalty_category=PoiCategory.DAYCARE,
        penalty_weight=0.5,
    ),
    FacilityRule(
        facility_type="library",
        description="작은도서관",
        indicator_weights=(
            ("residential_demand", 0.4),
            ("culture_public", 0.4),
            ("transportation", 0.2),
        ),
        penalty_category=PoiCategory.CULTURE,
        penalty_weight=0.3,
    ),
    FacilityRule(
        facility_type="sports_facility",
        description="주민 체육시설",
        indicator_weights=(
            ("residential_demand", 0.5),
            ("transportation", 0.3),
            ("commercial_vitality", 0.2),
        ),
    ),
    FacilityRule(
        facility_type="community_center",
        description="마을회관(주민공동시설)",
        indicator_weights=(
            ("residential_demand", 0.5),
            ("culture_public", 0.3),
            ("commercial_vitality", 0.2),
        ),
        penalty_category=PoiCategory.PUBLIC_OFFICE,
        penalty_weight=0.3,
    ),
    FacilityRule(
        facility_type="cultural_facility",
        description="문화센터",
        indicator_weights=(
            ("culture_public", 0.5),
            ("commercial_vitality", 0.3),
            ("transportation", 0.2),
        ),
        penalty_category=PoiCategory.CULTURE,
        penalty_weight=0.4,
    ),
    FacilityRule(
        facility_type="health_facility",
        description="보건지소",
        indicator_weights=(
            ("residential_demand", 0.5),
            ("transportation", 0.3),
            ("culture_public", 0.2),
        ),
        penalty_category=PoiCategory.MEDICAL,
        penalty_weight=0.4,
    ),
)

# 비교 분석의 분야별 선두 시설 묶음
FACILITY_GROUPS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("주민 편의", ("community_center", "senior_center")),
    ("교육·보육", ("daycare", "library")),
    ("여가·건강", ("park", "sports_facility", "playground")),
    ("기반 시설", ("parking_lot", "health_facility")),
)


# =============================================================================
# Grades
# =============================================================================

# 기본 점수 등급 (반열린 구간: 80.0 → A+, 79.99 → A)
AREA_GRADES: Tuple[GradeBand, ...] = (
    GradeBand(80, "A+"),
    GradeBand(70, "A"),
    GradeBand(60, "B+"),
    GradeBand(50, "B"),
    GradeBand(40, "C"),
    GradeBand(30, "D"),
)
AREA_GRADE_FLOOR = "F"

# 보고서 등급 (S 등급 포함)
REPORT_GRADES: Tuple[GradeBand, ...] = (
    GradeBand(90, "S"),
    GradeBand(80, "A+"),
    GradeBand(70, "A"),
    GradeBand(60, "B+"),
    GradeBand(50, "B"),
    GradeBand(40, "C"),
)
REPORT_GRADE_FLOOR = "D"

USAGE_TIERS: Dict[str, str] = {
    "A+": "주거 최적",
    "A": "주거 최적",
    "B+": "주거 적합",
    "B": "주거 적합",
    "C": "주거 보통",
}
USAGE_TIER_FLOOR = "인프라 부족"


def grade_for(score: float, bands=AREA_GRADES, floor: str = AREA_GRADE_FLOOR) -> str:
    """Highest band whose threshold <= score; bands are ordered high → low."""
    for band in bands:
        if score >= band.threshold:
            return band.label
    return floor


def usage_tier(grade: str) -> str:
    return USAGE_TIERS.get(grade, USAGE_TIER_FLOOR)


def build_scoring_model(cfg: Settings | None = None) -> ScoringModel:
    cfg = cfg or default_settings
    return ScoringModel(
        indicators=INDICATORS,
        facility_rules=FACILITY_RULES,
        indicator_max_score=cfg.INDICATOR_MAX_SCORE,
        baseline_max_score=cfg.BASELINE_MAX_SCORE,
        top_n_recommendations=cfg.TOP_N_RECOMMENDATIONS,
        nearby_radius_m=cfg.NEARBY_RADIUS_M,
    )
