"""PublicFacilityRecommender scoring, penalties, reasons and ranking."""

import pytest

from spacefit.core.categories import PoiCategory
from spacefit.core.scoring_config import INDICATORS, FacilityRule, ScoringModel
from spacefit.services.recommender import (
    DEFAULT_REASON,
    PublicFacilityRecommender,
    existing_penalty,
    poi_penalty,
)
from tests.conftest import make_facility, make_groups

ALL_INDICATORS = {
    "commercial_vitality": 0.0,
    "residential_demand": 0.0,
    "transportation": 0.0,
    "culture_public": 0.0,
}


def _model(*rules, top_n=5):
    return ScoringModel(indicators=(), facility_rules=rules, top_n_recommendations=top_n)


def _rule(facility_type, weights, penalty_category=None, penalty_weight=0.0):
    return FacilityRule(
        facility_type=facility_type,
        description=facility_type,
        indicator_weights=weights,
        penalty_category=penalty_category,
        penalty_weight=penalty_weight,
    )


class TestPenalties:
    def test_poi_penalty_caps_at_penalty_weight(self):
        rule = _rule("daycare", (("residential_demand", 1.0),), PoiCategory.DAYCARE, 0.5)
        for count in (10, 25):
            pois = make_groups(daycares=[100] * count)
            assert poi_penalty(rule, pois).fraction == 0.5

    def test_poi_penalty_proportional(self):
        rule = _rule("daycare", (("residential_demand", 1.0),), PoiCategory.DAYCARE, 0.5)
        pois = make_groups(daycares=[100] * 4)
        assert poi_penalty(rule, pois).fraction == pytest.approx(0.2)

    def test_no_penalty_category(self):
        rule = _rule("playground", (("residential_demand", 1.0),))
        assert poi_penalty(rule, make_groups()) is None

    def test_existing_penalty_caps_at_thirty_percent(self):
        snapshot = {"공원": [make_facility("공원")] * 5}
        assert existing_penalty("park", snapshot).fraction == pytest.approx(0.3)

    def test_existing_penalty_proportional(self):
        snapshot = {"공원": [make_facility("공원")]}
        assert existing_penalty("park", snapshot).fraction == pytest.approx(0.1)

    def test_unmapped_facility_type(self):
        assert existing_penalty("aquarium", {"공원": []}) is None


class TestScore:
    def test_raw_indicator_scale(self):
        rule = _rule("x", (("transportation", 0.5), ("culture_public", 0.5)))
        rec = PublicFacilityRecommender(_model(rule))
        indicators = dict(ALL_INDICATORS, transportation=20.0, culture_public=30.0)
        # (10 + 15) / 50 * 100
        assert rec.score(rule, indicators, make_groups(), {}) == pytest.approx(50.0)

    def test_penalties_compose_multiplicatively(self):
        rule = _rule("park", (("residential_demand", 1.0),), PoiCategory.TOURIST_SPOT, 0.4)
        rec = PublicFacilityRecommender(_model(rule))
        indicators = dict(ALL_INDICATORS, residential_demand=40.0)
        pois = make_groups(tourist_spots=[0] * 10)
        snapshot = {"공원": [make_facility("공원")] * 3}
        # 40 × (1 - 0.4) × (1 - 0.3) = 16.8 → 33.6
        assert rec.score(rule, indicators, pois, snapshot) == pytest.approx(33.6)

    def test_missing_indicator_contributes_zero(self):
        rule = _rule("x", (("unknown_indicator", 1.0), ("transportation", 1.0)))
        rec = PublicFacilityRecommender(_model(rule))
        indicators = dict(ALL_INDICATORS, transportation=10.0)
        assert rec.score(rule, indicators, make_groups(), {}) == pytest.approx(20.0)

    def test_score_clamped(self):
        rule = _rule("x", (("transportation", 1.0),))
        rec = PublicFacilityRecommender(_model(rule))
        indicators = dict(ALL_INDICATORS, transportation=500.0)
        assert rec.score(rule, indicators, make_groups(), {}) == 100.0


class TestReason:
    def test_default_reason(self):
        rule = _rule("x", (("transportation", 1.0),))
        rec = PublicFacilityRecommender(_model(rule))
        assert rec.reason(rule, ALL_INDICATORS, make_groups(), {}) == DEFAULT_REASON

    def test_excellent_and_good(self):
        rule = _rule(
            "x",
            (("transportation", 0.5), ("culture_public", 0.3), ("commercial_vitality", 0.2)),
        )
        model = ScoringModel(indicators=INDICATORS, facility_rules=(rule,))
        rec = PublicFacilityRecommender(model)
        indicators = dict(
            ALL_INDICATORS, transportation=40.0, culture_public=25.0, commercial_vitality=50.0
        )
        # 세 번째 지표(가중치 최저)는 근거에 포함되지 않음
        assert (
            rec.reason(rule, indicators, make_groups(), {})
            == "교통 접근성 우수(80.0점), 문화/공공시설 양호(50.0점)"
        )

    def test_saturation_and_existing_notes(self):
        rule = _rule("daycare", (("residential_demand", 1.0),), PoiCategory.DAYCARE, 0.5)
        rec = PublicFacilityRecommender(_model(rule))
        pois = make_groups(daycares=[100] * 6)
        snapshot = {"어린이집": [make_facility("어린이집")] * 2}
        assert (
            rec.reason(rule, ALL_INDICATORS, pois, snapshot)
            == "기존 어린이집 6개 존재, 기부채납 어린이집 2개 존재"
        )

    def test_five_pois_do_not_trigger_saturation_note(self):
        rule = _rule("daycare", (("residential_demand", 1.0),), PoiCategory.DAYCARE, 0.5)
        rec = PublicFacilityRecommender(_model(rule))
        pois = make_groups(daycares=[100] * 5)
        assert rec.reason(rule, ALL_INDICATORS, pois, {}) == DEFAULT_REASON


class TestRanking:
    def test_ties_keep_declaration_order(self):
        first = _rule("first", (("transportation", 1.0),))
        second = _rule("second", (("transportation", 1.0),))
        rec = PublicFacilityRecommender(_model(first, second))
        indicators = dict(ALL_INDICATORS, transportation=35.0)
        result = rec.recommend(indicators, make_groups(), {})
        assert [r.score for r in result] == [70.0, 70.0]
        assert [(r.facility_type, r.rank) for r in result] == [("first", 1), ("second", 2)]

    def test_descending_and_top_n(self):
        rules = [_rule(f"r{i}", (("transportation", 0.1 * i),)) for i in range(1, 8)]
        rec = PublicFacilityRecommender(_model(*rules, top_n=3))
        indicators = dict(ALL_INDICATORS, transportation=10.0)
        result = rec.recommend(indicators, make_groups(), {})
        assert [r.facility_type for r in result] == ["r7", "r6", "r5"]
        assert [r.rank for r in result] == [1, 2, 3]

    def test_default_configuration_returns_five(self, model, empty_pois):
        result = PublicFacilityRecommender(model).recommend(ALL_INDICATORS, empty_pois)
        assert len(result) == 5
        assert all(r.score == 0 and r.reason == DEFAULT_REASON for r in result)
        # 모두 0점이면 설정 순서 그대로
        assert [r.facility_type for r in result] == [
            rule.facility_type for rule in model.facility_rules[:5]
        ]


def test_penalty_weight_out_of_range():
    with pytest.raises(ValueError):
        _rule("x", (("transportation", 1.0),), PoiCategory.CAFE, 1.5)
