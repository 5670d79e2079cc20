"""IndicatorCalculator aggregation."""

import pytest

from spacefit.core.categories import PoiCategory
from spacefit.core.scoring_config import IndicatorDefinition, ScoringModel
from spacefit.services.indicators import IndicatorCalculator
from tests.conftest import make_groups


def test_all_four_indicators_present(model, empty_pois):
    result = IndicatorCalculator(model).calculate(empty_pois)
    assert set(result) == {
        "commercial_vitality",
        "residential_demand",
        "transportation",
        "culture_public",
    }
    assert all(v == 0.0 for v in result.values())


def test_distance_and_category_weights(model):
    pois = make_groups(restaurants=[0, 500], cafes=[0])
    result = IndicatorCalculator(model).calculate(pois)
    # 음식점 1.0 × (1.0 + 0.5) + 카페 0.8 × 1.0
    assert result["commercial_vitality"] == pytest.approx(2.3)
    assert result["transportation"] == 0.0


def test_far_pois_contribute_nothing(model):
    pois = make_groups(subway_stations=[1000, 1200])
    assert IndicatorCalculator(model).calculate(pois)["transportation"] == 0.0


def test_missing_groupings_contribute_zero(model):
    result = IndicatorCalculator(model).calculate({})
    assert sum(result.values()) == 0.0


def test_unspecified_category_weight_defaults_to_one():
    model = ScoringModel(
        indicators=(
            IndicatorDefinition(
                name="custom",
                label="custom",
                categories=(PoiCategory.BANK, PoiCategory.CAFE),
                weights=((PoiCategory.BANK, 2.0),),
            ),
        ),
        facility_rules=(),
    )
    pois = make_groups(banks=[0], cafes=[0, 0])
    # 은행 2.0 × 1 + 카페(기본 1.0) × 2
    assert IndicatorCalculator(model).calculate(pois) == {"custom": pytest.approx(4.0)}


def test_default_weight_in_shipped_indicators(model):
    # 음식점은 가중치 재정의가 없는 카테고리
    pois = make_groups(restaurants=[0, 0, 0])
    assert IndicatorCalculator(model).calculate(pois)["commercial_vitality"] == pytest.approx(3.0)


def test_custom_model():
    model = ScoringModel(
        indicators=(
            IndicatorDefinition(
                name="medical_only",
                label="의료",
                categories=(PoiCategory.MEDICAL,),
                weights=((PoiCategory.MEDICAL, 2.0),),
            ),
        ),
        facility_rules=(),
    )
    pois = make_groups(medical=[0, 250])
    assert IndicatorCalculator(model).calculate(pois) == {
        "medical_only": pytest.approx(2.0 + 1.5)
    }


def test_normalize_uses_indicator_scale(model):
    calc = IndicatorCalculator(model)
    normalized = calc.normalize({"transportation": 25.0, "culture_public": 80.0})
    assert normalized == {"transportation": 50.0, "culture_public": 100.0}
