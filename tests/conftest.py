"""Shared fixtures: scoring model, POI builders and a fake location provider."""

import pytest

from spacefit.core.categories import POI_GROUP_KEYS, PoiCategory
from spacefit.core.config import Settings
from spacefit.core.models import ExistingFacility, Location, Poi
from spacefit.core.scoring_config import build_scoring_model

SEOUL = Location(address="서울 강남구 역삼동 737", lat=37.5000, lng=127.0365)


def make_poi(category: PoiCategory, distance_m=0, name=None, lat=37.5, lng=127.03):
    return Poi(
        name=name or f"{category.value}-{distance_m}",
        category_code=category.value,
        lat=lat,
        lng=lng,
        distance_m=distance_m,
        address="서울 강남구",
    )


def make_groups(**counts):
    """make_groups(subway_stations=[0, 500]) → 빈 그룹 18개 + 지정 거리의 POI"""
    groups = {key: [] for key in POI_GROUP_KEYS.values()}
    codes = {v: k for k, v in POI_GROUP_KEYS.items()}
    for key, distances in counts.items():
        groups[key] = [make_poi(codes[key], d) for d in distances]
    return groups


def make_facility(category, name="시설", lat=None, lng=None, area=None):
    return ExistingFacility(name=name, category=category, lat=lat, lng=lng, area=area)


@pytest.fixture()
def settings():
    return Settings(_env_file=None, KAKAO_API_KEY="test-key")


@pytest.fixture()
def model(settings):
    return build_scoring_model(settings)


@pytest.fixture()
def empty_pois():
    return make_groups()


class FakeProvider:
    """geocode/search_all_categories 를 고정 값으로 돌려주는 제공자"""

    def __init__(self, location=SEOUL, pois=None, error=None):
        self.location = location
        self.pois = pois if pois is not None else make_groups()
        self.error = error
        self.calls = []

    async def geocode(self, address):
        self.calls.append(("geocode", address))
        if self.error:
            raise self.error
        return self.location

    async def search_all_categories(self, lat, lng):
        self.calls.append(("search_all_categories", lat, lng))
        return self.pois


@pytest.fixture()
def provider():
    return FakeProvider()
