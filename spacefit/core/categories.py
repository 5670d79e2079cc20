# spacefit/core/categories.py
# -----------------------------------------------------------------------------
# 고정 카테고리 테이블
# - 카카오 카테고리 그룹 코드(18개) ↔ 내부 POI 그룹 키 / 한글 라벨
# - 추천 시설 유형(10개) → 기부채납 시설 분류
# - 기부채납 시설 분류 문자열 정규화 규칙 (순서대로 평가, 첫 매칭 우선)
# -----------------------------------------------------------------------------
from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Optional, Tuple


class PoiCategory(str, Enum):
    LARGE_MART = "MT1"
    CONVENIENCE_STORE = "CS2"
    DAYCARE = "PS3"
    SCHOOL = "SC4"
    ACADEMY = "AC5"
    PARKING = "PK6"
    GAS_STATION = "OL7"
    SUBWAY_STATION = "SW8"
    BANK = "BK9"
    CULTURE = "CT1"
    REAL_ESTATE = "AG2"
    PUBLIC_OFFICE = "PO3"
    TOURIST_SPOT = "AT4"
    ACCOMMODATION = "AD5"
    RESTAURANT = "FD6"
    CAFE = "CE7"
    MEDICAL = "HP8"
    PHARMACY = "PM9"


POI_GROUP_KEYS: Dict[PoiCategory, str] = {
    PoiCategory.LARGE_MART: "large_marts",
    PoiCategory.CONVENIENCE_STORE: "convenience_stores",
    PoiCategory.DAYCARE: "daycares",
    PoiCategory.SCHOOL: "schools",
    PoiCategory.ACADEMY: "academies",
    PoiCategory.PARKING: "parkings",
    PoiCategory.GAS_STATION: "gas_stations",
    PoiCategory.SUBWAY_STATION: "subway_stations",
    PoiCategory.BANK: "banks",
    PoiCategory.CULTURE: "cultures",
    PoiCategory.REAL_ESTATE: "real_estates",
    PoiCategory.PUBLIC_OFFICE: "public_offices",
    PoiCategory.TOURIST_SPOT: "tourist_spots",
    PoiCategory.ACCOMMODATION: "accommodations",
    PoiCategory.RESTAURANT: "restaurants",
    PoiCategory.CAFE: "cafes",
    PoiCategory.MEDICAL: "medical",
    PoiCategory.PHARMACY: "pharmacies",
}

POI_LABELS: Dict[PoiCategory, str] = {
    PoiCategory.LARGE_MART: "대형마트",
    PoiCategory.CONVENIENCE_STORE: "편의점",
    PoiCategory.DAYCARE: "어린이집",
    PoiCategory.SCHOOL: "학교",
    PoiCategory.ACADEMY: "학원",
    PoiCategory.PARKING: "주차장",
    PoiCategory.GAS_STATION: "주유소",
    PoiCategory.SUBWAY_STATION: "지하철역",
    PoiCategory.BANK: "은행",
    PoiCategory.CULTURE: "문화시설",
    PoiCategory.REAL_ESTATE: "중개업소",
    PoiCategory.PUBLIC_OFFICE: "공공기관",
    PoiCategory.TOURIST_SPOT: "관광명소",
    PoiCategory.ACCOMMODATION: "숙박",
    PoiCategory.RESTAURANT: "음식점",
    PoiCategory.CAFE: "카페",
    PoiCategory.MEDICAL: "병원",
    PoiCategory.PHARMACY: "약국",
}

def parse_poi_category(code: object) -> Optional[PoiCategory]:
    """카테고리 코드 문자열 → PoiCategory. 모르는 코드는 None."""
    if isinstance(code, PoiCategory):
        return code
    try:
        return PoiCategory(str(code))
    except ValueError:
        return None


def group_key_for(code: object) -> Optional[str]:
    category = parse_poi_category(code)
    return POI_GROUP_KEYS[category] if category else None


def category_label(code: object) -> str:
    category = parse_poi_category(code)
    return POI_LABELS[category] if category else str(code)


# ── 기부채납 공공시설 분류 ─────────────────────────────────────────────────────
class ExistingCategory(str, Enum):
    PLAYGROUND = "어린이놀이터"
    PARK = "공원"
    PUBLIC_PARKING = "공용주차장"
    SENIOR_CENTER = "경로당"
    DAYCARE = "어린이집"
    SMALL_LIBRARY = "작은도서관"
    SPORTS = "주민운동시설"
    VILLAGE_HALL = "마을회관"
    CULTURE = "문화시설"
    HEALTH = "보건의료시설"
    OTHER = "기타"


# 추천 시설 유형 → 기부채납 시설 분류
FACILITY_EXISTING_CATEGORY: Dict[str, ExistingCategory] = {
    "playground": ExistingCategory.PLAYGROUND,
    "park": ExistingCategory.PARK,
    "parking_lot": ExistingCategory.PUBLIC_PARKING,
    "senior_center": ExistingCategory.SENIOR_CENTER,
    "daycare": ExistingCategory.DAYCARE,
    "library": ExistingCategory.SMALL_LIBRARY,
    "sports_facility": ExistingCategory.SPORTS,
    "community_center": ExistingCategory.VILLAGE_HALL,
    "cultural_facility": ExistingCategory.CULTURE,
    "health_facility": ExistingCategory.HEALTH,
}

# 겹치는 패턴이 있으므로 순서 유지 (예: "어린이공원" → 공원, "주차장" → 공용주차장)
CATEGORY_RULES: Tuple[Tuple[re.Pattern, ExistingCategory], ...] = (
    (re.compile(r"어린이놀이터|놀이터", re.I), ExistingCategory.PLAYGROUND),
    (re.compile(r"공원", re.I), ExistingCategory.PARK),
    (re.compile(r"공용주차장|주차장", re.I), ExistingCategory.PUBLIC_PARKING),
    (re.compile(r"경로당", re.I), ExistingCategory.SENIOR_CENTER),
    (re.compile(r"어린이집|보육시설", re.I), ExistingCategory.DAYCARE),
    (re.compile(r"작은도서관|도서관", re.I), ExistingCategory.SMALL_LIBRARY),
    (re.compile(r"주민운동시설|운동시설", re.I), ExistingCategory.SPORTS),
    (re.compile(r"마을회관|회관", re.I), ExistingCategory.VILLAGE_HALL),
    (re.compile(r"문화시설", re.I), ExistingCategory.CULTURE),
    (re.compile(r"보건의료시설|의료시설", re.I), ExistingCategory.HEALTH),
)


def normalize_category(raw: object) -> ExistingCategory:
    """자유 입력 시설 구분 → 표준 분류. 매칭 실패/빈 값은 기타."""
    if raw is None:
        return ExistingCategory.OTHER
    text = str(raw).strip()
    if not text:
        return ExistingCategory.OTHER
    for pattern, category in CATEGORY_RULES:
        if pattern.search(text):
            return category
    return ExistingCategory.OTHER
