# spacefit/services/facility_loader.py
# -----------------------------------------------------------------------------
# 기부채납 공공시설 데이터 로더
# - 엑셀(.xls/.xlsx)/CSV 첫 시트 → ExistingFacility 목록
# - 헤더/값 정규화 후 표준 분류별로 묶음
# - 읽기 실패는 로그만 남기고 빈 데이터로 강등
# -----------------------------------------------------------------------------
from __future__ import annotations

import numbers
import re
from collections import defaultdict
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
from loguru import logger

from spacefit.core.categories import normalize_category
from spacefit.core.errors import DataLoadFailure
from spacefit.core.models import ExistingFacility, FacilitySnapshot
from spacefit.services.distance import haversine_m, within_radius

EXCEL_EPOCH = date(1899, 12, 30)
YYYYMMDD_MIN = 19000101
YYYYMMDD_MAX = 29991231

# 헤더명 → 표준 키 (순서대로 평가)
HEADER_RULES: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"시설명|명칭", re.I), "name"),
    (re.compile(r"시설종류|구분|유형|카테고리", re.I), "category"),
    (re.compile(r"면적|규모", re.I), "area"),
    (re.compile(r"주소|위치|소재지", re.I), "location"),
    (re.compile(r"위도|lat", re.I), "latitude"),
    (re.compile(r"경도|lng|lon", re.I), "longitude"),
    (re.compile(r"설치일|준공일|완료일", re.I), "established_date"),
    (re.compile(r"비고|메모", re.I), "notes"),
)
FLOAT_KEYS = {"area", "latitude", "longitude"}


def _blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def normalize_header(header) -> Optional[str]:
    if _blank(header):
        return None
    text = str(header).strip()
    for pattern, key in HEADER_RULES:
        if pattern.search(text):
            return key
    slug = re.sub(r"[^\w]+", "_", text.lower()).strip("_")
    return slug or None


def parse_date(value) -> Optional[date]:
    """
    엑셀 날짜 숫자(1899-12-30 기준) / YYYYMMDD 숫자 / 날짜 객체 / 문자열 → date
    범위를 벗어나거나 해석할 수 없는 값은 None.
    """
    if _blank(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, numbers.Real):
        try:
            n = int(value)
            if YYYYMMDD_MIN <= n <= YYYYMMDD_MAX:
                return datetime.strptime(str(n), "%Y%m%d").date()
            return EXCEL_EPOCH + timedelta(days=n)
        except (OverflowError, ValueError):
            return None
    parsed = pd.to_datetime(str(value).strip(), errors="coerce")
    return None if pd.isna(parsed) else parsed.date()


def normalize_value(key: str, value):
    if _blank(value):
        return None
    if key in FLOAT_KEYS:
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
    if key == "established_date":
        return parse_date(value)
    return str(value).strip()


def row_to_facility(row: Dict[str, object]) -> Optional[ExistingFacility]:
    name = row.get("name")
    if not name:
        return None
    raw_category = row.get("category")
    lat, lng = row.get("latitude"), row.get("longitude")
    if lat is None or lng is None:
        lat = lng = None
    known = {"name", "category", "area", "location", "latitude", "longitude",
             "established_date", "notes"}
    extra = tuple(
        (k, str(v)) for k, v in row.items() if k not in known and v is not None
    )
    return ExistingFacility(
        name=str(name),
        category=normalize_category(raw_category).value,
        raw_category=raw_category,
        area=row.get("area"),
        lat=lat,
        lng=lng,
        established_date=row.get("established_date"),
        location=row.get("location"),
        notes=row.get("notes"),
        extra=extra,
    )


def frame_to_facilities(df: pd.DataFrame) -> List[ExistingFacility]:
    headers = {col: normalize_header(col) for col in df.columns}
    facilities = []
    for record in df.to_dict(orient="records"):
        row = {}
        for col, value in record.items():
            key = headers.get(col)
            if key and key not in row:
                row[key] = normalize_value(key, value)
        facility = row_to_facility(row)
        if facility:
            facilities.append(facility)
    return facilities


def group_by_category(
    facilities: Iterable[ExistingFacility],
) -> Dict[str, Tuple[ExistingFacility, ...]]:
    grouped: Dict[str, List[ExistingFacility]] = defaultdict(list)
    for f in facilities:
        grouped[f.category].append(f)
    return {k: tuple(v) for k, v in grouped.items()}


class ExistingFacilityLoader:
    """
    사용 예:
        loader = ExistingFacilityLoader("docs/기부채납 공공시설 - 수기.xls")
        snapshot = loader.load()   # {"공원": (ExistingFacility, ...), ...}
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def parse(self) -> List[ExistingFacility]:
        if not self.path.exists():
            raise DataLoadFailure(f"file not found: {self.path}")
        try:
            if self.path.suffix.lower() == ".csv":
                df = pd.read_csv(self.path, dtype=object)
            else:
                df = pd.read_excel(self.path, sheet_name=0, dtype=object)
        except Exception as e:
            raise DataLoadFailure(f"{self.path}: {e}") from e
        try:
            return frame_to_facilities(df)
        except Exception as e:
            raise DataLoadFailure(f"{self.path}: invalid row data: {e}") from e

    def load(self) -> Dict[str, Tuple[ExistingFacility, ...]]:
        try:
            facilities = self.parse()
        except DataLoadFailure as e:
            logger.error(f"[Facilities] 기존 시설 로드 실패: {e}")
            return {}
        grouped = group_by_category(facilities)
        logger.info(
            f"[Facilities] {len(facilities)}건 로드 ({len(grouped)}개 분류) ← {self.path}"
        )
        return grouped

    def load_by_types(
        self, facility_types: Sequence[str]
    ) -> Dict[str, Tuple[ExistingFacility, ...]]:
        wanted = set(facility_types)
        return {k: v for k, v in self.load().items() if k in wanted}


def facility_statistics(snapshot: FacilitySnapshot) -> Dict[str, dict]:
    """분류별 개수/총면적/평균면적"""
    stats = {}
    for kind, items in snapshot.items():
        total_area = sum(f.area or 0.0 for f in items)
        stats[kind] = {
            "count": len(items),
            "total_area": total_area,
            "avg_area": round(total_area / len(items), 2) if items else 0,
        }
    return stats


def count_nearby_facilities(
    snapshot: FacilitySnapshot,
    lat: float,
    lng: float,
    radius_m: float = 500.0,
    facility_type: Optional[str] = None,
) -> int:
    if facility_type is not None:
        snapshot = {facility_type: snapshot.get(facility_type) or ()}
    count = 0
    for items in snapshot.values():
        for f in items:
            if not f.has_coordinates:
                continue
            if within_radius(haversine_m(lat, lng, f.lat, f.lng), radius_m):
                count += 1
    return count
