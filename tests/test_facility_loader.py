"""Existing-facility spreadsheet loading and category normalization."""

import math
from datetime import date

import pandas as pd
import pytest

from spacefit.core.categories import ExistingCategory, normalize_category
from spacefit.core.errors import DataLoadFailure
from spacefit.services.distance import EARTH_RADIUS_M
from spacefit.services.facility_loader import (
    ExistingFacilityLoader,
    count_nearby_facilities,
    facility_statistics,
    normalize_header,
    parse_date,
)

ROWS = {
    "시설명": ["역삼 어린이공원", "개나리 경로당", "", "행복 작은도서관", "주민쉼터"],
    "시설종류": ["어린이공원", "경로당", "공원", "도서관", "휴게공간"],
    "면적(㎡)": [1500, 120.5, 300, None, 80],
    "소재지": ["역삼동 1", "역삼동 2", "역삼동 3", "역삼동 4", "역삼동 5"],
    "위도": [37.5001, 37.5100, 37.5, None, 37.49],
    "경도": [127.0365, 127.0400, 127.03, 127.03, 127.02],
    "준공일": ["2019-05-01", "2015-03-20", None, "bad-date", None],
    "비고": [None, "리모델링", None, None, None],
}


@pytest.fixture()
def csv_path(tmp_path):
    path = tmp_path / "facilities.csv"
    pd.DataFrame(ROWS).to_csv(path, index=False)
    return path


class TestNormalizeCategory:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("어린이놀이터", ExistingCategory.PLAYGROUND),
            ("놀이터(소규모)", ExistingCategory.PLAYGROUND),
            ("어린이공원", ExistingCategory.PARK),
            ("노외 주차장", ExistingCategory.PUBLIC_PARKING),
            ("국공립 보육시설", ExistingCategory.DAYCARE),
            ("구립도서관", ExistingCategory.SMALL_LIBRARY),
            ("실내 운동시설", ExistingCategory.SPORTS),
            ("주민회관", ExistingCategory.VILLAGE_HALL),
            ("보건의료시설", ExistingCategory.HEALTH),
            ("휴게공간", ExistingCategory.OTHER),
            ("", ExistingCategory.OTHER),
            (None, ExistingCategory.OTHER),
        ],
    )
    def test_rules(self, raw, expected):
        assert normalize_category(raw) == expected

    def test_first_match_wins(self):
        # 놀이터 규칙이 공원 규칙보다 먼저 평가됨
        assert normalize_category("공원 내 놀이터") == ExistingCategory.PLAYGROUND


class TestHeaders:
    @pytest.mark.parametrize(
        "header,key",
        [
            ("시설명", "name"),
            ("구분", "category"),
            ("면적(㎡)", "area"),
            ("소재지", "location"),
            ("위도", "latitude"),
            ("Longitude", "longitude"),
            ("준공일", "established_date"),
            ("비고", "notes"),
            ("관리 주체", "관리_주체"),
        ],
    )
    def test_normalize_header(self, header, key):
        assert normalize_header(header) == key

    def test_blank_header(self):
        assert normalize_header(None) is None
        assert normalize_header("  ") is None


class TestParseDate:
    def test_excel_serial(self):
        assert parse_date(43831) == date(2020, 1, 1)

    def test_string(self):
        assert parse_date("2019-05-01") == date(2019, 5, 1)

    def test_timestamp(self):
        assert parse_date(pd.Timestamp("2021-07-15 10:00")) == date(2021, 7, 15)

    def test_yyyymmdd_number(self):
        assert parse_date(20230115) == date(2023, 1, 15)
        assert parse_date(20230115.0) == date(2023, 1, 15)

    def test_out_of_range_number(self):
        assert parse_date(10**12) is None
        assert parse_date(20231345) is None
        assert parse_date(float("inf")) is None

    def test_unparseable(self):
        assert parse_date("bad-date") is None
        assert parse_date(None) is None


class TestLoader:
    def test_load_csv(self, csv_path):
        snapshot = ExistingFacilityLoader(csv_path).load()
        # 이름 없는 행 제외
        assert sum(len(v) for v in snapshot.values()) == 4
        assert set(snapshot) == {"공원", "경로당", "작은도서관", "기타"}

        park = snapshot["공원"][0]
        assert park.name == "역삼 어린이공원"
        assert park.raw_category == "어린이공원"
        assert park.area == 1500.0
        assert park.established_date == date(2019, 5, 1)
        assert park.has_coordinates

        library = snapshot["작은도서관"][0]
        assert not library.has_coordinates
        assert library.established_date is None
        assert snapshot["경로당"][0].notes == "리모델링"

    def test_load_xlsx(self, tmp_path):
        path = tmp_path / "facilities.xlsx"
        pd.DataFrame(ROWS).to_excel(path, index=False)
        snapshot = ExistingFacilityLoader(path).load()
        assert snapshot["경로당"][0].area == 120.5

    def test_numeric_dates_in_xlsx(self, tmp_path):
        path = tmp_path / "numeric_dates.xlsx"
        pd.DataFrame(
            {
                "시설명": ["역삼 경로당", "개나리 공원"],
                "시설종류": ["경로당", "공원"],
                "준공일": [20230115, 10**12],
            }
        ).to_excel(path, index=False)
        snapshot = ExistingFacilityLoader(path).load()
        assert snapshot["경로당"][0].established_date == date(2023, 1, 15)
        assert snapshot["공원"][0].established_date is None

    def test_row_error_degrades_to_empty(self, csv_path, monkeypatch):
        def broken(df):
            raise KeyError("시설명")

        monkeypatch.setattr("spacefit.services.facility_loader.frame_to_facilities", broken)
        loader = ExistingFacilityLoader(csv_path)
        assert loader.load() == {}
        with pytest.raises(DataLoadFailure):
            loader.parse()

    def test_missing_file_degrades_to_empty(self, tmp_path):
        loader = ExistingFacilityLoader(tmp_path / "none.xls")
        assert loader.load() == {}
        with pytest.raises(DataLoadFailure):
            loader.parse()

    def test_unreadable_file_degrades_to_empty(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a workbook")
        assert ExistingFacilityLoader(path).load() == {}

    def test_load_by_types(self, csv_path):
        snapshot = ExistingFacilityLoader(csv_path).load_by_types(["공원", "경로당"])
        assert set(snapshot) == {"공원", "경로당"}


class TestStatistics:
    def test_facility_statistics(self, csv_path):
        stats = facility_statistics(ExistingFacilityLoader(csv_path).load())
        assert stats["공원"] == {"count": 1, "total_area": 1500.0, "avg_area": 1500.0}
        assert stats["작은도서관"]["total_area"] == 0.0

    def test_count_nearby(self, csv_path):
        snapshot = ExistingFacilityLoader(csv_path).load()
        per_meter = 180 / (math.pi * EARTH_RADIUS_M)
        origin = (37.5001 - 100 * per_meter, 127.0365)
        assert count_nearby_facilities(snapshot, *origin, radius_m=500) == 1
        assert count_nearby_facilities(snapshot, *origin, radius_m=5000) == 3
        assert (
            count_nearby_facilities(snapshot, *origin, radius_m=5000, facility_type="경로당")
            == 1
        )
