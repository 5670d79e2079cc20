# spacefit/services/distance.py

import math

EARTH_RADIUS_M = 6_371_000.0
DECAY_DISTANCE_M = 1000.0


def distance_weight(distance_m) -> float:
    """
    거리 기반 가중치 (가까울수록 높음, 0~1)
    0m = 1.0, 1000m 이상 = 0.0 으로 선형 감쇠.
    값이 없거나 음수, 유한하지 않은 값(NaN/inf)이면 0m 로 취급.
    """
    try:
        d = float(distance_m or 0)
    except (TypeError, ValueError):
        d = 0.0
    if not math.isfinite(d) or d <= 0:
        return 1.0
    return max(1.0 - d / DECAY_DISTANCE_M, 0.0)


def normalize_score(raw_score: float, max_possible: float) -> float:
    """원점수 → 0~100 (max_possible 기준 비율, 범위 밖은 잘라냄)"""
    if max_possible <= 0:
        return 0.0
    normalized = (raw_score / max_possible) * 100
    return max(0.0, min(100.0, normalized))


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """두 좌표 사이 대원거리(미터)"""
    rad = math.pi / 180
    dlat = (lat2 - lat1) * rad
    dlng = (lng2 - lng1) * rad
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1 * rad) * math.cos(lat2 * rad) * math.sin(dlng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def within_radius(distance_m: float, radius_m: float) -> bool:
    # 경계 포함 (정확히 500m 도 주변 시설)
    return distance_m <= radius_m
