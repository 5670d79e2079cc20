# spacefit/core/errors.py
# -----------------------------------------------------------------------------
# 분석 파이프라인 예외
# - 호출자에게 노출되는 것은 주소 없음 / 잘못된 요청 / 외부 API 장애 세 가지
# - DataLoadFailure 는 로더 내부에서만 쓰이고 빈 데이터로 강등됨
# -----------------------------------------------------------------------------


class SpaceFitError(Exception):
    """분석 오류 기본 클래스"""


class AddressNotFound(SpaceFitError):
    def __init__(self, address: str):
        super().__init__(f"Address not found: {address}")
        self.address = address


class InvalidInput(SpaceFitError):
    """주소 형식 오류 또는 외부 API 가 400 으로 거절한 요청"""


class ProviderUnavailable(SpaceFitError):
    """네트워크/인증/서버 오류로 외부 API 를 사용할 수 없음"""


class DataLoadFailure(SpaceFitError):
    """기존 시설 원본 파일을 읽을 수 없음"""
