# spacefit/core/config.py
# -----------------------------------------------------------------------------
# 전역 설정 관리 (pydantic-settings v2)
# - .env 파일과 OS 환경변수를 읽어 Settings 객체로 제공
# - 정규화 기준값은 기본 점수(30.0)와 지표 모델(50.0)을 분리해서 관리
# -----------------------------------------------------------------------------
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # 기본
    APP_NAME: str = "SpaceFit"
    ENV: str = "dev"

    # 카카오 로컬 API
    KAKAO_API_KEY: str | None = None  # Kakao REST API Key
    KAKAO_BASE_URL: str = "https://dapi.kakao.com"
    KAKAO_SEARCH_RADIUS_M: int = Field(1000, ge=1, le=20000)
    KAKAO_MAX_PAGES: int = Field(1, ge=1, le=3)  # 페이지당 15건, 최대 3페이지
    KAKAO_TIMEOUT_S: float = 10.0
    KAKAO_RETRIES: int = Field(3, ge=1)

    # 기부채납 공공시설 엑셀
    FACILITY_DATA_PATH: str = "docs/기부채납 공공시설 - 수기.xls"

    # 점수 정규화 기준 (두 값은 서로 다른 스케일)
    BASELINE_MAX_SCORE: float = Field(30.0, gt=0)
    INDICATOR_MAX_SCORE: float = Field(50.0, gt=0)
    TOP_N_RECOMMENDATIONS: int = Field(5, ge=1)
    NEARBY_RADIUS_M: float = Field(500.0, gt=0)

    # 로깅
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore"  # .env에 추가 필드 무시
    )


settings = Settings()
