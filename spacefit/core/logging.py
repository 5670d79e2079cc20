# spacefit/core/logging.py
# -----------------------------------------------------------------------------
# Loguru 기반 로깅 설정
# - 회전/백트레이스/레벨 지정
# - 서버 기동 시 한 번 호출
# -----------------------------------------------------------------------------
import sys
from pathlib import Path

from loguru import logger

from spacefit.core.config import settings


def configure_logging(log_dir: str | None = None, level: str | None = None) -> None:
    level = level or settings.LOG_LEVEL
    path = Path(log_dir or settings.LOG_DIR)
    path.mkdir(exist_ok=True, parents=True)

    logger.remove()  # 기본 핸들러 제거
    logger.add(sys.stderr, level=level)
    logger.add(
        path / "app.log",
        rotation="10 MB",
        retention="10 files",
        enqueue=True,  # 멀티프로세스 안전
        backtrace=True,
        diagnose=False,
        level=level,
    )
