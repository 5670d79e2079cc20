# spacefit/routers/analysis.py
# -----------------------------------------------------------------------------
# GET /analyze?address=...
# - AddressNotFound 404 / InvalidInput 400 / ProviderUnavailable 503 / 그 외 500
# -----------------------------------------------------------------------------
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from loguru import logger

from spacefit.core.errors import AddressNotFound, InvalidInput, ProviderUnavailable
from spacefit.schemas.analysis import AnalysisResult
from spacefit.services.analyzer import AreaAnalyzer
from spacefit.services.kakao import KakaoLocalClient

router = APIRouter(tags=["analysis"])


def get_analyzer(request: Request) -> AreaAnalyzer:
    """요청마다 분석기 생성 (설정/기존 시설 스냅샷은 기동 시 1회 로드한 것을 공유)"""
    state = request.app.state
    try:
        provider = KakaoLocalClient.from_settings(state.settings)
    except ProviderUnavailable as e:
        logger.error(f"[Analyze] {e}")
        raise HTTPException(status_code=503, detail="External API unavailable")
    return AreaAnalyzer(provider, state.scoring_model, state.existing_facilities)


@router.get("/analyze", response_model=AnalysisResult)
async def analyze(
    address: str = Query("", description="분석할 주소 또는 장소명"),
    analyzer: AreaAnalyzer = Depends(get_analyzer),
):
    if not address.strip():
        raise HTTPException(status_code=400, detail="Address parameter is required")

    try:
        return await analyzer.analyze(address)
    except AddressNotFound:
        raise HTTPException(status_code=404, detail="Address not found")
    except InvalidInput:
        raise HTTPException(status_code=400, detail="Invalid address format")
    except ProviderUnavailable as e:
        logger.warning(f"[Analyze] provider unavailable: {e}")
        raise HTTPException(status_code=503, detail="External API unavailable")
    except Exception:
        logger.exception(f"[Analyze] unexpected error: address={address!r}")
        raise HTTPException(status_code=500, detail="Internal server error")
