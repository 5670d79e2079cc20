# spacefit/main.py
# -----------------------------------------------------------------------------
# FastAPI 엔트리포인트
# - 서버 기동 시 로깅 설정, 점수 모델 구성, 기부채납 시설 스냅샷 1회 로드
# -----------------------------------------------------------------------------
from fastapi import FastAPI

from spacefit.core.config import settings
from spacefit.core.logging import configure_logging
from spacefit.core.scoring_config import build_scoring_model
from spacefit.routers import analysis
from spacefit.services.facility_loader import ExistingFacilityLoader

app = FastAPI(title=settings.APP_NAME)
app.state.settings = settings
app.state.scoring_model = build_scoring_model(settings)
app.state.existing_facilities = {}


@app.on_event("startup")
async def on_startup():
    configure_logging()
    app.state.existing_facilities = ExistingFacilityLoader(
        settings.FACILITY_DATA_PATH
    ).load()


app.include_router(analysis.router)


@app.get("/")
async def root():
    return {"message": f"{settings.APP_NAME} API - Use GET /analyze?address=<address>"}


@app.get("/health")
async def health():
    return {"status": "ok"}
