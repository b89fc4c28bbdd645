import time

from fastapi import APIRouter, Request

from app.api.deps import SettingsDep
from app.core.rate_limit import api_limit
from app.models import HealthResponse

router = APIRouter()

# 프로세스 시작 시각
_STARTED_AT = time.monotonic()


@router.get("/health", response_model=HealthResponse)
@api_limit
async def health_check(request: Request, settings: SettingsDep):
    """헬스 체크 엔드포인트 (가동 시간, 최대 업로드 크기)"""
    return HealthResponse(
        ok=True,
        uptime=round(time.monotonic() - _STARTED_AT, 3),
        max_upload_mb=settings.MAX_FILE_SIZE_MB,
    )
