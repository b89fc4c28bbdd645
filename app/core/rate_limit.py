from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings, settings

# /api/ 라우트가 함께 쓰는 제한 범위
API_RATE_LIMIT_SCOPE = "api"


def api_rate_limit() -> str:
    """요청마다 현재 설정에서 제한값 생성 (예: '200/15minutes')"""
    current = get_settings()
    return f"{current.RATE_LIMIT_MAX_REQUESTS}/{current.RATE_LIMIT_WINDOW_MINUTES}minutes"


limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

# /api/ 엔드포인트 공용 제한 (클라이언트 IP 기준, 라우트 간 카운터 공유)
api_limit = limiter.shared_limit(api_rate_limit, scope=API_RATE_LIMIT_SCOPE)
