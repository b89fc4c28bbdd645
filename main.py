import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import convert, convert_url, health
from app.core.config import settings
from app.core.exceptions import ConverterException
from app.core.rate_limit import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기 관리"""
    # API 키가 없어도 기동은 하고, 요청 단위로 오류를 반환
    if not settings.is_cloudconvert_configured:
        logger.warning("CLOUDCONVERT_API_KEY가 설정되지 않았습니다. .env를 확인하세요")
    logger.info(f"File Converter API 시작 (port={settings.PORT}, max_upload={settings.MAX_FILE_SIZE_MB}MB)")

    yield


app = FastAPI(
    title="File Converter Relay",
    description="CloudConvert 기반 파일 변환 중계 서비스",
    version="0.1.0",
    lifespan=lifespan,
    # 프로덕션에서는 docs/openapi 비활성화
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
)

# /api/ 엔드포인트 요청 제한 (라우트 데코레이터로 적용되어 CORS 안쪽에서 동작)
app.state.limiter = limiter


# =============================================================================
# 미들웨어 설정
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
    max_age=600,  # preflight 캐시 10분
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """보안 헤더 추가 미들웨어"""
    # Request ID 생성/전달
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    response = await call_next(request)

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"

    if settings.is_production:
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )

    return response


# =============================================================================
# 에러 핸들러
# =============================================================================

@app.exception_handler(ConverterException)
async def converter_exception_handler(request: Request, exc: ConverterException):
    """서비스 예외 핸들러 ({"error", "details"})"""
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_content()),
        headers={"X-Request-ID": request.headers.get("X-Request-ID", "")},
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """요청 제한 초과 핸들러"""
    logger.warning(f"요청 제한 초과: {request.client.host if request.client else 'unknown'} ({exc.detail})")
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests, please try again later."},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """라우팅 예외 핸들러 (404, 405 등)"""
    error = "Not found" if exc.status_code == 404 else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": error},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """요청 형식 오류는 400으로 반환"""
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request body.",
            "details": [
                {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
                for error in exc.errors()
            ],
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """일반 예외 핸들러 (프로덕션에서 상세 에러 숨김)"""
    logger.error(f"처리되지 않은 오류: {request.method} {request.url.path}", exc_info=exc)

    content = {"error": "Unhandled error"}
    if settings.is_development:
        content["details"] = {"message": str(exc)}

    return JSONResponse(
        status_code=500,
        content=content,
        headers={"X-Request-ID": request.headers.get("X-Request-ID", "")},
    )


# =============================================================================
# 라우터 등록
# =============================================================================

app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(convert.router, prefix="/api", tags=["convert"])
app.include_router(convert_url.router, prefix="/api", tags=["convert"])


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
