from functools import lru_cache
from typing import Annotated, Dict, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# 소스 MIME 타입 → 허용 대상 포맷
DEFAULT_CONVERSION_MAP: Dict[str, List[str]] = {
    "application/pdf": ["docx", "png"],
    "application/msword": ["pdf", "docx"],
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ["pdf"],
    "image/jpeg": ["png", "webp", "jpg"],
    "image/png": ["jpg", "webp", "pdf", "png"],
    "image/webp": ["jpg", "png"],
    "text/plain": ["pdf"],
}

# 실행 파일 계열 (보안상 업로드 차단)
DEFAULT_BANNED_MIME_TYPES: List[str] = [
    "application/x-msdownload",
    "application/x-dosexec",
    "application/x-executable",
    "application/x-sh",
    "application/x-binary",
]

DEFAULT_API_URL = "https://api.cloudconvert.com/v2"
DEFAULT_SYNC_API_URL = "https://sync.api.cloudconvert.com/v2"
SANDBOX_API_URL = "https://api.sandbox.cloudconvert.com/v2"
SANDBOX_SYNC_API_URL = "https://sync.api.sandbox.cloudconvert.com/v2"


class Settings(BaseSettings):
    """File Converter Relay 애플리케이션 설정"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # 서버
    ENV: Literal["development", "production", "testing"] = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # CORS
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    # 파일 제한
    MAX_FILE_SIZE_MB: int = 25

    # CloudConvert
    CLOUDCONVERT_API_KEY: str | None = None
    CLOUDCONVERT_SANDBOX: bool = False
    CLOUDCONVERT_API_URL: str | None = None  # 미지정시 기본/샌드박스 URL 사용
    CLOUDCONVERT_SYNC_API_URL: str | None = None
    CLOUDCONVERT_TIMEOUT_SECONDS: float = 30.0
    CLOUDCONVERT_WAIT_TIMEOUT_SECONDS: float = 300.0

    # 작업 대기
    POLL_MAX_ATTEMPTS: int = Field(default=40, ge=1)
    POLL_INTERVAL_SECONDS: float = Field(default=1.5, ge=0)
    UPLOAD_AWAIT_STRATEGY: Literal["wait", "poll"] = "wait"

    # 요청 제한 (/api/ 경로)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_MINUTES: int = 15
    RATE_LIMIT_MAX_REQUESTS: int = 200

    # 변환 허용 목록
    CONVERSION_MAP: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_CONVERSION_MAP.items()}
    )
    BANNED_MIME_TYPES: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_BANNED_MIME_TYPES)
    )

    @field_validator("ALLOWED_ORIGINS", "BANNED_MIME_TYPES", mode="before")
    @classmethod
    def parse_comma_list(cls, v):
        """쉼표로 구분된 문자열을 리스트로 파싱"""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def MAX_FILE_SIZE_BYTES(self) -> int:
        """파일당 최대 크기 (bytes)"""
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """개발 환경 여부"""
        return self.ENV == "development"

    @property
    def is_production(self) -> bool:
        """프로덕션 환경 여부"""
        return self.ENV == "production"

    @property
    def is_cloudconvert_configured(self) -> bool:
        """CloudConvert API 키 설정 여부"""
        return bool(self.CLOUDCONVERT_API_KEY)

    @property
    def cloudconvert_api_url(self) -> str:
        if self.CLOUDCONVERT_API_URL:
            return self.CLOUDCONVERT_API_URL.rstrip("/")
        if self.CLOUDCONVERT_SANDBOX:
            return SANDBOX_API_URL
        return DEFAULT_API_URL

    @property
    def cloudconvert_sync_api_url(self) -> str:
        if self.CLOUDCONVERT_SYNC_API_URL:
            return self.CLOUDCONVERT_SYNC_API_URL.rstrip("/")
        if self.CLOUDCONVERT_SANDBOX:
            return SANDBOX_SYNC_API_URL
        return DEFAULT_SYNC_API_URL


@lru_cache
def get_settings() -> Settings:
    """설정 싱글톤 반환 (캐싱)"""
    return Settings()


# 기본 설정 인스턴스 (get_settings()와 동일 인스턴스 사용)
settings = get_settings()
