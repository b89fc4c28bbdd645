from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase 직렬화 베이스 모델"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversionResponse(CamelModel):
    """변환 결과 응답"""

    download_url: str = Field(..., description="변환 결과 다운로드 URL")
    filename: str | None = Field(default=None, description="결과 파일명")
    size_bytes: int | None = Field(default=None, description="결과 파일 크기 (bytes)")
    content_type: str | None = Field(default=None, description="결과 MIME 타입")


class OriginalFileInfo(CamelModel):
    """업로드 원본 파일 정보"""

    name: str
    mime: str
    size: int


class ConversionMeta(CamelModel):
    original: OriginalFileInfo
    target: str


class UploadConversionResponse(ConversionResponse):
    """업로드 변환 결과 응답 (원본 메타데이터 포함)"""

    meta: ConversionMeta


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = Field(default=True, description="서버 상태")
    uptime: float = Field(..., description="프로세스 가동 시간 (초)")
    max_upload_mb: int = Field(..., alias="maxUploadMB", description="최대 업로드 크기 (MB)")
