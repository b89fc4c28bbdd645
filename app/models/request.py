from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UrlConversionRequest(BaseModel):
    """원격 URL 변환 요청"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_url: str | None = Field(default=None, description="변환할 파일 URL")
    target: str | None = Field(default=None, description="대상 포맷 (예: pdf, docx)")
