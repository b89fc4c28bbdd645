import logging
from typing import Optional

from fastapi import APIRouter, Body, Request

from app.api.deps import OrchestratorDep, SettingsDep
from app.core.exceptions import (
    ConverterException,
    MissingApiKeyException,
    MissingUrlFieldsException,
    UnexpectedServerErrorException,
)
from app.core.rate_limit import api_limit
from app.models import ConversionRequest, ConversionResponse, UrlConversionRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/convert/url", response_model=ConversionResponse)
@api_limit
async def convert_url(
    request: Request,
    settings: SettingsDep,
    orchestrator: OrchestratorDep,
    payload: Optional[UrlConversionRequest] = Body(None),
):
    """
    원격 URL 파일 변환 API

    - **fileUrl**: 변환할 파일의 URL
    - **target**: 대상 포맷

    소스 타입은 CloudConvert가 가져온 뒤에야 알 수 있으므로 허용 목록 검증을 하지 않습니다.
    """
    if payload is None or not payload.file_url or not (payload.target or "").strip():
        raise MissingUrlFieldsException()

    if not settings.is_cloudconvert_configured:
        raise MissingApiKeyException()

    try:
        result = await orchestrator.submit_and_await(
            ConversionRequest.from_url(payload.file_url, payload.target),
            strategy="poll",
            is_cancelled=request.is_disconnected,
        )
    except ConverterException:
        raise
    except Exception as e:
        logger.exception(f"URL 변환 중 예기치 않은 오류 ({payload.file_url})")
        raise UnexpectedServerErrorException("Server error", cause=str(e)) from e

    return ConversionResponse(
        download_url=result.download_url,
        filename=result.filename,
        size_bytes=result.size_bytes,
        content_type=result.content_type,
    )
