import logging

from fastapi import APIRouter, File, Form, Request, UploadFile

from app.api.deps import ConversionPolicyDep, OrchestratorDep, SettingsDep
from app.core.exceptions import (
    BannedFileTypeException,
    ConverterException,
    FileTooLargeException,
    MissingApiKeyException,
    MissingTargetException,
    NoFileUploadedException,
    UnexpectedServerErrorException,
)
from app.core.rate_limit import api_limit
from app.models import (
    ConversionMeta,
    ConversionRequest,
    OriginalFileInfo,
    UploadConversionResponse,
    UploadSource,
)
from app.utils import normalize_target

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@router.post("/convert", response_model=UploadConversionResponse)
@api_limit
async def convert_file(
    request: Request,
    settings: SettingsDep,
    policy: ConversionPolicyDep,
    orchestrator: OrchestratorDep,
    file: UploadFile | None = File(None, description="변환할 파일"),
    target: str | None = Form(None, description="대상 포맷 (예: pdf, docx, png)"),
):
    """
    업로드 파일 변환 API

    - **file**: 변환할 파일
    - **target**: 대상 포맷 (소스 MIME 타입별 허용 목록 내)

    CloudConvert 작업을 생성하고 파일을 업로드한 뒤 완료까지 대기합니다.
    모든 입력 검증은 외부 호출 전에 수행됩니다.
    """
    # 1. 파일 존재 확인
    if file is None:
        raise NoFileUploadedException()

    filename = file.filename or "unnamed"
    mime = file.content_type or DEFAULT_CONTENT_TYPE

    # 2. 차단된 타입 (실행 파일 등)
    if policy.is_banned(mime):
        logger.warning(f"차단된 파일 타입 업로드 거부: {mime} ({filename})")
        raise BannedFileTypeException(mime)

    # 3. 크기 검증 (헤더 값이 있으면 사전 확인 후 실제 크기 확인)
    if file.size and file.size > settings.MAX_FILE_SIZE_BYTES:
        raise FileTooLargeException(settings.MAX_FILE_SIZE_MB)
    content = await file.read(settings.MAX_FILE_SIZE_BYTES + 1)
    if len(content) > settings.MAX_FILE_SIZE_BYTES:
        raise FileTooLargeException(settings.MAX_FILE_SIZE_MB)

    # 4. 대상 포맷 및 허용 목록 검증
    target_format = normalize_target(target)
    if not target_format:
        raise MissingTargetException()
    policy.ensure_allowed(mime, target_format)

    # 5. API 키 확인
    if not settings.is_cloudconvert_configured:
        raise MissingApiKeyException()

    upload = UploadSource(filename=filename, content_type=mime, content=content)

    try:
        result = await orchestrator.submit_and_await(
            ConversionRequest.from_upload(upload, target_format),
            strategy=settings.UPLOAD_AWAIT_STRATEGY,
            is_cancelled=request.is_disconnected,
        )
    except ConverterException:
        raise
    except Exception as e:
        logger.exception(f"업로드 변환 중 예기치 않은 오류 ({filename})")
        raise UnexpectedServerErrorException(cause=str(e)) from e

    return UploadConversionResponse(
        download_url=result.download_url,
        filename=result.filename,
        size_bytes=result.size_bytes,
        content_type=result.content_type,
        meta=ConversionMeta(
            original=OriginalFileInfo(name=filename, mime=mime, size=upload.size),
            target=target_format,
        ),
    )
