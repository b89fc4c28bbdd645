from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class ConverterException(HTTPException):
    """변환 서비스 기본 예외 (응답 본문: {"error", "details"})"""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "Internal server error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.details = details

    def to_content(self) -> Dict[str, Any]:
        """응답 본문 생성"""
        content: Dict[str, Any] = {"error": self.detail}
        if self.details:
            content["details"] = self.details
        return content


# =============================================================================
# 클라이언트 입력 오류 (400)
# =============================================================================


class BadRequestException(ConverterException):
    """잘못된 요청 예외"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
            details=details,
        )


class NoFileUploadedException(BadRequestException):
    def __init__(self):
        super().__init__('No file uploaded. Use field name "file".')


class MissingTargetException(BadRequestException):
    def __init__(self):
        super().__init__(
            'Missing target format. Include a "target" field (e.g., pdf, docx, png).'
        )


class MissingUrlFieldsException(BadRequestException):
    def __init__(self):
        super().__init__("Provide fileUrl and target")


class BannedFileTypeException(BadRequestException):
    """실행 파일 등 차단된 타입 예외"""

    def __init__(self, mime: str):
        super().__init__(
            "Unsupported file type for security reasons.",
            details={"receivedMime": mime},
        )


class FileTooLargeException(BadRequestException):
    """파일 크기 초과 예외"""

    def __init__(self, max_size_mb: int):
        super().__init__(f"Max file size is {max_size_mb}MB.")


class UnsupportedFileTypeException(BadRequestException):
    """허용 목록에 없는 소스 타입 예외"""

    def __init__(self, mime: str, supported: List[str]):
        super().__init__(
            "This file type is not supported yet.",
            details={"receivedMime": mime, "supportedMimes": supported},
        )


class TargetNotAllowedException(BadRequestException):
    """소스 타입에 허용되지 않는 대상 포맷 예외"""

    def __init__(self, mime: str, allowed: List[str]):
        super().__init__(
            "Target format not allowed for this file type.",
            details={"sourceMime": mime, "allowedTargets": allowed},
        )


# =============================================================================
# 설정 오류
# =============================================================================


class MissingApiKeyException(ConverterException):
    """API 키 미설정 (요청 단위로 보고)"""

    def __init__(self):
        super().__init__(detail="Missing CLOUDCONVERT_API_KEY")


# =============================================================================
# 외부 서비스 오류
# =============================================================================


class UpstreamException(ConverterException):
    """CloudConvert 통신 오류 (업스트림 상태 코드 전달)"""

    def __init__(self, upstream_status: Optional[int] = None, data: Any = None):
        code = upstream_status or status.HTTP_500_INTERNAL_SERVER_ERROR
        if not 400 <= code < 600:
            code = status.HTTP_500_INTERNAL_SERVER_ERROR
        super().__init__(
            status_code=code,
            detail="Upstream conversion error.",
            details={
                "status": upstream_status or status.HTTP_500_INTERNAL_SERVER_ERROR,
                "data": data,
            },
        )
        self.upstream_status = upstream_status


# =============================================================================
# 작업 처리 오류 (500, 재시도 없음)
# =============================================================================


class ConversionFailedException(ConverterException):
    """변환 작업 실패 예외"""

    def __init__(
        self,
        message: str = "Conversion failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(detail=message, details=details)


class JobCreationFailedException(ConversionFailedException):
    def __init__(self):
        super().__init__("Failed to create job")


class UploadInitFailedException(ConversionFailedException):
    def __init__(self):
        super().__init__("Failed to initialize upload with conversion service.")


class NoOutputFileException(ConversionFailedException):
    def __init__(self):
        super().__init__("Conversion finished, but no output file was provided.")


class ConversionUnresolvedException(ConversionFailedException):
    """작업 오류 상태 또는 폴링 시도 소진"""

    def __init__(self):
        super().__init__("Conversion not finished or failed")


class ConversionAbortedException(ConversionFailedException):
    """클라이언트 연결 종료로 대기 중단"""

    def __init__(self):
        super().__init__("Client disconnected before the conversion finished.")


class UnexpectedServerErrorException(ConverterException):
    """처리되지 않은 내부 오류 래핑"""

    def __init__(self, message: str = "Unexpected server error.", cause: Optional[str] = None):
        super().__init__(
            detail=message,
            details={"message": cause} if cause else None,
        )
