from app.models.types import AwaitStrategy, JobStatus, TaskStatus
from app.models.conversion import (
    CONVERT_TASK,
    EXPORT_TASK,
    IMPORT_TASK,
    ConversionJob,
    ConversionRequest,
    ConversionResult,
    ImportHandshake,
    JobTask,
    UploadSource,
)
from app.models.request import UrlConversionRequest
from app.models.response import (
    ConversionMeta,
    ConversionResponse,
    HealthResponse,
    OriginalFileInfo,
    UploadConversionResponse,
)

__all__ = [
    "AwaitStrategy",
    "JobStatus",
    "TaskStatus",
    "CONVERT_TASK",
    "EXPORT_TASK",
    "IMPORT_TASK",
    "ConversionJob",
    "ConversionRequest",
    "ConversionResult",
    "ImportHandshake",
    "JobTask",
    "UploadSource",
    "UrlConversionRequest",
    "ConversionMeta",
    "ConversionResponse",
    "HealthResponse",
    "OriginalFileInfo",
    "UploadConversionResponse",
]
