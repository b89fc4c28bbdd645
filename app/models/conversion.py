"""CloudConvert 작업 데이터 모델"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# 작업 파이프라인 단계 이름
IMPORT_TASK = "import-1"
CONVERT_TASK = "convert-1"
EXPORT_TASK = "export-1"


@dataclass(frozen=True)
class UploadSource:
    """메모리에 올라온 업로드 파일"""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ConversionRequest:
    """변환 요청 (원격 URL 또는 업로드 파일 중 하나)"""

    target_format: str
    source_url: Optional[str] = None
    upload: Optional[UploadSource] = None

    def __post_init__(self):
        if not self.target_format:
            raise ValueError("target_format은 비어 있을 수 없습니다")
        if (self.source_url is None) == (self.upload is None):
            raise ValueError("source_url과 upload 중 하나만 지정해야 합니다")

    @classmethod
    def from_url(cls, file_url: str, target: str) -> "ConversionRequest":
        return cls(target_format=target.strip().lower(), source_url=file_url)

    @classmethod
    def from_upload(cls, upload: UploadSource, target: str) -> "ConversionRequest":
        return cls(target_format=target.strip().lower(), upload=upload)

    @property
    def is_upload(self) -> bool:
        return self.upload is not None

    def build_tasks(self) -> Dict[str, Dict[str, Any]]:
        """import → convert → export/url 파이프라인 정의 생성"""
        if self.upload is not None:
            import_task: Dict[str, Any] = {"operation": "import/upload"}
        else:
            import_task = {"operation": "import/url", "url": self.source_url}

        return {
            IMPORT_TASK: import_task,
            CONVERT_TASK: {
                "operation": "convert",
                "input": IMPORT_TASK,
                "output_format": self.target_format,
            },
            EXPORT_TASK: {
                "operation": "export/url",
                "input": CONVERT_TASK,
                "inline": False,
                "archive_multiple_files": False,
            },
        }


@dataclass(frozen=True)
class ImportHandshake:
    """업로드용 서명된 폼 (한 번만 사용)"""

    url: str
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass
class JobTask:
    """작업 단계"""

    name: str
    status: str
    id: Optional[str] = None
    operation: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "JobTask":
        result = data.get("result")
        return cls(
            name=str(data.get("name") or ""),
            status=str(data.get("status") or ""),
            id=data.get("id"),
            operation=data.get("operation"),
            result=result if isinstance(result, dict) else None,
            message=data.get("message"),
            code=data.get("code"),
        )

    @property
    def is_finished(self) -> bool:
        return self.status == "finished"

    @property
    def files(self) -> List[Dict[str, Any]]:
        """export 결과 파일 목록 (형식이 잘못된 항목 제외)"""
        if not self.result:
            return []
        files = self.result.get("files")
        if not isinstance(files, list):
            return []
        return [f for f in files if isinstance(f, dict)]

    def import_handshake(self) -> Optional[ImportHandshake]:
        """import/upload 결과에서 업로드 폼 추출"""
        if not self.result:
            return None
        form = self.result.get("form")
        if not isinstance(form, dict) or not form.get("url"):
            return None
        parameters = form.get("parameters") or {}
        if not isinstance(parameters, dict):
            return None
        return ImportHandshake(url=str(form["url"]), parameters=parameters)


@dataclass
class ConversionJob:
    """CloudConvert 작업 (요청 단위, 재사용 안 함)"""

    id: str
    status: str
    tasks: List[JobTask] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> "ConversionJob":
        """API 응답 ({"data": {...}})에서 작업 생성. id가 없으면 빈 문자열"""
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            data = {}
        raw_tasks = data.get("tasks")
        tasks = [
            JobTask.from_payload(t)
            for t in (raw_tasks if isinstance(raw_tasks, list) else [])
            if isinstance(t, dict)
        ]
        return cls(
            id=str(data.get("id") or ""),
            status=str(data.get("status") or ""),
            tasks=tasks,
        )

    @property
    def is_errored(self) -> bool:
        return self.status == "error"

    def find_task(self, name: str, status: Optional[str] = None) -> Optional[JobTask]:
        for task in self.tasks:
            if task.name == name and (status is None or task.status == status):
                return task
        return None

    def import_handshake(self) -> Optional[ImportHandshake]:
        task = self.find_task(IMPORT_TASK)
        if task is None:
            return None
        return task.import_handshake()

    @property
    def error_summary(self) -> str:
        """실패한 단계 요약 (로그용)"""
        failed = [t for t in self.tasks if t.status == "error"]
        if not failed:
            return "unknown"
        return "; ".join(
            f"{t.name}: {t.code or '-'} {t.message or ''}".strip() for t in failed
        )


@dataclass(frozen=True)
class ConversionResult:
    """변환 결과 파일 정보 (저장하지 않음)"""

    download_url: str
    filename: Optional[str]
    size_bytes: Optional[int]
    content_type: Optional[str]

    @classmethod
    def from_file(cls, file_info: Dict[str, Any]) -> "ConversionResult":
        return cls(
            download_url=file_info["url"],
            filename=file_info.get("filename"),
            size_bytes=file_info.get("size"),
            content_type=file_info.get("content_type"),
        )
