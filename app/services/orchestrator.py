"""CloudConvert 작업 생성 → 업로드 → 완료 대기 → 결과 추출"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from app.core.exceptions import (
    ConversionAbortedException,
    ConversionUnresolvedException,
    NoOutputFileException,
    UploadInitFailedException,
)
from app.models import (
    EXPORT_TASK,
    AwaitStrategy,
    ConversionRequest,
    ConversionResult,
    JobTask,
)
from app.services.cloudconvert_client import CloudConvertClient

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], Awaitable[bool]]


def extract_result(export_task: JobTask) -> ConversionResult:
    """
    완료된 export 단계에서 첫 번째 결과 파일 추출

    Raises:
        NoOutputFileException: 결과 파일이 없는 경우
    """
    files = export_task.files
    if not files or not files[0].get("url"):
        raise NoOutputFileException()
    return ConversionResult.from_file(files[0])


class ConversionOrchestrator:
    """
    변환 작업 오케스트레이터

    요청마다 작업을 하나 생성하고 완료 또는 실패까지 진행합니다.
    작업 자체는 재시도하지 않으며, 폴링만 정해진 횟수만큼 반복합니다.
    """

    def __init__(
        self,
        client: CloudConvertClient,
        *,
        max_attempts: int = 40,
        poll_interval: float = 1.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        strategy: AwaitStrategy = "poll",
    ):
        self._client = client
        self.max_attempts = max_attempts
        self.poll_interval = poll_interval
        self._sleep = sleep
        self.strategy = strategy

    async def submit_and_await(
        self,
        request: ConversionRequest,
        *,
        strategy: Optional[AwaitStrategy] = None,
        is_cancelled: Optional[CancelCheck] = None,
    ) -> ConversionResult:
        """
        작업 생성부터 결과 추출까지 실행

        Args:
            request: 변환 요청
            strategy: 'poll' (제한 횟수 폴링) 또는 'wait' (sync API 대기)
            is_cancelled: 호출자 연결 종료 여부 확인 함수

        Returns:
            ConversionResult

        Raises:
            ConversionFailedException 계열: 작업 처리 실패
            UpstreamException: CloudConvert 통신 실패
        """
        job = await self._client.create_job(request.build_tasks())
        logger.info(
            f"변환 작업 생성됨 (job_id={job.id}, target={request.target_format}, "
            f"mode={'upload' if request.is_upload else 'url'})"
        )

        if request.upload is not None:
            handshake = job.import_handshake()
            if handshake is None:
                logger.error(f"업로드 폼을 찾을 수 없음 (job_id={job.id})")
                raise UploadInitFailedException()
            await self._client.upload(handshake, request.upload)
            logger.info(
                f"파일 업로드 완료 (job_id={job.id}, size={request.upload.size})"
            )

        if (strategy or self.strategy) == "wait":
            result = await self._wait(job.id)
        else:
            result = await self._poll(job.id, is_cancelled)

        logger.info(f"변환 완료 (job_id={job.id}, filename={result.filename})")
        return result

    async def _poll(self, job_id: str, is_cancelled: Optional[CancelCheck]) -> ConversionResult:
        """
        제한 횟수 폴링

        export 단계가 finished가 되면 즉시 결과 반환,
        작업이 error 상태가 되거나 시도 횟수를 소진하면 실패
        """
        for attempt in range(1, self.max_attempts + 1):
            if is_cancelled is not None and await is_cancelled():
                logger.info(f"호출자 연결 종료, 폴링 중단 (job_id={job_id}, attempt={attempt})")
                raise ConversionAbortedException()

            await self._sleep(self.poll_interval)
            job = await self._client.get_job(job_id)

            # finished 상태의 export는 최종 상태. 파일이 없으면 더 폴링하지 않고
            # 바로 NoOutputFileException으로 종료
            export_task = job.find_task(EXPORT_TASK, status="finished")
            if export_task is not None:
                return extract_result(export_task)

            if job.is_errored:
                logger.warning(
                    f"변환 작업 오류 상태 (job_id={job_id}, attempt={attempt}, "
                    f"cause={job.error_summary})"
                )
                raise ConversionUnresolvedException()

        logger.warning(
            f"폴링 시도 횟수 소진 (job_id={job_id}, attempts={self.max_attempts})"
        )
        raise ConversionUnresolvedException()

    async def _wait(self, job_id: str) -> ConversionResult:
        """sync API로 종료 상태까지 대기 후 결과 추출"""
        job = await self._client.wait_job(job_id)

        if job.is_errored:
            logger.warning(
                f"변환 작업 오류 상태 (job_id={job_id}, cause={job.error_summary})"
            )
            raise ConversionUnresolvedException()

        export_task = job.find_task(EXPORT_TASK, status="finished")
        if export_task is None:
            raise NoOutputFileException()
        return extract_result(export_task)
