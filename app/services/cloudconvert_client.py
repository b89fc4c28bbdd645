"""CloudConvert API v2 클라이언트 (httpx 기반)"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from app.core.config import Settings
from app.core.exceptions import (
    JobCreationFailedException,
    MissingApiKeyException,
    UpstreamException,
)
from app.models import ConversionJob, ImportHandshake, UploadSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CloudConvertConfig:
    """CloudConvert 접속 설정 (불변)"""

    api_key: Optional[str]
    api_url: str
    sync_api_url: str
    wait_timeout: float = 300.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudConvertConfig":
        return cls(
            api_key=settings.CLOUDCONVERT_API_KEY,
            api_url=settings.cloudconvert_api_url,
            sync_api_url=settings.cloudconvert_sync_api_url,
            wait_timeout=settings.CLOUDCONVERT_WAIT_TIMEOUT_SECONDS,
        )


def _response_body(response: httpx.Response) -> Any:
    """업스트림 응답 본문 (JSON 우선, 실패시 텍스트)"""
    try:
        return response.json()
    except ValueError:
        return response.text or None


class CloudConvertClient:
    """
    CloudConvert 작업 API 클라이언트

    - 작업 생성 / 조회 / 완료 대기
    - import/upload 폼으로 파일 업로드
    - 통신 오류는 UpstreamException으로 변환
    """

    def __init__(self, http_client: httpx.AsyncClient, config: CloudConvertConfig):
        self._http = http_client
        self._config = config

    def _auth_headers(self) -> Dict[str, str]:
        if not self._config.api_key:
            raise MissingApiKeyException()
        return {"Authorization": f"Bearer {self._config.api_key}"}

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"CloudConvert 오류 응답: {method} {url} -> {e.response.status_code}"
            )
            raise UpstreamException(
                upstream_status=e.response.status_code,
                data=_response_body(e.response),
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"CloudConvert 통신 실패: {method} {url} ({e!r})")
            raise UpstreamException(data={"message": str(e) or type(e).__name__}) from e
        return response

    async def _get_json(self, method: str, url: str, **kwargs) -> Any:
        response = await self._send(method, url, **kwargs)
        return _response_body(response)

    async def create_job(self, tasks: Dict[str, Dict[str, Any]]) -> ConversionJob:
        """
        작업 생성

        Args:
            tasks: 단계 이름 → 단계 정의

        Returns:
            생성된 ConversionJob

        Raises:
            JobCreationFailedException: 응답에 작업 ID가 없는 경우
        """
        payload = await self._get_json(
            "POST",
            f"{self._config.api_url}/jobs",
            json={"tasks": tasks},
            headers=self._auth_headers(),
        )
        job = ConversionJob.from_payload(payload)
        if not job.id:
            logger.error("CloudConvert 작업 생성 응답에 ID가 없습니다")
            raise JobCreationFailedException()
        return job

    async def get_job(self, job_id: str) -> ConversionJob:
        """작업 상태 조회"""
        payload = await self._get_json(
            "GET",
            f"{self._config.api_url}/jobs/{job_id}",
            headers=self._auth_headers(),
        )
        return ConversionJob.from_payload(payload)

    async def wait_job(self, job_id: str) -> ConversionJob:
        """작업이 종료 상태가 될 때까지 대기 (sync API)"""
        payload = await self._get_json(
            "GET",
            f"{self._config.sync_api_url}/jobs/{job_id}",
            headers=self._auth_headers(),
            timeout=self._config.wait_timeout,
        )
        return ConversionJob.from_payload(payload)

    async def upload(self, handshake: ImportHandshake, source: UploadSource) -> None:
        """
        서명된 업로드 폼으로 파일 전송

        폼 파라미터를 모두 포함하고 마지막에 file 필드를 추가합니다.
        저장소 엔드포인트에는 인증 헤더를 보내지 않습니다.
        """
        fields = {key: str(value) for key, value in handshake.parameters.items()}
        await self._send(
            "POST",
            handshake.url,
            data=fields,
            files={"file": (source.filename, source.content, source.content_type)},
            follow_redirects=True,
        )
