from typing import Annotated, AsyncIterator

import httpx
from fastapi import Depends

from app.core.config import Settings, get_settings
from app.services import CloudConvertClient, CloudConvertConfig, ConversionOrchestrator
from app.utils import ConversionPolicy

SettingsDep = Annotated[Settings, Depends(get_settings)]


async def get_http_client(settings: SettingsDep) -> AsyncIterator[httpx.AsyncClient]:
    """요청 단위 httpx 클라이언트 (요청 종료시 닫힘)"""
    async with httpx.AsyncClient(timeout=settings.CLOUDCONVERT_TIMEOUT_SECONDS) as client:
        yield client


HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]


def get_conversion_policy(settings: SettingsDep) -> ConversionPolicy:
    """설정의 허용/차단 목록으로 변환 정책 생성"""
    return ConversionPolicy.from_mapping(
        settings.CONVERSION_MAP, settings.BANNED_MIME_TYPES
    )


ConversionPolicyDep = Annotated[ConversionPolicy, Depends(get_conversion_policy)]


def get_orchestrator(
    settings: SettingsDep, http_client: HttpClientDep
) -> ConversionOrchestrator:
    client = CloudConvertClient(http_client, CloudConvertConfig.from_settings(settings))
    return ConversionOrchestrator(
        client,
        max_attempts=settings.POLL_MAX_ATTEMPTS,
        poll_interval=settings.POLL_INTERVAL_SECONDS,
    )


OrchestratorDep = Annotated[ConversionOrchestrator, Depends(get_orchestrator)]
