import json

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_http_client
from app.core.config import Settings, get_settings
from app.core.rate_limit import limiter
from app.services import CloudConvertClient, CloudConvertConfig, ConversionOrchestrator
from main import app

API_URL = "https://api.cloudconvert.com/v2"
SYNC_API_URL = "https://sync.api.cloudconvert.com/v2"
UPLOAD_URL = "https://storage.cloudconvert.test/tasks/import-1"

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class FakeCloudConvert:
    """CloudConvert API 대역 (httpx.MockTransport 핸들러)"""

    def __init__(self):
        self.job_id = "job-1"
        self.finish_after = 1  # None이면 끝나지 않음
        self.fail_after = None  # n번째 조회부터 error 상태
        self.export_files = [
            {
                "url": "https://x/out.docx",
                "filename": "out.docx",
                "size": 1024,
                "content_type": DOCX_MIME,
            }
        ]
        self.create_status = 201
        self.omit_job_id = False
        self.include_upload_form = True
        self.upload_parameters = {"expires": "1700000000", "signature": "abc123"}
        self.upload_status = 201
        self.connect_error = False

        self.requests = []
        self.created_tasks = None
        self.uploads = []
        self.polls = 0
        self.waits = 0

    @property
    def job_creations(self) -> int:
        return sum(
            1 for r in self.requests
            if r.method == "POST" and str(r.url) == f"{API_URL}/jobs"
        )

    def _import_operation(self) -> str:
        if self.created_tasks:
            return self.created_tasks["import-1"]["operation"]
        return "import/url"

    def _payload(self, job_status, export_status, files=None, import_result=None):
        failed = job_status == "error"
        return {
            "data": {
                "id": self.job_id,
                "status": job_status,
                "tasks": [
                    {
                        "id": "task-import",
                        "name": "import-1",
                        "operation": self._import_operation(),
                        "status": "waiting" if import_result else "finished",
                        "result": import_result,
                    },
                    {
                        "id": "task-convert",
                        "name": "convert-1",
                        "operation": "convert",
                        "status": "error" if failed else "processing",
                        "message": "Conversion failed" if failed else None,
                        "code": "CONVERSION_FAILED" if failed else None,
                    },
                    {
                        "id": "task-export",
                        "name": "export-1",
                        "operation": "export/url",
                        "status": export_status,
                        "result": {"files": files} if files is not None else None,
                    },
                ],
            }
        }

    def _finished(self):
        return self._payload("finished", "finished", files=self.export_files)

    def _errored(self):
        return self._payload("error", "waiting")

    def _job_state(self, n: int):
        if self.fail_after is not None and n >= self.fail_after:
            return self._errored()
        if self.finish_after is not None and n >= self.finish_after:
            return self._finished()
        return self._payload("processing", "waiting")

    def _create(self, request: httpx.Request) -> httpx.Response:
        self.created_tasks = json.loads(request.content)["tasks"]
        if self.create_status >= 400:
            return httpx.Response(
                self.create_status,
                json={"message": "Unauthenticated.", "code": "UNAUTHENTICATED"},
            )
        if self.omit_job_id:
            return httpx.Response(self.create_status, json={"data": {"status": "waiting"}})

        import_result = None
        if self._import_operation() == "import/upload" and self.include_upload_form:
            import_result = {
                "form": {"url": UPLOAD_URL, "parameters": self.upload_parameters}
            }
        return httpx.Response(
            self.create_status,
            json=self._payload("waiting", "waiting", import_result=import_result),
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.connect_error:
            raise httpx.ConnectError("connection refused", request=request)

        url = str(request.url)
        if request.method == "POST" and url == f"{API_URL}/jobs":
            return self._create(request)
        if request.method == "GET" and url == f"{API_URL}/jobs/{self.job_id}":
            self.polls += 1
            return httpx.Response(200, json=self._job_state(self.polls))
        if request.method == "GET" and url == f"{SYNC_API_URL}/jobs/{self.job_id}":
            self.waits += 1
            if self.fail_after is not None:
                return httpx.Response(200, json=self._errored())
            return httpx.Response(200, json=self._finished())
        if request.method == "POST" and url == UPLOAD_URL:
            self.uploads.append(request)
            return httpx.Response(self.upload_status)
        return httpx.Response(404, json={"message": "Not found"})


@pytest.fixture
def fake_cloudconvert() -> FakeCloudConvert:
    return FakeCloudConvert()


@pytest.fixture
def mock_http_client(fake_cloudconvert) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_cloudconvert))


@pytest.fixture
def sleep_calls() -> list:
    return []


@pytest.fixture
def make_orchestrator(mock_http_client, sleep_calls):
    """빠르게 감은 시계를 쓰는 오케스트레이터 생성기"""

    async def fake_sleep(seconds: float) -> None:
        sleep_calls.append(seconds)

    def factory(api_key: str | None = "test-key", **kwargs) -> ConversionOrchestrator:
        config = CloudConvertConfig(
            api_key=api_key, api_url=API_URL, sync_api_url=SYNC_API_URL
        )
        client = CloudConvertClient(mock_http_client, config)
        return ConversionOrchestrator(client, sleep=fake_sleep, **kwargs)

    return factory


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        CLOUDCONVERT_API_KEY="test-key",
        POLL_INTERVAL_SECONDS=0,
    )


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """테스트 간 요청 제한 카운터 초기화"""
    limiter.reset()
    yield
    limiter.reset()


@pytest_asyncio.fixture
async def api_client(test_settings, mock_http_client):
    """CloudConvert 대역과 테스트 설정을 주입한 API 클라이언트"""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_http_client] = lambda: mock_http_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
