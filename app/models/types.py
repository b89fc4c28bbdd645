"""공용 타입 정의"""

from typing import Literal

JobStatus = Literal["created", "waiting", "processing", "finished", "error"]
TaskStatus = Literal["waiting", "processing", "finished", "error"]
AwaitStrategy = Literal["poll", "wait"]
