"""ApiResponse envelope shared by every endpoint.

    {"code": 0, "message": "success", "data": {...},
     "timestamp": "2026-01-01T00:00:00+00:00", "request_id": "req_a1b2c3d4e5f6"}

code is 0 on success, otherwise the AppError code. On errors `data`
carries the upstream details (provider body, queue id, field errors) or null.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=utc_timestamp)
    request_id: str = Field(default_factory=new_request_id)


def success_response(data: Any = None, message: str = "success") -> ApiResponse:
    return ApiResponse(message=message, data=data)


def error_response(code: int, message: str, data: Any = None) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=data)
