"""统一响应结构工具。"""

from datetime import datetime, timezone
from time import perf_counter
from typing import Any

from fastapi import Request

DEFAULT_ERROR_MESSAGE = "internal server error"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _request_id(request: Request) -> str:
    # 中间件未生效（例如单元测试直接构造请求）时返回空串。
    return str(getattr(request.state, "request_id", ""))


def _elapsed_ms(request: Request) -> int | None:
    started_at = getattr(request.state, "request_started_at", None)
    if isinstance(started_at, float):
        return int((perf_counter() - started_at) * 1000)
    return None


def success(request: Request, data: Any, message: str = "操作成功。") -> dict[str, Any]:
    """构造统一成功响应结构。"""
    return {
        "request_id": _request_id(request),
        "data": data,
        "meta": {
            "message": message,
            "method": request.method.upper(),
            "path": request.url.path,
            "timestamp": _utc_now_iso(),
            "process_ms": _elapsed_ms(request),
        },
    }


def error_payload(
    request: Request,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """构造统一错误响应结构。"""
    final_details: dict[str, Any] = {
        "method": request.method.upper(),
        "path": request.url.path,
        "timestamp": _utc_now_iso(),
    }
    if details:
        final_details.update(details)
    return {
        "request_id": _request_id(request),
        "error": {
            "code": code,
            "message": message,
            "details": final_details,
        },
    }
