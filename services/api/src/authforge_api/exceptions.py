"""应用异常处理注册与引擎失败映射。"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from authforge_api.models.enums import AuthErrorKind
from authforge_api.services.results import AuthFailure
from authforge_api.utils.response import DEFAULT_ERROR_MESSAGE, error_payload

logger = logging.getLogger("authforge_api.exceptions")

# 引擎失败类别到协议状态码的映射。
FAILURE_STATUS: dict[AuthErrorKind, int] = {
    AuthErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    AuthErrorKind.INVALID_ROLE: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.ACCOUNT_NOT_ACTIVATED: status.HTTP_403_FORBIDDEN,
    AuthErrorKind.INVALID_TOKEN: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.TOKEN_EXPIRED: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.TOKEN_ALREADY_USED: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AuthErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_FAILURE_SUGGESTION: dict[AuthErrorKind, str] = {
    AuthErrorKind.ALREADY_EXISTS: "该邮箱已注册，请直接登录或申请重置口令。",
    AuthErrorKind.INVALID_ROLE: "角色仅支持 user 或 admin。",
    AuthErrorKind.INVALID_CREDENTIALS: "请确认邮箱与口令是否正确。",
    AuthErrorKind.ACCOUNT_NOT_ACTIVATED: "请先通过确认邮件中的链接激活账号。",
    AuthErrorKind.INVALID_TOKEN: "请确认令牌是否完整复制。",
    AuthErrorKind.TOKEN_EXPIRED: "令牌已过期，请重新申请。",
    AuthErrorKind.TOKEN_ALREADY_USED: "该重置令牌已使用，请重新申请。",
    AuthErrorKind.USER_NOT_FOUND: "请确认邮箱是否已注册。",
    AuthErrorKind.INTERNAL: "请稍后重试，若持续失败请联系管理员并提供 request_id。",
}


def failure_exception(failure: AuthFailure, status_code: int | None = None) -> HTTPException:
    """把引擎失败结果转换为协议异常。"""
    return HTTPException(
        status_code=status_code or FAILURE_STATUS[failure.kind],
        detail={
            "code": failure.kind.upper(),
            "message": failure.message,
            "details": {
                "reason": str(failure.kind),
                "suggestion": _FAILURE_SUGGESTION[failure.kind],
            },
        },
    )


def _default_http_error_code(status_code: int) -> str:
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "BAD_REQUEST"
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return "UNAUTHORIZED"
    if status_code == status.HTTP_403_FORBIDDEN:
        return "FORBIDDEN"
    if status_code == status.HTTP_404_NOT_FOUND:
        return "NOT_FOUND"
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return "METHOD_NOT_ALLOWED"
    return "HTTP_ERROR"


def _default_http_message(status_code: int) -> str:
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "请求参数不合法。"
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return "未登录或登录状态已失效。"
    if status_code == status.HTTP_403_FORBIDDEN:
        return "无权限访问该资源。"
    if status_code == status.HTTP_404_NOT_FOUND:
        return "请求资源不存在。"
    return "请求处理失败。"


def _parse_http_detail(detail: object, status_code: int) -> tuple[str, str, dict[str, object]]:
    code = _default_http_error_code(status_code)
    message = _default_http_message(status_code)
    details: dict[str, object] = {"status_code": status_code, "reason": code.lower()}

    if isinstance(detail, dict):
        code = str(detail.get("code") or code)
        message = str(detail.get("message") or message)
        raw_details = detail.get("details")
        if isinstance(raw_details, dict):
            details.update(raw_details)
        elif raw_details is not None:
            details["details"] = raw_details
        return code, message, details

    if isinstance(detail, str) and detail:
        return code, detail, details
    return code, message, details


async def http_exception_handler(request: Request, exc: HTTPException):
    """将协议异常统一包装为标准错误结构。"""
    code, message, details = _parse_http_detail(exc.detail, exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(request, code=code, message=message, details=details),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """统一处理请求参数校验错误。"""
    normalized_errors = [
        {
            "field": ".".join(str(item) for item in err.get("loc", []) if item not in {"body", "query", "header"}),
            "message": err.get("msg"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_payload(
            request,
            code="VALIDATION_ERROR",
            message="请求参数校验失败。",
            details={
                "status_code": status.HTTP_422_UNPROCESSABLE_CONTENT,
                "reason": "validation_error",
                "errors": normalized_errors,
            },
        ),
    )


async def unexpected_exception_handler(request: Request, exc: Exception):
    """处理未捕获异常，避免内部细节泄露。"""
    logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(
            request,
            code="INTERNAL_ERROR",
            message=DEFAULT_ERROR_MESSAGE,
            details={
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "reason": "unexpected_exception",
            },
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """集中注册异常处理器。"""
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(Exception)(unexpected_exception_handler)
