"""认证接口。

路由层只负责请求解码与状态码映射，流程逻辑全部委托给凭据引擎。
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request, status

from authforge_api.dependencies import get_bearer_token, get_credential_engine
from authforge_api.exceptions import failure_exception
from authforge_api.schemas.auth import (
    AccountConfirmData,
    AuthLoginData,
    AuthLoginRequest,
    AuthRegisterData,
    AuthRegisterRequest,
    PasswordResetConfirmData,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    PasswordResetRequestData,
    TokenIntrospectionData,
)
from authforge_api.schemas.common import ErrorResponse, SuccessResponse
from authforge_api.services.credentials import CredentialLifecycleEngine
from authforge_api.services.results import AuthFailure
from authforge_api.utils.response import success

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    summary="注册账号",
    description="创建未激活账号，并向注册邮箱发送 24 小时有效的确认链接。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AuthRegisterData],
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def register(
    payload: AuthRegisterRequest,
    request: Request,
    engine: CredentialLifecycleEngine = Depends(get_credential_engine),
):
    """注册账号并投递确认令牌。"""
    result = engine.register(payload.email, payload.password, payload.role)
    if isinstance(result, AuthFailure):
        raise failure_exception(result)

    account = result.value
    return success(
        request,
        {
            "account_id": account.id,
            "email": account.email,
            "role": account.role,
            "is_active": account.is_active,
            "message": "Registration successful. Please check your email to activate your account.",
        },
    )


@router.post(
    "/login",
    summary="账号登录",
    description="使用邮箱口令登录，返回相互独立的访问令牌与刷新令牌。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AuthLoginData],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def login(
    payload: AuthLoginRequest,
    request: Request,
    engine: CredentialLifecycleEngine = Depends(get_credential_engine),
):
    """登录并签发令牌。"""
    result = engine.login(payload.email, payload.password)
    if isinstance(result, AuthFailure):
        raise failure_exception(result)

    pair = result.value
    now_ts = int(datetime.now(timezone.utc).timestamp())
    return success(
        request,
        {
            "access_token": pair.access.token,
            "refresh_token": pair.refresh.token,
            "token_type": "bearer",
            "access_expires_at": pair.access.expires_at,
            "refresh_expires_at": pair.refresh.expires_at,
            "expires_in": max(0, int(pair.access.expires_at.timestamp()) - now_ts),
        },
    )


@router.get(
    "/confirm",
    summary="确认账号",
    description="消费邮件中的确认令牌并激活账号，令牌使用后即删除。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AccountConfirmData],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def confirm_account(
    request: Request,
    token: str = Query(min_length=1, max_length=128, description="确认令牌。"),
    engine: CredentialLifecycleEngine = Depends(get_credential_engine),
):
    """激活账号。"""
    result = engine.confirm_account(token)
    if isinstance(result, AuthFailure):
        raise failure_exception(result)

    return success(
        request,
        {"account_id": result.value.id, "activated": True, "message": "Account activated successfully."},
    )


@router.post(
    "/password-reset-request",
    summary="申请重置口令",
    description="向已注册邮箱发送 1 小时有效的重置令牌；此前未使用的令牌仍然有效。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[PasswordResetRequestData],
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def request_password_reset(
    payload: PasswordResetRequest,
    request: Request,
    engine: CredentialLifecycleEngine = Depends(get_credential_engine),
):
    """下发重置令牌。"""
    result = engine.request_password_reset(payload.email)
    if isinstance(result, AuthFailure):
        raise failure_exception(result)

    return success(
        request,
        {"requested": True, "message": "Password reset instructions have been sent."},
    )


@router.post(
    "/password-reset-confirm",
    summary="重置口令",
    description="使用重置令牌设置新口令，令牌仅可使用一次。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[PasswordResetConfirmData],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def reset_password(
    payload: PasswordResetConfirmRequest,
    request: Request,
    engine: CredentialLifecycleEngine = Depends(get_credential_engine),
):
    """消费重置令牌并更新口令。"""
    result = engine.reset_password(payload.token, payload.new_password)
    if isinstance(result, AuthFailure):
        raise failure_exception(result)

    return success(request, {"reset": True, "message": "Password has been reset successfully."})


@router.get(
    "/validate",
    summary="校验令牌",
    description="校验 Bearer 令牌的签名与有效期并返回主体信息，不访问存储。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[TokenIntrospectionData],
    responses={401: {"model": ErrorResponse}},
)
def validate_token(
    request: Request,
    token: str = Depends(get_bearer_token),
    engine: CredentialLifecycleEngine = Depends(get_credential_engine),
):
    """令牌自省。"""
    result = engine.validate_token(token)
    if isinstance(result, AuthFailure):
        raise failure_exception(result, status_code=status.HTTP_401_UNAUTHORIZED)

    claims = result.value
    return success(
        request,
        {
            "account_id": claims.account_id,
            "role": claims.role,
            "token_type": claims.token_type,
            "issued_at": claims.issued_at,
            "expires_at": claims.expires_at,
        },
        message="查询成功。",
    )
