"""凭据引擎的返回结果类型。

引擎操作返回 Ok 或 AuthFailure 二者之一，预期内的失败（令牌过期、口令错误等）
不通过异常传递。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from authforge_api.models.enums import AuthErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """成功结果。"""

    value: T


@dataclass(frozen=True)
class AuthFailure:
    """失败结果，kind 为固定分类，message 可直接对外展示。"""

    kind: AuthErrorKind
    message: str


Result = Union[Ok[T], AuthFailure]


def fail(kind: AuthErrorKind, message: str | None = None) -> AuthFailure:
    """按分类构造失败结果，未指定 message 时使用默认文案。"""
    return AuthFailure(kind=kind, message=message or DEFAULT_MESSAGES[kind])


DEFAULT_MESSAGES: dict[AuthErrorKind, str] = {
    AuthErrorKind.ALREADY_EXISTS: "user already exists",
    AuthErrorKind.INVALID_ROLE: "invalid role",
    AuthErrorKind.INVALID_CREDENTIALS: "invalid credentials",
    AuthErrorKind.ACCOUNT_NOT_ACTIVATED: "account not activated",
    AuthErrorKind.INVALID_TOKEN: "invalid token",
    AuthErrorKind.TOKEN_EXPIRED: "token expired",
    AuthErrorKind.TOKEN_ALREADY_USED: "token already used",
    AuthErrorKind.USER_NOT_FOUND: "user not found",
    AuthErrorKind.INTERNAL: "internal error",
}
