"""认证接口请求与返回结构。"""

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from authforge_api.schemas.common import BaseSchema

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PASSWORD_MAX_LENGTH = 128


class AuthRegisterRequest(BaseModel):
    """注册请求。"""

    email: str = Field(
        min_length=5,
        max_length=256,
        pattern=EMAIL_PATTERN,
        description="登录邮箱，按原样存储。",
        examples=["alice@example.com"],
    )
    password: str = Field(
        min_length=1, max_length=PASSWORD_MAX_LENGTH, description="登录密码。", examples=["StrongPassw0rd!"]
    )
    # 角色在引擎中校验，未知取值返回 INVALID_ROLE。
    role: str | None = Field(default=None, max_length=32, description="账号角色（user/admin），缺省为 user。")


class AuthLoginRequest(BaseModel):
    """登录请求。"""

    email: str = Field(min_length=1, max_length=256, description="登录邮箱。", examples=["alice@example.com"])
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH, description="登录密码。")


class PasswordResetRequest(BaseModel):
    """申请重置口令请求。"""

    email: str = Field(min_length=1, max_length=256, description="注册邮箱。", examples=["alice@example.com"])


class PasswordResetConfirmRequest(BaseModel):
    """使用重置令牌设置新口令。"""

    token: str = Field(min_length=1, max_length=128, description="邮件中的重置令牌。")
    new_password: str = Field(
        min_length=1,
        max_length=PASSWORD_MAX_LENGTH,
        validation_alias=AliasChoices("new_password", "newPassword"),
        description="新口令。",
    )


class AuthRegisterData(BaseSchema):
    """注册结果结构。"""

    account_id: UUID = Field(description="账号 ID。")
    email: str = Field(description="登录邮箱。")
    role: str = Field(description="账号角色。")
    is_active: bool = Field(description="是否已激活，注册后恒为 false。")
    message: str = Field(description="提示信息。")


class AuthLoginData(BaseSchema):
    """登录结果结构。"""

    access_token: str = Field(description="访问令牌。")
    refresh_token: str = Field(description="刷新令牌。")
    token_type: str = Field(default="bearer", description="令牌类型。")
    access_expires_at: datetime = Field(description="访问令牌过期时间（UTC）。")
    refresh_expires_at: datetime = Field(description="刷新令牌过期时间（UTC）。")
    expires_in: int = Field(description="访问令牌剩余秒数。")


class AccountConfirmData(BaseSchema):
    """账号确认结果。"""

    account_id: UUID = Field(description="已激活的账号 ID。")
    activated: bool = Field(description="是否已激活。")
    message: str = Field(description="提示信息。")


class PasswordResetRequestData(BaseSchema):
    """申请重置口令结果。"""

    requested: bool = Field(description="是否已下发重置令牌。")
    message: str = Field(description="提示信息。")


class PasswordResetConfirmData(BaseSchema):
    """重置口令结果。"""

    reset: bool = Field(description="口令是否已更新。")
    message: str = Field(description="提示信息。")


class TokenIntrospectionData(BaseSchema):
    """令牌校验结果。"""

    account_id: UUID = Field(description="令牌主体账号 ID。")
    role: str = Field(description="账号角色。")
    token_type: str = Field(description="令牌类型（access/refresh）。")
    issued_at: datetime = Field(description="签发时间（UTC）。")
    expires_at: datetime = Field(description="过期时间（UTC）。")
