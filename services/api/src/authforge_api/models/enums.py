"""领域枚举定义。"""

from enum import StrEnum


class AccountRole(StrEnum):
    """账号角色。"""

    USER = "user"  # 普通用户，注册时默认角色。
    ADMIN = "admin"  # 管理员。


class TokenType(StrEnum):
    """签名凭据类型。"""

    ACCESS = "access"  # 短期访问令牌。
    REFRESH = "refresh"  # 长期刷新令牌。


class AuthErrorKind(StrEnum):
    """凭据引擎失败类别。"""

    ALREADY_EXISTS = "already_exists"  # 邮箱已注册。
    INVALID_ROLE = "invalid_role"  # 注册时提供了未知角色。
    INVALID_CREDENTIALS = "invalid_credentials"  # 邮箱或口令错误，两者不可区分。
    ACCOUNT_NOT_ACTIVATED = "account_not_activated"  # 账号尚未完成邮箱确认。
    INVALID_TOKEN = "invalid_token"  # 令牌不存在，或签名/结构无效。
    TOKEN_EXPIRED = "token_expired"  # 令牌已过期。
    TOKEN_ALREADY_USED = "token_already_used"  # 重置令牌已被使用。
    USER_NOT_FOUND = "user_not_found"  # 仅用于申请重置口令。
    INTERNAL = "internal"  # 协作方故障（存储、邮件、熵源）。
