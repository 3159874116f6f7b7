"""请求级依赖。

职责:
1. 为每个请求组装凭据引擎（SQL 存储 + SMTP 通知 + 不可变凭据配置）。
2. 从 Authorization 头中提取 Bearer 令牌。
"""

from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from authforge_api.core.config import CredentialPolicy, get_settings
from authforge_api.core.security import CredentialSigner, extract_bearer_token
from authforge_api.db.session import get_db
from authforge_api.services.credentials import CredentialLifecycleEngine
from authforge_api.services.local_auth import PasswordHasher
from authforge_api.services.notifier import SmtpNotifier
from authforge_api.services.repositories import SqlAccountStore, SqlConfirmationTokenStore, SqlResetTokenStore
from authforge_api.services.stores import Notifier


@lru_cache
def get_credential_policy() -> CredentialPolicy:
    """启动后只读的凭据配置。"""
    return get_settings().credential_policy()


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(get_credential_policy().password_hash_iterations)


@lru_cache
def get_signer() -> CredentialSigner:
    return CredentialSigner(get_credential_policy())


@lru_cache
def get_notifier() -> Notifier:
    return SmtpNotifier(get_settings())


def get_credential_engine(db: Session = Depends(get_db)) -> CredentialLifecycleEngine:
    """组装绑定当前请求会话的凭据引擎。"""
    return CredentialLifecycleEngine(
        accounts=SqlAccountStore(db),
        confirmation_tokens=SqlConfirmationTokenStore(db),
        reset_tokens=SqlResetTokenStore(db),
        notifier=get_notifier(),
        policy=get_credential_policy(),
        hasher=get_password_hasher(),
        signer=get_signer(),
    )


def get_bearer_token(authorization: str | None = Header(default=None, alias="Authorization")) -> str:
    """提取 Bearer 令牌，缺失或格式错误时返回 401。"""
    token = extract_bearer_token(authorization)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "UNAUTHORIZED", "message": "missing or malformed bearer token"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token
