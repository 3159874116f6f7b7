"""凭据与一次性令牌生命周期引擎。

职责:
1. 注册账号并下发邮箱确认令牌。
2. 校验口令并签发访问/刷新令牌。
3. 消费确认令牌激活账号。
4. 下发并消费口令重置令牌。
5. 校验签名凭据。

每个流程按固定顺序调用协作方，不重试、不回滚：任一协作方故障立即以 internal
失败返回，此前已完成的写入保持原样。
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging

from authforge_api.core.config import CredentialPolicy
from authforge_api.core.security import (
    INVALID_ASSERTION_MESSAGE,
    AssertionClaims,
    CredentialSigner,
    IssuedAssertion,
    InvalidAssertionError,
)
from authforge_api.models.account import Account
from authforge_api.models.enums import AccountRole, AuthErrorKind, TokenType
from authforge_api.models.tokens import ConfirmationToken, PasswordResetToken
from authforge_api.services.errors import CollaboratorError, DuplicateKeyError, NotFoundError
from authforge_api.services.local_auth import OPAQUE_TOKEN_BYTES, PasswordHasher, generate_token
from authforge_api.services.results import AuthFailure, Ok, Result, fail
from authforge_api.services.stores import AccountStore, ConfirmationTokenStore, Notifier, ResetTokenStore

logger = logging.getLogger("authforge_api.credentials")

CONFIRMATION_TOKEN_TTL = timedelta(hours=24)
PASSWORD_RESET_TOKEN_TTL = timedelta(hours=1)

# 熵源耗尽时 os.urandom 抛出 OSError，与协作方故障同样归类为 internal。
_INTERNAL_ERRORS = (CollaboratorError, OSError)
_ROLE_VALUES = frozenset(role.value for role in AccountRole)


@dataclass(frozen=True)
class TokenPair:
    """登录签发的两枚独立令牌。"""

    access: IssuedAssertion
    refresh: IssuedAssertion


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """不带时区的时间戳按 UTC 解释（部分数据库回读时会丢失时区）。"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _internal(action: str, exc: BaseException) -> AuthFailure:
    logger.error("%s failed: %s", action, exc)
    return fail(AuthErrorKind.INTERNAL)


class CredentialLifecycleEngine:
    """编排账号存储、令牌存储、口令哈希、签名器与通知方。"""

    def __init__(
        self,
        *,
        accounts: AccountStore,
        confirmation_tokens: ConfirmationTokenStore,
        reset_tokens: ResetTokenStore,
        notifier: Notifier,
        policy: CredentialPolicy,
        hasher: PasswordHasher | None = None,
        signer: CredentialSigner | None = None,
        token_factory: Callable[[int], str] = generate_token,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._accounts = accounts
        self._confirmation_tokens = confirmation_tokens
        self._reset_tokens = reset_tokens
        self._notifier = notifier
        self._policy = policy
        self._hasher = hasher or PasswordHasher(policy.password_hash_iterations)
        self._signer = signer or CredentialSigner(policy)
        self._token_factory = token_factory
        self._clock = clock

    def register(self, email: str, password: str, role: str | None = None) -> Result[Account]:
        """注册未激活账号并投递确认令牌。

        账号写入后若令牌写入或邮件投递失败，账号保留为未激活状态，不做回滚。
        """
        logger.info("registering account email=%s", email)
        try:
            self._accounts.find_by_email(email)
        except NotFoundError:
            pass
        except _INTERNAL_ERRORS as exc:
            return _internal("lookup account", exc)
        else:
            logger.warning("registration rejected, account already exists email=%s", email)
            return fail(AuthErrorKind.ALREADY_EXISTS)

        if role is None or role == "":
            account_role = AccountRole.USER
        elif role in _ROLE_VALUES:
            account_role = AccountRole(role)
        else:
            logger.warning("registration rejected, invalid role email=%s", email)
            return fail(AuthErrorKind.INVALID_ROLE)

        try:
            password_hash = self._hasher.hash(password)
        except _INTERNAL_ERRORS as exc:
            return _internal("hash password", exc)

        account = Account(
            email=email,
            password_hash=password_hash,
            is_active=False,
            role=account_role,
            failed_login_attempts=0,
        )
        try:
            account_id = self._accounts.create(account)
        except DuplicateKeyError:
            # 并发注册时由存储的唯一约束兜底。
            logger.warning("registration rejected by unique constraint email=%s", email)
            return fail(AuthErrorKind.ALREADY_EXISTS)
        except _INTERNAL_ERRORS as exc:
            return _internal("create account", exc)
        logger.info("account created id=%s email=%s", account_id, email)

        now = self._clock()
        try:
            token_value = self._token_factory(OPAQUE_TOKEN_BYTES)
            self._confirmation_tokens.create(
                ConfirmationToken(
                    account_id=account_id,
                    token=token_value,
                    expires_at=now + CONFIRMATION_TOKEN_TTL,
                    created_at=now,
                )
            )
        except _INTERNAL_ERRORS as exc:
            return _internal("create confirmation token", exc)

        try:
            self._notifier.send_confirmation(email, token_value)
        except _INTERNAL_ERRORS as exc:
            return _internal("send confirmation", exc)

        logger.info("registration completed id=%s", account_id)
        return Ok(account)

    def login(self, email: str, password: str) -> Result[TokenPair]:
        """校验口令并签发访问/刷新令牌。"""
        logger.info("login attempt email=%s", email)
        try:
            account = self._accounts.find_by_email(email)
        except NotFoundError:
            logger.warning("login failed, unknown email=%s", email)
            return fail(AuthErrorKind.INVALID_CREDENTIALS)
        except _INTERNAL_ERRORS as exc:
            return _internal("lookup account", exc)

        if not account.is_active:
            logger.warning("login failed, account not activated id=%s", account.id)
            return fail(AuthErrorKind.ACCOUNT_NOT_ACTIVATED)

        if not self._hasher.verify(password, account.password_hash):
            logger.warning("login failed, bad password id=%s", account.id)
            return fail(AuthErrorKind.INVALID_CREDENTIALS)

        now = self._clock()
        pair = TokenPair(
            access=self._signer.issue(account.id, account.role, self._policy.access_ttl, TokenType.ACCESS, now=now),
            refresh=self._signer.issue(account.id, account.role, self._policy.refresh_ttl, TokenType.REFRESH, now=now),
        )
        logger.info("login succeeded id=%s", account.id)
        return Ok(pair)

    def confirm_account(self, token: str) -> Result[Account]:
        """消费确认令牌并激活账号。"""
        try:
            record = self._confirmation_tokens.find_by_token(token)
        except NotFoundError:
            logger.warning("confirmation rejected, unknown token")
            return fail(AuthErrorKind.INVALID_TOKEN)
        except _INTERNAL_ERRORS as exc:
            return _internal("lookup confirmation token", exc)

        if self._clock() > as_utc(record.expires_at):
            # 过期令牌原样保留，此流程不负责清理。
            logger.warning("confirmation rejected, token expired account_id=%s", record.account_id)
            return fail(AuthErrorKind.TOKEN_EXPIRED)

        try:
            account = self._accounts.find_by_id(record.account_id)
            account.is_active = True
            self._accounts.update(account)
        except _INTERNAL_ERRORS as exc:
            return _internal("activate account", exc)

        try:
            self._confirmation_tokens.delete(token)
        except _INTERNAL_ERRORS as exc:
            logger.error("failed to delete confirmation token account_id=%s: %s", account.id, exc)

        logger.info("account confirmed id=%s role=%s", account.id, account.role)
        return Ok(account)

    def request_password_reset(self, email: str) -> Result[None]:
        """为已注册邮箱下发口令重置令牌。

        与 login 不同，未注册邮箱会返回 user_not_found。
        已有的未使用令牌不会失效。
        """
        logger.info("password reset requested email=%s", email)
        try:
            account = self._accounts.find_by_email(email)
        except NotFoundError:
            logger.warning("password reset rejected, unknown email=%s", email)
            return fail(AuthErrorKind.USER_NOT_FOUND)
        except _INTERNAL_ERRORS as exc:
            return _internal("lookup account", exc)

        now = self._clock()
        try:
            token_value = self._token_factory(OPAQUE_TOKEN_BYTES)
            self._reset_tokens.create(
                PasswordResetToken(
                    account_id=account.id,
                    token=token_value,
                    expires_at=now + PASSWORD_RESET_TOKEN_TTL,
                    created_at=now,
                    used=False,
                )
            )
        except _INTERNAL_ERRORS as exc:
            return _internal("create password reset token", exc)

        try:
            self._notifier.send_password_reset(account.email, token_value)
        except _INTERNAL_ERRORS as exc:
            return _internal("send password reset", exc)

        logger.info("password reset token issued account_id=%s", account.id)
        return Ok(None)

    def reset_password(self, token: str, new_password: str) -> Result[None]:
        """消费重置令牌并更新口令。

        只有账号写入成功后才会标记令牌已使用。
        """
        try:
            record = self._reset_tokens.find_by_token(token)
        except NotFoundError:
            logger.warning("password reset rejected, unknown token")
            return fail(AuthErrorKind.INVALID_TOKEN)
        except _INTERNAL_ERRORS as exc:
            return _internal("lookup password reset token", exc)

        if record.used:
            logger.warning("password reset rejected, token already used account_id=%s", record.account_id)
            return fail(AuthErrorKind.TOKEN_ALREADY_USED)

        if self._clock() > as_utc(record.expires_at):
            logger.warning("password reset rejected, token expired account_id=%s", record.account_id)
            return fail(AuthErrorKind.TOKEN_EXPIRED)

        account_id = record.account_id
        try:
            account = self._accounts.find_by_id(account_id)
            account.password_hash = self._hasher.hash(new_password)
            self._accounts.update(account)
        except _INTERNAL_ERRORS as exc:
            return _internal("update password", exc)

        try:
            transitioned = self._reset_tokens.mark_used(token)
        except _INTERNAL_ERRORS as exc:
            return _internal("mark password reset token used", exc)
        if not transitioned:
            # 并发请求已先一步消费该令牌，口令已按本次请求写入。
            logger.warning("password reset token consumed concurrently account_id=%s", account_id)

        logger.info("password reset completed account_id=%s", account_id)
        return Ok(None)

    def validate_token(self, assertion: str) -> Result[AssertionClaims]:
        """校验签名凭据，不访问存储，无副作用。"""
        try:
            claims = self._signer.verify(assertion)
        except InvalidAssertionError:
            return fail(AuthErrorKind.INVALID_TOKEN, INVALID_ASSERTION_MESSAGE)
        return Ok(claims)
