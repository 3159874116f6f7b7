"""签名凭据的签发与校验。"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import re
from typing import Any
from uuid import UUID, uuid4

import jwt
from jwt import InvalidTokenError

from authforge_api.core.config import CredentialPolicy
from authforge_api.models.enums import AccountRole, TokenType

# 所有校验失败对外统一为同一文案，不区分具体原因。
INVALID_ASSERTION_MESSAGE = "invalid or expired token"
REQUIRED_CLAIMS = ["sub", "role", "iat", "exp"]


class InvalidAssertionError(Exception):
    """签名凭据无效或已过期。"""

    def __init__(self) -> None:
        super().__init__(INVALID_ASSERTION_MESSAGE)


@dataclass(frozen=True)
class IssuedAssertion:
    """签发结果。"""

    # 已签名令牌串。
    token: str
    # 过期时间（UTC）。
    expires_at: datetime


@dataclass(frozen=True)
class AssertionClaims:
    """校验通过后的声明集。"""

    # 账号 ID（sub）。
    account_id: UUID
    # 账号角色。
    role: AccountRole
    # 令牌类型（access/refresh）。
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    # 原始声明集，便于下游扩展。
    raw: dict[str, Any]


class CredentialSigner:
    """使用对称密钥签发与校验访问/刷新令牌。

    校验时只接受配置中固定的那一种算法，其余算法（含 none）一律拒绝。
    """

    def __init__(self, policy: CredentialPolicy) -> None:
        self._secret = policy.jwt_secret
        self._algorithm = policy.jwt_algorithm

    def issue(
        self,
        account_id: UUID,
        role: str,
        ttl: timedelta,
        token_type: TokenType = TokenType.ACCESS,
        *,
        now: datetime | None = None,
    ) -> IssuedAssertion:
        """签发一枚独立的签名凭据。"""
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + ttl
        claims: dict[str, object] = {
            "sub": str(account_id),
            "role": str(role),
            "typ": str(token_type),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": str(uuid4()),
        }
        token = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        return IssuedAssertion(token=token, expires_at=expires_at)

    def verify(self, assertion: str) -> AssertionClaims:
        """校验签名、算法与有效期并返回声明集。"""
        try:
            claims = jwt.decode(
                assertion,
                key=self._secret,
                algorithms=[self._algorithm],
                options={"require": REQUIRED_CLAIMS, "verify_signature": True, "verify_exp": True},
            )
            return AssertionClaims(
                account_id=UUID(str(claims["sub"])),
                role=AccountRole(claims["role"]),
                token_type=TokenType(claims.get("typ", TokenType.ACCESS)),
                issued_at=datetime.fromtimestamp(int(claims["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc),
                raw=claims,
            )
        except (InvalidTokenError, ValueError, TypeError, OverflowError, OSError) as exc:
            raise InvalidAssertionError() from exc


def extract_bearer_token(authorization: str | None) -> str | None:
    """从 Authorization 头中提取 Bearer token，兼容重复头被逗号拼接的场景。"""
    if not authorization:
        return None
    tokens = [token.strip() for token in re.findall(r"Bearer\s+([^,\s]+)", authorization, flags=re.IGNORECASE)]
    tokens = [token for token in tokens if token]
    if not tokens:
        return None
    # 多个 Bearer 时以最后一个为准。
    return tokens[-1]
