"""本地口令哈希与一次性令牌生成。"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets

PASSWORD_HASH_ALGORITHM = "pbkdf2_sha256"
# 口令哈希盐长度（字节）。
SALT_BYTES = 16
# 确认/重置令牌的随机字节数。
OPAQUE_TOKEN_BYTES = 32


class PasswordHasher:
    """PBKDF2-SHA256 口令哈希器，工作因子在构造时固定。"""

    def __init__(self, iterations: int) -> None:
        if iterations <= 0:
            raise ValueError("iterations must be positive")
        self._iterations = iterations

    def hash(self, password: str) -> str:
        """生成带随机盐的口令哈希。

        熵源不可用时 secrets 抛出的异常直接向上传播。
        """
        salt = secrets.token_bytes(SALT_BYTES)
        digest = self._derive(password, salt, self._iterations)
        salt_b64 = base64.b64encode(salt).decode("ascii")
        digest_b64 = base64.b64encode(digest).decode("ascii")
        return f"{PASSWORD_HASH_ALGORITHM}${self._iterations}${salt_b64}${digest_b64}"

    def verify(self, password: str, password_hash: str) -> bool:
        """校验口令是否匹配，哈希格式非法时返回 False。"""
        try:
            algorithm, iterations_text, salt_b64, expected_digest_b64 = password_hash.split("$", 3)
            if algorithm != PASSWORD_HASH_ALGORITHM:
                return False
            iterations = int(iterations_text)
            if iterations <= 0:
                return False
            salt = base64.b64decode(salt_b64.encode("ascii"), validate=True)
            expected_digest = base64.b64decode(expected_digest_b64.encode("ascii"), validate=True)
        except (AttributeError, ValueError, TypeError, binascii.Error):
            return False

        actual_digest = self._derive(password, salt, iterations)
        return hmac.compare_digest(actual_digest, expected_digest)

    @staticmethod
    def _derive(password: str, salt: bytes, iterations: int) -> bytes:
        # surrogatepass 保证任意 str（含孤立代理字符）都能稳定编码。
        return hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8", "surrogatepass"),
            salt,
            iterations,
        )


def generate_token(byte_length: int = OPAQUE_TOKEN_BYTES) -> str:
    """生成 URL 安全、无填充字符的随机令牌。"""
    if byte_length <= 0:
        raise ValueError("byte_length must be positive")
    return secrets.token_urlsafe(byte_length)
