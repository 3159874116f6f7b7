"""凭据引擎依赖的协作方接口。

引擎只通过这些协议访问存储与邮件，生产实现见 repositories 与 notifier 模块，
测试可替换为内存实现。
"""

from typing import Protocol
from uuid import UUID

from authforge_api.models.account import Account
from authforge_api.models.tokens import ConfirmationToken, PasswordResetToken


class AccountStore(Protocol):
    """账号存储，邮箱唯一性由存储保证。"""

    def create(self, account: Account) -> UUID:
        """持久化新账号并返回存储分配的 ID，邮箱冲突时抛出 DuplicateKeyError。"""
        ...

    def find_by_email(self, email: str) -> Account:
        """按邮箱精确查找，不存在时抛出 NotFoundError。"""
        ...

    def find_by_id(self, account_id: UUID) -> Account:
        ...

    def update(self, account: Account) -> None:
        """写回账号全部可变字段，不存在时抛出 NotFoundError。"""
        ...


class ConfirmationTokenStore(Protocol):
    """邮箱确认令牌存储。"""

    def create(self, token: ConfirmationToken) -> None: ...

    def find_by_token(self, token: str) -> ConfirmationToken: ...

    def delete(self, token: str) -> None: ...


class ResetTokenStore(Protocol):
    """口令重置令牌存储。"""

    def create(self, token: PasswordResetToken) -> None: ...

    def find_by_token(self, token: str) -> PasswordResetToken: ...

    def mark_used(self, token: str) -> bool:
        """原子地把 used 从 False 置为 True。

        返回本次调用是否完成置位；并发调用同一令牌时至多一次返回 True。
        令牌不存在时抛出 NotFoundError。
        """
        ...


class Notifier(Protocol):
    """带外令牌投递，失败时抛出 NotifierError。"""

    def send_confirmation(self, email: str, token: str) -> None: ...

    def send_password_reset(self, email: str, token: str) -> None: ...
