"""一次性令牌模型。"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from authforge_api.models.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class ConfirmationToken(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """邮箱确认令牌，确认成功后删除。"""

    __tablename__ = "confirmation_tokens"

    # 所属账号 ID（逻辑关联 accounts.id，不声明数据库外键）。
    account_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 随机令牌串，全局唯一。
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    # 过期时间。
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class PasswordResetToken(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """口令重置令牌，使用后置位 used 而不删除。"""

    __tablename__ = "password_reset_tokens"

    account_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # 是否已使用，置位后永久拒绝。
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
