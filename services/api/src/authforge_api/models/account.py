"""账号模型。"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from authforge_api.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from authforge_api.models.enums import AccountRole


class Account(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """本地账号，邮箱确认后方可登录。"""

    __tablename__ = "accounts"

    # 登录邮箱，全局唯一，按原样存储（区分大小写）。
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    # 口令哈希，不存明文，不对外输出。
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    # 是否已完成邮箱确认。
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 账号角色（user/admin）。
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=AccountRole.USER)
    # 连续登录失败次数，目前只记录不参与锁定判断。
    failed_login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # 最近一次登录失败时间。
    last_failed_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
