"""ORM 模型导出集合。"""

from authforge_api.models.account import Account
from authforge_api.models.tokens import ConfirmationToken, PasswordResetToken

__all__ = [
    "Account",
    "ConfirmationToken",
    "PasswordResetToken",
]
