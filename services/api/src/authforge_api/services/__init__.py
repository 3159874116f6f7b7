"""服务层能力导出集合。"""

from authforge_api.services.credentials import (
    CONFIRMATION_TOKEN_TTL,
    PASSWORD_RESET_TOKEN_TTL,
    CredentialLifecycleEngine,
    TokenPair,
)
from authforge_api.services.errors import (
    CollaboratorError,
    DuplicateKeyError,
    NotFoundError,
    NotifierError,
    StoreError,
)
from authforge_api.services.local_auth import PasswordHasher, generate_token
from authforge_api.services.notifier import SmtpNotifier
from authforge_api.services.repositories import SqlAccountStore, SqlConfirmationTokenStore, SqlResetTokenStore
from authforge_api.services.results import AuthFailure, Ok, Result
from authforge_api.services.stores import AccountStore, ConfirmationTokenStore, Notifier, ResetTokenStore

__all__ = [
    "CONFIRMATION_TOKEN_TTL",
    "PASSWORD_RESET_TOKEN_TTL",
    "CredentialLifecycleEngine",
    "TokenPair",
    "CollaboratorError",
    "DuplicateKeyError",
    "NotFoundError",
    "NotifierError",
    "StoreError",
    "PasswordHasher",
    "generate_token",
    "SmtpNotifier",
    "SqlAccountStore",
    "SqlConfirmationTokenStore",
    "SqlResetTokenStore",
    "AuthFailure",
    "Ok",
    "Result",
    "AccountStore",
    "ConfirmationTokenStore",
    "Notifier",
    "ResetTokenStore",
]
