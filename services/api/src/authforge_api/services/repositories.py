"""基于 SQLAlchemy 的存储实现。

每个写操作独立提交，引擎的多步流程不包裹在同一事务中。
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from authforge_api.models.account import Account
from authforge_api.models.tokens import ConfirmationToken, PasswordResetToken
from authforge_api.services.errors import DuplicateKeyError, NotFoundError, StoreError

logger = logging.getLogger("authforge_api.repositories")


class _SqlStore:
    """存储实现公共逻辑：提交与异常转换。"""

    def __init__(self, db: Session) -> None:
        self._db = db

    def _commit(self, action: str) -> None:
        try:
            self._db.commit()
        except IntegrityError as exc:
            self._db.rollback()
            logger.warning("unique constraint violated during %s", action)
            raise DuplicateKeyError(action) from exc
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("database error during %s", action)
            raise StoreError(action) from exc

    def _scalar(self, statement, action: str):
        try:
            return self._db.execute(statement).scalar_one_or_none()
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("database error during %s", action)
            raise StoreError(action) from exc


class SqlAccountStore(_SqlStore):
    """账号存储。"""

    def create(self, account: Account) -> UUID:
        self._db.add(account)
        self._commit("create account")
        logger.info("account created id=%s", account.id)
        return account.id

    def find_by_email(self, email: str) -> Account:
        account = self._scalar(select(Account).where(Account.email == email), "find account by email")
        if account is None:
            raise NotFoundError("account not found")
        return account

    def find_by_id(self, account_id: UUID) -> Account:
        account = self._scalar(select(Account).where(Account.id == account_id), "find account by id")
        if account is None:
            raise NotFoundError("account not found")
        return account

    def update(self, account: Account) -> None:
        exists = self._scalar(select(Account.id).where(Account.id == account.id), "check account")
        if exists is None:
            raise NotFoundError("account not found")
        self._db.add(account)
        self._commit("update account")


class SqlConfirmationTokenStore(_SqlStore):
    """邮箱确认令牌存储。"""

    def create(self, token: ConfirmationToken) -> None:
        self._db.add(token)
        self._commit("create confirmation token")
        logger.info("confirmation token created account_id=%s", token.account_id)

    def find_by_token(self, token: str) -> ConfirmationToken:
        record = self._scalar(
            select(ConfirmationToken).where(ConfirmationToken.token == token),
            "find confirmation token",
        )
        if record is None:
            raise NotFoundError("confirmation token not found")
        return record

    def delete(self, token: str) -> None:
        record = self.find_by_token(token)
        self._db.delete(record)
        self._commit("delete confirmation token")


class SqlResetTokenStore(_SqlStore):
    """口令重置令牌存储。"""

    def create(self, token: PasswordResetToken) -> None:
        self._db.add(token)
        self._commit("create password reset token")
        logger.info("password reset token created account_id=%s", token.account_id)

    def find_by_token(self, token: str) -> PasswordResetToken:
        record = self._scalar(
            select(PasswordResetToken).where(PasswordResetToken.token == token),
            "find password reset token",
        )
        if record is None:
            raise NotFoundError("password reset token not found")
        return record

    def mark_used(self, token: str) -> bool:
        # 条件更新保证 used 只会被置位一次；随后的提交会使会话内对象全部过期。
        statement = (
            update(PasswordResetToken)
            .where(PasswordResetToken.token == token)
            .where(PasswordResetToken.used.is_(False))
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self._db.execute(statement)
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("database error during mark password reset token used")
            raise StoreError("mark password reset token used") from exc
        self._commit("mark password reset token used")
        if result.rowcount == 1:
            return True

        # 未命中时区分“已被使用”与“不存在”。
        self.find_by_token(token)
        return False
