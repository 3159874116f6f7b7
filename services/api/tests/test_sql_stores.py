from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import text

from authforge_api.models.account import Account
from authforge_api.models.tokens import ConfirmationToken, PasswordResetToken
from authforge_api.services.errors import DuplicateKeyError, NotFoundError, StoreError
from authforge_api.services.repositories import SqlAccountStore, SqlConfirmationTokenStore, SqlResetTokenStore


def _new_account(email: str = "bob@example.com") -> Account:
    return Account(email=email, password_hash="pbkdf2_sha256$1$c2FsdA==$ZGlnZXN0", is_active=False, role="user")


def _expires() -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=1)


def test_account_create_and_lookup(db_session):
    store = SqlAccountStore(db_session)

    account_id = store.create(_new_account())

    assert store.find_by_id(account_id).email == "bob@example.com"
    found = store.find_by_email("bob@example.com")
    assert found.id == account_id
    assert found.created_at is not None
    assert found.updated_at is not None
    assert found.failed_login_attempts == 0


def test_account_duplicate_email(db_session):
    store = SqlAccountStore(db_session)
    store.create(_new_account())

    with pytest.raises(DuplicateKeyError):
        store.create(_new_account())

    # 回滚后会话仍可继续使用。
    assert store.find_by_email("bob@example.com").email == "bob@example.com"


def test_account_email_lookup_is_case_sensitive(db_session):
    store = SqlAccountStore(db_session)
    store.create(_new_account("Bob@Example.com"))

    with pytest.raises(NotFoundError):
        store.find_by_email("bob@example.com")
    assert store.find_by_email("Bob@Example.com").email == "Bob@Example.com"


def test_account_not_found(db_session):
    store = SqlAccountStore(db_session)

    with pytest.raises(NotFoundError):
        store.find_by_id(uuid4())
    with pytest.raises(NotFoundError):
        store.find_by_email("missing@example.com")
    with pytest.raises(NotFoundError):
        store.update(_new_account("ghost@example.com"))


def test_account_update_persists(db_session):
    store = SqlAccountStore(db_session)
    account_id = store.create(_new_account())

    account = store.find_by_id(account_id)
    account.is_active = True
    store.update(account)
    db_session.expire_all()

    assert store.find_by_id(account_id).is_active is True


def test_not_found_is_a_store_error():
    assert issubclass(NotFoundError, StoreError)
    assert issubclass(DuplicateKeyError, StoreError)


def test_confirmation_token_lifecycle(db_session):
    store = SqlConfirmationTokenStore(db_session)
    account_id = uuid4()
    store.create(ConfirmationToken(account_id=account_id, token="confirm-1", expires_at=_expires()))

    assert store.find_by_token("confirm-1").account_id == account_id

    store.delete("confirm-1")
    with pytest.raises(NotFoundError):
        store.find_by_token("confirm-1")
    with pytest.raises(NotFoundError):
        store.delete("confirm-1")


def test_confirmation_token_is_unique(db_session):
    store = SqlConfirmationTokenStore(db_session)
    store.create(ConfirmationToken(account_id=uuid4(), token="dup", expires_at=_expires()))

    with pytest.raises(DuplicateKeyError):
        store.create(ConfirmationToken(account_id=uuid4(), token="dup", expires_at=_expires()))


def test_reset_token_mark_used_flips_once(db_session):
    store = SqlResetTokenStore(db_session)
    store.create(PasswordResetToken(account_id=uuid4(), token="reset-1", expires_at=_expires(), used=False))

    assert store.mark_used("reset-1") is True
    assert store.find_by_token("reset-1").used is True
    assert store.mark_used("reset-1") is False


def test_reset_token_mark_used_unknown(db_session):
    store = SqlResetTokenStore(db_session)

    with pytest.raises(NotFoundError):
        store.mark_used("no-such-token")


def test_reset_token_mark_used_leaves_other_tokens(db_session):
    store = SqlResetTokenStore(db_session)
    account_id = uuid4()
    store.create(PasswordResetToken(account_id=account_id, token="reset-a", expires_at=_expires(), used=False))
    store.create(PasswordResetToken(account_id=account_id, token="reset-b", expires_at=_expires(), used=False))

    store.mark_used("reset-a")

    assert store.find_by_token("reset-b").used is False


def test_account_store_io_failure_raises_store_error(db_session):
    store = SqlAccountStore(db_session)
    db_session.execute(text("DROP TABLE accounts"))
    db_session.commit()

    with pytest.raises(StoreError) as exc_info:
        store.create(_new_account())
    assert not isinstance(exc_info.value, DuplicateKeyError)

    with pytest.raises(StoreError) as exc_info:
        store.find_by_email("bob@example.com")
    assert not isinstance(exc_info.value, NotFoundError)


def test_reset_store_io_failure_raises_store_error(db_session):
    store = SqlResetTokenStore(db_session)
    db_session.execute(text("DROP TABLE password_reset_tokens"))
    db_session.commit()

    with pytest.raises(StoreError) as exc_info:
        store.mark_used("reset-1")
    assert not isinstance(exc_info.value, NotFoundError)
