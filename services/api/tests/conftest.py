from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from authforge_api.core.config import CredentialPolicy
from authforge_api.db.base import Base
from authforge_api.services.credentials import CredentialLifecycleEngine
from authforge_api.services.errors import NotifierError
from authforge_api.services.repositories import SqlAccountStore, SqlConfirmationTokenStore, SqlResetTokenStore

TEST_JWT_SECRET = "unit-test-secret-0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_HASH_ITERATIONS = 1000


class RecordingNotifier:
    """记录投递内容的通知方，可切换为失败模式。"""

    def __init__(self) -> None:
        self.confirmations: list[tuple[str, str]] = []
        self.password_resets: list[tuple[str, str]] = []
        self.fail = False

    def send_confirmation(self, email: str, token: str) -> None:
        if self.fail:
            raise NotifierError("smtp unavailable")
        self.confirmations.append((email, token))

    def send_password_reset(self, email: str, token: str) -> None:
        if self.fail:
            raise NotifierError("smtp unavailable")
        self.password_resets.append((email, token))

    def last_confirmation_token(self) -> str:
        return self.confirmations[-1][1]

    def last_reset_token(self) -> str:
        return self.password_resets[-1][1]


class MutableClock:
    """可手动推进的 UTC 时钟。"""

    def __init__(self) -> None:
        self.now = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def policy() -> CredentialPolicy:
    return CredentialPolicy(
        jwt_secret=TEST_JWT_SECRET,
        jwt_algorithm="HS256",
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
        password_hash_iterations=TEST_HASH_ITERATIONS,
    )


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    local_session = sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)
    db = local_session()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def credential_engine(
    db_session: Session, notifier: RecordingNotifier, policy: CredentialPolicy, clock: MutableClock
) -> CredentialLifecycleEngine:
    return CredentialLifecycleEngine(
        accounts=SqlAccountStore(db_session),
        confirmation_tokens=SqlConfirmationTokenStore(db_session),
        reset_tokens=SqlResetTokenStore(db_session),
        notifier=notifier,
        policy=policy,
        clock=clock,
    )
