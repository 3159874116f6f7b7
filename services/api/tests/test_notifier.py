import json
import smtplib

import pytest

from authforge_api.core.config import Settings
from authforge_api.services import notifier as notifier_module
from authforge_api.services.errors import NotifierError
from authforge_api.services.notifier import SmtpNotifier, confirmation_url


class _FakeSMTP:
    """记录调用序列的 SMTP 替身。"""

    instances: list["_FakeSMTP"] = []
    fail_with: Exception | None = None

    def __init__(self, host: str, port: int, timeout: float) -> None:
        if _FakeSMTP.fail_with is not None:
            raise _FakeSMTP.fail_with
        self.host = host
        self.port = port
        self.timeout = timeout
        self.calls: list[str] = []
        self.messages = []
        _FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.calls.append("quit")

    def starttls(self) -> None:
        self.calls.append("starttls")

    def login(self, username: str, password: str) -> None:
        self.calls.append(f"login:{username}:{password}")

    def send_message(self, message) -> None:
        self.calls.append("send")
        self.messages.append(message)


@pytest.fixture
def fake_smtp(monkeypatch):
    _FakeSMTP.instances = []
    _FakeSMTP.fail_with = None
    monkeypatch.setattr(notifier_module.smtplib, "SMTP", _FakeSMTP)
    return _FakeSMTP


def _settings(**overrides) -> Settings:
    values = {
        "smtp_host": "mail.internal",
        "smtp_port": 2525,
        "smtp_username": "mailer",
        "smtp_password": "s3cret",
        "smtp_sender": "auth@example.com",
        "smtp_use_tls": True,
        "smtp_timeout_seconds": 3.0,
        "public_base_url": "https://auth.example.com/",
    }
    values.update(overrides)
    return Settings(**values)


def test_confirmation_email(fake_smtp):
    SmtpNotifier(_settings()).send_confirmation("alice@example.com", "tok_123-abc")

    client = fake_smtp.instances[0]
    assert (client.host, client.port, client.timeout) == ("mail.internal", 2525, 3.0)
    assert client.calls == ["starttls", "login:mailer:s3cret", "send", "quit"]

    message = client.messages[0]
    assert message["From"] == "auth@example.com"
    assert message["To"] == "alice@example.com"
    assert message["Subject"] == "Account Confirmation"
    assert "https://auth.example.com/api/v1/auth/confirm?token=tok_123-abc" in message.get_content()


def test_password_reset_email_carries_token(fake_smtp):
    SmtpNotifier(_settings()).send_password_reset("alice@example.com", "reset-token")

    message = fake_smtp.instances[0].messages[0]
    body = message.get_content()
    assert message["Subject"] == "Password Reset"
    assert "/api/v1/auth/password-reset-confirm" in body
    payload = json.loads(body[body.index("{") : body.rindex("}") + 1])
    assert payload["token"] == "reset-token"
    assert "new_password" in payload


def test_plain_smtp_without_credentials(fake_smtp):
    SmtpNotifier(_settings(smtp_use_tls=False, smtp_username=None)).send_confirmation("a@example.com", "t")

    assert fake_smtp.instances[0].calls == ["send", "quit"]


@pytest.mark.parametrize(
    "error",
    [smtplib.SMTPServerDisconnected("gone"), ConnectionRefusedError("refused"), TimeoutError("slow")],
)
def test_delivery_failures_raise_notifier_error(fake_smtp, error):
    fake_smtp.fail_with = error

    with pytest.raises(NotifierError):
        SmtpNotifier(_settings()).send_confirmation("alice@example.com", "t")


def test_confirmation_url_escapes_token():
    assert confirmation_url("http://h", "/api/v1", "a+b/c") == "http://h/api/v1/auth/confirm?token=a%2Bb%2Fc"
