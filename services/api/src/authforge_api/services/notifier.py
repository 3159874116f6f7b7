"""邮件通知服务（SMTP 实现）。"""

from __future__ import annotations

from email.message import EmailMessage
import json
import logging
import smtplib
from urllib.parse import quote

from authforge_api.core.config import Settings
from authforge_api.services.errors import NotifierError

logger = logging.getLogger("authforge_api.notifier")

CONFIRMATION_SUBJECT = "Account Confirmation"
PASSWORD_RESET_SUBJECT = "Password Reset"


def confirmation_url(base_url: str, api_prefix: str, token: str) -> str:
    """构造账号确认链接。"""
    return f"{base_url}{api_prefix}/auth/confirm?token={quote(token, safe='')}"


def build_confirmation_body(base_url: str, api_prefix: str, token: str) -> str:
    return (
        "Please confirm your account by clicking the link:\n"
        f"{confirmation_url(base_url, api_prefix, token)}\n"
        "The link expires in 24 hours."
    )


def build_password_reset_body(base_url: str, api_prefix: str, token: str) -> str:
    payload = json.dumps({"token": token, "new_password": "<your new password>"}, indent=2)
    return (
        "To reset your password, send a POST request to endpoint "
        f"{base_url}{api_prefix}/auth/password-reset-confirm with the following JSON body:\n"
        f"{payload}\n"
        "The token expires in 1 hour and can be used only once."
    )


class SmtpNotifier:
    """通过 SMTP 投递确认与重置令牌。"""

    def __init__(self, settings: Settings) -> None:
        self._host = settings.smtp_host
        self._port = settings.smtp_port
        self._username = settings.smtp_username
        self._password = settings.smtp_password
        self._sender = settings.smtp_sender
        self._use_tls = settings.smtp_use_tls
        self._timeout = settings.smtp_timeout_seconds
        self._base_url = settings.public_base_url
        self._api_prefix = settings.api_prefix

    def send_confirmation(self, email: str, token: str) -> None:
        logger.info("sending confirmation email to=%s", email)
        body = build_confirmation_body(self._base_url, self._api_prefix, token)
        self._send(email, CONFIRMATION_SUBJECT, body)
        logger.info("confirmation email sent to=%s", email)

    def send_password_reset(self, email: str, token: str) -> None:
        logger.info("sending password reset email to=%s", email)
        body = build_password_reset_body(self._base_url, self._api_prefix, token)
        self._send(email, PASSWORD_RESET_SUBJECT, body)
        logger.info("password reset email sent to=%s", email)

    def _build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body, charset="utf-8")
        return message

    def _send(self, to: str, subject: str, body: str) -> None:
        message = self._build_message(to, subject, body)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as client:
                if self._use_tls:
                    client.starttls()
                if self._username:
                    client.login(self._username, self._password or "")
                client.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("smtp delivery failed host=%s port=%s to=%s error=%s", self._host, self._port, to, exc)
            raise NotifierError(f"failed to deliver {subject!r} to {to}") from exc
