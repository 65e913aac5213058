"""Outbound email and the worker pool that delivers it after commit."""

import html
import logging
import smtplib
import ssl
from concurrent.futures import Future, ThreadPoolExecutor
from email.mime.text import MIMEText
from functools import lru_cache
from string import Template
from typing import Protocol

from saas_core.config import Settings, get_settings

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verify Your Email Address"

VERIFICATION_TEMPLATE = Template("""\
<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; color: #333;">
    <h2>Welcome, $user_name!</h2>
    <p>Please confirm your email address by clicking the link below:</p>
    <p><a href="$verification_link">Verify my email</a></p>
    <p>If the button does not work, copy this link into your browser:</p>
    <p>$verification_link</p>
    <p>If you did not create an account, you can ignore this email.</p>
  </body>
</html>
""")


class Notifier(Protocol):
    def send_verification_email(self, to: str, name: str, token: str, base_url: str) -> None:
        ...


def build_verification_link(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/verify-email?token={token}"


class EmailService:
    """SMTP notifier. Without a host and username it only logs what it would send."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_email: str,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailService":
        return cls(
            host=settings.email_host,
            port=settings.email_port,
            username=settings.email_username,
            password=settings.email_password,
            from_email=settings.email_from,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.username)

    def send_verification_email(self, to: str, name: str, token: str, base_url: str) -> None:
        body = VERIFICATION_TEMPLATE.substitute(
            user_name=html.escape(name),
            verification_link=html.escape(build_verification_link(base_url, token)),
        )
        self.send(to, VERIFICATION_SUBJECT, body)

    def send(self, to: str, subject: str, html_body: str) -> None:
        if not self.is_configured:
            logger.warning("Email service not configured. Would send to %s: %s", to, subject)
            logger.debug("Email body:\n%s", html_body)
            return

        msg = MIMEText(html_body, "html", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to

        # Port 465 speaks TLS from the first byte; anything else upgrades with STARTTLS.
        if self.port == 465:
            with smtplib.SMTP_SSL(
                self.host, self.port, timeout=self.timeout, context=ssl.create_default_context()
            ) as server:
                server.login(self.username, self.password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=ssl.create_default_context())
                server.login(self.username, self.password)
                server.send_message(msg)


class NotificationDispatcher:
    """
    Fire-and-forget delivery on a bounded thread pool.

    Callers submit only after their transaction has committed and never wait
    on the returned future. Delivery failures are logged here and go no
    further.
    """

    def __init__(self, notifier: Notifier, base_url: str, max_workers: int = 4):
        self.notifier = notifier
        self.base_url = base_url
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notifications"
        )

    def send_verification_email(self, to: str, name: str, token: str) -> Future | None:
        try:
            return self._executor.submit(self._deliver_verification, to, name, token)
        except RuntimeError:
            logger.warning("Notification pool is shut down, dropping verification email to %s", to)
            return None

    def _deliver_verification(self, to: str, name: str, token: str) -> bool:
        try:
            self.notifier.send_verification_email(to, name, token, self.base_url)
        except Exception:
            logger.warning("Failed to send verification email to %s", to, exc_info=True)
            return False
        logger.info("Verification email sent to %s", to)
        return True

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


@lru_cache
def get_dispatcher() -> NotificationDispatcher:
    settings = get_settings()
    return NotificationDispatcher(
        EmailService.from_settings(settings),
        base_url=settings.base_url,
        max_workers=settings.notification_workers,
    )
