import logging
from unittest.mock import MagicMock, patch

from saas_core.services.notifications import (
    EmailService,
    NotificationDispatcher,
    build_verification_link,
)


def test_verification_link():
    assert build_verification_link("https://app.test/", "abc") == "https://app.test/verify-email?token=abc"


def test_unconfigured_email_service_only_logs(caplog):
    service = EmailService(host="", port=587, username="", password="", from_email="noreply@test")

    with patch("saas_core.services.notifications.smtplib.SMTP") as smtp, \
            caplog.at_level(logging.WARNING):
        service.send_verification_email("ada@example.com", "Ada", "tok", "https://app.test")

    smtp.assert_not_called()
    assert "Email service not configured" in caplog.text


def test_configured_email_service_uses_starttls():
    service = EmailService(
        host="smtp.test", port=587, username="mailer", password="pw", from_email="noreply@test"
    )

    with patch("saas_core.services.notifications.smtplib.SMTP") as smtp:
        service.send_verification_email("ada@example.com", "<Ada>", "tok", "https://app.test")

    server = smtp.return_value.__enter__.return_value
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer", "pw")
    message = server.send_message.call_args.args[0]
    assert message["To"] == "ada@example.com"
    body = message.get_payload(decode=True).decode()
    assert "https://app.test/verify-email?token=tok" in body
    assert "&lt;Ada&gt;" in body


def test_dispatcher_swallows_delivery_failures():
    notifier = MagicMock()
    notifier.send_verification_email.side_effect = ConnectionError("down")
    dispatcher = NotificationDispatcher(notifier, base_url="https://app.test", max_workers=1)

    future = dispatcher.send_verification_email("ada@example.com", "Ada", "tok")

    assert future.result(timeout=5) is False
    dispatcher.shutdown()


def test_dispatcher_after_shutdown_drops_email():
    notifier = MagicMock()
    dispatcher = NotificationDispatcher(notifier, base_url="https://app.test", max_workers=1)
    dispatcher.shutdown()

    assert dispatcher.send_verification_email("ada@example.com", "Ada", "tok") is None
    notifier.send_verification_email.assert_not_called()
