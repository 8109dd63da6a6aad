import smtplib
from dataclasses import replace

from fuel_procurement.core.config import Settings
from fuel_procurement.models.enums import NotificationStatus
from fuel_procurement.services.notification_service import (
    AwardNotice,
    EmailNotifier,
    LogNotifier,
    build_notifier,
)


class DummySMTP:
    """Fake SMTP client capturing operations for assertions."""

    instance = None
    fail_with = None

    def __init__(self, host, port, timeout=30):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.ehlo_called = 0
        self.starttls_called = False
        self.login_calls = []
        self.sent_messages = []
        DummySMTP.instance = self

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def ehlo(self):
        self.ehlo_called += 1

    def starttls(self):
        self.starttls_called = True

    def login(self, username, password):
        self.login_calls.append((username, password))

    def send_message(self, message):
        if DummySMTP.fail_with:
            raise DummySMTP.fail_with
        self.sent_messages.append(message)


def _settings(**overrides):
    values = dict(
        database_url="sqlite://",
        jwt_secret_key="x",
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_username="relay",
        smtp_password="secret",
        smtp_sender="procurement@example.com",
        smtp_timeout_seconds=7,
    )
    values.update(overrides)
    return Settings(**values)


NOTICE = AwardNotice(
    supplier_name="Supplier 1",
    supplier_email="s1@example.com",
    boq_id="b-1",
    fuel_type="Diesel",
    quantity="1000.000",
    unit="Liters",
    bid_price_per_unit="1150.00",
    total_price="1150000.00000",
    deadline="2026-12-31",
)


def setup_function():
    DummySMTP.instance = None
    DummySMTP.fail_with = None


def test_email_notifier_sends_with_timeout_and_tls():
    notifier = EmailNotifier(_settings(), smtp_class=DummySMTP)
    result = notifier.send_award(NOTICE)

    smtp = DummySMTP.instance
    assert result.status == NotificationStatus.sent
    assert smtp.timeout == 7
    assert smtp.starttls_called is True
    assert smtp.login_calls == [("relay", "secret")]
    assert len(smtp.sent_messages) == 1

    msg = smtp.sent_messages[0]
    assert msg["To"] == "s1@example.com"
    assert msg["From"] == "procurement@example.com"
    assert "Diesel" in msg["Subject"]


def test_email_notifier_uses_ssl_class_on_465():
    notifier = EmailNotifier(_settings(smtp_port=465), smtp_class=None, smtp_ssl_class=DummySMTP)
    assert notifier.send_award(NOTICE).status == NotificationStatus.sent
    assert DummySMTP.instance.starttls_called is False


def test_email_failure_is_reported_not_raised():
    DummySMTP.fail_with = smtplib.SMTPRecipientsRefused({"s1@example.com": (550, b"no such user")})
    result = EmailNotifier(_settings(), smtp_class=DummySMTP).send_award(NOTICE)

    assert result.status == NotificationStatus.failed
    assert result.delivered is False
    assert "SMTPRecipientsRefused" in result.detail


def test_socket_timeout_is_reported():
    DummySMTP.fail_with = TimeoutError("timed out")
    result = EmailNotifier(_settings(), smtp_class=DummySMTP).send_award(NOTICE)
    assert result.status == NotificationStatus.failed


def test_missing_address_fails_without_connecting():
    notice = replace(NOTICE, supplier_email="")
    result = EmailNotifier(_settings(), smtp_class=DummySMTP).send_award(notice)

    assert result.status == NotificationStatus.failed
    assert DummySMTP.instance is None


def test_build_notifier_falls_back_to_log():
    assert isinstance(build_notifier(_settings(smtp_host=None)), LogNotifier)
    assert isinstance(build_notifier(_settings()), EmailNotifier)
    assert LogNotifier().send_award(NOTICE).delivered is True
