"""Tests for SMTP delivery with smtplib stubbed out."""

import smtplib
from datetime import datetime, timezone

import pytest

from niftyscan.core.config import EmailConfig
from niftyscan.core.exceptions import DeliveryError
from niftyscan.core.models import ReportDocument
from niftyscan.core.services import SmtpMailSender
from niftyscan.core.services import mailer as mailer_module

DOCUMENT = ReportDocument(
    subject="Daily Stock Report - 03/06/2024",
    html="<p>report</p>",
    text="report",
    generated_at=datetime(2024, 6, 3, 17, 0, tzinfo=timezone.utc),
)


class FakeSMTP:
    """Records the SMTP conversation instead of opening a socket."""

    instances: list["FakeSMTP"] = []
    fail_on_send: Exception | None = None

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.context = context
        self.calls: list[str] = []
        self.logins: list[tuple[str, str]] = []
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.calls.append("quit")
        return False

    def ehlo(self):
        self.calls.append("ehlo")

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.logins.append((user, password))

    def send_message(self, message):
        if FakeSMTP.fail_on_send is not None:
            raise FakeSMTP.fail_on_send
        self.messages.append(message)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_on_send = None
    monkeypatch.setattr(mailer_module.smtplib, "SMTP_SSL", FakeSMTP)
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def _config(**overrides) -> EmailConfig:
    values = {"user": "bot@example.com", "password": "app-pass", "recipient": "me@example.com"}
    values.update(overrides)
    return EmailConfig(**values)


class TestSmtpMailSender:
    """SmtpMailSender.send."""

    @pytest.mark.asyncio
    async def test_ssl_delivery(self, fake_smtp):
        receipt = await SmtpMailSender(_config()).send(DOCUMENT)

        (server,) = fake_smtp.instances
        assert (server.host, server.port) == ("smtp.gmail.com", 465)
        assert server.context is not None
        assert server.logins == [("bot@example.com", "app-pass")]
        (message,) = server.messages
        assert message["Subject"] == DOCUMENT.subject
        assert message["To"] == "me@example.com"
        assert message["From"] == "bot@example.com"
        assert receipt.message_id == message["Message-ID"]
        assert receipt.recipients == ("me@example.com",)

    @pytest.mark.asyncio
    async def test_message_carries_html_and_text(self, fake_smtp):
        await SmtpMailSender(_config()).send(DOCUMENT)

        message = fake_smtp.instances[0].messages[0]
        html_part = message.get_body(preferencelist=("html",))
        text_part = message.get_body(preferencelist=("plain",))
        assert "<p>report</p>" in html_part.get_content()
        assert "report" in text_part.get_content()

    @pytest.mark.asyncio
    async def test_starttls_delivery(self, fake_smtp):
        await SmtpMailSender(_config(security="starttls", smtp_port=587)).send(DOCUMENT)

        (server,) = fake_smtp.instances
        assert server.port == 587
        assert server.calls[:3] == ["ehlo", "starttls", "ehlo"]

    @pytest.mark.asyncio
    async def test_multiple_recipients(self, fake_smtp):
        receipt = await SmtpMailSender(_config(recipient="a@example.com, b@example.com")).send(DOCUMENT)

        assert receipt.recipients == ("a@example.com", "b@example.com")

    @pytest.mark.asyncio
    async def test_transport_failure_raises_delivery_error(self, fake_smtp):
        fake_smtp.fail_on_send = smtplib.SMTPAuthenticationError(535, b"bad credentials")

        with pytest.raises(DeliveryError) as exc_info:
            await SmtpMailSender(_config()).send(DOCUMENT)

        assert exc_info.value.error_code == "DELIVERY_ERROR"
        assert exc_info.value.details["error_type"] == "SMTPAuthenticationError"

    @pytest.mark.asyncio
    async def test_connection_failure_raises_delivery_error(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise ConnectionRefusedError("refused")

        monkeypatch.setattr(mailer_module.smtplib, "SMTP_SSL", refuse)

        with pytest.raises(DeliveryError):
            await SmtpMailSender(_config()).send(DOCUMENT)

    @pytest.mark.asyncio
    async def test_missing_recipient_raises(self, fake_smtp):
        with pytest.raises(DeliveryError):
            await SmtpMailSender(_config(recipient=None)).send(DOCUMENT)

        assert fake_smtp.instances == []

    def test_unsupported_security_rejected(self):
        with pytest.raises(ValueError):
            SmtpMailSender(_config(security="tls13"))
