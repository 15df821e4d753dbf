"""SMTP report delivery."""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import make_msgid

from niftyscan.core.config import EmailConfig
from niftyscan.core.exceptions import DeliveryError
from niftyscan.core.logging import logger
from niftyscan.core.models import DeliveryReceipt, ReportDocument


class SmtpMailSender:
    """Sends rendered reports through an SMTP server."""

    def __init__(self, config: EmailConfig):
        if config.security not in {"ssl", "starttls", "none"}:
            raise ValueError(f"Unsupported SMTP security mode: {config.security}")
        self.config = config

    @property
    def recipients(self) -> list[str]:
        raw = self.config.recipient or ""
        return [address.strip() for address in raw.split(",") if address.strip()]

    async def send(self, document: ReportDocument) -> DeliveryReceipt:
        """Deliver ``document``, raising ``DeliveryError`` when the transport fails."""
        recipients = self.recipients
        if not recipients:
            raise DeliveryError("No recipient configured for report delivery")

        message = self._build_message(document, recipients)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email: {e}")
            raise DeliveryError(
                f"Failed to send report: {e}",
                recipients=recipients,
                details={"error_type": type(e).__name__},
            ) from e

        message_id = str(message["Message-ID"])
        logger.info(f"Email sent successfully - Message ID: {message_id}")
        return DeliveryReceipt(
            message_id=message_id,
            recipients=tuple(recipients),
            sent_at=datetime.now(timezone.utc),
        )

    def _build_message(self, document: ReportDocument, recipients: list[str]) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = document.subject
        message["From"] = self.config.user or ""
        message["To"] = ", ".join(recipients)
        message["Message-ID"] = make_msgid(domain="niftyscan")
        message.set_content(document.text)
        message.add_alternative(document.html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        host, port, timeout = self.config.smtp_host, self.config.smtp_port, self.config.timeout

        if self.config.security == "ssl":
            with smtplib.SMTP_SSL(host, port, timeout=timeout, context=ssl.create_default_context()) as server:
                self._login(server)
                server.send_message(message)
            return

        with smtplib.SMTP(host, port, timeout=timeout) as server:
            server.ehlo()
            if self.config.security == "starttls":
                server.starttls(context=ssl.create_default_context())
                server.ehlo()
            self._login(server)
            server.send_message(message)

    def _login(self, server: smtplib.SMTP) -> None:
        if self.config.user:
            server.login(self.config.user, self.config.password or "")
