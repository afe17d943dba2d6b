"""Service for sending email notifications about leave requests."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from leavedesk.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class OutboxEntry:
    to: str
    subject: str
    body: str
    delivered: bool
    sent_at: datetime


class EmailSender:
    """Sends plain-text mail over SMTP_SSL, or logs it when SMTP is not set up.

    Every attempt is appended to ``sent`` so callers and tests can inspect it.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.sent: list[OutboxEntry] = []

    @property
    def configured(self) -> bool:
        return bool(self.settings.email_user and self.settings.email_password)

    def send(self, to: str, subject: str, body: str) -> bool:
        delivered = self._deliver(to, subject, body)
        self.sent.append(
            OutboxEntry(
                to=to,
                subject=subject,
                body=body,
                delivered=delivered,
                sent_at=datetime.now(timezone.utc),
            )
        )
        return delivered

    def _deliver(self, to: str, subject: str, body: str) -> bool:
        if not self.configured:
            logger.info("[mock email] to=%s subject=%s body=%s", to, subject, body)
            return True

        msg = MIMEMultipart()
        msg["From"] = f"Leave Desk <{self.settings.email_user}>"
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))

        try:
            with smtplib.SMTP_SSL(self.settings.smtp_server, self.settings.smtp_port) as server:
                server.login(self.settings.email_user, self.settings.email_password)
                server.sendmail(self.settings.email_user, to, msg.as_string())
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to)
            return False
        logger.info("Email sent to %s", to)
        return True
