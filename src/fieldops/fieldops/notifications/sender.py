from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    def send(self, *, to: Sequence[str], subject: str, text: str, bcc: Sequence[str] = ()) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int
    user: Optional[str]
    password: Optional[str]
    mail_from: str
    use_ssl: bool = True


class SmtpNotificationSender(NotificationSender):
    """Plain-text mail over SMTP; one connection per message."""

    def __init__(self, settings: SmtpSettings, *, timeout: float = 10.0):
        self._settings = settings
        self._timeout = timeout

    def send(self, *, to: Sequence[str], subject: str, text: str, bcc: Sequence[str] = ()) -> None:
        s = self._settings
        msg = EmailMessage()
        msg["From"] = s.mail_from
        msg["To"] = ", ".join(to)
        msg["Subject"] = subject
        msg["X-Priority"] = "1"
        msg["Importance"] = "high"
        msg.set_content(text)

        smtp_cls = smtplib.SMTP_SSL if s.use_ssl else smtplib.SMTP
        with smtp_cls(s.host, s.port, timeout=self._timeout) as server:
            if s.user and s.password:
                server.login(s.user, s.password)
            # Bcc goes to the envelope only, never into the headers
            server.send_message(msg, to_addrs=list(to) + list(bcc))


class LogNotificationSender(NotificationSender):
    """Used when SMTP is not configured: messages only reach the log."""

    def send(self, *, to: Sequence[str], subject: str, text: str, bcc: Sequence[str] = ()) -> None:
        logger.info("mail (not sent, SMTP disabled) to=%s bcc=%d subject=%r", list(to), len(bcc), subject)
