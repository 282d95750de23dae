"""
Outbound email over SMTP, with an in-memory outbox for development and tests.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass, field
from email.mime.text import MIMEText
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, to_email: str, subject: str, body: str) -> None:
        ...


@dataclass
class InMemoryMailer:
    """Collects messages instead of sending them."""

    outbox: list[dict] = field(default_factory=list)

    def send(self, to_email: str, subject: str, body: str) -> None:
        self.outbox.append({"to": to_email, "subject": subject, "body": body})


@dataclass
class SmtpMailer:
    host: str
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    from_email: str = "no-reply@mamacita.app"
    use_tls: bool = True

    def send(self, to_email: str, subject: str, body: str) -> None:
        message = MIMEText(body, "plain", "utf-8")
        message["Subject"] = subject
        message["From"] = self.from_email
        message["To"] = to_email

        with smtplib.SMTP(self.host, self.port, timeout=10) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(message)
        logger.info("Sent '%s' to %s", subject, to_email)
