from __future__ import annotations

import logging
import smtplib
import ssl
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from functools import lru_cache
from typing import Optional

from voice_intake.config import Settings, get_settings
from voice_intake.errors import SendError

logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    html: str
    text: str


class MailClient(ABC):
    """
    Simple abstraction so we can swap mail providers (or fake one in tests).
    """

    @abstractmethod
    def send(self, message: OutgoingEmail) -> None:
        """
        Deliver the message. Raises SendError on failure.
        """
        ...


class SmtpMailClient(MailClient):
    """
    SMTP implementation using the standard library client.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        sender: str = "Intake Assistant <intake@localhost>",
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: bool = False,
        starttls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.starttls = starttls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailClient":
        return cls(
            host=settings.smtp_host or "",
            port=settings.smtp_port,
            sender=settings.mail_from,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_ssl=settings.smtp_use_ssl,
            starttls=settings.smtp_starttls,
            timeout=settings.smtp_timeout,
        )

    def build_message(self, message: OutgoingEmail) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = self.sender
        mime["To"] = message.to
        # Clients render the last part they understand, so HTML goes last.
        mime.attach(MIMEText(message.text, "plain", "utf-8"))
        mime.attach(MIMEText(message.html, "html", "utf-8"))
        return mime

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.use_ssl:
            return smtplib.SMTP_SSL(
                self.host, self.port, timeout=self.timeout, context=context
            )

        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        if self.starttls:
            server.ehlo()
            server.starttls(context=context)
            server.ehlo()
        return server

    def send(self, message: OutgoingEmail) -> None:
        mime = self.build_message(message)
        try:
            with self._connect() as server:
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(mime)
        except (smtplib.SMTPException, OSError) as exc:
            raise SendError(
                f"SMTP delivery to {message.to} via {self.host}:{self.port} failed: {exc}"
            ) from exc

        logger.info("Sent email %r to %s", message.subject, message.to)


@lru_cache(maxsize=1)
def get_mail_client() -> Optional[MailClient]:
    """
    Returns None when SMTP_HOST is unset; notifications are then skipped.
    """
    settings = get_settings()
    if not settings.smtp_host:
        logger.warning("SMTP_HOST is not set; intake notification emails are disabled")
        return None
    return SmtpMailClient.from_settings(settings)
