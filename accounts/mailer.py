"""
accounts/mailer.py -- Outbound mail delivery.

Two implementations of the same send(to, subject, html_body) shape:

  SmtpMailSender     -- one SMTP session per message (STARTTLS + login when
                        configured). SMTP and socket failures are wrapped in
                        MailDeliveryError so the API layer reports a 502
                        instead of a bare 500.

  ConsoleMailSender  -- logs the message instead of sending it. Selected with
                        MAIL_BACKEND=console for local development.

The backend is chosen once by build_mail_sender() from Settings.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from core.config import Settings
from core.errors import MailDeliveryError

logger = logging.getLogger("permahub.mail")


def _build_message(sender: str, to: str, subject: str, html_body: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content("This message requires an HTML capable mail client.")
    message.add_alternative(html_body, subtype="html")
    return message


class SmtpMailSender:
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def send(self, to: str, subject: str, html_body: str) -> None:
        message = _build_message(self._sender, to, subject, html_body)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                if self._use_tls:
                    smtp.starttls()
                if self._username:
                    smtp.login(self._username, self._password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Mail delivery to %s failed: %s", to, exc)
            raise MailDeliveryError("Could not send email", detail=type(exc).__name__) from exc
        logger.info("Sent '%s' to %s", subject, to)


class ConsoleMailSender:
    """Development backend: writes the message to the log."""

    def __init__(self, sender: str) -> None:
        self._sender = sender

    def send(self, to: str, subject: str, html_body: str) -> None:
        logger.info("Mail (console backend) from=%s to=%s subject=%r\n%s", self._sender, to, subject, html_body)


def build_mail_sender(settings: Settings) -> SmtpMailSender | ConsoleMailSender:
    if settings.mail_backend == "console":
        return ConsoleMailSender(settings.mail_from)
    return SmtpMailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.mail_from,
        username=settings.smtp_username,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
    )
