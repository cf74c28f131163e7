"""SMTP transport for outgoing digest emails."""
from __future__ import annotations

import logging
import smtplib
import threading
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Callable, Optional

from core.errors import ConfigurationError
from core.settings import SmtpSettings

SmtpFactory = Callable[[SmtpSettings], smtplib.SMTP]

log = logging.getLogger("newspulse.mailer")


def default_smtp_factory(settings: SmtpSettings) -> smtplib.SMTP:
    if settings.secure:
        return smtplib.SMTP_SSL(settings.host, settings.port, timeout=settings.timeout)
    smtp = smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout)
    smtp.starttls()
    return smtp


class Mailer:
    """Owns one SMTP connection between ``open()`` and ``close()``.

    ``send`` reconnects on demand, so a connection dropped by the server
    between digest runs is replaced transparently.
    """

    def __init__(self, settings: SmtpSettings, *, factory: SmtpFactory = default_smtp_factory) -> None:
        self.settings = settings
        self.factory = factory
        self._smtp: Optional[smtplib.SMTP] = None
        self._lock = threading.Lock()

    def _connect(self) -> smtplib.SMTP:
        if not self.settings.configured():
            raise ConfigurationError("SMTP credentials are not configured (SMTP_USER/SMTP_PASSWORD)")
        smtp = self.factory(self.settings)
        smtp.login(str(self.settings.user), str(self.settings.password))
        return smtp

    def open(self) -> None:
        with self._lock:
            if self._smtp is None:
                self._smtp = self._connect()

    def verify(self) -> bool:
        """Check the transport is usable; failures are logged, not raised."""

        try:
            with self._lock:
                smtp = self._smtp or self._connect()
                self._smtp = smtp
                code, _ = smtp.noop()
        except (OSError, smtplib.SMTPException, ConfigurationError) as exc:
            log.warning("mailer.verify_failed", extra={"error": str(exc)})
            return False
        log.info("mailer.ready", extra={"host": self.settings.host, "port": self.settings.port})
        return code == 250

    def send(self, *, sender: str, to: str, subject: str, html: str) -> str:
        """Send one HTML email and return its Message-ID."""

        message = EmailMessage()
        message["From"] = sender
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain="newspulse")
        message.set_content("This email requires an HTML capable client.")
        message.add_alternative(html, subtype="html")

        with self._lock:
            if self._smtp is None:
                self._smtp = self._connect()
            try:
                self._smtp.send_message(message)
            except smtplib.SMTPServerDisconnected:
                self._smtp = self._connect()
                self._smtp.send_message(message)
        return str(message["Message-ID"])

    def close(self) -> None:
        with self._lock:
            smtp, self._smtp = self._smtp, None
        if smtp is None:
            return
        try:
            smtp.quit()
        except (OSError, smtplib.SMTPException):
            smtp.close()


__all__ = ["Mailer", "default_smtp_factory"]
