"""
Email Service for Foster Toys
Sends transactional emails over SMTP (Gmail app password or generic SMTP credentials)
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid, parseaddr
from typing import Optional

from modules.config import ConfigEnv

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 10


class MailerError(Exception):
    """Email could not be sent (missing configuration or SMTP failure)."""


@dataclass
class SmtpSettings:
    host: str
    port: int
    secure: bool
    username: str
    password: str

    @classmethod
    def from_env(cls) -> Optional["SmtpSettings"]:
        """Gmail credentials win over generic SMTP settings; None when neither is set."""
        if ConfigEnv.GMAIL_USER and ConfigEnv.GMAIL_APP_PASSWORD:
            return cls(
                host="smtp.gmail.com",
                port=465,
                secure=True,
                username=ConfigEnv.GMAIL_USER,
                password=ConfigEnv.GMAIL_APP_PASSWORD,
            )
        if ConfigEnv.SMTP_HOST and ConfigEnv.SMTP_USER and ConfigEnv.SMTP_PASS:
            return cls(
                host=ConfigEnv.SMTP_HOST,
                port=ConfigEnv.SMTP_PORT,
                secure=bool(ConfigEnv.SMTP_SECURE),
                username=ConfigEnv.SMTP_USER,
                password=ConfigEnv.SMTP_PASS,
            )
        return None


@dataclass
class SentMail:
    message_id: str
    to: str
    subject: str


class Mailer:
    """Sends multipart (plain text + HTML) emails."""

    def __init__(self, settings: Optional[SmtpSettings] = None, from_email: Optional[str] = None):
        self.settings = settings
        self.from_email = from_email or ConfigEnv.SMTP_FROM_EMAIL
        if settings is None:
            logger.warning("SMTP credentials missing - emails will not be sent")

    def _build_message(self, to: str, subject: str, text: str, html: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to
        msg["Message-ID"] = make_msgid(domain="fostertoys.org")
        msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))
        return msg

    def _deliver(self, msg: MIMEMultipart) -> None:
        settings = self.settings
        envelope_from = parseaddr(self.from_email)[1] or settings.username
        if settings.secure:
            with smtplib.SMTP_SSL(settings.host, settings.port, timeout=SMTP_TIMEOUT_SECONDS) as server:
                server.login(settings.username, settings.password)
                server.sendmail(envelope_from, [msg["To"]], msg.as_string())
        else:
            with smtplib.SMTP(settings.host, settings.port, timeout=SMTP_TIMEOUT_SECONDS) as server:
                server.starttls()
                server.login(settings.username, settings.password)
                server.sendmail(envelope_from, [msg["To"]], msg.as_string())

    async def send_mail(self, to: str, subject: str, text: str, html: str) -> SentMail:
        """
        Send an email.

        Args:
            to: Recipient email address
            subject: Email subject
            text: Plain text body
            html: HTML body

        Returns:
            SentMail with the generated Message-ID

        Raises:
            MailerError: SMTP is not configured or delivery failed.
        """
        if self.settings is None:
            raise MailerError("SMTP credentials are not configured")

        msg = self._build_message(to, subject, text, html)
        try:
            # smtplib is blocking; keep it off the event loop
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"[mailer] Error sending email to {to} ({subject}): {e}")
            raise MailerError(str(e)) from e

        logger.info(f"Email sent successfully to {to}: {subject}")
        return SentMail(message_id=msg["Message-ID"], to=to, subject=subject)
