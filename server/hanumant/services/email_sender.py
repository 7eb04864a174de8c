from __future__ import annotations

import logging
import smtplib
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import format_datetime, formataddr, make_msgid
from typing import Iterable, Sequence

from hanumant.core.config import settings

logger = logging.getLogger(__name__)

PLACEHOLDER_DOMAINS = {"example.com", "example.org", "example.net"}


def _clean_recipients(recipients: Iterable[str]) -> list[str]:
    cleaned: list[str] = []
    for address in recipients:
        normalized = (address or "").strip()
        if "@" not in normalized:
            continue
        if normalized.split("@")[-1].lower() in PLACEHOLDER_DOMAINS:
            continue
        cleaned.append(normalized)
    return list(dict.fromkeys(cleaned))


class EmailSender:
    """SMTP delivery for member-facing mail; a no-op until SMTP is configured."""

    def __init__(self) -> None:
        self.from_address = settings.EMAIL_FROM_ADDRESS
        self.from_name = settings.EMAIL_FROM_NAME
        self.reply_to = settings.EMAIL_REPLY_TO

    def is_configured(self) -> bool:
        return bool(
            self.from_address
            and settings.EMAIL_SMTP_HOST
            and settings.EMAIL_SMTP_USERNAME
            and settings.EMAIL_SMTP_PASSWORD
        )

    def _build_message(self, subject: str, html_body: str, text_body: str, to: list[str]) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.from_name, self.from_address))
        message["To"] = ", ".join(to)
        if self.reply_to:
            message["Reply-To"] = self.reply_to
        message["Date"] = format_datetime(datetime.now(timezone.utc))
        if "@" in self.from_address:
            message["Message-ID"] = make_msgid(domain=self.from_address.split("@", 1)[1])
        message.set_content(text_body or " ")
        message.add_alternative(html_body, subtype="html")
        return message

    def send(self, *, subject: str, html_body: str, text_body: str, to: Sequence[str]) -> bool:
        recipients = _clean_recipients(to)
        if not recipients:
            logger.warning("email_send_skipped_no_recipients", extra={"subject": subject})
            return False
        if not self.is_configured():
            logger.warning("email_send_skipped_unconfigured", extra={"subject": subject, "to": recipients})
            return False

        message = self._build_message(subject, html_body, text_body, recipients)
        try:
            with smtplib.SMTP(settings.EMAIL_SMTP_HOST, settings.EMAIL_SMTP_PORT, timeout=30) as smtp:
                smtp.ehlo()
                if settings.EMAIL_SMTP_USE_TLS:
                    smtp.starttls()
                    smtp.ehlo()
                smtp.login(settings.EMAIL_SMTP_USERNAME, settings.EMAIL_SMTP_PASSWORD)
                smtp.send_message(message, from_addr=self.from_address, to_addrs=recipients)
        except (smtplib.SMTPException, OSError):
            logger.exception("email_send_failed", extra={"subject": subject, "to": recipients})
            return False
        logger.info("email_sent", extra={"subject": subject, "to": recipients})
        return True


def get_email_sender() -> EmailSender:
    return EmailSender()
