"""SMTP mail delivery for account emails."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from config import settings
from services.errors import UpstreamError

logger = logging.getLogger(__name__)


def _deliver(message: EmailMessage) -> None:
    if settings.SMTP_USE_TLS and int(settings.SMTP_PORT) == 465:
        client = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
    else:
        client = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
    with client:
        if settings.SMTP_USE_TLS and int(settings.SMTP_PORT) != 465:
            client.starttls()
        if settings.SMTP_USERNAME:
            client.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        client.send_message(message)


async def send_mail(to: str, subject: str, body: str) -> None:
    """Send a plain-text email, surfacing relay failures as UpstreamError."""
    message = EmailMessage()
    message["From"] = settings.EMAIL_FROM
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    try:
        await asyncio.to_thread(_deliver, message)
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("Mail delivery to %s failed: %s", to, exc)
        raise UpstreamError("Email could not be sent. Try again later.") from exc
    logger.info("mail_sent to=%s subject=%s", to, subject)


def password_reset_body(reset_link: str) -> str:
    return (
        "You have requested a password reset for your account.\n\n"
        f"{reset_link}\n\n"
        "The link expires in "
        f"{max(int(settings.PASSWORD_RESET_TTL_SECONDS) // 60, 1)} minutes. "
        "If you did not request it, ignore this email."
    )
