"""Booking confirmation e-mails.

Delivery is best effort. Everything here runs after the booking has been
committed; a failure is logged and dropped, the booking stands.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from datetime import date
from email.message import EmailMessage

from weekstay.config import settings

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Booking Confirmation"
CONFIRMATION_BODY = (
    "Your booking for {house_name} from {check_in} to {check_out} has been confirmed.\n\n"
    "Credits remaining: {credits}\n"
)


@dataclass(frozen=True)
class EmailNotification:
    to: str
    subject: str
    body: str


def _format_day(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def compose_booking_confirmation(
    to: str,
    house_name: str,
    check_in: date,
    check_out: date,
    credits: int,
) -> EmailNotification:
    return EmailNotification(
        to=to,
        subject=CONFIRMATION_SUBJECT,
        body=CONFIRMATION_BODY.format(
            house_name=house_name,
            check_in=_format_day(check_in),
            check_out=_format_day(check_out),
            credits=credits,
        ),
    )


def send_email(notification: EmailNotification) -> bool:
    """Send one message over SMTP. Without an SMTP host, only log it."""
    if not settings.smtp_host:
        logger.info("[email] To: %s | Subject: %s\n%s", notification.to, notification.subject, notification.body)
        return True

    msg = EmailMessage()
    msg["Subject"] = notification.subject
    msg["From"] = settings.smtp_sender
    msg["To"] = notification.to
    msg.set_content(notification.body)

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds) as server:
        server.starttls()
        if settings.smtp_user and settings.smtp_password:
            server.login(settings.smtp_user, settings.smtp_password)
        server.send_message(msg)
    return True


async def send_booking_confirmation(notification: EmailNotification) -> bool:
    """Background task: deliver a confirmation without ever raising."""
    try:
        sent = await asyncio.to_thread(send_email, notification)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send booking confirmation to %s", notification.to)
        return False

    logger.info("Booking confirmation sent to %s", notification.to)
    return sent
