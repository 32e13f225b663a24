import logging
import smtplib
from email.message import EmailMessage

from bodyshop.core.config import Settings

logger = logging.getLogger(__name__)

STATUS_SUBJECTS = {
    "confirmed": "Your booking is confirmed",
    "in_progress": "Work on your vehicle has started",
    "completed": "Your vehicle is ready",
    "cancelled": "Your booking was cancelled",
}


def send_email(settings: Settings, to_email: str, subject: str, body: str):
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_USER
    msg["To"] = to_email
    msg.set_content(body)

    with smtplib.SMTP_SSL(settings.SMTP_SERVER, settings.SMTP_PORT) as smtp:
        smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        smtp.send_message(msg)


def send_booking_status_email(settings: Settings, to_email: str, booking: dict) -> bool:
    """Best-effort notification; returns False when skipped or failed."""
    if not settings.SMTP_SERVER or not to_email:
        return False

    status = booking["status"]
    subject = STATUS_SUBJECTS.get(status, "Your booking was updated")
    body = (
        f"Booking #{booking['id']}\n"
        f"Date: {booking['booking_date']}\n"
        f"Time: {booking['start_time']} - {booking['end_time']}\n"
        f"Status: {status.replace('_', ' ')}\n"
    )
    try:
        send_email(settings, to_email, subject, body)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send status email for booking %s", booking["id"])
        return False
    return True
