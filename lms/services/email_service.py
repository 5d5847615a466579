# /lms/services/email_service.py

"""
Best-effort outbound email. Every public function returns True/False and
never raises: an email that cannot be sent must not undo the record it
mirrors. Callers schedule these as background tasks with plain values, not
ORM objects, since the request session is closed by the time they run.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Iterable, Tuple

from lms.core.config import settings

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, body: str) -> bool:
    if not settings.smtp_configured:
        logger.info(f"SMTP not configured; skipping email to {to_email} ({subject})")
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_email
    msg.set_content(body)

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as server:
            server.starttls()
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Email to {to_email} failed: {e}")
        return False

    logger.info(f"Email sent to {to_email} ({subject})")
    return True


def send_approval_email(email: str, name: str) -> bool:
    body = (
        f"Dear {name},\n\n"
        "Your account has been approved. You can now log in to the Learning "
        "Management System and access your class materials.\n\n"
        "Regards,\nLMS Administration"
    )
    return send_email(email, "Account Approval - Learning Management System", body)


def send_material_notification(
    recipients: Iterable[Tuple[str, str]],
    material_type: str,
    material_title: str,
    subject_name: str,
) -> int:
    """Mails every (email, name) recipient; returns how many were sent."""
    sent = 0
    for email, name in recipients:
        body = (
            f"Dear {name},\n\n"
            f'A new {material_type} titled "{material_title}" has been added to your '
            f"{subject_name} course.\n"
            "Login to the Learning Management System to access it.\n\n"
            "Regards,\nLMS Administration"
        )
        if send_email(email, f"New Material Added - {subject_name}", body):
            sent += 1
    return sent
