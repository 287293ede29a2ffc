# helpers/mail_helper.py

import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr
from typing import Optional

from sqlalchemy.orm import Session

from config.settings import settings
from api.email_queue.email_queue_model import EmailQueue, EmailStatus

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, body: str, html: Optional[str] = None):
    msg = MIMEMultipart("alternative")
    msg["From"] = formataddr((settings.EMAIL_NAME, settings.EMAIL_FROM))
    msg["To"] = to_email
    msg["Subject"] = subject

    msg.attach(MIMEText(body, "plain"))
    if html:
        msg.attach(MIMEText(html, "html"))

    with smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=settings.EMAIL_TIMEOUT) as server:
        if settings.EMAIL_USE_TLS:
            server.starttls()
        if settings.EMAIL_USER and settings.EMAIL_PASSWORD:
            server.login(settings.EMAIL_USER, settings.EMAIL_PASSWORD)
        server.send_message(msg)


def queue_email(db: Session, to_email: str, subject: str, body: str, html: Optional[str] = None) -> EmailQueue:
    """
    Stage an email in the queue table. The row joins the caller's transaction,
    so it is only sent if the surrounding work commits.
    """
    item = EmailQueue(
        email=to_email,
        subject=subject,
        text=body,
        html=html,
        status=EmailStatus.pending,
        attempts=0,
    )
    db.add(item)
    logger.info(f"Queued email '{subject}' for {to_email}")
    return item


def queue_welcome_email(db: Session, to_email: str, full_name: str, fellowship_number: str):
    subject = f"Welcome to {settings.APP_NAME}"
    body = (
        f"Hi {full_name},\n\n"
        f"Your registration has been approved.\n"
        f"Your fellowship number is {fellowship_number}. Use it with your email to sign in;\n"
        f"your initial password is also your fellowship number, please change it after signing in.\n\n"
        f"See you at the next fellowship!\n\n"
        f"{settings.EMAIL_NAME}"
    )
    html = (
        f"<p>Hi {full_name},</p>"
        f"<p>Your registration has been approved.</p>"
        f"<p>Your fellowship number is <strong>{fellowship_number}</strong>. "
        f"Your initial password is also your fellowship number.</p>"
        f"<p>{settings.EMAIL_NAME}</p>"
    )
    return queue_email(db, to_email, subject, body, html)


def queue_registration_received_email(db: Session, to_email: str, full_name: str):
    subject = "We received your registration"
    body = (
        f"Hi {full_name},\n\n"
        f"Thank you for registering. A fellowship manager will review your details shortly\n"
        f"and you will receive another email once it has been approved.\n\n"
        f"{settings.EMAIL_NAME}"
    )
    return queue_email(db, to_email, subject, body)


def queue_rejection_email(db: Session, to_email: str, full_name: str, reason: Optional[str] = None):
    subject = "Update on your registration"
    body = (
        f"Hi {full_name},\n\n"
        f"Unfortunately your registration could not be approved."
        + (f"\nReason: {reason}" if reason else "")
        + f"\n\nPlease contact a fellowship manager if you think this is a mistake.\n\n"
        f"{settings.EMAIL_NAME}"
    )
    return queue_email(db, to_email, subject, body)


def queue_profile_edit_decision_email(db: Session, to_email: str, full_name: str, decision: str,
                                      changes: list, note: Optional[str] = None):
    subject = f"Your profile edit request was {decision.lower()}"
    lines = "\n".join(f"  {c['field']}: {c['old_value'] or '-'} -> {c['new_value']}" for c in changes)
    body = (
        f"Hi {full_name},\n\n"
        f"Your request to change the following details was {decision.lower()}:\n{lines}\n"
        + (f"\nNote from the reviewer: {note}\n" if note else "")
        + f"\n{settings.EMAIL_NAME}"
    )
    return queue_email(db, to_email, subject, body)
