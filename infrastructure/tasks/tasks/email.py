"""Email related Celery tasks"""
from __future__ import annotations

import smtplib
from email.message import EmailMessage
from typing import List

from celery import shared_task

from core.config import settings
from core.logging_config import get_logger

from ..utils.base_task import BaseTask

logger = get_logger(__name__)


def build_message(recipients: List[str], subject: str, body: str) -> EmailMessage:
    smtp = settings.smtp
    msg = EmailMessage()
    sender = smtp.from_address or smtp.user
    if sender:
        msg["From"] = sender
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = subject.strip()[:160]
    msg.set_content(body)
    return msg


def deliver(msg: EmailMessage) -> None:
    smtp = settings.smtp
    with smtplib.SMTP(smtp.host, smtp.port, timeout=smtp.timeout) as client:
        client.ehlo()
        if smtp.use_tls:
            client.starttls()
            client.ehlo()
        client.login(smtp.user, smtp.password)
        client.send_message(msg)


@shared_task(
    bind=True,
    base=BaseTask,
    name="infrastructure.tasks.tasks.email.send_notification_email",
    autoretry_for=(smtplib.SMTPException, OSError),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_jitter=True,
    retry_kwargs={"max_retries": 3},
)
def send_notification_email(self, recipients: List[str], subject: str, body: str) -> bool:
    """Send a plain-text notification; skipped when SMTP is not configured."""
    if not recipients:
        return False
    if not settings.smtp.configured:
        logger.info("notification_email_skipped", reason="smtp_not_configured", recipients=len(recipients))
        return False
    deliver(build_message(recipients, subject, body))
    logger.info("notification_email_sent", recipients=len(recipients), subject=subject)
    return True
