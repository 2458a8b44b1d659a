"""Small dispatching helpers to decouple Celery from callers."""
from __future__ import annotations

from typing import Sequence

from ..tasks.email import send_notification_email


class TaskDispatcher:
    """Internal facade used by the application layer to schedule tasks.

    ``apply_async`` is used rather than ``send_task`` so that eager mode
    (development/test) runs the task in-process.
    """

    def send_notification_email(self, recipients: Sequence[str], subject: str, body: str) -> None:
        send_notification_email.apply_async(
            kwargs={"recipients": list(recipients), "subject": subject, "body": body},
        )
