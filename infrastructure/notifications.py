"""
比赛事件邮件通知 - MatchEventNotifierPort 的 Celery 实现
"""
from __future__ import annotations

import asyncio
import json
from typing import Optional, Sequence, Tuple

from application.dto import MatchEventDTO, dump_record
from core.config import settings
from core.logging_config import get_logger
from infrastructure.tasks import TaskDispatcher

logger = get_logger(__name__)


def build_match_event_email(event: MatchEventDTO) -> Tuple[str, str]:
    """返回 (subject, body)"""
    record = dump_record(event)
    subject = f"Match event: {record['eventType']}"
    body = (
        f"An event occurred for match {record['matchId']}: {record['description']}"
        f"\n\nDetails:\n{json.dumps(record, indent=2, ensure_ascii=False)}"
    )
    return subject, body


class CeleryMatchEventNotifier:
    """把通知交给 Celery；dispatcher 调用在线程中执行，避免阻塞事件循环"""

    def __init__(
        self,
        recipients: Optional[Sequence[str]] = None,
        dispatcher: Optional[TaskDispatcher] = None,
    ) -> None:
        self._recipients = list(settings.notify_recipients if recipients is None else recipients)
        self._dispatcher = dispatcher or TaskDispatcher()

    @property
    def enabled(self) -> bool:
        return bool(self._recipients)

    async def notify_match_event(self, event: MatchEventDTO) -> None:
        if not self.enabled:
            return
        subject, body = build_match_event_email(event)
        await asyncio.to_thread(self._dispatcher.send_notification_email, self._recipients, subject, body)
        logger.info("match_event_notification_dispatched", event_id=event.id, recipients=len(self._recipients))
