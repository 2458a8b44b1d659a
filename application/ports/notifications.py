"""
Outbound notification port.

The application layer asks for a "match event happened" notification; the
infrastructure decides how (Celery + SMTP) and to whom.
"""
from __future__ import annotations

from typing import Protocol

from application.dto import MatchEventDTO


class MatchEventNotifierPort(Protocol):

    @property
    def enabled(self) -> bool:
        """True when at least one recipient is configured."""
        ...

    async def notify_match_event(self, event: MatchEventDTO) -> None:
        """Hand the notification off for delivery. Must not block on SMTP."""
        ...


__all__ = ["MatchEventNotifierPort"]
