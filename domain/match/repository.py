"""
比赛仓储接口
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from domain.common.repository import Repository

from .entity import Match, MatchEvent, MatchPlayerStats, MatchStatus


class MatchRepository(Repository[Match]):

    @abstractmethod
    async def list(self, status: Optional[MatchStatus] = None, limit: int = 20, offset: int = 0) -> List[Match]:
        """获取比赛列表，可按状态过滤"""


class MatchEventRepository(ABC):
    """比赛事件仓储 - 只追加"""

    @abstractmethod
    async def create(self, event: MatchEvent) -> MatchEvent:
        ...

    @abstractmethod
    async def list_by_match(self, match_id: str, limit: int = 100) -> List[MatchEvent]:
        """按时间倒序获取某场比赛的事件"""


class MatchStatsRepository(ABC):

    @abstractmethod
    async def create(self, stats: MatchPlayerStats) -> MatchPlayerStats:
        ...

    @abstractmethod
    async def list_by_match(self, match_id: str) -> List[MatchPlayerStats]:
        ...
