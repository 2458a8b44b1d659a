"""
比赛领域实体 - 比赛、比赛事件与选手单场数据
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Mapping, Optional

from domain.common.entity import EntityMixin, utcnow


class MatchStatus(str, Enum):
    UPCOMING = "upcoming"
    LIVE = "live"
    FINISHED = "finished"


class MatchEventType(str, Enum):
    KILL = "kill"
    ROUND_END = "round_end"
    BOMB_PLANT = "bomb_plant"
    BOMB_DEFUSE = "bomb_defuse"
    CLUTCH = "clutch"
    ACE = "ace"
    PLAYER_INJURY = "player_injury"
    ROSTER_CHANGE = "roster_change"


@dataclass
class Match(EntityMixin):
    """比赛实体"""

    id: Optional[str]
    team1_id: str
    team2_id: str
    status: MatchStatus = MatchStatus.UPCOMING
    tournament: Optional[str] = None
    stage: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    team1_score: int = 0
    team2_score: int = 0
    current_map: Optional[str] = None
    maps: List[str] = field(default_factory=list)
    stream_links: List[dict] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.status = MatchStatus(self.status)
        self.maps = list(self.maps or [])
        self.stream_links = list(self.stream_links or [])
        self.validate()
        self._stamp_status(explicit=())

    def validate(self) -> None:
        """业务规则：对阵双方不同，比分非负"""
        if not self.team1_id or not self.team2_id:
            raise ValueError("比赛必须指定两支战队")
        if self.team1_id == self.team2_id:
            raise ValueError("比赛双方不能是同一支战队")
        if self.team1_score < 0 or self.team2_score < 0:
            raise ValueError("比分不能为负数")

    def apply_changes(self, changes: Mapping[str, Any]) -> None:
        if "status" in changes and changes["status"] is not None:
            changes = {**changes, "status": MatchStatus(changes["status"])}
        super().apply_changes(changes)
        self._stamp_status(explicit=changes.keys())

    def _stamp_status(self, explicit) -> None:
        """业务规则：进入 live/finished 时补记开始/结束时间"""
        if self.status in (MatchStatus.LIVE, MatchStatus.FINISHED):
            if self.started_at is None and "started_at" not in explicit:
                self.started_at = utcnow()
        if self.status == MatchStatus.FINISHED:
            if self.finished_at is None and "finished_at" not in explicit:
                self.finished_at = utcnow()


@dataclass
class MatchEvent(EntityMixin):
    """比赛时间线事件（追加写入，不修改）"""

    id: Optional[str]
    match_id: str
    event_type: MatchEventType
    description: str
    timestamp: Optional[datetime] = None
    player_id: Optional[str] = None
    metadata: Optional[dict] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        self.event_type = MatchEventType(self.event_type)
        if self.timestamp is None:
            self.timestamp = utcnow()
        self.validate()

    def validate(self) -> None:
        if not self.match_id:
            raise ValueError("比赛事件必须关联比赛")
        if not self.description or not self.description.strip():
            raise ValueError("事件描述不能为空")


@dataclass
class MatchPlayerStats(EntityMixin):
    """选手单场数据"""

    id: Optional[str]
    match_id: str
    player_id: str
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    adr: int = 0
    headshot_percent: int = 0
    rating: int = 0
    opening_kills: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not self.match_id or not self.player_id:
            raise ValueError("单场数据必须关联比赛与选手")
        if min(self.kills, self.deaths, self.assists) < 0:
            raise ValueError("击杀/死亡/助攻不能为负数")
        if not 0 <= self.headshot_percent <= 100:
            raise ValueError("爆头率必须在 0-100 之间")
