"""
比赛、比赛事件、选手单场数据模型
"""
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from .base import Base, CreatedAtMixin, TimestampMixin, generate_id


class MatchModel(TimestampMixin, Base):
    __tablename__ = "matches"

    id = Column(String(36), primary_key=True, default=generate_id)
    team1_id = Column(String(36), ForeignKey("teams.id"), nullable=False)
    team2_id = Column(String(36), ForeignKey("teams.id"), nullable=False)
    status = Column(String(20), default="upcoming", nullable=False, index=True)
    tournament = Column(String(255), nullable=True)
    stage = Column(String(100), nullable=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True, index=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    team1_score = Column(Integer, default=0, nullable=False)
    team2_score = Column(Integer, default=0, nullable=False)
    current_map = Column(String(64), nullable=True)
    maps = Column(JSON, nullable=True)
    stream_links = Column(JSON, nullable=True, comment="[{platform, url, latency}]")

    def __repr__(self):
        return f"<MatchModel(id={self.id}, status='{self.status}')>"


class MatchEventModel(CreatedAtMixin, Base):
    __tablename__ = "match_events"

    id = Column(String(36), primary_key=True, default=generate_id)
    match_id = Column(String(36), ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type = Column(String(32), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    description = Column(Text, nullable=False)
    player_id = Column(String(36), ForeignKey("players.id", ondelete="SET NULL"), nullable=True)
    # Declarative 保留了 metadata 属性名，列名仍为 metadata
    event_metadata = Column("metadata", JSON, nullable=True)


class MatchPlayerStatsModel(TimestampMixin, Base):
    __tablename__ = "match_player_stats"

    id = Column(String(36), primary_key=True, default=generate_id)
    match_id = Column(String(36), ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, index=True)
    player_id = Column(String(36), ForeignKey("players.id", ondelete="CASCADE"), nullable=False)
    kills = Column(Integer, default=0, nullable=False)
    deaths = Column(Integer, default=0, nullable=False)
    assists = Column(Integer, default=0, nullable=False)
    adr = Column(Integer, default=0, nullable=False)
    headshot_percent = Column(Integer, default=0, nullable=False)
    rating = Column(Integer, default=0, nullable=False, comment="rating * 100")
    opening_kills = Column(Integer, default=0, nullable=False)
