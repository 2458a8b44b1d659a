"""
战队与选手数据库模型
"""
from sqlalchemy import JSON, Column, ForeignKey, Integer, String

from .base import Base, TimestampMixin, generate_id


class TeamModel(TimestampMixin, Base):
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    acronym = Column(String(10), nullable=True)
    country = Column(String(3), nullable=True)
    logo_url = Column(String(512), nullable=True)
    banner_url = Column(String(512), nullable=True)
    region = Column(String(64), nullable=True)
    rank = Column(Integer, nullable=True, index=True)
    wins = Column(Integer, default=0, nullable=False)
    losses = Column(Integer, default=0, nullable=False)
    social_links = Column(JSON, nullable=True, comment="{twitter, twitch, youtube}")

    def __repr__(self):
        return f"<TeamModel(id={self.id}, name='{self.name}')>"


class PlayerModel(TimestampMixin, Base):
    __tablename__ = "players"

    id = Column(String(36), primary_key=True, default=generate_id)
    team_id = Column(String(36), ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True)
    alias = Column(String(100), nullable=False)
    real_name = Column(String(255), nullable=True)
    country = Column(String(3), nullable=True)
    avatar_url = Column(String(512), nullable=True)
    role = Column(String(50), nullable=True)
    steam_id = Column(String(64), nullable=True)
    total_matches = Column(Integer, default=0, nullable=False)
    total_kills = Column(Integer, default=0, nullable=False)
    total_deaths = Column(Integer, default=0, nullable=False)
    total_assists = Column(Integer, default=0, nullable=False)
    average_rating = Column(Integer, default=0, nullable=False, comment="rating * 100")

    def __repr__(self):
        return f"<PlayerModel(id={self.id}, alias='{self.alias}')>"
