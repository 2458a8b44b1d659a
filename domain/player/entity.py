"""
选手领域实体
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.common.entity import EntityMixin


@dataclass
class Player(EntityMixin):
    """选手实体 - average_rating 以整数存储（rating * 100）"""

    id: Optional[str]
    alias: str
    team_id: Optional[str] = None
    real_name: Optional[str] = None
    country: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    steam_id: Optional[str] = None
    total_matches: int = 0
    total_kills: int = 0
    total_deaths: int = 0
    total_assists: int = 0
    average_rating: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not self.alias or not self.alias.strip():
            raise ValueError("选手ID不能为空")
        for name in ("total_matches", "total_kills", "total_deaths", "total_assists"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} 不能为负数")
