"""
收藏领域实体
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.common.entity import EntityMixin


@dataclass
class Favorite(EntityMixin):
    id: Optional[str]
    user_id: str
    team_id: Optional[str] = None
    player_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not self.team_id and not self.player_id:
            raise ValueError("收藏必须指定战队或选手")

    def owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id
