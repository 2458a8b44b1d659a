"""
战队领域实体
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.common.entity import EntityMixin


@dataclass
class Team(EntityMixin):
    """战队实体"""

    id: Optional[str]
    name: str
    acronym: Optional[str] = None
    country: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    region: Optional[str] = None
    rank: Optional[int] = None
    wins: int = 0
    losses: int = 0
    social_links: Optional[dict] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("战队名称不能为空")
        if self.acronym and len(self.acronym) > 10:
            raise ValueError("战队简称不能超过10个字符")
        if self.country and len(self.country) > 3:
            raise ValueError("国家代码不能超过3个字符")
        if self.wins < 0 or self.losses < 0:
            raise ValueError("胜负场次不能为负数")
