"""
新闻文章领域实体
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from domain.common.entity import EntityMixin


@dataclass
class NewsArticle(EntityMixin):
    id: Optional[str]
    author_id: Optional[str]
    title: str
    content: str
    subtitle: Optional[str] = None
    hero_image_url: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    published: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.tags = list(self.tags or [])
        self.validate()

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("标题不能为空")
        if not self.content or not self.content.strip():
            raise ValueError("正文不能为空")
