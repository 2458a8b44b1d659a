"""
评论领域实体
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.common.entity import EntityMixin
from domain.user.entity import User


@dataclass
class Comment(EntityMixin):
    id: Optional[str]
    user_id: str
    content: str
    match_id: Optional[str] = None
    article_id: Optional[str] = None
    parent_comment_id: Optional[str] = None
    likes: int = 0
    flagged: bool = False
    removed: bool = False
    removal_reason: Optional[str] = None
    removed_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not self.content or not self.content.strip():
            raise ValueError("评论内容不能为空")
        if not self.match_id and not self.article_id:
            raise ValueError("评论必须关联比赛或文章")

    def can_edit(self, user: User) -> bool:
        """业务规则：仅作者本人可编辑"""
        return user.id == self.user_id

    def can_delete(self, user: User) -> bool:
        """业务规则：作者、版主、管理员可删除"""
        return user.id == self.user_id or user.can_moderate
