"""
新闻、评论、收藏数据模型
"""
from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text

from .base import Base, CreatedAtMixin, TimestampMixin, generate_id


class NewsArticleModel(TimestampMixin, Base):
    __tablename__ = "news_articles"

    id = Column(String(36), primary_key=True, default=generate_id)
    author_id = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), nullable=False)
    subtitle = Column(String(512), nullable=True)
    content = Column(Text, nullable=False)
    hero_image_url = Column(String(512), nullable=True)
    tags = Column(JSON, nullable=True)
    published = Column(Boolean, default=False, nullable=False, index=True)


class CommentModel(TimestampMixin, Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    match_id = Column(String(36), ForeignKey("matches.id", ondelete="CASCADE"), nullable=True, index=True)
    article_id = Column(String(36), ForeignKey("news_articles.id", ondelete="CASCADE"), nullable=True, index=True)
    parent_comment_id = Column(String(36), nullable=True)
    content = Column(Text, nullable=False)
    likes = Column(Integer, default=0, nullable=False)
    flagged = Column(Boolean, default=False, nullable=False)
    removed = Column(Boolean, default=False, nullable=False)
    removal_reason = Column(Text, nullable=True)
    removed_by = Column(String(64), nullable=True)


class FavoriteModel(CreatedAtMixin, Base):
    __tablename__ = "user_favorites"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=True)
    player_id = Column(String(36), ForeignKey("players.id", ondelete="CASCADE"), nullable=True)
